# mipscache

A small single-cycle MIPS emulator. It runs a big-endian program image
and counts how many cycles the run takes under one of two cache models:

- a **fully associative** cache, 64 lines by default, with second-chance
  (clock) replacement, and
- a **direct-mapped** cache, 128 lines by default (the line count must be
  a power of two).

Each line holds 16 words (64 bytes). Both caches are write-back and
write-allocate: a hit costs 1 cycle, a miss costs 1000 cycles, and a dirty
line is written back to memory when it is replaced.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running a program

The program image is a flat binary file of 32-bit big-endian instruction
words, loaded at address 0 of a memory of 0x400000 words. A trailing
partial word is ignored.

```
mipscache simple.bin
```

The program file defaults to `simple.bin` when none is given. Options:

- `--cache {fully,direct}`: the cache model (default `fully`).
- `--lines N`: the number of cache lines, overriding the default above.
- `-q`, `--quiet`: do not print a trace line for each instruction.

Execution starts at `pc = 0` with the stack pointer (`$29`) set to
`0x1000000` and the return address register (`$31`) set to `0xffffffff`.
The program stops when the pc reaches `0xffffffff`, which usually happens
when `main` returns through `jr $31`.

When the program stops, the command prints:

- the total number of cycles,
- the return value in `$2`,
- how many instructions were executed, split into R, I and J types and
  no-ops,
- how many of them were loads or stores,
- how many branches there were and how many were taken, and
- the number of cache hits and misses and the hit rate in percent.

If the program file cannot be opened, or a load, store or fetch falls
outside memory, the command prints an error and exits with status 1.

## Cycle model

Fetch and decode take one cycle each. Execute, memory and write-back
together take three more. Every instruction fetch and every load or store
also goes through the cache and pays its hit or miss cost. With the fully
associative cache, `slti` does not add the three execute cycles; with the
direct-mapped cache it does.

## Supported instructions

`add`, `addu`, `sub`, `subu`, `and`, `or`, `nor`, `slt`, `sltu`, `sll`,
`srl`, `jr`, `addi`, `addiu`, `andi`, `ori`, `slti`, `sltiu`, `lui`,
`lw`, `sw`, `beq`, `bne`, `j` and `jal`. Any other encoding runs as a
no-op.

Some of these behave in ways worth knowing:

- `nor` stores 1 when both operands are zero and 0 otherwise.
- `sltu` and `sltiu` compare as signed values, like `slt` and `slti`.
- `srl` shifts the signed register value, so negative values keep their
  sign.
- There are no branch delay slots; `jal` stores `pc + 8` in `$31`.
- Addition and subtraction wrap silently; there are no overflow traps.

## What it does not do

There are no system calls, no exceptions or interrupts, no floating point
and no separate instruction and data caches: fetches, loads and stores
share the one cache.

## Using it from Python

- `mipscache.decode`: `decode(word, pc)` splits a word into an
  `Instruction` (opcode, registers, immediates, branch and jump targets).
  `to_signed32` and `to_unsigned32` wrap values to 32 bits.
- `mipscache.memory`: `Memory` is word-addressed main memory indexed by
  word number; `load_words` stores words from address 0. `parse_program`
  turns raw bytes into words, and `load_program_file` reads a program
  image from disk.
- `mipscache.cache`: `FullyAssociativeCache(memory, lines)` and
  `DirectMappedCache(memory, lines)` sit in front of a `Memory`, with
  `read(address)` and `write(address, value)` taking byte addresses.
  Their `stats` is a `CacheStats` holding `hits`, `misses` and `cycles`,
  with `hit_rate()` (NaN before any access).
- `mipscache.cpu`: `CPU(cache, slti_counts_cycles)` runs the program in
  the cache's memory. `step()` executes one instruction and returns its
  trace line, `run(trace)` runs until the pc reaches `0xffffffff` and
  writes trace lines to `trace` when given, and `report()` returns the
  summary that the command prints. Counters are in `stats`, an
  `ExecutionStats`, and `total_cycles` adds the cache's cycles to the
  core's.
- `mipscache.cli`: `main(argv)` is the command; `build_parser()` returns
  its argument parser.

```python
from mipscache.cache import DirectMappedCache
from mipscache.cpu import CPU
from mipscache.memory import Memory, load_program_file

memory = Memory()
memory.load_words(load_program_file("simple.bin"))
cpu = CPU(DirectMappedCache(memory))
cpu.run()
print(cpu.report())
```