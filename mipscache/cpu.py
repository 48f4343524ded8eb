"""A single-cycle MIPS core that reaches memory through a cache."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TextIO

from mipscache.cache import CacheStats
from mipscache.decode import Instruction, decode, to_signed32, to_unsigned32
from mipscache.memory import Memory

HALT_ADDRESS = 0xFFFFFFFF
STACK_TOP = 0x1000000
FETCH_CYCLES = 1
DECODE_CYCLES = 1
EXECUTE_CYCLES = 3

_SLTI = 0x0A


class _Cache(Protocol):
    memory: Memory
    stats: CacheStats

    def read(self, address: int) -> int: ...

    def write(self, address: int, value: int) -> None: ...


def _h(value: int) -> str:
    return f"{to_unsigned32(value):x}"


@dataclass
class ExecutionStats:
    """Counts of executed instructions by kind and of core cycles."""

    r_inst: int = 0
    i_inst: int = 0
    j_inst: int = 0
    nop: int = 0
    memory_access: int = 0
    branches: int = 0
    branches_taken: int = 0
    cycles: int = 0

    @property
    def executed(self) -> int:
        """All instructions executed so far."""
        return self.r_inst + self.i_inst + self.j_inst + self.nop


_BinaryOp = Callable[[int, int], int]

# opcode -> (label, operator shown in traces, uses sign-extended immediate, operation)
_IMMEDIATE_ALU: dict[int, tuple[str, str, bool, _BinaryOp]] = {
    0x08: ("AddI", "+", True, lambda a, b: a + b),
    0x09: ("AddIU", "+", True, lambda a, b: a + b),
    0x0C: ("ANDI", "&", False, lambda a, b: a & b),
    0x0D: ("ORI", "|", False, lambda a, b: a | b),
    0x0A: ("SLTI", "<", True, lambda a, b: int(a < b)),
    0x0B: ("SLTIU", "<", True, lambda a, b: int(a < b)),
}

# func -> (label, operator shown in traces, operation)
_REGISTER_ALU: dict[int, tuple[str, str, _BinaryOp]] = {
    0x20: ("Add", "+", lambda a, b: a + b),
    0x21: ("AddU", "+", lambda a, b: a + b),
    0x24: ("AND", "&", lambda a, b: a & b),
    0x25: ("OR", "|", lambda a, b: a | b),
    # Logical, not bitwise, negation: the result is 1 or 0.
    0x27: ("NOR", "~|", lambda a, b: int(not (a | b))),
    0x2A: ("SLT", "<", lambda a, b: int(a < b)),
    0x2B: ("SLTU", "<", lambda a, b: int(a < b)),
    0x22: ("Sub", "-", lambda a, b: a - b),
    0x23: ("SubU", "-", lambda a, b: a - b),
}


class CPU:
    """Fetches, decodes and executes instructions until the PC reaches 0xffffffff."""

    def __init__(self, cache: _Cache, slti_counts_cycles: bool = True) -> None:
        self.cache = cache
        self.slti_counts_cycles = slti_counts_cycles
        self.regs = [0] * 32
        self.regs[29] = STACK_TOP
        self.regs[31] = to_signed32(HALT_ADDRESS)
        self.pc = 0
        self.stats = ExecutionStats()

    @property
    def memory(self) -> Memory:
        return self.cache.memory

    @property
    def halted(self) -> bool:
        return self.pc == HALT_ADDRESS

    @property
    def total_cycles(self) -> int:
        """Core cycles plus the cycles spent in the cache."""
        return self.stats.cycles + self.cache.stats.cycles

    def step(self) -> str:
        """Execute one instruction and return its trace line."""
        if self.halted:
            raise RuntimeError("the processor has halted")
        pc = self.pc
        inst = decode(self.cache.read(pc), pc)
        self.stats.cycles += FETCH_CYCLES + DECODE_CYCLES
        text = self._execute(inst)
        if inst.opcode != _SLTI or self.slti_counts_cycles:
            self.stats.cycles += EXECUTE_CYCLES
        return f"@ 0x{pc:x} {text}"

    def run(self, trace: TextIO | None = None) -> ExecutionStats:
        """Run until halted, writing trace lines to ``trace`` when given."""
        while not self.halted:
            line = self.step()
            if trace is not None:
                print(line, file=trace)
        return self.stats

    def report(self) -> str:
        """Summary of cycles, instruction counts and cache behaviour."""
        s = self.stats
        cs = self.cache.stats
        return (
            f"Total cycle num: {self.total_cycles}\n"
            f"Final return value Regs[2]: 0x{_h(self.regs[2])}\n"
            f"Num of Executed Inst: {s.executed}\n"
            f"(R_inst: {s.r_inst}, I_inst: {s.i_inst}, J_inst:{s.j_inst}, Nop: {s.nop})\n"
            f"Memory Access inst: {s.memory_access}\n"
            f"Num of Branch: {s.branches}\n"
            f"Num of Branch taken: {s.branches_taken}\n"
            "\n"
            f"cache hit / miss num: {cs.hits} / {cs.misses}\n"
            f"cache hit rate: {cs.hit_rate():f}\n"
        )

    def _advance(self) -> None:
        self.pc = to_unsigned32(self.pc + 4)

    def _execute(self, inst: Instruction) -> str:
        if inst.opcode == 0:
            return self._special(inst)
        if inst.opcode in _IMMEDIATE_ALU:
            return self._immediate_alu(inst)
        handler = self._HANDLERS.get(inst.opcode)
        if handler is None:
            return self._nop()
        return handler(self, inst)

    def _nop(self) -> str:
        self.stats.nop += 1
        self._advance()
        return "Nop"

    def _immediate_alu(self, inst: Instruction) -> str:
        label, symbol, signed, operation = _IMMEDIATE_ALU[inst.opcode]
        operand = inst.s_imm if signed else inst.z_imm
        source = self.regs[inst.rs]
        result = to_signed32(operation(source, operand))
        self.regs[inst.rt] = result
        self._advance()
        self.stats.i_inst += 1
        return (
            f"{label}:  R[{inst.rs}]: 0x{_h(source)} {symbol} 0x{_h(operand)}"
            f" -> R[{inst.rt}]: 0x{_h(result)}"
        )

    def _branch(self, inst: Instruction, equal: bool) -> str:
        left, right = self.regs[inst.rs], self.regs[inst.rt]
        if (left == right) == equal:
            target = to_unsigned32(self.pc + 4 + inst.b_addr)
            self.stats.branches_taken += 1
        else:
            target = to_unsigned32(self.pc + 4)
        self.pc = target
        self.stats.branches += 1
        self.stats.i_inst += 1
        label, symbol = ("BEQ", "==") if equal else ("BNE", "!=")
        return (
            f"{label}:  if(R[{inst.rs}]: 0x{_h(left)} {symbol} R[{inst.rt}]: 0x{_h(right)})"
            f" pc + 4 + b_addr: 0x{_h(inst.b_addr)} // pc + 4 -> pc: 0x{target:x}"
        )

    def _beq(self, inst: Instruction) -> str:
        return self._branch(inst, equal=True)

    def _bne(self, inst: Instruction) -> str:
        return self._branch(inst, equal=False)

    def _jump(self, inst: Instruction) -> str:
        self.pc = inst.j_addr
        self.stats.j_inst += 1
        return f"Jump:  j_addr: 0x{inst.j_addr:x} -> pc: 0x{inst.j_addr:x}"

    def _jal(self, inst: Instruction) -> str:
        link = to_signed32(self.pc + 8)
        self.regs[31] = link
        self.pc = inst.j_addr
        self.stats.j_inst += 1
        return f"JAL:  pc + 8: 0x{_h(link)} -> Regs[31], j_addr: 0x{inst.j_addr:x} -> pc"

    def _lui(self, inst: Instruction) -> str:
        result = to_signed32(inst.imm << 16)
        self.regs[inst.rt] = result
        self._advance()
        self.stats.i_inst += 1
        return f"LUI  : imm: 0x{inst.imm:x} & 16'b0 -> R[{inst.rt}]: 0x{_h(result)}"

    def _lw(self, inst: Instruction) -> str:
        base = self.regs[inst.rs]
        address = to_signed32(base + inst.s_imm)
        value = self.cache.read(address)
        self.regs[inst.rt] = value
        self._advance()
        self.stats.memory_access += 1
        self.stats.i_inst += 1
        return (
            f"LW:  M[ R[{inst.rs}]:0x{_h(base)} + 0x{_h(inst.s_imm)}]: 0x{_h(address)}"
            f" -> R[{inst.rt}]: 0x{_h(value)}"
        )

    def _sw(self, inst: Instruction) -> str:
        base = self.regs[inst.rs]
        value = self.regs[inst.rt]
        self.cache.write(to_signed32(base + inst.s_imm), value)
        self._advance()
        self.stats.memory_access += 1
        self.stats.i_inst += 1
        return (
            f"SW:  R[{inst.rt}]: 0x{_h(value)} -> M[ R[{inst.rs}]:0x{_h(base)}"
            f" + s_imm 0x{_h(inst.s_imm)} ]"
        )

    def _special(self, inst: Instruction) -> str:
        if inst.func in _REGISTER_ALU:
            label, symbol, operation = _REGISTER_ALU[inst.func]
            left, right = self.regs[inst.rs], self.regs[inst.rt]
            result = to_signed32(operation(left, right))
            self.regs[inst.rd] = result
            self._advance()
            self.stats.r_inst += 1
            return (
                f"{label}:  R[{inst.rs}]: 0x{_h(left)} {symbol} R[{inst.rt}]: 0x{_h(right)}"
                f" -> R[{inst.rd}]: 0x{_h(result)}"
            )
        if inst.func in (0x01, 0x02):
            source = self.regs[inst.rt]
            if inst.func == 0x01:
                label, symbol, result = "SLL", "<<", to_signed32(source << inst.shamt)
            else:
                label, symbol, result = "SRL", ">>", source >> inst.shamt
            self.regs[inst.rd] = result
            self._advance()
            self.stats.r_inst += 1
            return (
                f"{label}:  R[{inst.rt}]: 0x{_h(source)} {symbol} shamt: 0x{inst.shamt:x}"
                f" -> R[{inst.rd}]: 0x{_h(result)}"
            )
        if inst.func == 0x08:
            target = to_unsigned32(self.regs[inst.rs])
            self.pc = target
            self.stats.r_inst += 1
            return f"JR:  R[{inst.rs}]: 0x{target:x} -> pc: 0x{target:x}"
        return self._nop()

    _HANDLERS: dict[int, Callable[[CPU, Instruction], str]] = {
        0x04: _beq,
        0x05: _bne,
        0x02: _jump,
        0x03: _jal,
        0x0F: _lui,
        0x23: _lw,
        0x2B: _sw,
    }