"""Command line entry point: load a program image and run it."""

from __future__ import annotations

import argparse
import sys

from mipscache.cache import DirectMappedCache, FullyAssociativeCache
from mipscache.cpu import CPU
from mipscache.memory import Memory, load_program_file


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog="mipscache",
        description="Run a big-endian MIPS program image through a cached memory system.",
    )
    parser.add_argument("program", nargs="?", default="simple.bin", help="program image")
    parser.add_argument(
        "--cache",
        choices=("fully", "direct"),
        default="fully",
        help="fully associative (64 lines) or direct mapped (128 lines)",
    )
    parser.add_argument("--lines", type=int, default=None, help="number of cache lines")
    parser.add_argument("-q", "--quiet", action="store_true", help="do not trace instructions")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        words = load_program_file(args.program)
    except OSError as exc:
        print(f"file open error: {exc}", file=sys.stderr)
        return 1

    memory = Memory()
    try:
        memory.load_words(words)
        if args.cache == "fully":
            cache = FullyAssociativeCache(memory, args.lines or 64)
            slti_counts_cycles = False
        else:
            cache = DirectMappedCache(memory, args.lines or 128)
            slti_counts_cycles = True
    except (ValueError, IndexError) as exc:
        parser.error(str(exc))

    cpu = CPU(cache, slti_counts_cycles)
    try:
        cpu.run(None if args.quiet else sys.stdout)
    except IndexError as exc:
        print(f"memory access error at pc 0x{cpu.pc:x}: {exc}", file=sys.stderr)
        return 1

    print("\n\n" + cpu.report(), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())