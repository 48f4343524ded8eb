"""Write-back caches with 64-byte blocks in front of main memory."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from mipscache.decode import to_signed32, to_unsigned32
from mipscache.memory import Memory

BLOCK_WORDS = 16
HIT_CYCLES = 1
MISS_CYCLES = 1000


@dataclass
class CacheStats:
    """Hit and miss counters plus the cycles spent in the memory system."""

    hits: int = 0
    misses: int = 0
    cycles: int = 0

    def hit_rate(self) -> float:
        """Hits as a percentage of all accesses; NaN before any access."""
        total = self.hits + self.misses
        if total == 0:
            return math.nan
        return self.hits / total * 100


@dataclass
class CacheLine:
    """One 16-word cache line."""

    tag: int = 0
    valid: bool = False
    dirty: bool = False
    referenced: bool = False
    data: list[int] = field(default_factory=lambda: [0] * BLOCK_WORDS)


class _BlockCache:
    def __init__(self, memory: Memory, lines: int) -> None:
        if lines < 1:
            raise ValueError("a cache needs at least one line")
        self.memory = memory
        self.lines = [CacheLine() for _ in range(lines)]
        self.stats = CacheStats()

    def _count_hit(self) -> None:
        self.stats.hits += 1
        self.stats.cycles += HIT_CYCLES

    def _count_miss(self) -> None:
        self.stats.misses += 1
        self.stats.cycles += MISS_CYCLES

    def _fill(self, line: CacheLine, block: int) -> None:
        base = block * BLOCK_WORDS
        line.data = [self.memory[base + n] for n in range(BLOCK_WORDS)]

    def _write_back(self, line: CacheLine, block: int) -> None:
        base = block * BLOCK_WORDS
        for n, value in enumerate(line.data):
            self.memory[base + n] = value

    def _lookup(self, address: int) -> tuple[CacheLine, int]:
        raise NotImplementedError

    def read(self, address: int) -> int:
        """Return the word at byte ``address``, filling the cache on a miss."""
        line, offset = self._lookup(address)
        return line.data[offset]

    def write(self, address: int, value: int) -> None:
        """Store ``value`` at byte ``address`` in the cache, marking the line dirty."""
        line, offset = self._lookup(address)
        line.dirty = True
        line.data[offset] = to_signed32(value)


class FullyAssociativeCache(_BlockCache):
    """Fully associative cache replacing lines by the second-chance clock."""

    def __init__(self, memory: Memory, lines: int = 64) -> None:
        super().__init__(memory, lines)
        self._hand = 0

    def _victim(self) -> CacheLine:
        while True:
            line = self.lines[self._hand]
            self._hand = (self._hand + 1) % len(self.lines)
            if not line.referenced:
                return line
            line.referenced = False

    def _lookup(self, address: int) -> tuple[CacheLine, int]:
        address = to_unsigned32(address)
        block = address >> 6
        offset = (address >> 2) & (BLOCK_WORDS - 1)

        line = next((ln for ln in self.lines if ln.valid and ln.tag == block), None)
        if line is not None:
            line.referenced = True
            self._count_hit()
            return line, offset

        self._count_miss()
        line = next((ln for ln in self.lines if not ln.valid), None)
        if line is None:
            line = self._victim()
            if line.dirty:
                self._write_back(line, line.tag)
        self._fill(line, block)
        line.valid = True
        line.tag = block
        return line, offset

    def read(self, address: int) -> int:
        """Return the word at byte ``address``, filling the cache on a miss."""
        return super().read(address)

    def write(self, address: int, value: int) -> None:
        """Store ``value`` at byte ``address`` in the cache, marking the line dirty."""
        super().write(address, value)


class DirectMappedCache(_BlockCache):
    """Direct-mapped cache; each block maps to line ``block % lines``."""

    def __init__(self, memory: Memory, lines: int = 128) -> None:
        if lines < 1 or lines & (lines - 1):
            raise ValueError("line count must be a power of two")
        super().__init__(memory, lines)
        self._index_bits = lines.bit_length() - 1

    def _lookup(self, address: int) -> tuple[CacheLine, int]:
        word = to_unsigned32(address) >> 2
        offset = word & (BLOCK_WORDS - 1)
        block = word >> 4
        index = block & (len(self.lines) - 1)
        tag = block >> self._index_bits
        line = self.lines[index]

        if line.valid and line.tag == tag:
            self._count_hit()
            return line, offset

        self._count_miss()
        if line.valid and line.dirty:
            self._write_back(line, (line.tag << self._index_bits) | index)
        self._fill(line, block)
        line.valid = True
        line.tag = tag
        return line, offset

    def read(self, address: int) -> int:
        """Return the word at byte ``address``, filling the cache on a miss."""
        return super().read(address)

    def write(self, address: int, value: int) -> None:
        """Store ``value`` at byte ``address`` in the cache, marking the line dirty."""
        super().write(address, value)