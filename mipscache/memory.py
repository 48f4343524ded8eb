"""Word-addressed main memory and program loading."""

from __future__ import annotations

import struct
from array import array
from collections.abc import Iterable
from os import PathLike

from mipscache.decode import to_signed32

DEFAULT_SIZE_WORDS = 0x400000

_WORD = struct.Struct(">i")


class Memory:
    """A fixed-size array of signed 32-bit words, indexed by word number."""

    def __init__(self, size_words: int = DEFAULT_SIZE_WORDS) -> None:
        if size_words < 0:
            raise ValueError("memory size must not be negative")
        self._words = array("i", bytes(4 * size_words))

    def __len__(self) -> int:
        return len(self._words)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._words):
            raise IndexError(f"word index {index:#x} outside memory")

    def __getitem__(self, index: int) -> int:
        self._check(index)
        return self._words[index]

    def __setitem__(self, index: int, value: int) -> None:
        self._check(index)
        self._words[index] = to_signed32(value)

    def load_words(self, words: Iterable[int]) -> None:
        """Store ``words`` consecutively starting at word 0."""
        data = array("i", (to_signed32(word) for word in words))
        if len(data) > len(self._words):
            raise IndexError("program does not fit in memory")
        self._words[: len(data)] = data


def parse_program(data: bytes) -> list[int]:
    """Split a program image into big-endian words; a trailing partial word is ignored."""
    usable = len(data) - len(data) % _WORD.size
    return [word for (word,) in _WORD.iter_unpack(data[:usable])]


def load_program_file(path: str | PathLike[str]) -> list[int]:
    """Read a binary program image from ``path`` and return its words."""
    with open(path, "rb") as handle:
        return parse_program(handle.read())