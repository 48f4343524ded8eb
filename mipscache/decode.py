"""Decoding of 32-bit MIPS instruction words into their fields."""

from __future__ import annotations

from dataclasses import dataclass

_MASK32 = 0xFFFFFFFF
_SIGN32 = 0x80000000


def to_unsigned32(value: int) -> int:
    """Return ``value`` wrapped to an unsigned 32-bit integer."""
    return value & _MASK32


def to_signed32(value: int) -> int:
    """Return ``value`` wrapped to a two's-complement signed 32-bit integer."""
    value &= _MASK32
    return value - (1 << 32) if value & _SIGN32 else value


@dataclass(frozen=True)
class Instruction:
    """All fields of a decoded instruction word.

    ``s_imm`` is the sign-extended immediate, ``z_imm`` the zero-extended one,
    ``b_addr`` the branch displacement in bytes and ``j_addr`` the absolute
    jump target computed from the program counter of the instruction.
    """

    word: int
    opcode: int
    rs: int
    rt: int
    rd: int
    shamt: int
    func: int
    imm: int
    addr: int
    s_imm: int
    z_imm: int
    b_addr: int
    j_addr: int


def decode(word: int, pc: int) -> Instruction:
    """Split the instruction ``word`` fetched from address ``pc`` into fields."""
    bits = to_unsigned32(word)
    imm = bits & 0xFFFF
    addr = bits & 0x03FFFFFF
    s_imm = imm - 0x10000 if imm & 0x8000 else imm
    j_addr = (to_unsigned32(pc + 4) & 0xF0000000) | (addr << 2)
    return Instruction(
        word=to_signed32(bits),
        opcode=(bits >> 26) & 0x3F,
        rs=(bits >> 21) & 0x1F,
        rt=(bits >> 16) & 0x1F,
        rd=(bits >> 11) & 0x1F,
        shamt=(bits >> 6) & 0x1F,
        func=bits & 0x3F,
        imm=imm,
        addr=addr,
        s_imm=s_imm,
        z_imm=imm,
        b_addr=s_imm * 4,
        j_addr=j_addr,
    )