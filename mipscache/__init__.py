"""Single-cycle MIPS emulator with fully associative and direct-mapped cache models."""

__version__ = "0.1.0"
__all__ = ["cache", "cli", "cpu", "decode", "memory"]