"""Runtime helpers (numbers, opcodes, lexer) and standard libraries of a small scripting language."""

__version__ = "0.1.0"
__all__ = [
    "objects",
    "memory",
    "opcodes",
    "lexer",
    "strlib",
    "auxlib",
    "tablib",
    "mathlib",
    "baselib",
    "iolib",
]