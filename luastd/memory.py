"""Block accounting and growth policy for dynamically sized arrays."""

from __future__ import annotations

import sys

from .objects import LuaError

__all__ = ["AllocationError", "BlockCounter", "grow_size", "MEMERRMSG", "MINSIZEARRAY"]

MEMERRMSG = "not enough memory"
MINSIZEARRAY = 4
BLOCK_TOO_BIG = "memory allocation error: block too big"


class AllocationError(LuaError):
    """Raised when an allocation or growth request cannot be satisfied."""


def grow_size(size: int, limit: int, message: str) -> int:
    """Return the new capacity for an array of ``size`` elements bounded by ``limit``."""
    newsize = size * 2
    if newsize < MINSIZEARRAY:
        return MINSIZEARRAY
    if size >= limit // 2:
        if size < limit - MINSIZEARRAY:
            return limit
        raise AllocationError(message)
    return newsize


class BlockCounter:
    """Tracks the total number of bytes held by allocated blocks."""

    def __init__(self, max_size: int = sys.maxsize) -> None:
        self.max_size = max_size
        self.nblocks = 0

    def realloc(self, oldsize: int, size: int) -> int:
        """Account for resizing a block from ``oldsize`` to ``size``; return the new size."""
        if oldsize < 0 or size < 0:
            raise ValueError("block sizes must be non-negative")
        if oldsize > self.nblocks:
            raise ValueError("releasing more than was allocated")
        if size == 0:
            if oldsize == 0:
                return 0
        elif size >= self.max_size:
            raise AllocationError(BLOCK_TOO_BIG)
        self.nblocks += size - oldsize
        return size