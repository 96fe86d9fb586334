"""Auxiliary facilities shared by the libraries: tables, sizes, references, chunk loading."""

from __future__ import annotations

import math
import os
import sys
from collections.abc import Iterable, Mapping
from typing import Any, Sequence

from .objects import LuaError, str2d

__all__ = [
    "LUA_NOREF",
    "LUA_REFNIL",
    "RESERVED_REFS",
    "FREELIST_REF",
    "LuaTable",
    "find_string",
    "read_chunk",
]

LUA_NOREF = -2
LUA_REFNIL = -1

RESERVED_REFS = 2
FREELIST_REF = 1

_NONE = object()


class _BoolKey(tuple):
    """Keeps boolean keys apart from the numbers 0 and 1."""


# -- argument checking helpers shared by the libraries ---------------------


def _typename(value: object) -> str:
    if value is _NONE:
        return "no value"
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, LuaTable):
        return "table"
    if callable(value):
        return "function"
    return "userdata"


def _argerror(narg: int, fname: str, extramsg: str) -> LuaError:
    return LuaError(f"bad argument #{narg} to `{fname}' ({extramsg})")


def _typeerror(narg: int, fname: str, expected: str, value: object) -> LuaError:
    return _argerror(narg, fname, f"{expected} expected, got {_typename(value)}")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _tonumber(value: object) -> float | None:
    """Convert a number or numeric string to a number; None otherwise."""
    if _is_number(value):
        return value  # type: ignore[return-value]
    if isinstance(value, str):
        return str2d(value)
    return None


def _truthy(value: object) -> bool:
    return value is not None and value is not False


def _size_field(value: object) -> int:
    number = _tonumber(value)
    return -1 if number is None else int(number)


# -- tables -------------------------------------------------------------------


class LuaTable:
    """An associative table with Lua semantics: nil values are absent."""

    def __init__(self, items: Mapping[Any, Any] | Iterable[Any] | None = None) -> None:
        self._hash: dict[Any, tuple[Any, Any]] = {}
        self._size: int | None = None
        if items is None:
            return
        if isinstance(items, Mapping):
            for key, value in items.items():
                self.rawset(key, value)
        else:
            for index, value in enumerate(items, start=1):
                self.rawset(index, value)

    @staticmethod
    def _norm(key: object) -> object:
        if isinstance(key, bool):
            return _BoolKey((bool, key))
        return key

    def rawget(self, key: object) -> Any:
        """Return the value stored under ``key``, or None."""
        if key is None:
            return None
        entry = self._hash.get(self._norm(key))
        return None if entry is None else entry[1]

    def rawset(self, key: object, value: object) -> None:
        """Store ``value`` under ``key``; a None value removes the entry."""
        if key is None:
            raise LuaError("table index is nil")
        if isinstance(key, float) and math.isnan(key):
            raise LuaError("table index is NaN")
        norm = self._norm(key)
        if value is None:
            self._hash.pop(norm, None)
        else:
            self._hash[norm] = (key, value)

    def next(self, key: object = None) -> tuple[Any, Any] | None:
        """Return the entry that follows ``key`` in traversal order, or None at the end."""
        entries = iter(self._hash.items())
        if key is not None:
            norm = self._norm(key)
            if norm not in self._hash:
                raise LuaError("invalid key to `next'")
            for candidate, _ in entries:
                if candidate == norm and type(candidate) is type(norm):
                    break
        for _, entry in entries:
            return entry
        return None

    def getn(self) -> int:
        """Return the size of the array part: field ``n``, an explicit size, or a count."""
        n = _size_field(self.rawget("n"))
        if n >= 0:
            return n
        if self._size is not None and self._size >= 0:
            return self._size
        n = 1
        while self.rawget(n) is not None:
            n += 1
        return n - 1

    def setn(self, n: int) -> None:
        """Set the size of the array part."""
        if _size_field(self.rawget("n")) >= 0:
            self.rawset("n", n)
        else:
            self._size = n

    def ref(self, value: object) -> int:
        """Store ``value`` in the table and return a unique integer reference to it."""
        if value is None:
            return LUA_REFNIL
        free = _tonumber(self.rawget(FREELIST_REF))
        ref = 0 if free is None else int(free)
        if ref != 0:
            self.rawset(FREELIST_REF, self.rawget(ref))
        else:
            ref = max(self.getn(), RESERVED_REFS) + 1
            self.setn(ref)
        self.rawset(ref, value)
        return ref

    def unref(self, ref: int) -> None:
        """Release reference ``ref`` so that it can be reused."""
        if ref >= 0:
            self.rawset(ref, self.rawget(FREELIST_REF))
            self.rawset(FREELIST_REF, ref)

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self._hash.values())
        return f"LuaTable({{{body}}})"


# -- misc -----------------------------------------------------------------------


def find_string(name: str, options: Sequence[str]) -> int:
    """Return the index of ``name`` in ``options``, or -1 if it is absent."""
    for index, option in enumerate(options):
        if option == name:
            return index
    return -1


def read_chunk(filename: str | os.PathLike[str] | None = None) -> tuple[str, str]:
    """Read a chunk from a file (or standard input) and return (text, chunk name)."""
    if filename is None:
        chunkname = "=stdin"
        stream = getattr(sys.stdin, "buffer", sys.stdin)
        try:
            data = stream.read()
        except OSError as exc:
            raise LuaError(f"cannot read stdin: {exc.strerror}") from exc
        if isinstance(data, str):
            return data, chunkname
    else:
        path = os.fspath(filename)
        chunkname = "@" + path
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise LuaError(f"cannot read {path}: {exc.strerror}") from exc
    return data.decode("latin-1"), chunkname