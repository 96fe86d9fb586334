"""Table manipulation: traversal, sizes, insertion, removal, concatenation and sorting."""

from __future__ import annotations

from typing import Any, Callable

from .auxlib import (
    _NONE,
    LuaTable,
    _argerror,
    _is_number,
    _tonumber,
    _truthy,
    _typeerror,
    _typename,
)
from .objects import LuaError, format_number

__all__ = [
    "foreach",
    "foreachi",
    "getn",
    "setn",
    "insert",
    "remove",
    "concat",
    "sort",
]


def _check_table(t: object, narg: int, fname: str) -> LuaTable:
    if not isinstance(t, LuaTable):
        raise _typeerror(narg, fname, "table", t)
    return t


def _check_function(f: object, narg: int, fname: str) -> Callable[..., Any]:
    if isinstance(f, LuaTable) or not callable(f):
        raise _typeerror(narg, fname, "function", f)
    return f


def _checkint(value: object, narg: int, fname: str) -> int:
    number = _tonumber(value)
    if number is None:
        raise _typeerror(narg, fname, "number", value)
    return int(number)


def _aux_getn(t: object, fname: str) -> int:
    return _check_table(t, 1, fname).getn()


def _as_text(value: object) -> str | None:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return format_number(value)
    return None


def foreachi(t: LuaTable, func: Callable[[int, Any], Any]) -> Any:
    """Call ``func(i, t[i])`` for i in 1..n; return the first non-nil result."""
    n = _aux_getn(t, "foreachi")
    func = _check_function(func, 2, "foreachi")
    for i in range(1, n + 1):
        result = func(i, t.rawget(i))
        if result is not None:
            return result
    return None


def foreach(t: LuaTable, func: Callable[[Any, Any], Any]) -> Any:
    """Call ``func(key, value)`` for every entry; return the first non-nil result."""
    t = _check_table(t, 1, "foreach")
    func = _check_function(func, 2, "foreach")
    key = None
    while (entry := t.next(key)) is not None:
        key, value = entry
        result = func(key, value)
        if result is not None:
            return result
    return None


def getn(t: LuaTable) -> int:
    """Return the size of the array part of ``t``."""
    return _aux_getn(t, "getn")


def setn(t: LuaTable, n: int) -> None:
    """Set the size of the array part of ``t``."""
    t = _check_table(t, 1, "setn")
    t.setn(_checkint(n, 2, "setn"))


def insert(t: LuaTable, *args: Any) -> None:
    """insert(t, value) appends; insert(t, pos, value) inserts at ``pos``, moving elements up."""
    n = _aux_getn(t, "insert") + 1
    if len(args) == 1:
        pos = n
        value = args[0]
    else:
        pos = _checkint(args[0] if args else _NONE, 2, "insert")
        if pos > n:
            n = pos
        value = args[1] if len(args) > 1 else None
    t.setn(n)
    n -= 1
    while n >= pos:
        t.rawset(n + 1, t.rawget(n))
        n -= 1
    t.rawset(pos, value)


def remove(t: LuaTable, pos: int | None = None) -> Any:
    """Remove and return the element at ``pos`` (default the last), moving later ones down."""
    n = _aux_getn(t, "remove")
    pos = n if pos is None else _checkint(pos, 2, "remove")
    if n <= 0:
        return None
    t.setn(n - 1)
    result = t.rawget(pos)
    while pos < n:
        t.rawset(pos, t.rawget(pos + 1))
        pos += 1
    t.rawset(n, None)
    return result


def concat(t: LuaTable, sep: str = "", i: int = 1, j: int | None = None) -> str:
    """Join t[i]..t[j] (strings or numbers) with ``sep``."""
    if sep is None:
        sep = ""
    text_sep = _as_text(sep)
    if text_sep is None:
        raise _typeerror(2, "concat", "string", sep)
    start = _checkint(i, 3, "concat")
    stop = 0 if j is None else _checkint(j, 4, "concat")
    t = _check_table(t, 1, "concat")
    if stop == 0:
        stop = t.getn()
    parts: list[str] = []
    for k in range(start, stop + 1):
        item = _as_text(t.rawget(k))
        if item is None:
            raise _argerror(1, "concat", "table contains non-strings")
        parts.append(item)
        if k != stop:
            parts.append(text_sep)
    return "".join(parts)


def _lessthan(a: object, b: object) -> bool:
    if _is_number(a) and _is_number(b):
        return a < b  # type: ignore[operator]
    if isinstance(a, str) and isinstance(b, str):
        return a < b
    ta, tb = _typename(a), _typename(b)
    if ta == tb:
        raise LuaError(f"attempt to compare two {ta} values")
    raise LuaError(f"attempt to compare {ta} with {tb}")


class _Sorter:
    def __init__(self, t: LuaTable, comp: Callable[[Any, Any], Any] | None) -> None:
        self.t = t
        self.comp = comp

    def less(self, a: object, b: object) -> bool:
        if self.comp is not None:
            return _truthy(self.comp(a, b))
        return _lessthan(a, b)

    def swap(self, i: int, j: int) -> None:
        t = self.t
        ai, aj = t.rawget(i), t.rawget(j)
        t.rawset(i, aj)
        t.rawset(j, ai)

    def sort(self, lo: int, up: int) -> None:
        t = self.t
        while lo < up:
            if self.less(t.rawget(up), t.rawget(lo)):
                self.swap(lo, up)
            if up - lo == 1:
                break
            i = (lo + up) // 2
            if self.less(t.rawget(i), t.rawget(lo)):
                self.swap(i, lo)
            elif self.less(t.rawget(up), t.rawget(i)):
                self.swap(i, up)
            if up - lo == 2:
                break
            pivot = t.rawget(i)
            self.swap(i, up - 1)
            i, j = lo, up - 1
            while True:
                i += 1
                while self.less(t.rawget(i), pivot):
                    if i > up:
                        raise LuaError("invalid order function for sorting")
                    i += 1
                j -= 1
                while self.less(pivot, t.rawget(j)):
                    if j < lo:
                        raise LuaError("invalid order function for sorting")
                    j -= 1
                if j < i:
                    break
                self.swap(i, j)
            self.swap(up - 1, i)
            if i - lo < up - i:
                j, i, lo = lo, i - 1, i + 1
            else:
                j, i, up = i + 1, up, i - 1
            self.sort(j, i)


def sort(t: LuaTable, comp: Callable[[Any, Any], Any] | None = None) -> None:
    """Sort t[1..n] in place, using ``comp(a, b)`` as "a < b" when given."""
    n = _aux_getn(t, "sort")
    if comp is not None:
        comp = _check_function(comp, 2, "sort")
    _Sorter(t, comp).sort(1, n)