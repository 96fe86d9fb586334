"""Basic functions: conversions, raw table access, iteration, assertions and require."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import Any, Callable, Iterator, TextIO

from .auxlib import (
    LuaTable,
    _argerror,
    _is_number,
    _tonumber,
    _truthy,
    _typeerror,
    _typename,
    read_chunk,
)
from .lexer import LuaSyntaxError
from .objects import LuaError, format_number, raw_equal

__all__ = [
    "LUA_PATH",
    "LUA_PATH_DEFAULT",
    "PackageLoader",
    "tonumber",
    "tostring",
    "lua_type",
    "rawequal",
    "rawget",
    "rawset",
    "next_key",
    "pairs",
    "ipairs",
    "unpack",
    "lua_assert",
    "error",
    "lua_print",
    "get_path",
    "expand_path",
]

LUA_PATH = "LUA_PATH"
LUA_PATH_SEP = ";"
LUA_PATH_MARK = "?"
LUA_PATH_DEFAULT = "?;?.lua"

_C_SPACES = " \t\n\r\f\v"
_ULONG_MAX = 2**64 - 1


def _check_table(t: Any, narg: int, fname: str) -> LuaTable:
    if not isinstance(t, LuaTable):
        raise _typeerror(narg, fname, "table", t)
    return t


def _checkint(value: Any, narg: int, fname: str) -> int:
    number = _tonumber(value)
    if number is None:
        raise _typeerror(narg, fname, "number", value)
    return int(number)


def _checkstring(value: Any, narg: int, fname: str) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return format_number(value)
    raise _typeerror(narg, fname, "string", value)


def _digit(c: str) -> int:
    if "0" <= c <= "9":
        return ord(c) - ord("0")
    if c.isascii() and c.isalpha():
        return ord(c.lower()) - ord("a") + 10
    return 99


def _strtoul(text: str, base: int) -> int | None:
    """Parse a whole unsigned numeral in ``base``; None if any part is invalid."""
    text = text.split("\0", 1)[0]
    size = len(text)
    i = 0
    while i < size and text[i] in _C_SPACES:
        i += 1
    negative = False
    if i < size and text[i] in "+-":
        negative = text[i] == "-"
        i += 1
    if base == 16 and text[i : i + 2].lower() == "0x" and i + 2 < size and _digit(text[i + 2]) < 16:
        i += 2
    start = i
    value = 0
    while i < size and _digit(text[i]) < base:
        value = value * base + _digit(text[i])
        i += 1
    if i == start:
        return None
    while i < size and text[i] in _C_SPACES:
        i += 1
    if i != size:
        return None
    if value > _ULONG_MAX:
        return _ULONG_MAX
    if negative:
        value = (-value) % (_ULONG_MAX + 1)
    return value


def tonumber(value: Any, base: Any = 10) -> float | int | None:
    """Convert ``value`` to a number, or return None; bases 2..36 parse unsigned integers."""
    b = 10 if base is None else _checkint(base, 2, "tonumber")
    if b == 10:
        return _tonumber(value)
    text = _checkstring(value, 1, "tonumber")
    if not 2 <= b <= 36:
        raise _argerror(2, "tonumber", "base out of range")
    number = _strtoul(text, b)
    return None if number is None else float(number)


def tostring(value: Any) -> str:
    """Return the printable form of a value."""
    if isinstance(value, str):
        return value
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return format_number(value)
    return f"{_typename(value)}: {id(value):#010x}"


def lua_type(value: Any) -> str:
    """Return the type name of a value."""
    return _typename(value)


def rawequal(a: Any, b: Any) -> bool:
    """Primitive equality without metamethods."""
    return raw_equal(a, b)


def rawget(t: Any, key: Any) -> Any:
    """Return ``t[key]`` without metamethods."""
    return _check_table(t, 1, "rawget").rawget(key)


def rawset(t: Any, key: Any, value: Any) -> LuaTable:
    """Set ``t[key] = value`` without metamethods and return ``t``."""
    table = _check_table(t, 1, "rawset")
    table.rawset(key, value)
    return table


def next_key(t: Any, key: Any = None) -> tuple[Any, Any] | None:
    """Return the entry after ``key`` in ``t``, or None when traversal is over."""
    return _check_table(t, 1, "next").next(key)


def _traverse(table: LuaTable) -> Iterator[tuple[Any, Any]]:
    key = None
    while (entry := table.next(key)) is not None:
        key, value = entry
        yield key, value


def pairs(t: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate over every (key, value) entry of ``t``."""
    return _traverse(_check_table(t, 1, "pairs"))


def _walk_array(table: LuaTable) -> Iterator[tuple[int, Any]]:
    i = 1
    while (value := table.rawget(i)) is not None:
        yield i, value
        i += 1


def ipairs(t: Any) -> Iterator[tuple[int, Any]]:
    """Iterate over (1, t[1]), (2, t[2]), ... up to the first nil."""
    return _walk_array(_check_table(t, 1, "ipairs"))


def unpack(t: Any) -> tuple[Any, ...]:
    """Return t[1] .. t[n] as a tuple, n being the table size."""
    table = _check_table(t, 1, "unpack")
    return tuple(table.rawget(i) for i in range(1, table.getn() + 1))


def lua_assert(value: Any, message: Any = None) -> Any:
    """Return ``value`` if it is true, else raise with ``message``."""
    if not _truthy(value):
        text = "assertion failed!" if message is None else _checkstring(message, 2, "assert")
        raise LuaError(text)
    return value


def error(message: Any, level: Any = 1) -> None:
    """Raise ``message`` as a Lua error.

    No call-stack position is available here, so no location prefix is added.
    """
    if level is not None:
        _checkint(level, 2, "error")
    raise LuaError(message)


def lua_print(*args: Any, file: TextIO | None = None) -> None:
    """Write the printable forms of ``args``, tab separated, followed by a newline."""
    out = sys.stdout if file is None else file
    out.write("\t".join(tostring(arg) for arg in args) + "\n")


def get_path(env: Mapping[str, str] | None = None) -> str:
    """Return the package search path from the environment or the default."""
    source = os.environ if env is None else env
    path = source.get(LUA_PATH)
    return LUA_PATH_DEFAULT if path is None else path


def _components(path: str) -> Iterator[str]:
    rest = path
    while rest:
        if rest[0] == LUA_PATH_SEP:
            rest = rest[1:]
        idx = rest.find(LUA_PATH_SEP)
        if idx == -1:
            yield rest
            return
        yield rest[:idx]
        rest = rest[idx:]


def expand_path(name: str, path: str) -> list[str]:
    """Return the file names to try for package ``name`` along ``path``."""
    return [component.replace(LUA_PATH_MARK, name) for component in _components(path)]


class PackageLoader:
    """Finds, runs and records packages along a search path.

    ``runner(text, chunkname)`` executes a chunk and returns its result.
    """

    def __init__(self, runner: Callable[[str, str], Any], path: str | None = None) -> None:
        self.runner = runner
        self.path = path
        self.loaded = LuaTable()
        self.required_name: str | None = None

    def _search_path(self) -> str:
        return self.path if self.path is not None else get_path()

    def require(self, name: Any) -> Any:
        """Load package ``name`` once and return its result (True if it returned nil)."""
        name = _checkstring(name, 1, "require")
        done = self.loaded.rawget(name)
        if _truthy(done):
            return done
        path = self._search_path()
        for filename in expand_path(name, path):
            try:
                text, chunkname = read_chunk(filename)
            except LuaError:
                continue
            break
        else:
            raise LuaError(f"could not load package `{name}' from path `{path}'")
        previous = self.required_name
        self.required_name = name
        try:
            result = self.runner(text, chunkname)
        except LuaSyntaxError as exc:
            raise LuaError(f"error loading package `{name}' ({exc})") from exc
        finally:
            self.required_name = previous
        if result is None:
            result = True
        self.loaded.rawset(name, result)
        return result