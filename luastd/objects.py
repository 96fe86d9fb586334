"""Generic helpers over Lua values: number conversion, equality and messages."""

from __future__ import annotations

import re

__all__ = [
    "LuaError",
    "int2fb",
    "fb2int",
    "log2",
    "str2d",
    "raw_equal",
    "format_number",
    "format_message",
    "chunkid",
]

NUMBER_FMT = "%.14g"

_UINT_MAX = 0xFFFFFFFF
_C_SPACES = " \t\n\r\f\v"

_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_HEX = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?")
_SPECIAL = re.compile(r"[+-]?(?:inf(?:inity)?|nan)", re.IGNORECASE)


class LuaError(Exception):
    """An error raised with a Lua value as its error object."""

    def __init__(self, value: object = None) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return self.value
        if isinstance(self.value, (int, float)) and not isinstance(self.value, bool):
            return format_number(self.value)
        return repr(self.value)


def _check_unsigned(x: int) -> int:
    if not 0 <= x <= _UINT_MAX:
        raise ValueError(f"value out of unsigned int range: {x}")
    return x


def int2fb(x: int) -> int:
    """Encode an integer as a 'floating point byte' (mmmmmxxx = xxx * 2^mmmmm)."""
    x = _check_unsigned(x)
    m = 0
    while x >= 8:
        x = (x + 1) >> 1
        m += 1
    return (m << 3) | x


def fb2int(x: int) -> int:
    """Decode a 'floating point byte' back into an integer."""
    return (x & 7) << (x >> 3)


def log2(x: int) -> int:
    """Integer base-2 logarithm; -1 for zero."""
    x = _check_unsigned(x)
    return x.bit_length() - 1


def str2d(s: str) -> float | None:
    """Convert a string to a number, or return None if it is not a whole numeral."""
    text = s.lstrip(_C_SPACES).rstrip(_C_SPACES)
    if not text:
        return None
    if _HEX.fullmatch(text):
        sign = -1.0 if text[0] == "-" else 1.0
        body = text.lstrip("+-")
        if "p" not in body.lower():
            body += "p0"
        return sign * float.fromhex(body)
    if _DECIMAL.fullmatch(text) or _SPECIAL.fullmatch(text):
        return float(text)
    return None


def _type_tag(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def raw_equal(a: object, b: object) -> bool:
    """Primitive equality between two Lua values, without metamethods."""
    tag = _type_tag(a)
    if tag != _type_tag(b):
        return False
    if tag == "nil":
        return True
    if tag in ("number", "boolean", "string"):
        return a == b
    return a is b


def format_number(n: float) -> str:
    """Format a number the way Lua converts numbers to strings."""
    return NUMBER_FMT % n


def format_message(fmt: str, *args: object) -> str:
    """Format a message supporting only %d, %c, %f, %s and %%."""
    parts: list[str] = []
    remaining = iter(args)
    pos = 0
    while (e := fmt.find("%", pos)) != -1:
        parts.append(fmt[pos:e])
        spec = fmt[e + 1 : e + 2]
        if spec == "%":
            parts.append("%")
        else:
            try:
                arg = next(remaining)
            except StopIteration:
                raise ValueError(f"missing argument for %{spec}") from None
            if spec == "s":
                parts.append(str(arg))
            elif spec == "c":
                parts.append(chr(int(arg)))
            elif spec == "d":
                parts.append(format_number(float(int(arg))))
            elif spec == "f":
                parts.append(format_number(float(arg)))
            else:
                raise ValueError(f"invalid format option '%{spec}'")
        pos = e + 2
    parts.append(fmt[pos:])
    return "".join(parts)


def chunkid(source: str, bufflen: int = 80) -> str:
    """Build a short printable name for a chunk from its source name."""
    if source.startswith("="):
        return source[1:bufflen]
    if source.startswith("@"):
        name = source[1:]
        room = bufflen - len(" `...' ") - 1
        if len(name) > room:
            return "..." + name[len(name) - room :]
        return name
    newline = source.find("\n")
    length = len(source) if newline == -1 else newline
    room = bufflen - len(' [string "..."] ') - 1
    length = min(length, room)
    if length < len(source):
        body = source[:length] + "..."
    else:
        body = source
    return f'[string "{body}"]'