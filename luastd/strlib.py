"""String manipulation and pattern matching."""

from __future__ import annotations

import string as _string
from typing import Callable, Iterator, Union

from .objects import LuaError, format_number, str2d

__all__ = [
    "MAX_CAPTURES",
    "SPECIALS",
    "length",
    "sub",
    "lower",
    "upper",
    "rep",
    "byte",
    "char",
    "find",
    "gfind",
    "gsub",
    "format",
]

MAX_CAPTURES = 32
CAP_UNFINISHED = -1
CAP_POSITION = -2

ESC = "%"
SPECIALS = "^$*+?.([%-"

MAX_FORMAT = 20

_NONE = object()

_LOWER_TABLE = str.maketrans(_string.ascii_uppercase, _string.ascii_lowercase)
_UPPER_TABLE = str.maketrans(_string.ascii_lowercase, _string.ascii_uppercase)

Capture = Union[str, int]
Replacement = Union[str, int, float, Callable[..., object]]


# -- argument checking -------------------------------------------------


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
    if isinstance(value, (dict, list)):
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


def _checkstring(value: object, narg: int, fname: str) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return format_number(value)
    raise _typeerror(narg, fname, "string", value)


def _checknumber(value: object, narg: int, fname: str) -> float:
    if _is_number(value):
        return value
    if isinstance(value, str):
        converted = str2d(value)
        if converted is not None:
            return converted
    raise _typeerror(narg, fname, "number", value)


def _checkint(value: object, narg: int, fname: str) -> int:
    return int(_checknumber(value, narg, fname))


def _posrelat(pos: int, size: int) -> int:
    """Relative string position: negative means back from the end."""
    return pos if pos >= 0 else size + pos + 1


def _cstring(pattern: str) -> str:
    """Patterns end at the first NUL character."""
    return pattern.split("\0", 1)[0]


# -- simple functions ----------------------------------------------------


def length(s: str) -> int:
    """Return the length of ``s``."""
    return len(_checkstring(s, 1, "len"))


def sub(s: str, i: int, j: int = -1) -> str:
    """Return the substring from ``i`` to ``j`` (1-based, inclusive, negatives from the end)."""
    s = _checkstring(s, 1, "sub")
    size = len(s)
    start = max(_posrelat(_checkint(i, 2, "sub"), size), 1)
    end = min(_posrelat(_checkint(j, 3, "sub"), size), size)
    if start <= end:
        return s[start - 1 : end]
    return ""


def lower(s: str) -> str:
    """Return ``s`` with ASCII capital letters turned into small ones."""
    return _checkstring(s, 1, "lower").translate(_LOWER_TABLE)


def upper(s: str) -> str:
    """Return ``s`` with ASCII small letters turned into capital ones."""
    return _checkstring(s, 1, "upper").translate(_UPPER_TABLE)


def rep(s: str, n: int) -> str:
    """Return ``s`` repeated ``n`` times."""
    s = _checkstring(s, 1, "rep")
    return s * max(_checkint(n, 2, "rep"), 0)


def byte(s: str, i: int = 1) -> int | None:
    """Return the code of the character at position ``i``, or None when out of range."""
    s = _checkstring(s, 1, "byte")
    pos = _posrelat(_checkint(i, 2, "byte"), len(s))
    if pos <= 0 or pos > len(s):
        return None
    return ord(s[pos - 1])


def char(*args: int) -> str:
    """Build a string from character codes in 0..255."""
    chars = []
    for narg, value in enumerate(args, start=1):
        code = _checkint(value, narg, "char")
        if not 0 <= code <= 255:
            raise _argerror(narg, "char", "invalid value")
        chars.append(chr(code))
    return "".join(chars)


# -- character classes ---------------------------------------------------


def _isalpha(c: int) -> bool:
    return 65 <= c <= 90 or 97 <= c <= 122


def _isdigit(c: int) -> bool:
    return 48 <= c <= 57


def _islower(c: int) -> bool:
    return 97 <= c <= 122


def _isupper(c: int) -> bool:
    return 65 <= c <= 90


def _isalnum(c: int) -> bool:
    return _isalpha(c) or _isdigit(c)


def _isspace(c: int) -> bool:
    return c == 32 or 9 <= c <= 13


def _iscntrl(c: int) -> bool:
    return c < 32 or c == 127


def _ispunct(c: int) -> bool:
    return 33 <= c <= 126 and not _isalnum(c)


def _isxdigit(c: int) -> bool:
    return _isdigit(c) or 65 <= c <= 70 or 97 <= c <= 102


_CLASSES: dict[str, Callable[[int], bool]] = {
    "a": _isalpha,
    "c": _iscntrl,
    "d": _isdigit,
    "l": _islower,
    "p": _ispunct,
    "s": _isspace,
    "u": _isupper,
    "w": _isalnum,
    "x": _isxdigit,
    "z": lambda c: c == 0,
}


def _match_class(c: int, cl: str) -> bool:
    test = _CLASSES.get(cl.lower() if cl.isascii() else cl)
    if test is None:
        return ord(cl) == c
    res = test(c)
    return res if _islower(ord(cl)) else not res


# -- the matcher ---------------------------------------------------------


class _MatchState:
    def __init__(self, src: str, pat: str) -> None:
        self.src = src
        self.pat = pat
        self.level = 0
        self.cap_init = [0] * MAX_CAPTURES
        self.cap_len = [0] * MAX_CAPTURES

    def _p(self, i: int) -> str:
        return self.pat[i] if i < len(self.pat) else "\0"

    def _s(self, i: int) -> str:
        return self.src[i] if 0 <= i < len(self.src) else "\0"

    # captures

    def check_capture(self, ch: str) -> int:
        idx = ord(ch) - ord("1")
        if idx < 0 or idx >= self.level or self.cap_len[idx] == CAP_UNFINISHED:
            raise LuaError("invalid capture index")
        return idx

    def capture_to_close(self) -> int:
        for level in range(self.level - 1, -1, -1):
            if self.cap_len[level] == CAP_UNFINISHED:
                return level
        raise LuaError("invalid pattern capture")

    def get_capture(self, i: int) -> Capture:
        size = self.cap_len[i]
        if size == CAP_UNFINISHED:
            raise LuaError("unfinished capture")
        init = self.cap_init[i]
        if size == CAP_POSITION:
            return init + 1
        return self.src[init : init + size]

    def captures(self, s: int | None, e: int) -> list[Capture]:
        if self.level == 0 and s is not None:
            return [self.src[s:e]]
        return [self.get_capture(i) for i in range(self.level)]

    # pattern items

    def class_end(self, p: int) -> int:
        c = self._p(p)
        p += 1
        if c == ESC:
            if p >= len(self.pat):
                raise LuaError("malformed pattern (ends with `%')")
            return p + 1
        if c == "[":
            if self._p(p) == "^":
                p += 1
            while True:
                if p >= len(self.pat):
                    raise LuaError("malformed pattern (missing `]')")
                cur = self.pat[p]
                p += 1
                if cur == ESC and p < len(self.pat):
                    p += 1
                if self._p(p) == "]":
                    break
            return p + 1
        return p

    def match_bracket_class(self, c: int, p: int, ec: int) -> bool:
        sig = True
        if self._p(p + 1) == "^":
            sig = False
            p += 1
        p += 1
        while p < ec:
            cur = self._p(p)
            if cur == ESC:
                p += 1
                if _match_class(c, self._p(p)):
                    return sig
            elif self._p(p + 1) == "-" and p + 2 < ec:
                p += 2
                if ord(self._p(p - 2)) <= c <= ord(self._p(p)):
                    return sig
            elif ord(cur) == c:
                return sig
            p += 1
        return not sig

    def single_match(self, c: int, p: int, ep: int) -> bool:
        cur = self._p(p)
        if cur == ".":
            return True
        if cur == ESC:
            return _match_class(c, self._p(p + 1))
        if cur == "[":
            return self.match_bracket_class(c, p, ep - 1)
        return ord(cur) == c

    def match_balance(self, s: int, p: int) -> int | None:
        if p >= len(self.pat) or p + 1 >= len(self.pat):
            raise LuaError("unbalanced pattern")
        if self._s(s) != self.pat[p]:
            return None
        opening, closing = self.pat[p], self.pat[p + 1]
        depth = 1
        s += 1
        while s < len(self.src):
            cur = self.src[s]
            if cur == closing:
                depth -= 1
                if depth == 0:
                    return s + 1
            elif cur == opening:
                depth += 1
            s += 1
        return None

    def max_expand(self, s: int, p: int, ep: int) -> int | None:
        i = 0
        while s + i < len(self.src) and self.single_match(ord(self.src[s + i]), p, ep):
            i += 1
        while i >= 0:
            res = self.match(s + i, ep + 1)
            if res is not None:
                return res
            i -= 1
        return None

    def min_expand(self, s: int, p: int, ep: int) -> int | None:
        while True:
            res = self.match(s, ep + 1)
            if res is not None:
                return res
            if s < len(self.src) and self.single_match(ord(self.src[s]), p, ep):
                s += 1
            else:
                return None

    def start_capture(self, s: int, p: int, what: int) -> int | None:
        level = self.level
        if level >= MAX_CAPTURES:
            raise LuaError("too many captures")
        self.cap_init[level] = s
        self.cap_len[level] = what
        self.level = level + 1
        res = self.match(s, p)
        if res is None:
            self.level -= 1
        return res

    def end_capture(self, s: int, p: int) -> int | None:
        idx = self.capture_to_close()
        self.cap_len[idx] = s - self.cap_init[idx]
        res = self.match(s, p)
        if res is None:
            self.cap_len[idx] = CAP_UNFINISHED
        return res

    def match_capture(self, s: int, ch: str) -> int | None:
        idx = self.check_capture(ch)
        size = self.cap_len[idx]
        if size < 0 or len(self.src) - s < size:
            return None
        init = self.cap_init[idx]
        if self.src[init : init + size] == self.src[s : s + size]:
            return s + size
        return None

    def match(self, s: int, p: int) -> int | None:
        while True:
            if p >= len(self.pat):
                return s
            pc = self.pat[p]
            if pc == "(":
                if self._p(p + 1) == ")":
                    return self.start_capture(s, p + 2, CAP_POSITION)
                return self.start_capture(s, p + 1, CAP_UNFINISHED)
            if pc == ")":
                return self.end_capture(s, p + 1)
            if pc == ESC:
                nc = self._p(p + 1)
                if nc == "b":
                    found = self.match_balance(s, p + 2)
                    if found is None:
                        return None
                    s = found
                    p += 4
                    continue
                if nc == "f":
                    p += 2
                    if self._p(p) != "[":
                        raise LuaError("missing `[' after `%f' in pattern")
                    ep = self.class_end(p)
                    previous = self._s(s - 1) if s > 0 else "\0"
                    if self.match_bracket_class(ord(previous), p, ep - 1) or not (
                        self.match_bracket_class(ord(self._s(s)), p, ep - 1)
                    ):
                        return None
                    p = ep
                    continue
                if _isdigit(ord(nc)):
                    found = self.match_capture(s, nc)
                    if found is None:
                        return None
                    s = found
                    p += 2
                    continue
            elif pc == "$" and p + 1 == len(self.pat):
                return s if s == len(self.src) else None
            ep = self.class_end(p)
            m = s < len(self.src) and self.single_match(ord(self.src[s]), p, ep)
            suffix = self._p(ep)
            if suffix == "?":
                if m:
                    res = self.match(s + 1, ep + 1)
                    if res is not None:
                        return res
                p = ep + 1
                continue
            if suffix == "*":
                return self.max_expand(s, p, ep)
            if suffix == "+":
                return self.max_expand(s + 1, p, ep) if m else None
            if suffix == "-":
                return self.min_expand(s, p, ep)
            if not m:
                return None
            s += 1
            p = ep


# -- searching -----------------------------------------------------------


def find(
    s: str, pattern: str, init: int = 1, plain: bool = False
) -> tuple[Capture, ...] | None:
    """Find ``pattern`` in ``s``; return (start, end, *captures) or None."""
    s = _checkstring(s, 1, "find")
    pattern = _checkstring(pattern, 2, "find")
    size = len(s)
    start = _posrelat(_checkint(init, 3, "find"), size) - 1
    start = min(max(start, 0), size)
    pat = _cstring(pattern)
    if plain or not any(c in SPECIALS for c in pat):
        idx = s.find(pattern, start)
        if idx == -1:
            return None
        return (idx + 1, idx + len(pattern))
    anchor = pat.startswith("^")
    if anchor:
        pat = pat[1:]
    ms = _MatchState(s, pat)
    s1 = start
    while True:
        ms.level = 0
        res = ms.match(s1, 0)
        if res is not None:
            return (s1 + 1, res, *ms.captures(None, 0))
        if s1 >= size or anchor:
            return None
        s1 += 1


def gfind(s: str, pattern: str) -> Iterator[Capture | tuple[Capture, ...]]:
    """Yield successive matches of ``pattern`` in ``s``.

    A match with one capture yields that value; several captures yield a tuple.
    """
    s = _checkstring(s, 1, "gfind")
    pat = _cstring(_checkstring(pattern, 2, "gfind"))
    ms = _MatchState(s, pat)
    src = 0
    while src <= len(s):
        ms.level = 0
        end = ms.match(src, 0)
        if end is None:
            src += 1
            continue
        caps = ms.captures(src, end)
        src = end + 1 if end == src else end
        yield caps[0] if len(caps) == 1 else tuple(caps)


def _as_text(value: object) -> str | None:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return format_number(value)
    return None


def _expand(ms: _MatchState, news: str) -> str:
    out = []
    i = 0
    while i < len(news):
        c = news[i]
        if c != ESC:
            out.append(c)
        else:
            i += 1
            nc = news[i] if i < len(news) else "\0"
            if not _isdigit(ord(nc)):
                out.append(nc)
            else:
                out.append(_as_text(ms.get_capture(ms.check_capture(nc))) or "")
        i += 1
    return "".join(out)


def gsub(
    s: str, pattern: str, repl: Replacement, max_n: int | None = None
) -> tuple[str, int]:
    """Replace matches of ``pattern``; return the new string and the number of matches."""
    s = _checkstring(s, 1, "gsub")
    pat = _cstring(_checkstring(pattern, 2, "gsub"))
    limit = len(s) + 1 if max_n is None else _checkint(max_n, 4, "gsub")
    template = _as_text(repl)
    if template is None and not callable(repl):
        raise _argerror(3, "gsub", "string or function expected")
    anchor = pat.startswith("^")
    if anchor:
        pat = pat[1:]
    ms = _MatchState(s, pat)
    out: list[str] = []
    src = 0
    count = 0
    while count < limit:
        ms.level = 0
        end = ms.match(src, 0)
        if end is not None:
            count += 1
            if template is not None:
                out.append(_expand(ms, template))
            else:
                result = _as_text(repl(*ms.captures(src, end)))
                if result is not None:
                    out.append(result)
        if end is not None and end > src:
            src = end
        elif src < len(s):
            out.append(s[src])
            src += 1
        else:
            break
        if anchor:
            break
    out.append(s[src:])
    return "".join(out), count


# -- formatting ----------------------------------------------------------


def _quoted(s: str) -> str:
    out = ['"']
    for c in s:
        if c in '"\\\n':
            out.append("\\" + c)
        elif c == "\0":
            out.append("\\000")
        else:
            out.append(c)
    out.append('"')
    return "".join(out)


def _scan_format(fmt: str, pos: int) -> tuple[str, str, str, int | None, int]:
    """Parse flags, width and precision; return them with the index of the specifier."""
    start = pos
    while pos < len(fmt) and fmt[pos] in "-+ #0":
        pos += 1
    flags = fmt[start:pos]
    wstart = pos
    for _ in range(2):
        if pos < len(fmt) and fmt[pos].isdigit() and fmt[pos].isascii():
            pos += 1
    width = fmt[wstart:pos]
    precision: int | None = None
    if pos < len(fmt) and fmt[pos] == ".":
        pos += 1
        pstart = pos
        for _ in range(2):
            if pos < len(fmt) and fmt[pos].isdigit() and fmt[pos].isascii():
                pos += 1
        precision = int(fmt[pstart:pos] or "0")
    if pos < len(fmt) and fmt[pos].isdigit() and fmt[pos].isascii():
        raise LuaError("invalid format (width or precision too long)")
    if pos - start + 2 > MAX_FORMAT:
        raise LuaError("invalid format (too long)")
    return flags, width, fmt[start:pos], precision, pos


def format(fmt: str, *args: object) -> str:
    """Format ``args`` following a printf-like format string."""
    fmt = _checkstring(fmt, 1, "format")
    out: list[str] = []
    arg = 1
    pos = 0
    while pos < len(fmt):
        c = fmt[pos]
        if c != "%":
            out.append(c)
            pos += 1
            continue
        pos += 1
        if pos < len(fmt) and fmt[pos] == "%":
            out.append("%")
            pos += 1
            continue
        if pos + 1 < len(fmt) and fmt[pos].isdigit() and fmt[pos + 1] == "$":
            raise LuaError("obsolete option (d$) to `format'")
        arg += 1
        value = args[arg - 2] if arg - 2 < len(args) else _NONE
        flags, width, spec, precision, pos = _scan_format(fmt, pos)
        conv = fmt[pos] if pos < len(fmt) else "\0"
        pos += 1
        if conv in "cdi":
            number = _checkint(value, arg, "format")
            if conv == "c":
                item = ("%" + spec + "c") % chr(number & 0xFF)
            else:
                item = ("%" + spec + conv) % number
        elif conv in "ouxX":
            number = int(_checknumber(value, arg, "format")) % (1 << 32)
            if conv == "o" and "#" in flags:
                digits = len("%o" % number)
                if number != 0 and (precision is None or precision <= digits):
                    precision = digits + 1
                plain_flags = flags.replace("#", "")
                prec = "" if precision is None else f".{precision}"
                item = ("%" + plain_flags + width + prec + "o") % number
            else:
                item = ("%" + spec + conv) % number
        elif conv in "eEfgG":
            item = ("%" + spec + conv) % float(_checknumber(value, arg, "format"))
        elif conv == "q":
            out.append(_quoted(_checkstring(value, arg, "format")))
            continue
        elif conv == "s":
            text = _checkstring(value, arg, "format")
            if precision is None and len(text) >= 100:
                out.append(text)
                continue
            item = ("%" + spec + "s") % text
        else:
            raise LuaError("invalid option to `format'")
        out.append(item.split("\0", 1)[0])
    return "".join(out)