"""File handles, default input/output streams and operating-system facilities."""

from __future__ import annotations

import builtins
import errno as _errno
import io as _io
import locale as _locale
import os
import re
import subprocess
import sys
import tempfile
import time as _time
from typing import Any, Iterator

from .auxlib import (
    LuaTable,
    _argerror,
    _is_number,
    _tonumber,
    _truthy,
    _typeerror,
    find_string,
)
from .objects import LuaError, format_number

__all__ = [
    "FileHandle",
    "IOLibrary",
    "clock",
    "date",
    "time",
    "difftime",
    "execute",
    "exit",
    "getenv",
    "remove",
    "rename",
    "setlocale",
    "tmpname",
]

_SPACES = " \t\n\r\f\v"
_SEEK_MODES = ("set", "cur", "end")
_MODE_RE = re.compile(r"^[rwa](\+?b?|b\+)$")
_LOCALE_NAMES = ("all", "collate", "ctype", "monetary", "numeric", "time")
_LOCALE_CATEGORIES = (
    _locale.LC_ALL,
    _locale.LC_COLLATE,
    _locale.LC_CTYPE,
    getattr(_locale, "LC_MONETARY", _locale.LC_ALL),
    _locale.LC_NUMERIC,
    _locale.LC_TIME,
)
_DATE_LIMIT = 256


def _checkstring(value: Any, narg: int, fname: str) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return format_number(value)
    raise _typeerror(narg, fname, "string", value)


def _checknumber(value: Any, narg: int, fname: str) -> float:
    number = _tonumber(value)
    if number is None:
        raise _typeerror(narg, fname, "number", value)
    return number


def _isdigit(c: str) -> bool:
    return c != "" and "0" <= c <= "9"


def _open_raw(filename: str, mode: str) -> Any:
    """Open ``filename`` with a C-style mode; the stream is always binary."""
    if not _MODE_RE.match(mode):
        raise OSError(_errno.EINVAL, os.strerror(_errno.EINVAL), filename)
    return builtins.open(filename, mode.replace("b", "") + "b")


class FileHandle:
    """An open (or closed) file with the read formats of the io library.

    Text is exchanged as ``str`` holding one character per byte (latin-1).
    """

    def __init__(self, raw: Any, name: str | None = None, ispipe: bool = False) -> None:
        self.raw = raw
        self.name = name
        self.ispipe = ispipe
        self._pending = ""
        self._process: subprocess.Popen | None = None
        self._standard = False
        self._closed = raw is None

    @property
    def closed(self) -> bool:
        """True once the handle has been closed."""
        return self._closed

    # -- low level -------------------------------------------------------

    def _file(self) -> Any:
        if self._closed:
            raise LuaError("attempt to use a closed file")
        return self.raw

    @staticmethod
    def _text(data: Any) -> str:
        if not data:
            return ""
        return data if isinstance(data, str) else bytes(data).decode("latin-1")

    def _encode(self, text: str) -> Any:
        if isinstance(self.raw, _io.TextIOBase):
            return text
        return text.encode("latin-1")

    def _take(self, n: int | None) -> str:
        raw = self._file()
        if n is None:
            data = self._pending + self._text(raw.read())
            self._pending = ""
            return data
        head, self._pending = self._pending[:n], self._pending[n:]
        if len(head) < n:
            head += self._text(raw.read(n - len(head)))
        return head

    def _unread(self, text: str) -> None:
        self._pending = text + self._pending

    def _sync(self) -> None:
        """Give back characters read ahead so the stream position is exact."""
        if not self._pending:
            return
        try:
            self.raw.seek(self.raw.tell() - len(self._pending))
        except (OSError, ValueError, AttributeError):
            pass
        self._pending = ""

    # -- read formats ---------------------------------------------------

    def _readline(self) -> str | None:
        if "\n" in self._pending:
            line, _, self._pending = self._pending.partition("\n")
            return line
        data = self._pending + self._text(self._file().readline())
        self._pending = ""
        if data.endswith("\n"):
            return data[:-1]
        return data if data else None

    def _test_eof(self) -> str | None:
        c = self._take(1)
        if not c:
            return None
        self._unread(c)
        return ""

    def _read_chars(self, n: int) -> str | None:
        data = self._take(None if n < 0 else n)
        return data if data else None

    def _read_number(self) -> float | None:
        c = self._take(1)
        while c and c in _SPACES:
            c = self._take(1)
        text = ""
        if c and c in "+-":
            text += c
            c = self._take(1)
        digits = 0
        while _isdigit(c):
            text += c
            digits += 1
            c = self._take(1)
        if c == ".":
            text += c
            c = self._take(1)
            while _isdigit(c):
                text += c
                digits += 1
                c = self._take(1)
        if digits and c and c in "eE":
            text += c
            c = self._take(1)
            if c and c in "+-":
                text += c
                c = self._take(1)
            while _isdigit(c):
                text += c
                c = self._take(1)
        if c:
            self._unread(c)
        text = text.rstrip("eE+-") if digits else text
        try:
            return float(text)
        except ValueError:
            return None

    def _read_formats(self, args: tuple[Any, ...]) -> Any:
        self._file()
        if not args:
            return self._readline()
        results: list[Any] = []
        for narg, fmt in enumerate(args, start=1):
            if _is_number(fmt):
                count = int(fmt)
                value = self._test_eof() if count == 0 else self._read_chars(count)
            else:
                if not isinstance(fmt, str) or not fmt.startswith("*"):
                    raise _argerror(narg, "read", "invalid option")
                option = fmt[1:2]
                if option == "n":
                    value = self._read_number()
                elif option == "l":
                    value = self._readline()
                elif option == "a":
                    value = self._take(None)
                elif option == "w":
                    raise LuaError("obsolete option `*w' to `read'")
                else:
                    raise _argerror(narg, "read", "invalid format")
            results.append(value)
            if value is None:
                break
        return results[0] if len(args) == 1 else tuple(results)

    # -- public methods -------------------------------------------------

    def read(self, *args: Any) -> Any:
        """Read by formats: "*n", "*l", "*a" or a character count.

        With no format a line is read. One format gives one value; several give a
        tuple that stops at the first failure, which is None.
        """
        return self._read_formats(args)

    def write(self, *args: Any) -> bool:
        """Write strings and numbers in order."""
        raw = self._file()
        self._sync()
        for narg, value in enumerate(args, start=1):
            if _is_number(value):
                text = format_number(value)
            elif isinstance(value, str):
                text = value
            else:
                raise _typeerror(narg, "write", "string", value)
            raw.write(self._encode(text))
        return True

    def _iter_lines(self, close: bool) -> Iterator[str]:
        while True:
            if self._closed:
                raise LuaError("file is already closed")
            line = self._readline()
            if line is None:
                if close:
                    self.close()
                return
            yield line

    def lines(self) -> Iterator[str]:
        """Iterate over the remaining lines, without their end-of-line characters."""
        self._file()
        return self._iter_lines(close=False)

    def seek(self, whence: str | None = "cur", offset: Any = 0) -> int:
        """Move to ``offset`` relative to "set", "cur" or "end"; return the new position."""
        raw = self._file()
        op = find_string("cur" if whence is None else _checkstring(whence, 1, "seek"), _SEEK_MODES)
        delta = 0 if offset is None else int(_checknumber(offset, 2, "seek"))
        if op == -1:
            raise _argerror(1, "seek", "invalid mode")
        if op == os.SEEK_CUR:
            delta -= len(self._pending)
        self._pending = ""
        raw.seek(delta, op)
        return raw.tell()

    def flush(self) -> bool:
        """Flush buffered output."""
        self._file().flush()
        return True

    def close(self) -> bool:
        """Close the file; standard streams are left open and give False."""
        raw = self._file()
        if self._standard:
            return False
        ok = True
        try:
            raw.close()
            if self.ispipe and self._process is not None:
                self._process.wait()
        except OSError:
            ok = False
        self._closed = True
        self._pending = ""
        return ok

    def __enter__(self) -> FileHandle:
        return self

    def __exit__(self, *exc: object) -> None:
        if not self._closed:
            self.close()

    def __str__(self) -> str:
        if self._closed:
            return "file (closed)"
        return f"file ({id(self):#010x})"


class IOLibrary:
    """The io table: standard streams plus a current input and output file."""

    def __init__(self, stdin: Any = None, stdout: Any = None, stderr: Any = None) -> None:
        self.stdin = self._standard(stdin, sys.stdin, "stdin")
        self.stdout = self._standard(stdout, sys.stdout, "stdout")
        self.stderr = self._standard(stderr, sys.stderr, "stderr")
        self._input = self.stdin
        self._output = self.stdout

    @staticmethod
    def _standard(raw: Any, default: Any, name: str) -> FileHandle:
        if raw is None:
            raw = getattr(default, "buffer", default)
        handle = FileHandle(raw, name)
        handle._standard = True
        return handle

    def _select(self, file: Any, mode: str, fname: str) -> FileHandle:
        if isinstance(file, FileHandle):
            file._file()
            return file
        if isinstance(file, str) or _is_number(file):
            filename = _checkstring(file, 1, fname)
            try:
                return FileHandle(_open_raw(filename, mode), filename)
            except OSError as exc:
                raise _argerror(1, fname, f"{filename}: {exc.strerror}") from exc
        raise _argerror(1, fname, "bad file")

    def input(self, file: Any = None) -> FileHandle:
        """Set the default input to a handle or file name; return the current one."""
        if file is not None:
            self._input = self._select(file, "r", "input")
        return self._input

    def output(self, file: Any = None) -> FileHandle:
        """Set the default output to a handle or file name; return the current one."""
        if file is not None:
            self._output = self._select(file, "w", "output")
        return self._output

    def read(self, *args: Any) -> Any:
        """Read from the default input; see :meth:`FileHandle.read`."""
        return self._input.read(*args)

    def write(self, *args: Any) -> bool:
        """Write to the default output."""
        return self._output.write(*args)

    def lines(self, filename: Any = None) -> Iterator[str]:
        """Iterate over lines of the default input, or of a file closed at the end."""
        if filename is None:
            return self._input.lines()
        name = _checkstring(filename, 1, "lines")
        try:
            handle = FileHandle(_open_raw(name, "r"), name)
        except OSError as exc:
            raise _argerror(1, "lines", exc.strerror or str(exc)) from exc
        return handle._iter_lines(close=True)

    def close(self, file: Any = None) -> bool:
        """Close ``file``, or the default output."""
        target = self._output if file is None else file
        if not isinstance(target, FileHandle):
            raise _argerror(1, "close", "bad file")
        return target.close()

    def flush(self) -> bool:
        """Flush the default output."""
        return self._output.flush()

    def open(self, filename: Any, mode: Any = "r") -> FileHandle:
        """Open a file with a C-style mode ("r", "w", "a", optional "+" and "b")."""
        name = _checkstring(filename, 1, "open")
        text_mode = "r" if mode is None else _checkstring(mode, 2, "open")
        return FileHandle(_open_raw(name, text_mode), name)

    def popen(self, command: Any, mode: Any = "r") -> FileHandle:
        """Start a shell command and return a handle on its output ("r") or input ("w")."""
        cmd = _checkstring(command, 1, "popen")
        text_mode = "r" if mode is None else _checkstring(mode, 2, "popen")
        if text_mode not in ("r", "w"):
            raise OSError(_errno.EINVAL, os.strerror(_errno.EINVAL), cmd)
        if text_mode == "r":
            process = subprocess.Popen(cmd, shell=True, stdout=subprocess.PIPE)
            raw = process.stdout
        else:
            process = subprocess.Popen(cmd, shell=True, stdin=subprocess.PIPE)
            raw = process.stdin
        handle = FileHandle(raw, cmd, ispipe=True)
        handle._process = process
        return handle

    def tmpfile(self) -> FileHandle:
        """Return a handle on an anonymous temporary file, removed when closed."""
        return FileHandle(tempfile.TemporaryFile("w+b"))

    def type(self, obj: Any) -> str | None:
        """Return "file", "closed file", or None when ``obj`` is not a file handle."""
        if not isinstance(obj, FileHandle):
            return None
        return "closed file" if obj.closed else "file"


# -- operating-system facilities ---------------------------------------------


def clock() -> float:
    """Processor time used by the program, in seconds."""
    return _time.process_time()


def date(fmt: Any = "%c", t: Any = None) -> Any:
    """Format a time with strftime, or return a table with "*t"; a leading "!" means UTC."""
    text = "%c" if fmt is None else _checkstring(fmt, 1, "date")
    stamp = -1 if t is None else int(_checknumber(t, 2, "date"))
    if stamp == -1:
        stamp = int(_time.time())
    utc = text.startswith("!")
    if utc:
        text = text[1:]
    try:
        stm = _time.gmtime(stamp) if utc else _time.localtime(stamp)
    except (OverflowError, OSError, ValueError):
        return None
    if text == "*t":
        return LuaTable(
            {
                "sec": stm.tm_sec,
                "min": stm.tm_min,
                "hour": stm.tm_hour,
                "day": stm.tm_mday,
                "month": stm.tm_mon,
                "year": stm.tm_year,
                "wday": (stm.tm_wday + 1) % 7 + 1,
                "yday": stm.tm_yday,
                "isdst": stm.tm_isdst > 0,
            }
        )
    try:
        result = _time.strftime(text, stm)
    except ValueError:
        result = ""
    if not result or len(result) >= _DATE_LIMIT:
        raise LuaError("`date' format too long")
    return result


def time(table: Any = None) -> int | None:
    """Return the current time, or the time described by a date table."""
    if table is None:
        return int(_time.time())
    if not isinstance(table, LuaTable):
        raise _typeerror(1, "time", "table", table)

    def field(key: str, default: int | None) -> int:
        value = _tonumber(table.rawget(key))
        if value is None:
            if default is None:
                raise LuaError(f"field `{key}' missing in date table")
            return default
        return int(value)

    sec = field("sec", 0)
    minute = field("min", 0)
    hour = field("hour", 12)
    day = field("day", None)
    month = field("month", None)
    year = field("year", None)
    isdst = 1 if _truthy(table.rawget("isdst")) else 0
    try:
        return int(_time.mktime((year, month, day, hour, minute, sec, 0, 1, isdst)))
    except (OverflowError, ValueError, OSError):
        return None


def difftime(t2: Any, t1: Any = None) -> float:
    """Seconds from ``t1`` (default 0) to ``t2``."""
    end = int(_checknumber(t2, 1, "difftime"))
    start = 0 if t1 is None else int(_checknumber(t1, 2, "difftime"))
    return float(end - start)


def execute(command: Any) -> int:
    """Run a shell command and return its status as the system reports it."""
    return os.system(_checkstring(command, 1, "execute"))


def exit(code: Any = None) -> None:
    """Terminate the program with ``code`` (default success)."""
    raise SystemExit(0 if code is None else int(_checknumber(code, 1, "exit")))


def getenv(name: Any) -> str | None:
    """Return an environment variable, or None."""
    return os.environ.get(_checkstring(name, 1, "getenv"))


def remove(filename: Any) -> bool:
    """Remove a file or an empty directory."""
    path = _checkstring(filename, 1, "remove")
    try:
        os.remove(path)
    except (IsADirectoryError, PermissionError):
        if not os.path.isdir(path):
            raise
        os.rmdir(path)
    return True


def rename(old: Any, new: Any) -> bool:
    """Rename a file."""
    os.rename(_checkstring(old, 1, "rename"), _checkstring(new, 2, "rename"))
    return True


def setlocale(locale_name: Any = None, category: Any = "all") -> str | None:
    """Set (or with None, query) the locale of a category; None if it cannot be set."""
    op = find_string(
        "all" if category is None else _checkstring(category, 2, "setlocale"), _LOCALE_NAMES
    )
    if locale_name is not None and not (isinstance(locale_name, str) or _is_number(locale_name)):
        raise _argerror(1, "setlocale", "string expected")
    if op == -1:
        raise _argerror(2, "setlocale", "invalid option")
    name = None if locale_name is None else _checkstring(locale_name, 1, "setlocale")
    try:
        return _locale.setlocale(_LOCALE_CATEGORIES[op], name)
    except _locale.Error:
        return None


def tmpname() -> str:
    """Return the name of a new, empty temporary file."""
    fd, path = tempfile.mkstemp()
    os.close(fd)
    return path