"""Lexical analyser turning Lua source text into tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import Iterator, NoReturn, Union

from .objects import LuaError, chunkid, format_message, str2d

__all__ = [
    "FIRST_RESERVED",
    "NUM_RESERVED",
    "TokenKind",
    "LexToken",
    "LuaSyntaxError",
    "Lexer",
    "token2str",
]

FIRST_RESERVED = 257
MAXSRC = 80
MAX_INT = 2**31 - 1
UCHAR_MAX = 255

EOZ = ""


class TokenKind(IntEnum):
    """Multi-character tokens; reserved words come first."""

    AND = FIRST_RESERVED
    BREAK = auto()
    DO = auto()
    ELSE = auto()
    ELSEIF = auto()
    END = auto()
    FALSE = auto()
    FOR = auto()
    FUNCTION = auto()
    IF = auto()
    IN = auto()
    LOCAL = auto()
    NIL = auto()
    NOT = auto()
    OR = auto()
    REPEAT = auto()
    RETURN = auto()
    THEN = auto()
    TRUE = auto()
    UNTIL = auto()
    WHILE = auto()
    NAME = auto()
    CONCAT = auto()
    DOTS = auto()
    EQ = auto()
    GE = auto()
    LE = auto()
    NE = auto()
    NUMBER = auto()
    STRING = auto()
    EOS = auto()


NUM_RESERVED = TokenKind.WHILE - FIRST_RESERVED + 1

_TOKEN_STRINGS = (
    "and", "break", "do", "else", "elseif",
    "end", "false", "for", "function", "if",
    "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while", "*name",
    "..", "...", "==", ">=", "<=", "~=",
    "*number", "*string", "<eof>",
)

_RESERVED = {_TOKEN_STRINGS[k]: TokenKind(FIRST_RESERVED + k) for k in range(NUM_RESERVED)}

_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}

_PAIRED = {
    "=": TokenKind.EQ,
    "<": TokenKind.LE,
    ">": TokenKind.GE,
    "~": TokenKind.NE,
}

Kind = Union[TokenKind, str]


def _isdigit(c: str) -> bool:
    return c != EOZ and "0" <= c <= "9"


def _isalpha(c: str) -> bool:
    return c != EOZ and ("a" <= c <= "z" or "A" <= c <= "Z")


def _isalnum(c: str) -> bool:
    return _isalpha(c) or _isdigit(c)


def _isspace(c: str) -> bool:
    return c != EOZ and c in " \t\n\r\f\v"


def _iscntrl(c: str) -> bool:
    return c != EOZ and (ord(c) < 32 or ord(c) == 127)


def token2str(token: Kind | int) -> str:
    """Return the printable form of a token kind."""
    if isinstance(token, str):
        return token
    token = int(token)
    if token < FIRST_RESERVED:
        return chr(token)
    return _TOKEN_STRINGS[TokenKind(token) - FIRST_RESERVED]


class LuaSyntaxError(LuaError):
    """A lexical or syntax error in a chunk."""


@dataclass(frozen=True)
class LexToken:
    """One token: its kind, its semantic value and the line it ended on."""

    kind: Kind
    value: str | float | None = None
    line: int = 0
    raw: str = field(default="", compare=False)


class Lexer:
    """Reads tokens one by one from a chunk of source text."""

    def __init__(self, text: str, source: str = "=?") -> None:
        self.text = text
        self.source = source
        self.linenumber = 1
        self.lastline = 1
        self.t = LexToken(TokenKind.EOS)
        self.current = EOZ
        self._pos = 0
        self._buff: list[str] = []
        self._advance()
        if self.current == "#":
            while True:  # skip first line
                self._advance()
                if self.current in ("\n", EOZ):
                    break

    # -- character handling -------------------------------------------

    def _advance(self) -> None:
        if self._pos < len(self.text):
            self.current = self.text[self._pos]
            self._pos += 1
        else:
            self.current = EOZ

    def _save(self, c: str) -> None:
        self._buff.append(c)

    def _save_and_next(self) -> None:
        self._save(self.current)
        self._advance()

    @property
    def _raw(self) -> str:
        return "".join(self._buff)

    def _inclinenumber(self) -> None:
        self._advance()
        self.linenumber += 1
        self.check_limit(self.linenumber, MAX_INT, "lines in a chunk")

    # -- errors -------------------------------------------------------

    def check_limit(self, val: int, limit: int, msg: str) -> None:
        """Raise a syntax error if ``val`` exceeds ``limit``."""
        if val > limit:
            self.syntax_error(format_message("too many %s (limit=%d)", msg, limit))

    def error_line(self, msg: str, token: str, line: int) -> NoReturn:
        """Raise a syntax error located at ``line`` near ``token``."""
        where = chunkid(self.source, MAXSRC)
        raise LuaSyntaxError(f"{where}:{line}: {msg} near `{token}'")

    def _error(self, msg: str, token: str) -> NoReturn:
        self.error_line(msg, token, self.linenumber)

    def syntax_error(self, msg: str) -> NoReturn:
        """Raise a syntax error near the current token."""
        t = self.t
        if t.kind == TokenKind.NAME:
            token = str(t.value)
        elif t.kind in (TokenKind.STRING, TokenKind.NUMBER):
            token = t.raw
        else:
            token = self.token_to_str(t.kind)
        self._error(msg, token)

    def token_to_str(self, token: Kind | int) -> str:
        """Return the printable form of a token kind."""
        return token2str(token)

    def _lexerror(self, msg: str, token: TokenKind) -> NoReturn:
        if token == TokenKind.EOS:
            self._error(msg, token2str(token))
        self._error(msg, self._raw)

    # -- token readers ------------------------------------------------

    def _read_name(self) -> str:
        self._buff = []
        while True:
            self._save_and_next()
            if not (_isalnum(self.current) or self.current == "_"):
                break
        return self._raw

    def _read_digits(self) -> None:
        while _isdigit(self.current):
            self._save_and_next()

    def _read_numeral(self, comma: bool) -> float:
        self._buff = ["."] if comma else []
        self._read_digits()
        if self.current == ".":
            self._save_and_next()
            if self.current == ".":
                self._save_and_next()
                self._lexerror(
                    "ambiguous syntax (decimal point x string concatenation)",
                    TokenKind.NUMBER,
                )
        self._read_digits()
        if self.current in ("e", "E"):
            self._save_and_next()
            if self.current in ("+", "-"):
                self._save_and_next()
            self._read_digits()
        value = str2d(self._raw)
        if value is None:
            self._lexerror("malformed number", TokenKind.NUMBER)
        return value

    def _read_long_string(self, keep: bool) -> str:
        self._buff = ["["]
        self._save_and_next()  # second '['
        if self.current == "\n":
            self._inclinenumber()
        depth = 0
        while True:
            c = self.current
            if c == EOZ:
                self._lexerror(
                    "unfinished long string" if keep else "unfinished long comment",
                    TokenKind.EOS,
                )
            elif c == "[":
                self._save_and_next()
                if self.current == "[":
                    depth += 1
                    self._save_and_next()
            elif c == "]":
                self._save_and_next()
                if self.current == "]":
                    if depth == 0:
                        break
                    depth -= 1
                    self._save_and_next()
            elif c == "\n":
                self._save("\n")
                self._inclinenumber()
                if not keep:
                    self._buff = []
            else:
                self._save_and_next()
        self._save_and_next()  # second ']'
        return "".join(self._buff[2:-2])

    def _read_string(self, delimiter: str) -> str:
        self._buff = []
        self._save_and_next()
        while self.current != delimiter:
            c = self.current
            if c == EOZ:
                self._lexerror("unfinished string", TokenKind.EOS)
            elif c == "\n":
                self._lexerror("unfinished string", TokenKind.STRING)
            elif c == "\\":
                self._advance()
                esc = self.current
                if esc in _ESCAPES:
                    self._save(_ESCAPES[esc])
                    self._advance()
                elif esc == "\n":
                    self._save("\n")
                    self._inclinenumber()
                elif esc == EOZ:
                    pass  # reported on the next pass
                elif not _isdigit(esc):
                    self._save_and_next()
                else:
                    code = 0
                    for _ in range(3):
                        if not _isdigit(self.current):
                            break
                        code = 10 * code + int(self.current)
                        self._advance()
                    if code > UCHAR_MAX:
                        self._lexerror("escape sequence too large", TokenKind.STRING)
                    self._save(chr(code))
            else:
                self._save_and_next()
        self._save_and_next()  # closing delimiter
        return "".join(self._buff[1:-1])

    # -- main scanner -------------------------------------------------

    def _make(self, kind: Kind, value: str | float | None = None, raw: str = "") -> LexToken:
        return LexToken(kind, value, self.linenumber, raw)

    def _lex(self) -> LexToken:
        while True:
            c = self.current
            if c == "\n":
                self._inclinenumber()
            elif c == "-":
                self._advance()
                if self.current != "-":
                    return self._make("-")
                self._advance()
                if self.current == "[":
                    self._advance()
                    if self.current == "[":
                        self._read_long_string(keep=False)
                        continue
                while self.current not in ("\n", EOZ):
                    self._advance()
            elif c == "[":
                self._advance()
                if self.current != "[":
                    return self._make("[")
                value = self._read_long_string(keep=True)
                return self._make(TokenKind.STRING, value, self._raw)
            elif c in _PAIRED:
                self._advance()
                if self.current != "=":
                    return self._make(c)
                self._advance()
                return self._make(_PAIRED[c])
            elif c in ('"', "'"):
                value = self._read_string(c)
                return self._make(TokenKind.STRING, value, self._raw)
            elif c == ".":
                self._advance()
                if self.current == ".":
                    self._advance()
                    if self.current == ".":
                        self._advance()
                        return self._make(TokenKind.DOTS)
                    return self._make(TokenKind.CONCAT)
                if not _isdigit(self.current):
                    return self._make(".")
                number = self._read_numeral(comma=True)
                return self._make(TokenKind.NUMBER, number, self._raw)
            elif c == EOZ:
                return self._make(TokenKind.EOS)
            elif _isspace(c):
                self._advance()
            elif _isdigit(c):
                number = self._read_numeral(comma=False)
                return self._make(TokenKind.NUMBER, number, self._raw)
            elif _isalpha(c) or c == "_":
                name = self._read_name()
                reserved = _RESERVED.get(name)
                if reserved is not None:
                    return self._make(reserved)
                return self._make(TokenKind.NAME, name, name)
            else:
                if _iscntrl(c):
                    self._error("invalid control char", format_message("char(%d)", ord(c)))
                self._advance()
                return self._make(c)

    def next_token(self) -> LexToken:
        """Read the next token, make it current and return it."""
        self.lastline = self.linenumber
        self.t = self._lex()
        return self.t

    def __iter__(self) -> Iterator[LexToken]:
        """Yield the remaining tokens, stopping before end of stream."""
        while (token := self.next_token()).kind != TokenKind.EOS:
            yield token