"""Token trees, a small tokenizer for them, and shared macro-input parsing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Union


class Delimiter(Enum):
    """The delimiter around a group of tokens."""

    PARENTHESIS = ("(", ")")
    BRACE = ("{", "}")
    BRACKET = ("[", "]")
    NONE = ("", "")

    @property
    def open(self) -> str:
        return self.value[0]

    @property
    def close(self) -> str:
        return self.value[1]


class Spacing(Enum):
    """Whether a punctuation token is immediately followed by another one."""

    JOINT = "joint"
    ALONE = "alone"


PUNCT_CHARS = frozenset("=<>!~+-*/%^&|@.,;:#$?")


@dataclass(frozen=True)
class Ident:
    """An identifier or keyword."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Punct:
    """A single punctuation character."""

    char: str
    spacing: Spacing = Spacing.ALONE

    def __post_init__(self) -> None:
        if len(self.char) != 1 or (self.char not in PUNCT_CHARS and self.char != "'"):
            raise ValueError(f"not a punctuation character: {self.char!r}")

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class Literal:
    """A literal, kept as its source text."""

    text: str

    @classmethod
    def string(cls, value: str) -> "Literal":
        """Build a string literal holding ``value``."""
        escaped = (
            value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
        )
        return cls(f'"{escaped}"')

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Group:
    """A delimited sequence of token trees."""

    delimiter: Delimiter
    stream: tuple = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "stream", tuple(self.stream))

    def __str__(self) -> str:
        return f"{self.delimiter.open}{tokens_to_string(self.stream)}{self.delimiter.close}"


TokenTree = Union[Ident, Punct, Literal, Group]


class MacroError(Exception):
    """An error reported while processing macro input."""

    END_PREFIX = "tokens ended before parsing finished, "

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def end(cls, message: str) -> "MacroError":
        """Error for input that ran out before parsing finished."""
        return cls(cls.END_PREFIX + message)

    def to_compile_error(self) -> list:
        """Tokens of a ``compile_error!{"..."}`` invocation carrying the message."""
        return [
            Ident("compile_error"),
            Punct("!"),
            Group(Delimiter.BRACE, [Literal.string(self.message)]),
        ]


_UNSET = object()


class TokenCursor:
    """An iterator over token trees that can look one token ahead."""

    def __init__(self, tokens: Iterable = ()) -> None:
        self._iter = iter(tokens)
        self._peeked = _UNSET

    @classmethod
    def of(cls, tokens) -> "TokenCursor":
        """Return ``tokens`` if it already is a cursor, else a cursor over it."""
        return tokens if isinstance(tokens, cls) else cls(tokens)

    def peek(self):
        """The next token without consuming it, or None at the end."""
        if self._peeked is _UNSET:
            self._peeked = next(self._iter, None)
        return self._peeked

    def next(self):
        """Consume and return the next token, or None at the end."""
        if self._peeked is not _UNSET:
            tt, self._peeked = self._peeked, _UNSET
            return tt
        return next(self._iter, None)

    def __iter__(self) -> "TokenCursor":
        return self

    def __next__(self):
        tt = self.next()
        if tt is None:
            raise StopIteration
        return tt


@dataclass
class MacroInvocation:
    """A macro path with its bang, and the delimited arguments passed to it."""

    path_bang: list
    delimiter: Delimiter
    args: list

    def into_tokens(self) -> list:
        """The tokens of the whole invocation."""
        return [*self.path_bang, Group(self.delimiter, self.args)]

    def expand_with_extra_args(self, func: Callable[[list], None]) -> list:
        """Let ``func`` add to the arguments, then return the invocation's tokens."""
        func(self.args)
        return self.into_tokens()


_IDENT = re.compile(r"[^\W\d]\w*")
_NUMBER = re.compile(r"\d\w*(?:\.\d\w*)?")
_RAW_STRING = re.compile(r'b?r(#*)"')
_OPENERS = {d.open: d for d in Delimiter if d is not Delimiter.NONE}
_CLOSERS = {d.close for d in Delimiter if d is not Delimiter.NONE}


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _skip_trivia(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise MacroError("unterminated block comment")
                self.pos = end + 2
            else:
                break

    def _scan_quoted(self, start: int, quote: str) -> int:
        text = self.text
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
            elif ch == quote:
                return i + 1
            else:
                i += 1
        raise MacroError(f"unterminated literal starting at offset {start}")

    def _take_literal(self, end: int) -> Literal:
        lit = Literal(self.text[self.pos:end])
        self.pos = end
        return lit

    def parse_stream(self, closing: str | None) -> list:
        text = self.text
        out: list = []
        while True:
            self._skip_trivia()
            if self.pos >= len(text):
                if closing is not None:
                    raise MacroError(f"unclosed delimiter, expected {closing!r}")
                return out
            ch = text[self.pos]
            if ch in _OPENERS:
                delimiter = _OPENERS[ch]
                self.pos += 1
                out.append(Group(delimiter, self.parse_stream(delimiter.close)))
            elif ch in _CLOSERS:
                if ch != closing:
                    raise MacroError(f"unexpected closing delimiter {ch!r}")
                self.pos += 1
                return out
            elif ch == '"':
                out.append(self._take_literal(self._scan_quoted(self.pos, '"')))
            elif ch == "'":
                out.extend(self._quote())
            elif ch.isdigit():
                match = _NUMBER.match(text, self.pos)
                out.append(self._take_literal(match.end()))
            elif ch == "_" or ch.isalpha():
                out.append(self._word())
            elif ch in PUNCT_CHARS:
                nxt = text[self.pos + 1:self.pos + 2]
                spacing = Spacing.JOINT if nxt and nxt in PUNCT_CHARS else Spacing.ALONE
                out.append(Punct(ch, spacing))
                self.pos += 1
            else:
                raise MacroError(f"unexpected character {ch!r}")

    def _quote(self) -> list:
        text = self.text
        nxt = text[self.pos + 1:self.pos + 2]
        if nxt == "\\":
            return [self._take_literal(self._scan_quoted(self.pos, "'"))]
        if nxt and text[self.pos + 2:self.pos + 3] == "'":
            return [self._take_literal(self.pos + 3)]
        if nxt and (nxt == "_" or nxt.isalpha()):
            self.pos += 1
            return [Punct("'", Spacing.JOINT)]
        raise MacroError(f"unexpected quote at offset {self.pos}")

    def _word(self):
        text = self.text
        raw = _RAW_STRING.match(text, self.pos)
        if raw:
            terminator = '"' + raw.group(1)
            end = text.find(terminator, raw.end())
            if end == -1:
                raise MacroError(f"unterminated raw string at offset {self.pos}")
            return self._take_literal(end + len(terminator))
        if text.startswith('b"', self.pos):
            return self._take_literal(self._scan_quoted(self.pos + 1, '"'))
        if text.startswith("b'", self.pos):
            return self._take_literal(self._scan_quoted(self.pos + 1, "'"))
        if text.startswith("r#", self.pos):
            match = _IDENT.match(text, self.pos + 2)
            if match:
                self.pos = match.end()
                return Ident("r#" + match.group())
        match = _IDENT.match(text, self.pos)
        self.pos = match.end()
        return Ident(match.group())


def parse_tokens(text: str) -> list:
    """Split source text into a list of token trees."""
    return _Lexer(text).parse_stream(None)


def tokens_to_string(tokens: Iterable) -> str:
    """Render token trees as source text."""
    parts = []
    for tt in tokens:
        parts.append(str(tt))
        if not (isinstance(tt, Punct) and tt.spacing is Spacing.JOINT):
            parts.append(" ")
    return "".join(parts).rstrip(" ")


def parenthesize(tokens: Iterable) -> Group:
    """Wrap tokens in a parenthesized group."""
    return Group(Delimiter.PARENTHESIS, tokens)


def parse_paren_args(tt) -> TokenCursor:
    """A cursor over the contents of a parenthesized group.

    A group whose only content is an undelimited group yields that inner group's tokens.
    """
    if not (isinstance(tt, Group) and tt.delimiter is Delimiter.PARENTHESIS):
        raise MacroError(f"Expected a parentheses-delimited group, found:\n{tt}")
    stream = tt.stream
    if len(stream) == 1 and isinstance(stream[0], Group) and stream[0].delimiter is Delimiter.NONE:
        stream = stream[0].stream
    return TokenCursor(stream)


def parse_macro_invocation(tokens) -> MacroInvocation:
    """Read a macro path and its delimited arguments from the front of ``tokens``."""
    cursor = TokenCursor.of(tokens)
    path_bang: list = []
    for tt in cursor:
        if isinstance(tt, Group):
            if tt.delimiter is Delimiter.NONE:
                path_bang.extend(tt.stream)
                continue
            return MacroInvocation(path_bang, tt.delimiter, list(tt.stream))
        path_bang.append(tt)
    raise MacroError.end("could not parse last tokens as a macro invocation")


def parse_path_and_args(macro_name: str, cursor, args: Iterable, func: Callable[[list], None]) -> list:
    """Read a macro invocation, append ``args`` to its arguments, then let ``func`` add more."""
    cursor = TokenCursor.of(cursor)
    out: list = []
    while True:
        tt = cursor.next()
        if tt is None:
            raise MacroError(f"{macro_name} expected more tokens")
        if isinstance(tt, Group) and tt.delimiter is Delimiter.NONE:
            out.extend(tt.stream)
        elif isinstance(tt, Group):
            new_args = [*tt.stream, *args]
            func(new_args)
            out.append(Group(tt.delimiter, new_args))
            return out
        else:
            out.append(tt)