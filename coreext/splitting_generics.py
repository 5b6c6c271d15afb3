"""Splitting an item into generic parameters, the header, a where clause and the rest."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Iterable

from coreext.tokens import (
    Delimiter,
    Group,
    Ident,
    MacroError,
    MacroInvocation,
    Punct,
    Spacing,
    TokenCursor,
    parenthesize,
    parse_macro_invocation,
    parse_paren_args,
    parse_path_and_args,
)


class PostGenericsParser(ABC):
    """Receives the tokens between the generic parameters and the where clause."""

    @abstractmethod
    def consume_token(self, splitter: "SplitGenerics", tt) -> None:
        """Take one token that follows the generic parameters."""

    @abstractmethod
    def write_tokens(self, out: list) -> None:
        """Append what was gathered to the callback's arguments."""


class _Location(Enum):
    IN_GENERICS = auto()
    AFTER_GENERICS = auto()
    IN_WHERE = auto()
    AFTER_WHERE = auto()


class _TokenKind(Enum):
    WHERE = auto()
    COMMA = auto()
    OTHER = auto()


class SplitGenerics:
    """Splits tokens that start with an optional ``<...>`` generic parameter list."""

    def __init__(self, parsing) -> None:
        self._parsing = TokenCursor.of(parsing)
        self.curr_is_joint = False
        self.prev_is_joint = False
        self._curr_kind = _TokenKind.OTHER
        self._prev_kind = _TokenKind.OTHER
        self._location = _Location.IN_GENERICS
        self.depth = 0
        self._generics: list = []
        self._where_clause: list = []
        self._after_where: list = []

    @classmethod
    def from_tokens(cls, tokens) -> "SplitGenerics":
        """Start from the next token, which must be a parenthesized group."""
        cursor = TokenCursor.of(tokens)
        first = cursor.next()
        if first is None:
            raise MacroError("skip_generics expected more tokens")
        return cls(parse_paren_args(first))

    def split_generics(self, callback_macro: MacroInvocation, args: Iterable, parser: PostGenericsParser) -> list:
        """Split the tokens and pass the pieces to ``callback_macro``.

        The callback receives ``args``, then the generics, what ``parser`` writes,
        the where clause and the remaining tokens, each parenthesized.
        """
        self._process_generics()
        self._location = _Location.AFTER_GENERICS

        if self.depth == 0:
            for tt in self._parsing:
                tt = self._process_generic_list(tt)
                if tt is None:
                    break
                if self.depth == 0:
                    tt = self._process_after_generics(tt)
                    if tt is None:
                        break
                parser.consume_token(self, tt)

        self._process_from_where_clause()

        extra = list(args)

        def add_pieces(out: list) -> None:
            out.extend(extra)
            out.append(parenthesize(self._generics))
            parser.write_tokens(out)
            out.append(parenthesize(self._where_clause))
            out.append(parenthesize(self._after_where))

        return callback_macro.expand_with_extra_args(add_pieces)

    def _process_generics(self) -> None:
        first = self._parsing.peek()
        if isinstance(first, Punct) and first.char == "<":
            self._parsing.next()
            for tt in self._parsing:
                tt = self._process_generic_list(tt)
                if tt is None:
                    break
                self._generics.append(tt)

    def _process_from_where_clause(self) -> None:
        if self.depth == 0 and self._location is _Location.IN_WHERE:
            for tt in self._parsing:
                tt = self._process_generic_list(tt)
                if tt is None:
                    break
                if self.depth == 0:
                    tt = self._process_after_generics(tt)
                    if tt is None:
                        break
                self._where_clause.append(tt)
        self._after_where.extend(self._parsing)

    def _process_after_generics(self, tt):
        if (
            isinstance(tt, Ident)
            and self._location is _Location.AFTER_GENERICS
            and tt.name == "where"
        ):
            self._curr_kind = _TokenKind.WHERE
            self._location = _Location.IN_WHERE
            return None

        ends_header = (
            isinstance(tt, Punct)
            and (tt.char == ";" or (tt.char == "=" and tt.spacing is Spacing.ALONE))
        ) or (isinstance(tt, Group) and tt.delimiter is Delimiter.BRACE)

        if ends_header:
            self._where_clause.extend(self._trailing_comma())
            self._after_where.append(tt)
            self._location = _Location.AFTER_WHERE
            return None
        return tt

    def _trailing_comma(self) -> list:
        if self._location is _Location.IN_WHERE and self._prev_kind is _TokenKind.OTHER:
            return [Punct(",")]
        return []

    def _process_generic_list(self, tt):
        """Track ``<``/``>`` nesting; returns None at the ``>`` closing the generics."""
        self.prev_is_joint = self.curr_is_joint
        self.curr_is_joint = False
        self._prev_kind = self._curr_kind
        self._curr_kind = _TokenKind.OTHER

        if isinstance(tt, Punct):
            char = tt.char
            self.curr_is_joint = char == "-" or (
                tt.spacing is Spacing.JOINT and char not in "<>"
            )
            if char == ",":
                self._curr_kind = _TokenKind.COMMA
            if char == "<":
                self.depth += 1
            if not self.prev_is_joint and char == ">":
                if self.depth == 0:
                    if self._location is _Location.IN_GENERICS:
                        return None
                else:
                    self.depth -= 1
        return tt


class _UnparsedPostGenerics(PostGenericsParser):
    def __init__(self) -> None:
        self.output: list = []

    def consume_token(self, splitter: SplitGenerics, tt) -> None:
        self.output.append(tt)

    def write_tokens(self, out: list) -> None:
        out.append(parenthesize(self.output))


def split_generics(tokens) -> list:
    """Split ``callback!(..) (<generics> header where clause rest)`` for the callback."""
    cursor = TokenCursor.of(tokens)
    macro_invoc = parse_macro_invocation(cursor)
    return SplitGenerics.from_tokens(cursor).split_generics(macro_invoc, [], _UnparsedPostGenerics())


def unwrap_bound(tokens) -> list:
    """Pass the bounds held in an undelimited group to a callback, ending them with ``+``."""
    cursor = TokenCursor.of(tokens)
    first = cursor.next()
    if first is None:
        raise MacroError("__priv_unwrap_bound expected more tokens")
    if not (isinstance(first, Group) and first.delimiter is Delimiter.NONE):
        raise MacroError(f"Expected a none-delimited group, found:\n{first}")

    bound = list(first.stream)
    if bound and not (isinstance(bound[-1], Punct) and bound[-1].char == "+"):
        bound.append(Punct("+"))

    return parse_path_and_args(
        "__priv_unwrap_bound",
        cursor,
        [],
        lambda args: args.append(parenthesize(bound)),
    )