"""Token lists for the list macros: literal groups, ranges, repetitions and combinations of them."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import chain, count, cycle, islice
from typing import Callable, Iterator, Optional

from coreext.macro_parsing import (
    USIZE_MAX,
    expect_no_tokens,
    parse_check_punct,
    parse_count_and,
    parse_ident,
    parse_keyword,
    parse_parentheses,
    parse_range_param,
    parse_unbounded_range_param,
    repeat_times,
)
from coreext.tokens import Group, Ident, Literal, MacroError, TokenCursor, parenthesize

_METHOD_NAMES = ("cycle", "repeat", "take", "skip", "chain", "gen_ident_range", "range")
_METHODS_MSG = (
    "expected one of "
    + ", ".join(f"`{name}`" for name in _METHOD_NAMES)
    + ", or parentheses."
)


def _usize_literal(value: int) -> Literal:
    return Literal(str(value))


@dataclass(frozen=True)
class GenIdentRange:
    """Identifiers made of a prefix followed by each number of a range."""

    prefix: str
    range: range

    def is_unbounded(self) -> bool:
        """Whether the range was written without an end."""
        return self.range.stop == USIZE_MAX

    def __iter__(self) -> Iterator[Ident]:
        return (Ident(f"{self.prefix}{n}") for n in self.range)


def gen_ident_range_just_idents(cursor, parse_range: Callable[[TokenCursor], range]) -> GenIdentRange:
    """Parse ``for prefix* in <range>``, with ``parse_range`` reading the range."""
    cursor = TokenCursor.of(cursor)
    parse_keyword(cursor, "for")
    prefix = parse_ident(cursor)
    parse_check_punct(cursor, "*")
    parse_keyword(cursor, "in")
    numbers = parse_range(cursor)
    expect_no_tokens(cursor)
    return GenIdentRange(prefix.name, numbers)


@dataclass(frozen=True)
class TokenList:
    """A list of tokens: a finite prefix, optionally followed by an endless tail."""

    tokens: tuple = ()
    tail: Optional[Callable[[], Iterator]] = None

    def is_finite(self) -> bool:
        """Whether the list has no endless tail."""
        return self.tail is None

    def iterate(self) -> Iterator:
        """Iterate over the tokens; endless if the list is not finite."""
        if self.tail is None:
            return iter(self.tokens)
        return chain(self.tokens, self.tail())


class _Builder:
    """Builds the result of each list method, as a bounded group or as a token list."""

    def __init__(self, bounded: bool) -> None:
        self.bounded = bounded

    def group(self, tokens):
        tokens = tuple(tokens)
        return parenthesize(tokens) if self.bounded else TokenList(tokens)

    def cycle(self, tokens):
        if self.bounded:
            raise MacroError("expected a bounded iterator")
        tokens = tuple(tokens)
        return TokenList(tail=lambda: cycle(tokens))

    def skip_unbounded(self, n: int, inner: TokenList):
        if self.bounded:
            raise MacroError("expected a bounded iterator")
        return TokenList(tail=lambda: islice(inner.iterate(), n, None))

    def gen_idents_unbounded(self, idents: GenIdentRange):
        if self.bounded:
            raise MacroError("expected a bounded range")
        return TokenList(tail=lambda: iter(idents))

    def range_from(self, start: int):
        if self.bounded:
            raise MacroError("Expected a bounded range")
        return TokenList(tail=lambda: map(_usize_literal, count(start)))

    def chain(self, cursor: TokenCursor):
        lists = []
        while cursor.peek() is not None:
            lists.append(_parse(cursor, self))

        if self.bounded:
            return parenthesize([tt for group in lists for tt in group.stream])

        prefix: list = []
        unbounded: Optional[TokenList] = None
        for elem in lists:
            if unbounded is not None:
                continue
            if elem.is_finite():
                prefix.extend(elem.tokens)
            else:
                unbounded = elem
        if unbounded is None:
            return TokenList(tuple(prefix))
        return TokenList(tuple(prefix), unbounded.iterate)


def _parse(cursor: TokenCursor, builder: _Builder):
    tt = cursor.next()

    if isinstance(tt, Group):
        return builder.group(tt.stream)

    if not isinstance(tt, Ident):
        raise MacroError.end(_METHODS_MSG) if tt is None else MacroError(_METHODS_MSG)

    keyword = tt.name
    try:
        group = parse_parentheses(cursor)
        paren_error = None
    except MacroError as error:
        group, paren_error = None, error

    if keyword not in _METHOD_NAMES:
        raise MacroError(f"{_METHODS_MSG}\nFound {keyword}")
    if paren_error is not None:
        raise paren_error

    args = TokenCursor(group.stream)

    if keyword == "cycle":
        tokens = parse_bounded(args)
        expect_no_tokens(args)
        return builder.cycle(tokens.stream)

    if keyword == "repeat":
        parsed = parse_count_and(args, parse_bounded)
        if parsed.count == 0:
            return builder.group(())
        return builder.group(repeat_times(parsed.count, parsed.other.stream))

    if keyword == "take":
        parsed = parse_count_and(args, parse_unbounded)
        return builder.group(islice(parsed.other.iterate(), parsed.count))

    if keyword == "skip":
        parsed = parse_count_and(args, parse_unbounded)
        if parsed.other.is_finite():
            return builder.group(parsed.other.tokens[parsed.count:])
        return builder.skip_unbounded(parsed.count, parsed.other)

    if keyword == "chain":
        return builder.chain(args)

    if keyword == "gen_ident_range":
        idents = gen_ident_range_just_idents(args, parse_unbounded_range_param)
        if idents.is_unbounded():
            return builder.gen_idents_unbounded(idents)
        return builder.group(idents)

    parsed = parse_range_param(args)
    if parsed.end is None:
        return builder.range_from(parsed.start)
    return builder.group(_usize_literal(i) for i in range(parsed.start, parsed.end))


def parse_unbounded(cursor) -> TokenList:
    """Parse one list, which may be endless."""
    return _parse(TokenCursor.of(cursor), _Builder(bounded=False))


def parse_bounded(cursor) -> Group:
    """Parse one list that must be finite, as a parenthesized group."""
    return _parse(TokenCursor.of(cursor), _Builder(bounded=True))