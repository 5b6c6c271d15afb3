"""Parsers for the small argument grammar of the token-list macros, and token comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterable, Iterator, Optional

from coreext.tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    MacroError,
    Punct,
    Spacing,
    TokenCursor,
)

USIZE_MAX = (1 << 64) - 1
"""The largest count or index accepted; also the end of an unbounded range."""

_DECIMAL = re.compile(r"\+?\d+")


def _fail(tt, message: str) -> MacroError:
    """The error for a token that did not match, or for input that ended."""
    return MacroError.end(message) if tt is None else MacroError(message)


def _parse_usize(text: str) -> Optional[int]:
    if not _DECIMAL.fullmatch(text):
        return None
    value = int(text)
    return value if value <= USIZE_MAX else None


def _saturating_inc(value: int) -> int:
    return min(value + 1, USIZE_MAX)


def _debug_char(char: str) -> str:
    return "'\\''" if char == "'" else f"'{char}'"


class RangeType(Enum):
    """The kind of range operator that was parsed."""

    INCLUSIVE = auto()
    EXCLUSIVE = auto()
    RANGE_START = auto()


@dataclass(frozen=True)
class RangeB:
    """A range whose end is None when it is unbounded."""

    start: int
    end: Optional[int]


@dataclass(frozen=True)
class CountAnd:
    """A count followed by something else that was parsed after a comma."""

    count: int
    other: Any


@dataclass
class PathAndSpan:
    """A path read from the front of some tokens, and the token that ended it."""

    path: list = field(default_factory=list)
    terminator: Any = None


def parse_integer(cursor) -> int:
    """Parse a decimal integer literal."""
    message = "expected a decimal integer"
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Literal):
        value = _parse_usize(tt.text)
        if value is None:
            raise MacroError(message)
        return value
    raise _fail(tt, message)


def parse_count_param(cursor) -> int:
    """Parse either ``count(...)``, giving the number of tokens inside, or an integer literal."""
    message = "expected either `count(....)` or an integer literal"
    cursor = TokenCursor.of(cursor)
    tt = cursor.next()

    if isinstance(tt, Ident) and tt.name == "count":
        group = cursor.next()
        if isinstance(group, Group):
            return len(group.stream)
        raise _fail(group, "expected parentheses")

    if isinstance(tt, Group) and tt.delimiter is Delimiter.NONE:
        inner = TokenCursor(tt.stream)
        result = parse_count_param(inner)
        if inner.next() is not None:
            raise MacroError("Expected no more tokens after integer")
        return result

    if isinstance(tt, Literal):
        value = _parse_usize(tt.text)
        if value is None:
            raise MacroError("could not parse integer literal")
        return value

    raise _fail(tt, message)


def parse_count_and(cursor, func: Callable[[TokenCursor], Any]) -> CountAnd:
    """Parse a count, a comma, then whatever ``func`` parses, with nothing after it."""
    cursor = TokenCursor.of(cursor)
    count = parse_count_param(cursor)
    parse_check_punct(cursor, ",")
    other = func(cursor)
    expect_no_tokens(cursor)
    return CountAnd(count, other)


def _parse_start_bound(cursor: TokenCursor) -> int:
    first = cursor.peek()
    if isinstance(first, Punct) and first.char == ".":
        return 0
    return parse_count_param(cursor)


def _parse_range_operator_inner(cursor: TokenCursor) -> RangeType:
    tt = cursor.next()
    if not isinstance(tt, Punct):
        raise _fail(tt, "expected a range")

    nxt = cursor.peek()
    if isinstance(nxt, Punct) and nxt.char == "=":
        cursor.next()
        return RangeType.INCLUSIVE
    if nxt is not None:
        return RangeType.EXCLUSIVE
    return RangeType.RANGE_START


def _is_range_dot(tt) -> bool:
    return isinstance(tt, Punct) and tt.char == "." and tt.spacing is Spacing.JOINT


def _parse_range_operator(cursor: TokenCursor) -> RangeType:
    tt = cursor.next()
    if _is_range_dot(tt):
        return _parse_range_operator_inner(cursor)
    raise _fail(tt, "expected a range")


def _parse_range_operator_opt(cursor: TokenCursor) -> Optional[RangeType]:
    tt = cursor.next()
    if tt is None:
        return None
    if _is_range_dot(tt):
        return _parse_range_operator_inner(cursor)
    raise MacroError("expected a range")


def _range_end(cursor: TokenCursor, range_type: RangeType) -> int:
    end = parse_count_param(cursor)
    return _saturating_inc(end) if range_type is RangeType.INCLUSIVE else end


def parse_range_param(cursor) -> RangeB:
    """Parse ``a..b``, ``a..=b`` or ``a..``, where the start may be left out."""
    cursor = TokenCursor.of(cursor)
    start = _parse_start_bound(cursor)
    range_type = _parse_range_operator(cursor)
    if range_type is RangeType.RANGE_START:
        return RangeB(start, None)
    return RangeB(start, _range_end(cursor, range_type))


def parse_bounded_range_param(cursor) -> range:
    """Parse a range that must have an end."""
    parsed = parse_range_param(cursor)
    if parsed.end is None:
        raise MacroError("Expected a finite range")
    return range(parsed.start, parsed.end)


def parse_unbounded_range_param(cursor) -> range:
    """Parse a range, giving an open-ended one the end ``USIZE_MAX``."""
    parsed = parse_range_param(cursor)
    return range(parsed.start, USIZE_MAX if parsed.end is None else parsed.end)


def parse_int_or_range_param(cursor) -> RangeB:
    """Parse either a single index, as a one-element range, or a range."""
    cursor = TokenCursor.of(cursor)
    start = _parse_start_bound(cursor)
    range_type = _parse_range_operator_opt(cursor)

    if range_type is None:
        return RangeB(start, _saturating_inc(start))
    if range_type is RangeType.RANGE_START:
        return RangeB(start, None)
    return RangeB(start, _range_end(cursor, range_type))


def parse_parentheses(cursor) -> Group:
    """Parse a parenthesized group."""
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Group) and tt.delimiter is Delimiter.PARENTHESIS:
        return tt
    raise _fail(tt, "expected parentheses")


def parse_group(cursor) -> Group:
    """Parse a group delimited by parentheses, braces or brackets."""
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Group) and tt.delimiter is not Delimiter.NONE:
        return tt
    raise _fail(tt, "expected `(`, `{`, or `[`")


def parse_ident(cursor) -> Ident:
    """Parse an identifier, looking inside undelimited groups."""
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Group) and tt.delimiter is Delimiter.NONE:
        return parse_ident(TokenCursor(tt.stream))
    if isinstance(tt, Ident):
        return tt
    raise _fail(tt, "expected identifier")


def parse_keyword(cursor, keyword: str) -> Ident:
    """Parse the identifier ``keyword``."""
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Ident) and tt.name == keyword:
        return tt
    raise _fail(tt, f'expected "{keyword}"')


def parse_check_punct(cursor, punct: str) -> Punct:
    """Parse the punctuation character ``punct``."""
    tt = TokenCursor.of(cursor).next()
    if isinstance(tt, Punct) and tt.char == punct:
        return tt
    raise _fail(tt, f"expected {_debug_char(punct)}")


def parse_path_and_span(cursor) -> PathAndSpan:
    """Read identifiers and colons as a path, stopping at the first other token."""
    result = PathAndSpan()
    for tt in TokenCursor.of(cursor):
        if isinstance(tt, Group):
            if tt.delimiter is Delimiter.NONE:
                result.path.extend(tt.stream)
                continue
        elif isinstance(tt, Punct):
            if tt.char == ":":
                result.path.append(tt)
                continue
        elif isinstance(tt, Ident):
            result.path.append(tt)
            continue
        result.terminator = tt
        return result
    return result


def expect_no_tokens(cursor) -> None:
    """Raise if any token is left."""
    if TokenCursor.of(cursor).next() is not None:
        raise MacroError("expected no more tokens, starting from this one")


def repeat_times(times: int, items: Iterable) -> Iterator:
    """Yield ``items`` over and over, ``times`` times in all, and at least once."""
    items = list(items)
    if not items:
        return
    while True:
        yield from items
        if times <= 1:
            return
        times -= 1


def tokens_equal(left, right) -> bool:
    """Compare token trees by text, ignoring punctuation spacing."""
    if isinstance(left, Ident) and isinstance(right, Ident):
        return left.name == right.name
    if isinstance(left, Punct) and isinstance(right, Punct):
        return left.char == right.char
    if isinstance(left, Literal) and isinstance(right, Literal):
        return left.text == right.text
    if isinstance(left, Group) and isinstance(right, Group):
        return (
            left.delimiter is right.delimiter
            and len(left.stream) == len(right.stream)
            and all(tokens_equal(lt, rt) for lt, rt in zip(left.stream, right.stream))
        )
    return False


def skip_until_match(cursor, needle) -> tuple:
    """Take tokens up to and including the first run equal to ``needle``.

    Returns the tokens before the match and whether the needle was found;
    the needle's tokens are consumed but not returned.
    """
    cursor = TokenCursor.of(cursor)
    needle = list(needle)
    out: list = []
    matched = 0

    while matched < len(needle):
        tt = cursor.next()
        if tt is None:
            return out, False
        if tokens_equal(tt, needle[matched]):
            matched += 1
        else:
            matched = 1 if tokens_equal(tt, needle[0]) else 0
        out.append(tt)

    del out[len(out) - len(needle):]
    return out, bool(needle)