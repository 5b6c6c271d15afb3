"""Procedural helpers over token lists: counting, identifier ranges and list methods."""

from __future__ import annotations

from itertools import islice
from typing import Callable, Iterable

from coreext.list_generation import gen_ident_range_just_idents, parse_bounded, parse_unbounded
from coreext.macro_parsing import (
    expect_no_tokens,
    parse_bounded_range_param,
    parse_count_param,
    parse_group,
    parse_ident,
    parse_int_or_range_param,
    parse_parentheses,
    parse_path_and_span,
    skip_until_match,
)
from coreext.tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    MacroError,
    Punct,
    TokenCursor,
    parenthesize,
    parse_macro_invocation,
)


def rewrap_macro_parameters(tokens: Iterable) -> list:
    """Drop each lone ``~`` and parenthesize the identifier or undelimited group after it.

    A ``~~`` pair stands for a single literal ``~``.
    """
    out: list = []
    curr_tilde = False
    for tt in tokens:
        prev_tilde, curr_tilde = curr_tilde, False

        if isinstance(tt, Group):
            delimiter = tt.delimiter
            if prev_tilde and delimiter is Delimiter.NONE:
                delimiter = Delimiter.PARENTHESIS
            out.append(Group(delimiter, rewrap_macro_parameters(tt.stream)))
        elif isinstance(tt, Punct):
            curr_tilde = tt.char == "~"
            if not prev_tilde and curr_tilde:
                continue
            curr_tilde = False
            out.append(tt)
        elif isinstance(tt, Ident) and prev_tilde:
            out.append(parenthesize([tt]))
        else:
            out.append(tt)
    return out


def count_tts(tokens) -> list:
    """Count the tokens in a parenthesized group.

    Without a callback macro the count is an expression (``3usize``); with one,
    the unsuffixed count is passed to the callback.
    """
    cursor = TokenCursor.of(tokens)
    first = cursor.peek()
    if isinstance(first, Group) and first.delimiter is Delimiter.PARENTHESIS:
        counted = parse_parentheses(cursor)
        return [Literal(f"{len(counted.stream)}usize")]

    macro = parse_macro_invocation(cursor)
    counted = parse_parentheses(cursor)
    macro.args.append(Literal(str(len(counted.stream))))
    return macro.into_tokens()


def gen_ident_range(tokens) -> list:
    """Pass ``prefix0 prefix1 ...`` for ``for prefix* in a..b`` to a callback macro."""
    cursor = TokenCursor.of(tokens)
    macro = parse_macro_invocation(cursor)
    idents = gen_ident_range_just_idents(cursor, parse_bounded_range_param)
    macro.args.append(parenthesize(idents))
    return macro.into_tokens()


def macro_attr(attr, item: Iterable) -> list:
    """Turn an attribute naming a macro into an invocation of it on the annotated item."""
    attr_cursor = TokenCursor.of(attr)
    parsed = parse_path_and_span(attr_cursor)
    terminator = parsed.terminator

    if isinstance(terminator, Punct) and terminator.char == "!":
        bang, more_tokens = terminator, True
    elif terminator is not None:
        raise MacroError("expected a `!`")
    else:
        bang, more_tokens = Punct("!"), False

    path = [*parsed.path, bang]
    if more_tokens:
        group = parse_group(attr_cursor)
        args = [*group.stream, *item]
    else:
        args = list(item)
    path.append(Group(Delimiter.BRACE, args))
    return path


def _parse_no_params(cursor: TokenCursor) -> None:
    tt = cursor.next()
    if isinstance(tt, Punct) and tt.char == ":":
        return
    message = "expected colon"
    raise MacroError.end(message) if tt is None else MacroError(message)


def _parse_params(cursor: TokenCursor) -> Group:
    tt = cursor.next()
    if isinstance(tt, Group) and tt.delimiter is Delimiter.PARENTHESIS:
        _parse_no_params(cursor)
        return tt
    message = "expected parentheses followed by colon"
    raise MacroError.end(message) if tt is None else MacroError(message)


def _parse_count_params(cursor: TokenCursor) -> int:
    params = TokenCursor(_parse_params(cursor).stream)
    value = parse_count_param(params)
    expect_no_tokens(params)
    return value


def _split_shared(cursor: TokenCursor) -> tuple:
    needle = list(_parse_params(cursor).stream)
    group = parse_bounded(cursor)
    return needle, TokenCursor(group.stream)


def _parse_for_zip(cursor: TokenCursor) -> tuple:
    iterators = []
    finite_count = 0
    while True:
        elem = parse_unbounded(cursor)
        if elem.is_finite():
            finite_count += 1
        iterators.append(elem.iterate())
        if cursor.peek() is None:
            break
    if finite_count == 0:
        raise MacroError("Expected at least one finite list")
    return iterators, finite_count


def _parse_bounded_args(cursor: TokenCursor) -> list:
    groups = []
    while True:
        groups.append(parse_bounded(cursor))
        if cursor.peek() is None:
            return groups


def _first(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    tokens = parse_unbounded(cursor)
    args.append(parenthesize(islice(tokens.iterate(), 1)))


def _last(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    args.append(parenthesize(parse_bounded(cursor).stream[-1:]))


def _split_first(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    stream = parse_bounded(cursor).stream
    args.append(parenthesize(stream[:1]))
    args.append(parenthesize(stream[1:]))


def _split_last(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    stream = parse_bounded(cursor).stream
    args.append(parenthesize(stream[:-1]))
    args.append(parenthesize(stream[-1:]))


def _split_last_n(cursor: TokenCursor, args: list) -> None:
    last_count = _parse_count_params(cursor)
    stream = parse_bounded(cursor).stream
    taken = max(len(stream) - last_count, 0)
    args.append(parenthesize(stream[:taken]))
    args.append(parenthesize(stream[taken:]))


def _split_at(cursor: TokenCursor, args: list) -> None:
    split_at = _parse_count_params(cursor)
    stream = parse_bounded(cursor).stream
    args.append(parenthesize(stream[:split_at]))
    args.append(parenthesize(stream[split_at:]))


def _get(cursor: TokenCursor, args: list) -> None:
    params = TokenCursor(_parse_params(cursor).stream)
    bounds = parse_int_or_range_param(params)
    expect_no_tokens(params)
    if bounds.end is not None:
        tokens = parse_unbounded(cursor)
        middle = islice(tokens.iterate(), bounds.start, max(bounds.end, bounds.start))
    else:
        middle = parse_bounded(cursor).stream[bounds.start:]
    args.append(parenthesize(middle))


def _split(cursor: TokenCursor, args: list) -> None:
    needle, items = _split_shared(cursor)
    while True:
        tokens, found = skip_until_match(items, needle)
        args.append(parenthesize(tokens))
        if not found:
            return


def _split_terminator(cursor: TokenCursor, args: list) -> None:
    needle, items = _split_shared(cursor)
    while True:
        tokens, found = skip_until_match(items, needle)
        if found or tokens:
            args.append(parenthesize(tokens))
        if not found:
            return


def _split_starter(cursor: TokenCursor, args: list) -> None:
    needle, items = _split_shared(cursor)
    start = True
    while True:
        tokens, found = skip_until_match(items, needle)
        if not start or tokens or not found:
            args.append(parenthesize(tokens))
        if not found:
            return
        start = False


def _zip_shortest(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    iterators, _ = _parse_for_zip(cursor)
    while True:
        zipped = []
        for iterator in iterators:
            tt = next(iterator, None)
            if tt is None:
                return
            zipped.append(parenthesize([tt]))
        args.append(parenthesize(zipped))


def _zip_longest(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    iterators, finite_count = _parse_for_zip(cursor)
    while True:
        zipped = []
        exhausted = 0
        for iterator in iterators:
            tt = next(iterator, None)
            if tt is None:
                exhausted += 1
                zipped.append(parenthesize([]))
            else:
                zipped.append(parenthesize([tt]))
        if exhausted == finite_count:
            return
        args.append(parenthesize(zipped))


def _iterate(cursor: TokenCursor, args: list) -> None:
    _parse_no_params(cursor)
    groups = _parse_bounded_args(cursor)
    nested = groups[-1]
    for group in reversed(groups[:-1]):
        elems = []
        for tt in group.stream:
            elems.append(Group(Delimiter.BRACE, [tt]))
            elems.append(nested)
        nested = parenthesize(elems)
    args.append(nested)


_METHODS: dict[str, Callable[[TokenCursor, list], None]] = {
    "first": _first,
    "last": _last,
    "split_first": _split_first,
    "split_last": _split_last,
    "split_last_n": _split_last_n,
    "split_at": _split_at,
    "get": _get,
    "split": _split,
    "split_terminator": _split_terminator,
    "split_starter": _split_starter,
    "zip_shortest": _zip_shortest,
    "zip_longest": _zip_longest,
    "iterate": _iterate,
}

_METHODS_MSG = "expected one of " + ", ".join(f"`{name}`" for name in _METHODS) + "."


def tokens_method(tokens) -> list:
    """Apply a list method such as ``split_at(2): (a b c)`` and pass the result to a callback."""
    cursor = TokenCursor.of(tokens)
    macro = parse_macro_invocation(cursor)

    try:
        ident = parse_ident(cursor)
    except MacroError as error:
        raise MacroError(_METHODS_MSG) from error

    method = _METHODS.get(ident.name)
    if method is None:
        raise MacroError(f"{_METHODS_MSG}\nFound {ident.name}")
    method(cursor, macro.args)
    return macro.into_tokens()