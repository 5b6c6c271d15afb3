"""Splitting an ``impl`` block header into attributes, qualifiers, generics, trait and type."""

from __future__ import annotations

from enum import Enum, auto

from coreext.splitting_generics import PostGenericsParser, SplitGenerics
from coreext.tokens import (
    Ident,
    MacroError,
    TokenCursor,
    parenthesize,
    parse_macro_invocation,
    parse_paren_args,
)


class _Location(Enum):
    BEFORE_START = auto()
    STARTED = auto()
    IGNORE_FOR = auto()


class _ImplHeader(PostGenericsParser):
    def __init__(self) -> None:
        self.type_: list = []
        self.trait_ = None
        self.location = _Location.BEFORE_START

    def consume_token(self, splitter: SplitGenerics, tt) -> None:
        if self.location is _Location.BEFORE_START:
            is_dyn = isinstance(tt, Ident) and tt.name == "dyn"
            self.location = _Location.IGNORE_FOR if is_dyn else _Location.STARTED
        elif self.location is _Location.STARTED:
            if isinstance(tt, Ident) and tt.name == "for":
                self.trait_, self.type_ = self.type_, []
                self.location = _Location.IGNORE_FOR
                return
        self.type_.append(tt)

    def write_tokens(self, out: list) -> None:
        if self.trait_ is not None:
            out.append(Ident("trait"))
            out.append(parenthesize(self.trait_))
        out.append(Ident("type"))
        out.append(parenthesize(self.type_))


def split_impl(tokens) -> list:
    """Split ``callback!(..) (attrs qualifiers impl<..> Trait for Type where .. {..})``.

    The callback receives the attributes, the qualifiers and the generics, then
    ``trait(..)`` if there is a trait, ``type(..)``, the where clause and the rest.
    """
    cursor = TokenCursor.of(tokens)
    macro = parse_macro_invocation(cursor)

    parsed = cursor.next()
    if parsed is None:
        raise MacroError("expected more tokens")
    parsing = parse_paren_args(parsed)

    attrs: list = []
    qualifiers: list = []
    target = attrs
    while (tt := parsing.peek()) is not None:
        if isinstance(tt, Ident):
            if tt.name == "impl":
                parsing.next()
                break
            target = qualifiers
        target.append(parsing.next())

    out = [parenthesize(attrs), parenthesize(qualifiers)]
    return SplitGenerics(parsing).split_generics(macro, out, _ImplHeader())