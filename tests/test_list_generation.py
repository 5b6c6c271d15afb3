from itertools import islice

import pytest

from coreext.list_generation import (
    GenIdentRange,
    TokenList,
    gen_ident_range_just_idents,
    parse_bounded,
    parse_unbounded,
)
from coreext.macro_parsing import parse_bounded_range_param, parse_unbounded_range_param
from coreext.tokens import Delimiter, Group, Ident, Literal, MacroError, TokenCursor, parse_tokens


def _bounded(text):
    return parse_bounded(TokenCursor(parse_tokens(text)))


def _unbounded(text):
    return parse_unbounded(TokenCursor(parse_tokens(text)))


def _take(token_list, n):
    return list(islice(token_list.iterate(), n))


def test_parenthesized_group_is_its_tokens():
    group = _bounded("(a b c)")
    assert group.delimiter is Delimiter.PARENTHESIS
    assert group.stream == tuple(parse_tokens("a b c"))


def test_undelimited_group_is_a_list():
    token_list = parse_unbounded([Group(Delimiter.NONE, [Ident("a"), Ident("b")])])
    assert token_list.is_finite()
    assert list(token_list.iterate()) == [Ident("a"), Ident("b")]


def test_bounded_inclusive_range():
    group = _bounded("range(2..=4)")
    assert [int(tt.text) for tt in group.stream] == [2, 3, 4]


def test_unbounded_range_counts_up_from_start():
    token_list = _unbounded("range(5..)")
    assert not token_list.is_finite()
    values = [int(tt.text) for tt in _take(token_list, 10)]
    assert values[0] == 5
    assert all(b - a == 1 for a, b in zip(values, values[1:]))


def test_repeat():
    group = _bounded("repeat(3, (a b))")
    assert group.stream == tuple(parse_tokens("a b")) * 3


def test_repeat_zero_is_empty():
    assert _bounded("repeat(0, (a))").stream == ()


def test_take_from_cycle():
    group = _bounded("take(4, cycle((x y)))")
    pattern = tuple(parse_tokens("x y"))
    assert group.stream[:2] == pattern
    assert group.stream[2:] == pattern


def test_take_more_than_available():
    assert _bounded("take(10, (a b))").stream == tuple(parse_tokens("a b"))


def test_skip_finite():
    assert _bounded("skip(1, (a b c))").stream == tuple(parse_tokens("b c"))


def test_skip_unbounded():
    token_list = _unbounded("skip(2, range(0..))")
    assert not token_list.is_finite()
    assert int(_take(token_list, 1)[0].text) == 2


def test_chain_bounded():
    assert _bounded("chain((a b) (c))").stream == tuple(parse_tokens("a b c"))


def test_chain_finite_parts_stay_finite():
    token_list = _unbounded("chain((a) (b c))")
    assert token_list.is_finite()
    assert list(token_list.iterate()) == parse_tokens("a b c")


def test_chain_with_unbounded_tail():
    token_list = _unbounded("chain((a) range(0..) (z))")
    assert not token_list.is_finite()
    first, second = _take(token_list, 2)
    assert first == Ident("a")
    assert isinstance(second, Literal) and int(second.text) == 0


def test_cycle_of_nothing_yields_nothing():
    token_list = _unbounded("cycle(())")
    assert not token_list.is_finite()
    assert _take(token_list, 5) == []


def test_bounded_gen_ident_range():
    group = _bounded("gen_ident_range(for x* in 0..3)")
    assert [tt.name for tt in group.stream] == ["x0", "x1", "x2"]


def test_unbounded_gen_ident_range():
    token_list = _unbounded("gen_ident_range(for x* in 7..)")
    assert not token_list.is_finite()
    names = [tt.name for tt in _take(token_list, 3)]
    assert all(name.startswith("x") for name in names)
    assert names[0] == "x7"


def test_gen_ident_range_just_idents_unbounded():
    idents = gen_ident_range_just_idents(
        TokenCursor(parse_tokens("for p* in 1..")), parse_unbounded_range_param
    )
    assert idents.is_unbounded()
    assert idents.prefix == "p"


def test_gen_ident_range_just_idents_bounded():
    idents = gen_ident_range_just_idents(
        TokenCursor(parse_tokens("for p* in 1..3")), parse_bounded_range_param
    )
    assert not idents.is_unbounded()
    assert list(idents) == [Ident("p1"), Ident("p2")]


def test_gen_ident_range_rejects_trailing_tokens():
    with pytest.raises(MacroError, match="expected no more tokens"):
        gen_ident_range_just_idents(
            TokenCursor(parse_tokens("for p* in 1..3 extra")), parse_bounded_range_param
        )


def test_gen_ident_range_requires_star():
    with pytest.raises(MacroError, match=r"expected '\*'"):
        gen_ident_range_just_idents(
            TokenCursor(parse_tokens("for p in 1..3")), parse_bounded_range_param
        )


def test_gen_ident_range_requires_for():
    with pytest.raises(MacroError, match='expected "for"'):
        gen_ident_range_just_idents(
            TokenCursor(parse_tokens("p* in 1..3")), parse_bounded_range_param
        )


def test_gen_ident_range_value_iterates_again():
    idents = GenIdentRange("v", range(0, 2))
    assert list(idents) == list(idents)
    assert not idents.is_unbounded()


def test_token_list_finite_iterate():
    token_list = TokenList(tuple(parse_tokens("a b")))
    assert token_list.is_finite()
    assert list(token_list.iterate()) == parse_tokens("a b")


@pytest.mark.parametrize(
    "text",
    [
        "range(1..)",
        "cycle((1))",
        "repeat(4, range(1..))",
        "skip(10, range(1..))",
        "chain(range(1..))",
        "chain((a b c d) range(1..))",
        "chain((a b c d) range(1..) range(1..))",
        "gen_ident_range(for i* in 0..)",
    ],
)
def test_bounded_rejects_endless_lists(text):
    with pytest.raises(MacroError, match="(?i)expected a bounded"):
        _bounded(text)


def test_unknown_method():
    with pytest.raises(MacroError, match="Found frobnicate"):
        _bounded("frobnicate(a)")


def test_method_needs_parentheses():
    with pytest.raises(MacroError, match="expected parentheses"):
        _bounded("range[0..3]")


def test_literal_is_not_a_list():
    with pytest.raises(MacroError, match="expected one of `cycle`"):
        _bounded("5")


def test_empty_input():
    with pytest.raises(MacroError, match="tokens ended before parsing finished"):
        parse_unbounded(TokenCursor([]))


def test_take_rejects_extra_arguments():
    with pytest.raises(MacroError, match="expected no more tokens"):
        _bounded("take(1, (a) (b))")