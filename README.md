# coreext

A library for working with token streams the way a macro preprocessor
does. It tokenizes source text into identifiers, punctuation, literals
and delimited groups. It then splits, slices, zips and rewrites those
streams, passing the results to a "callback" macro invocation. It also
has a few small helpers for calling objects and for conditional values.

## Installation

```
pip install coreext
```

To run the test suite:

```
pip install coreext[test]
pytest
```

## Token streams

`coreext.tokens` turns text into token trees and back:

```python
from coreext.tokens import parse_tokens, tokens_to_string

tokens = parse_tokens("foo!(a, b) <T: Clone>")
print(tokens_to_string(tokens))
# foo ! (a , b) < T : Clone >
```

The token types are `Ident`, `Punct`, `Literal` and `Group`.

- A `Punct` carries a `Spacing`. It is `JOINT` when another punctuation
  character follows it directly.
- A `Group` carries a `Delimiter`: `PARENTHESIS`, `BRACE`, `BRACKET` or
  `NONE`.
- `tokens_to_string` separates tokens with single spaces. It puts no
  space after joint punctuation.

A `TokenCursor` walks a sequence of tokens with `peek()` and `next()`.
Both return `None` at the end.

Errors are raised as `MacroError`. `MacroError.to_compile_error()`
returns the tokens of a `compile_error!{"..."}` invocation that carries
the message.

Several helpers read or build macro calls:

- `parse_macro_invocation` reads a callback macro such as `foo!()` from
  the front of a stream and returns a `MacroInvocation`.
- `MacroInvocation.into_tokens()` gives the whole call back as tokens.
- `MacroInvocation.expand_with_extra_args(func)` lets `func` append
  arguments first, then gives the whole call back as tokens.
- `parse_path_and_args` appends extra arguments to a macro call.
- `parse_paren_args` opens a parenthesized group.
- `parenthesize` wraps tokens in one.

## Splitting generics

`coreext.splitting_generics.split_generics` reads a callback macro and a
parenthesized item. It passes the callback four groups:

1. the generic parameters;
2. the tokens between the generics and the `where` clause;
3. the `where` predicates, with a trailing comma added;
4. everything after them.

```python
from coreext.splitting_generics import split_generics
from coreext.tokens import parse_tokens, tokens_to_string

out = split_generics(parse_tokens("foo!() (<T: Clone> (x: T) where T: Copy {})"))
print(tokens_to_string(out))
# foo ! ((T : Clone) ((x : T)) (T : Copy ,) ({}))
```

`SplitGenerics.split_generics` is the same splitter with a pluggable
`PostGenericsParser`. That parser receives the tokens between the
generics and the where clause.

`unwrap_bound` takes bounds held in an undelimited group and passes them
to a callback, ending them with `+`.

`coreext.item_parsing.split_impl` splits an `impl` header. The callback
receives these groups, in order:

- the attributes;
- the qualifiers;
- the generics;
- `trait(...)`, when the header names a trait;
- `type(...)`;
- the where clause;
- the rest.

## List methods

`coreext.macro_utils.tokens_method` applies a named method to a token
list and passes the result to a callback macro. The methods are:

- `first`
- `last`
- `split_first`
- `split_last`
- `split_last_n(n)`
- `split_at(n)`
- `get(i)` or `get(a..b)`
- `split(sep)`
- `split_terminator(sep)`
- `split_starter(sep)`
- `zip_shortest`
- `zip_longest`
- `iterate`

A list is either a parenthesized group or one built with `range(a..b)`,
`repeat(n, list)`, `take(n, list)`, `skip(n, list)`, `chain(...)`,
`cycle(list)` or `gen_ident_range(for prefix* in a..b)`. Lists that
never end, such as `range(1..)` or `cycle(...)`, are only accepted where
the method can finish with them.

```python
from coreext.macro_utils import tokens_method
from coreext.tokens import parse_tokens, tokens_to_string

out = tokens_method(parse_tokens("f!() split_at(2): (a b c d)"))
print(tokens_to_string(out))
# f ! ((a b) (c d))
```

`coreext.macro_utils` also provides:

- `count_tts` counts the tokens in a group. Without a callback the result
  is a literal such as `3usize`.
- `gen_ident_range` passes `prefix0 prefix1 ...` to a callback.
- `macro_attr` turns an attribute naming a macro into a call of that
  macro on the item.
- `rewrap_macro_parameters` drops a lone `~` and parenthesizes the
  identifier or undelimited group after it.

The pieces these are built from can be used directly:

- `coreext.list_generation` has `parse_bounded`, `parse_unbounded`,
  `TokenList` and `GenIdentRange`.
- `coreext.macro_parsing` has the count, range, keyword and punctuation
  parsers, plus `tokens_equal` and `skip_until_match`.

## Callables and booleans

`coreext.callable` has the base classes `CallInto`, `CallMut` and
`CallRef`, each building on the one before:

- A subclass of `CallRef` implements `ref_call`. It gets `mut_call` and
  `into_call` from it.
- A subclass of `CallMut` implements `mut_call`. It gets `into_call`
  from it.

The functions `ref_call`, `mut_call` and `into_call` call such objects.
Parameters are passed as one value: `()` for none, the value itself for
one, and a tuple for several. The functions also accept plain Python
callables, which always take a tuple of their arguments. Calling an
object in a stronger way than its class supports raises `TypeError`.

`coreext.bools` has `if_true(value, func)` and `if_false(value, func)`.
Each returns `func()` when the condition holds and `None` otherwise.

## What it does not do

This is a library only; it has no command-line tool. It works on token
lists in memory. It does not run a compiler, expand macros by itself,
or derive trait implementations for type definitions.