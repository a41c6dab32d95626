from typing import Any

import pytest
from pydantic import Field
from pydantic.dataclasses import dataclass

from tt_lib import (
    Delimiter,
    Group,
    Ident,
    IndexBinding,
    Literal,
    MatchError,
    OneOrMoreBinding,
    OptionalBinding,
    ParameterBindingMismatch,
    Punct,
    TrailingInput,
    ValueBinding,
    ZeroOrMoreBinding,
    ZeroWidthRepetition,
    lex,
)
from tt_lib.pattern import parse_pattern


@dataclass
class Case:
    pattern: str
    matches: dict[str, Any]
    not_matches: list[str] = Field(default_factory=list)


def ident(name: str) -> ValueBinding[Ident]:
    return ValueBinding(Ident(name))


EXAMPLES = [
    # Plain tokens
    Case("a + b", {"a + b": {}, "a+b": {}}, ["a - b", "a +", "a + b c", "a += b"]),
    Case("f(x)", {"f(x)": {}, "f( x )": {}}, ["f[x]", "f(x, y)", "f()"]),
    # Fragments
    Case("$x", {"a": {"x": ident("a")}, "1": {"x": ValueBinding(Literal("1"))}}, ["", "a b"]),
    Case("$x:ident", {"abc": {"x": ident("abc")}}, ["1", "+", "(a)"]),
    Case("$x:literal", {"'s'": {"x": ValueBinding(Literal("'s'"))}}, ["a"]),
    Case("$x:punct", {"->": {"x": ValueBinding(Punct.from_str("->"))}}, ["a"]),
    Case(
        "$x:group",
        {"[a]": {"x": ValueBinding(Group(Delimiter.BRACKET, (Ident("a"),)))}},
        ["a"],
    ),
    Case(
        "f($args:tts)",
        {
            "f()": {"args": ValueBinding(())},
            "f(a, b)": {"args": ValueBinding(tuple(lex("a, b")))},
        },
    ),
    Case("$x + $x", {"a + a": {"x": ident("a")}}),
    # Optionals
    Case(
        "import $m:ident $(as $alias:ident)?",
        {
            "import os": {"m": ident("os"), "alias": OptionalBinding(None)},
            "import numpy as np": {
                "m": ident("numpy"),
                "alias": OptionalBinding(ident("np")),
            },
        },
        ["import numpy as", "import numpy np"],
    ),
    # Zero or more
    Case(
        "a $($x:ident),* b",
        {
            "a x1, x2, x3 b": {
                "x": ZeroOrMoreBinding((ident("x1"), ident("x2"), ident("x3")))
            },
            "a x1 b": {"x": ZeroOrMoreBinding((ident("x1"),))},
        },
        # Repetitions are greedy, `b` is taken as another `x`
        ["a b", "a x1, b", "a x1 x2 b", "a , b"],
    ),
    Case(
        "[$($x:ident),* ,]",
        {
            "[a, b,]": {"x": ZeroOrMoreBinding((ident("a"), ident("b")))},
            "[,]": {"x": ZeroOrMoreBinding(())},
        },
        ["[a, b]"],
    ),
    Case(
        "$($x:ident),* ,;",
        {"a, b,;": {"x": ZeroOrMoreBinding((ident("a"), ident("b")))}},
    ),
    Case(
        "$($k:ident = $v:literal);*",
        {
            "a = 1; b = 2": {
                "k": ZeroOrMoreBinding((ident("a"), ident("b"))),
                "v": ZeroOrMoreBinding(
                    (ValueBinding(Literal("1")), ValueBinding(Literal("2")))
                ),
            },
        },
        ["a = 1; b", "a = 1 b = 2"],
    ),
    # One or more
    Case(
        "$($x:ident)+",
        {
            "x1": {"x": OneOrMoreBinding((ident("x1"),))},
            "x1 x2": {"x": OneOrMoreBinding((ident("x1"), ident("x2")))},
        },
        ["", "1"],
    ),
    Case(
        "($($x:literal)|+)",
        {"(1|2|3)": {"x": OneOrMoreBinding(tuple(ValueBinding(Literal(n)) for n in "123"))}},
        ["()", "(1|)", "(1 2)"],
    ),
    # Nested repetitions
    Case(
        "$($f:ident($($a:ident),*));*",
        {
            "f(a, b); g()": {
                "f": ZeroOrMoreBinding((ident("f"), ident("g"))),
                "a": ZeroOrMoreBinding(
                    (
                        ZeroOrMoreBinding((ident("a"), ident("b"))),
                        ZeroOrMoreBinding(()),
                    )
                ),
            },
        },
    ),
    Case(
        "$($x:ident $(: $t:ident)?),*",
        {
            "a: int, b": {
                "x": ZeroOrMoreBinding((ident("a"), ident("b"))),
                "t": ZeroOrMoreBinding((OptionalBinding(ident("int")), OptionalBinding(None))),
            },
        },
    ),
    # Indices
    Case(
        "$[i]($x:ident = $@i),*",
        {
            "a = 0, b = 1": {
                "x": ZeroOrMoreBinding((ident("a"), ident("b"))),
                "i": IndexBinding(2),
            },
            "": {"x": ZeroOrMoreBinding(()), "i": IndexBinding(0)},
        },
        ["a = 1", "a = 0, b = 0", "a = x"],
    ),
    Case(
        "$[i]($x:ident),* ; $@i",
        {
            "a, b ; 2": {
                "x": ZeroOrMoreBinding((ident("a"), ident("b"))),
                "i": IndexBinding(2),
            },
        },
        ["a, b ; c"],
    ),
    Case("len $@n", {"len 4": {"n": IndexBinding(4)}}, ["len x", "len 1.5"]),
    Case(
        "$($[j]($y:ident $@j)*),*",
        {
            "a 0 b 1, c 0": {
                "y": ZeroOrMoreBinding(
                    (
                        ZeroOrMoreBinding((ident("a"), ident("b"))),
                        ZeroOrMoreBinding((ident("c"),)),
                    )
                ),
                "j": ZeroOrMoreBinding((IndexBinding(2), IndexBinding(1))),
            },
        },
    ),
]


@pytest.mark.parametrize("testcase", EXAMPLES)
def test_match_pattern(testcase: Case):
    pattern = parse_pattern(testcase.pattern)
    for source, expected in testcase.matches.items():
        bindings = pattern.match(source)
        assert dict(bindings) == expected, source

    for source in testcase.not_matches:
        with pytest.raises(MatchError):
            pattern.match(source)


def test_match_tokens():
    pattern = parse_pattern("$f:ident($($args:ident),*)")
    bindings = pattern.match(lex("print(a, b)"))
    assert bindings.unstructure() == {
        "f": Ident("print"),
        "args": [Ident("a"), Ident("b")],
    }


def test_trailing_input():
    with pytest.raises(TrailingInput) as e:
        parse_pattern("a").match("a b")
    assert str(e.value) == "1:2: expected end of input"

    with pytest.raises(TrailingInput, match="expected end of group"):
        parse_pattern("f($x)").match("f(a b)")


def test_mismatch_error_location():
    with pytest.raises(MatchError) as e:
        parse_pattern("f($x:ident)").match("f(\n  1)")
    assert str(e.value) == "2:2: expected identifier"


def test_conflicting_bindings():
    pattern = parse_pattern("$x + $x")
    with pytest.raises(ParameterBindingMismatch) as e:
        pattern.match("a + b")
    assert e.value.parameter == "x"

    with pytest.raises(ParameterBindingMismatch):
        parse_pattern("$[i]($x:ident),* ; $@i").match("a, b ; 3")


def test_shared_repetition_binding():
    pattern = parse_pattern("$($x:ident),* | $($x:ident),*")
    assert pattern.match("a, b | a, b").unstructure() == {"x": [Ident("a"), Ident("b")]}
    with pytest.raises(ParameterBindingMismatch):
        pattern.match("a, b | a")


# ---- Zero-width iterations ---- #


def test_zero_width_iteration_stops():
    pattern = parse_pattern("$($($x:ident)?)* ;")
    assert pattern.match("a b ;").unstructure() == {"x": [Ident("a"), Ident("b")]}
    assert pattern.match(";").unstructure() == {"x": []}

    assert parse_pattern("$($t:tts)*").match("").unstructure() == {"t": []}


def test_zero_width_iteration_error():
    pattern = parse_pattern("$($($x:ident)?)* ;")
    with pytest.raises(ZeroWidthRepetition):
        pattern.match("a ;", zero_width="error")


def test_first_iteration_may_be_empty():
    pattern = parse_pattern("$($($x:ident)?)+ ;")
    assert pattern.match(";").unstructure() == {"x": [None]}


def test_separator_counts_as_progress():
    pattern = parse_pattern("[$($($x:ident)?),*]")
    assert pattern.match("[a, , b]").unstructure() == {
        "x": [Ident("a"), None, Ident("b")]
    }


def test_separator_is_a_whole_run():
    # `,,` is one run, not two separators
    with pytest.raises(MatchError):
        parse_pattern("[$($($x:ident)?),*]").match("[a,,b]")

    pattern = parse_pattern("$($x:tt),* $($rest:tts)?")
    bindings = pattern.match("a ,+ b")
    assert bindings.unstructure() == {
        "x": [Ident("a")],
        "rest": (Punct.from_str(",+"), Ident("b")),
    }
    assert pattern.substitute(bindings) == lex("a ,+ b")


# ---- Options ---- #


def test_trace_note():
    with pytest.raises(MatchError) as e:
        parse_pattern("$($x:ident),* ;").match("a, 1 ;", trace=True)
    (note,) = e.value.__notes__
    assert "Matching $($x:ident),* ;" in note
    assert "Bound `x` to `a`" in note


def test_no_trace_note():
    with pytest.raises(MatchError) as e:
        parse_pattern("$x:ident").match("1")
    assert not hasattr(e.value, "__notes__")


def test_unknown_option():
    with pytest.raises(TypeError):
        parse_pattern("$x").match("a", nope=True)
