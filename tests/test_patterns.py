from typing import Any

import pytest
from pydantic import ValidationError
from pydantic.dataclasses import dataclass

from tt_lib import Delimiter, Ident, Literal, Punct, PunctChar, dump, lex
from tt_lib.errors import PatternSyntaxError
from tt_lib.pattern import (
    FragmentKind,
    FragmentSpec,
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    Pattern,
    PatternSyntax,
    ZeroOrMoreItem,
    parse_pattern,
)

TT = FragmentSpec()
IDENT = FragmentSpec(FragmentKind.IDENT)


@dataclass
class Case:
    patterns: list[str]
    expected: Any


EXAMPLES = [
    # Plain tokens
    Case(["a b", "a  b"], (Ident("a"), Ident("b"))),
    Case(["1 -> 2"], (Literal("1"), Punct.from_str("->"), Literal("2"))),
    Case(
        ["f(a)"],
        (Ident("f"), GroupItem(Delimiter.PAREN, (Ident("a"),))),
    ),
    # Parameters
    Case(["$x"], (Parameter("x", TT),)),
    Case(["$x:tt"], (Parameter("x", TT),)),
    Case(["$x:ident", "$x : ident"], (Parameter("x", IDENT),)),
    Case(
        ["$x:literal $y:punct $z:group $w:tts"],
        (
            Parameter("x", FragmentSpec(FragmentKind.LITERAL)),
            Parameter("y", FragmentSpec(FragmentKind.PUNCT)),
            Parameter("z", FragmentSpec(FragmentKind.GROUP)),
            Parameter("w", FragmentSpec(FragmentKind.TTS)),
        ),
    ),
    # Escape inside a punctuation run
    Case(["a,$x", "a, $x"], (Ident("a"), Punct.from_str(","), Parameter("x", TT))),
    Case(["$x::y"], (Parameter("x", TT), Punct.from_str("::"), Ident("y"))),
    # Index references
    Case(["$@i"], (IndexReference("i"),)),
    # Repetitions
    Case(["$($x)?"], (OptionalItem((Parameter("x", TT),)),)),
    Case(["$($x)*"], (ZeroOrMoreItem((Parameter("x", TT),)),)),
    Case(["$($x)+"], (OneOrMoreItem((Parameter("x", TT),)),)),
    Case(
        ["$($x:ident),*"],
        (ZeroOrMoreItem((Parameter("x", IDENT),), separator=PunctChar(",")),),
    ),
    Case(
        ["$($x);+"],
        (OneOrMoreItem((Parameter("x", TT),), separator=PunctChar(";")),),
    ),
    Case(
        ["$[i]($x = $@i),*"],
        (
            ZeroOrMoreItem(
                (Parameter("x", TT), Punct.from_str("="), IndexReference("i")),
                index="i",
                separator=PunctChar(","),
            ),
        ),
    ),
    Case(
        ["$($($x)*)?"],
        (OptionalItem((ZeroOrMoreItem((Parameter("x", TT),)),)),),
    ),
]


@pytest.mark.parametrize("testcase", EXAMPLES)
def test_parse_pattern(testcase: Case):
    for pattern in testcase.patterns:
        assert parse_pattern(pattern).items == testcase.expected


@pytest.mark.parametrize(
    "source",
    [
        "$",
        "$1",
        "$@",
        "$@1",
        "$(a $x)",
        "$($x),",
        "$($x),;",
        "$[i]($x)?",
        "$[1]($x)*",
        "$[i j]($x)*",
        "$[i]",
        "$[i]{$x}*",
        "$x:",
        "$x:nope",
        "$x:1",
    ],
)
def test_syntax_error(source: str):
    with pytest.raises(PatternSyntaxError):
        parse_pattern(source)


def test_syntax_error_span():
    with pytest.raises(PatternSyntaxError) as e:
        parse_pattern("a\n  $x:nope")
    assert str(e.value).startswith("2:5: Unknown fragment kind `nope`")


@pytest.mark.parametrize(
    "source",
    [
        "a b",
        "$x",
        "$x:ident",
        "f($a, $b)",
        "$($x:ident),*",
        "$[i]($x = $@i);+",
        "$(as $alias:ident)?",
        "[$($($x)*)?]",
    ],
)
def test_str_roundtrip(source: str):
    pattern = parse_pattern(source)
    assert parse_pattern(str(pattern)) == pattern
    assert Pattern.parse(pattern.to_tokens()) == pattern


def test_pattern_equality():
    assert parse_pattern("$x, $y") == parse_pattern("$x ,$y")
    assert parse_pattern("$x") != parse_pattern("$x:ident")
    assert hash(parse_pattern("$($x),*")) == hash(parse_pattern("$( $x ),*"))
    assert repr(parse_pattern("$x:ident")) == "Pattern('$x:ident')"


# ---- Syntax configuration ---- #


def test_custom_syntax():
    syntax = PatternSyntax(escape="%", index_sigil="!")
    pattern = parse_pattern("%x, %[i](%y = %!i),*", syntax=syntax)
    assert pattern.items[0] == Parameter("x", TT)
    assert str(pattern) == "%x , %[i](%y = %!i),*"

    # `$` is plain punctuation under this syntax
    assert parse_pattern("$x", syntax=syntax).items == (
        Punct.from_str("$"),
        Ident("x"),
    )

    bindings = pattern.match("a, b = 0, c = 1")
    assert bindings.unstructure() == {
        "x": Ident("a"),
        "y": [Ident("b"), Ident("c")],
        "i": 2,
    }


@pytest.mark.parametrize(
    "kwargs",
    [
        {"escape": "ab"},
        {"escape": "x"},
        {"escape": "("},
        {"optional": " "},
        {"one_or_more": "*"},
        {"index_sigil": "$"},
    ],
)
def test_invalid_syntax(kwargs: dict[str, str]):
    with pytest.raises((ValidationError, ValueError)):
        PatternSyntax(**kwargs)


def test_parse_tokens():
    assert Pattern.parse(lex("$x:ident")) == parse_pattern("$x:ident")


def test_dump():
    (parameter,) = parse_pattern("$x").items
    assert dump(parameter) == (
        "Parameter(name='x', payload=FragmentSpec(kind=<FragmentKind.TT: 'tt'>))"
    )
    assert dump(lex("f(a)"), annotate_fields=False) == (
        "(Ident('f'), Group(<Delimiter.PAREN: 'paren'>, (Ident('a'))))"
    )
