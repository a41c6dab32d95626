from typing import Any

import pytest
from pydantic.dataclasses import dataclass

from tt_lib import (
    Ident,
    OptionalBinding,
    Pattern,
    RepetitionLenMismatch,
    SpecializationError,
    StructuredBindings,
    StructuredBindingTypeMismatch,
)
from tt_lib.pattern import parse_pattern


@dataclass
class Case:
    pattern: str
    bindings: dict[str, Any]
    expected: str


EXAMPLES = [
    Case("$x + $y", {"x": "1"}, "1 + $y"),
    Case("$x + $y", {}, "$x + $y"),
    Case("$f($($x:ident),*)", {"f": "g"}, "g($($x:ident),*)"),
    Case("$f($($x:ident),*)", {"x": ["a", "b"]}, "$f(a, b)"),
    Case("$($x $y),*", {"x": ["a", "b"]}, "$($x $y),*"),
    Case("$($x $y),*", {"x": ["a", "b"], "y": [1, 2]}, "a 1, b 2"),
    Case("$($x)+", {"x": ["a"]}, "a"),
    Case("import $m $(as $a)?", {"a": None}, "import $m"),
    Case("import $m $(as $a)?", {"a": "np"}, "import $m as np"),
    Case("$(- $a $b)?", {"a": "x"}, "$(- $a $b)?"),
    Case("$[i]($x = $@i),*", {"x": ["a", "b"]}, "a = 0, b = 1"),
    Case("$[i]($x),* ; $@i", {"i": 2}, "$[i]($x),* ; 2"),
    Case("$[i]($x),* ; $@i", {}, "$[i]($x),* ; $@i"),
    Case("$($f($($a),*));*", {"f": ["f", "g"]}, "$($f($($a),*));*"),
    Case(
        "$($f($($a),*));*",
        {"f": ["f", "g"], "a": [["a"], []]},
        "f(a); g()",
    ),
    Case("$($[j]($y $@j)*),*", {"y": [["a", "b"]]}, "a 0 b 1"),
    # Values are parsed as pattern source
    Case("[$x:tts]", {"x": "$a, $b"}, "[$a, $b]"),
]


@pytest.mark.parametrize("testcase", EXAMPLES)
def test_specialize(testcase: Case):
    pattern = parse_pattern(testcase.pattern)
    assert pattern.specialize(testcase.bindings) == parse_pattern(testcase.expected)


@pytest.mark.parametrize(
    "pattern, bindings",
    [
        ("$x + $y", {"x": "a", "y": "b"}),
        ("f($($x:ident),*)", {"x": ["a", "b", "c"]}),
        ("$($k = $v);*", {"k": ["a"], "v": [1]}),
        ("$[i]($x = $@i),* ; $@i", {"x": ["p", "q"], "i": 2}),
        ("import $m $(as $a)?", {"m": "os", "a": None}),
    ],
)
def test_full_specialization_is_substitution(pattern: str, bindings: dict[str, Any]):
    pattern = parse_pattern(pattern)
    specialized = pattern.specialize(bindings)
    assert specialized == Pattern.parse(pattern.substitute(bindings))
    assert specialized.parameters == frozenset()


def test_specialized_pattern_matches():
    pattern = parse_pattern("$f:ident($($x:ident),*)").specialize({"f": "print"})
    assert pattern.parameters == {"x"}
    assert pattern.match("print(a, b)").unstructure() == {"x": [Ident("a"), Ident("b")]}


def test_specialize_errors():
    pattern = parse_pattern("$[i]($x)* ; $@i")
    with pytest.raises(RepetitionLenMismatch):
        pattern.specialize({"x": ["a"], "i": 2})
    assert issubclass(RepetitionLenMismatch, SpecializationError)


def test_specialize_checks_binding_shapes():
    # `$y` is unbound so the repetition is kept, the shape of `x` is still checked
    pattern = parse_pattern("$($x $y),*")
    with pytest.raises(StructuredBindingTypeMismatch) as e:
        pattern.specialize(StructuredBindings({"x": OptionalBinding(None)}))
    assert e.value.parameter == "x"
