import pytest

from tt_lib import (
    Ident,
    IndexBinding,
    OneOrMoreBinding,
    OptionalBinding,
    ParameterBindingMismatch,
    ParameterBindingNotFound,
    RepetitionLenMismatch,
    StructuredBindings,
    StructuredBindingTypeMismatch,
    ValueBinding,
    ZeroOrMoreBinding,
)
from tt_lib.bindings import BindingKind, IndexBindings, unstructure


def values(*items) -> tuple[ValueBinding, ...]:
    return tuple(ValueBinding(item) for item in items)


def test_add_binding():
    bindings = StructuredBindings()
    bindings.add_value_binding("x", 1)
    bindings.add_value_binding("x", 1)
    bindings.add_index_len("i", 2)

    assert dict(bindings) == {"x": ValueBinding(1), "i": IndexBinding(2)}

    with pytest.raises(ParameterBindingMismatch) as e:
        bindings.add_value_binding("x", 2)
    assert str(e.value) == "Cannot bind parameter `x` to value `2`: already has value `1`"


def test_add_repetition_bindings():
    first, second = StructuredBindings(), StructuredBindings()
    first.add_value_binding("x", "a")
    second.add_value_binding("x", "b")

    bindings = StructuredBindings()
    bindings.add_zero_or_more_bindings({"x"}, [first, second])
    assert bindings["x"] == ZeroOrMoreBinding(values("a", "b"))
    # Iteration bindings are moved out
    assert len(first) == len(second) == 0


def test_add_optional_bindings():
    inner = StructuredBindings({"x": ValueBinding("a")})
    bindings = StructuredBindings()
    bindings.add_optional_bindings({"x"}, inner)
    bindings.add_optional_bindings({"y"}, None)

    assert bindings["x"] == OptionalBinding(ValueBinding("a"))
    assert bindings["y"] == OptionalBinding(None)

    with pytest.raises(ParameterBindingNotFound):
        bindings.add_optional_bindings({"z"}, StructuredBindings())


def test_merge():
    bindings = StructuredBindings({"x": ValueBinding(1)})
    bindings.merge({"y": ValueBinding(2), "x": ValueBinding(1)})
    assert set(bindings) == {"x", "y"}

    with pytest.raises(ParameterBindingMismatch):
        bindings.merge({"y": ValueBinding(3)})


def test_str_and_unstructure():
    bindings = StructuredBindings(
        {
            "a": ValueBinding(Ident("a")),
            "b": OptionalBinding(None),
            "c": OptionalBinding(ValueBinding(1)),
            "d": OneOrMoreBinding((ZeroOrMoreBinding(values(1, 2)), ZeroOrMoreBinding(()))),
            "i": IndexBinding(3),
        }
    )
    assert str(bindings) == "{a: a, b: None, c: Some (1), d: [[1, 2], []], i: 3}"
    assert bindings.unstructure() == {
        "a": Ident("a"),
        "b": None,
        "c": 1,
        "d": [[1, 2], []],
        "i": 3,
    }
    assert unstructure(OptionalBinding(OptionalBinding(None))) is None


def test_map():
    bindings = StructuredBindings(
        {
            "x": ZeroOrMoreBinding(values(1, 2)),
            "y": OptionalBinding(ValueBinding(3)),
            "i": IndexBinding(2),
        }
    )
    mapped = bindings.map(lambda v: v * 10)
    assert mapped.unstructure() == {"x": [10, 20], "y": 30, "i": 2}


# ---- Views ---- #


def test_view_lookups():
    view = StructuredBindings(
        {"x": ValueBinding("a"), "i": IndexBinding(2), "r": ZeroOrMoreBinding(())}
    ).view()

    assert view.get_value("x") == "a"
    assert view.get_maybe_value("nope") is None
    assert view.get_index_len("i") == 2
    assert view.get_maybe_index_len("nope") is None

    with pytest.raises(ParameterBindingNotFound) as e:
        view.get_value("nope")
    assert e.value.parameter == "nope"

    with pytest.raises(StructuredBindingTypeMismatch) as e:
        view.get_index_len("r")
    assert str(e.value) == (
        "Expected parameter `r` to have binding of type `index`: "
        "found binding of type `zero_or_more`"
    )


def test_projection():
    view = StructuredBindings({"x": ValueBinding(1), "y": ValueBinding(2)}).view()

    assert dict(view.project(["x"])) == {"x": ValueBinding(1)}
    assert dict(view.project(["x", "j"], frozenset({"j"}))) == {"x": ValueBinding(1)}
    assert view.try_project(["x", "z"]) is None

    with pytest.raises(ParameterBindingNotFound):
        view.project(["z"])


def test_optional_view():
    some = StructuredBindings(
        {"x": OptionalBinding(ValueBinding(1)), "y": OptionalBinding(ValueBinding(2))}
    ).view()
    assert dict(some.optional_view()) == {"x": ValueBinding(1), "y": ValueBinding(2)}

    partial = StructuredBindings(
        {"x": OptionalBinding(ValueBinding(1)), "y": OptionalBinding(None)}
    ).view()
    assert partial.optional_view() is None


def test_repetition_view():
    view = StructuredBindings(
        {"x": ZeroOrMoreBinding(values(1, 2)), "y": ZeroOrMoreBinding(values(3, 4))}
    ).view()

    assert view.repetition_len(BindingKind.ZERO_OR_MORE) == 2
    assert dict(view.zero_or_more_view(1)) == {"x": ValueBinding(2), "y": ValueBinding(4)}
    assert view.zero_or_more_view(2) is None

    with pytest.raises(StructuredBindingTypeMismatch):
        view.one_or_more_view(0)


def test_repetition_len_mismatch():
    view = StructuredBindings(
        {"x": ZeroOrMoreBinding(values(1, 2)), "y": ZeroOrMoreBinding(values(3))}
    ).view()
    with pytest.raises(RepetitionLenMismatch) as e:
        view.repetition_len(BindingKind.ZERO_OR_MORE)
    assert e.value.parameter == "y"

    empty = StructuredBindings({"x": OneOrMoreBinding(())}).view()
    with pytest.raises(RepetitionLenMismatch):
        empty.repetition_len(BindingKind.ONE_OR_MORE)


# ---- Index scopes ---- #


def test_index_scopes():
    indices = IndexBindings()
    assert indices.get_maybe_index("i") is None

    with indices.scope("i") as outer:
        outer.increment()
        with indices.scope("j") as inner:
            assert indices.active() == {"i", "j"}
            assert indices.get_index("i") == 1
            inner.increment()
            inner.increment()
            assert indices.get_index("j") == 2
        # Shadowing reads the innermost scope
        with indices.scope("i"):
            assert indices.get_index("i") == 0
        assert indices.get_index("i") == 1

    assert indices.active() == frozenset()
    with pytest.raises(ParameterBindingNotFound):
        indices.get_index("i")
