from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    Iterator,
    Mapping,
    Sequence,
    TypeAlias,
    TypeVar,
    Union,
)

from ..errors import (
    ParameterBindingMismatch,
    ParameterBindingNotFound,
    RepetitionLenMismatch,
    StructuredBindingTypeMismatch,
)
from ..tokens import unparse

V = TypeVar("V")
W = TypeVar("W")


class BindingKind(StrEnum):
    VALUE = "value"
    INDEX = "index"
    OPTIONAL = "optional"
    ZERO_OR_MORE = "zero_or_more"
    ONE_OR_MORE = "one_or_more"


def _format_value(value: Any) -> str:
    if isinstance(value, tuple):
        return unparse(value)
    return str(value)


# ---------------------------------------------------------------------------- #
#                                   Bindings                                   #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ValueBinding(Generic[V]):
    value: V
    kind: ClassVar[BindingKind] = BindingKind.VALUE

    def __str__(self) -> str:
        return _format_value(self.value)

    def map(self, f: Callable[[V], W]) -> ValueBinding[W]:
        return ValueBinding(f(self.value))


@dataclass(frozen=True)
class IndexBinding:
    count: int
    kind: ClassVar[BindingKind] = BindingKind.INDEX

    def __str__(self) -> str:
        return str(self.count)

    def map(self, f: Callable[[Any], Any]) -> IndexBinding:
        return self


@dataclass(frozen=True)
class OptionalBinding(Generic[V]):
    binding: StructuredBinding[V] | None
    kind: ClassVar[BindingKind] = BindingKind.OPTIONAL

    def __str__(self) -> str:
        if self.binding is None:
            return "None"
        return f"Some ({self.binding})"

    def map(self, f: Callable[[V], W]) -> OptionalBinding[W]:
        if self.binding is None:
            return OptionalBinding(None)
        return OptionalBinding(self.binding.map(f))


@dataclass(frozen=True)
class ZeroOrMoreBinding(Generic[V]):
    bindings: tuple[StructuredBinding[V], ...]
    kind: ClassVar[BindingKind] = BindingKind.ZERO_OR_MORE

    def __str__(self) -> str:
        return f"[{', '.join(str(b) for b in self.bindings)}]"

    def map(self, f: Callable[[V], W]) -> ZeroOrMoreBinding[W]:
        return ZeroOrMoreBinding(tuple(b.map(f) for b in self.bindings))


@dataclass(frozen=True)
class OneOrMoreBinding(Generic[V]):
    bindings: tuple[StructuredBinding[V], ...]
    kind: ClassVar[BindingKind] = BindingKind.ONE_OR_MORE

    def __str__(self) -> str:
        return f"[{', '.join(str(b) for b in self.bindings)}]"

    def map(self, f: Callable[[V], W]) -> OneOrMoreBinding[W]:
        return OneOrMoreBinding(tuple(b.map(f) for b in self.bindings))


StructuredBinding: TypeAlias = Union[
    ValueBinding[V],
    IndexBinding,
    OptionalBinding[V],
    ZeroOrMoreBinding[V],
    OneOrMoreBinding[V],
]

RepetitionBinding: TypeAlias = Union[ZeroOrMoreBinding[V], OneOrMoreBinding[V]]


def unstructure(binding: StructuredBinding[V]) -> Any:
    """Plain Python form of a binding: values, ints, `None` and lists."""
    match binding:
        case ValueBinding(value=value):
            return value
        case IndexBinding(count=count):
            return count
        case OptionalBinding(binding=None):
            return None
        case OptionalBinding(binding=inner):
            return unstructure(inner)
        case ZeroOrMoreBinding(bindings=bindings) | OneOrMoreBinding(
            bindings=bindings
        ):
            return [unstructure(b) for b in bindings]


# ---------------------------------------------------------------------------- #
#                                 Binding maps                                 #
# ---------------------------------------------------------------------------- #


class StructuredBindings(Mapping[str, StructuredBinding[V]]):
    """Owning map from parameter name to its binding, built up while matching."""

    def __init__(self, bindings: Mapping[str, StructuredBinding[V]] | None = None):
        self._bindings: dict[str, StructuredBinding[V]] = dict(bindings or {})

    def __getitem__(self, name: str) -> StructuredBinding[V]:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"StructuredBindings({self._bindings!r})"

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self._bindings.items()) + "}"

    def add_binding(self, name: str, binding: StructuredBinding[V]) -> None:
        existing = self._bindings.get(name)
        if existing is None:
            self._bindings[name] = binding
        elif existing != binding:
            raise ParameterBindingMismatch(name, binding, existing)

    def add_value_binding(self, name: str, value: V) -> None:
        self.add_binding(name, ValueBinding(value))

    def add_index_len(self, name: str, count: int) -> None:
        self.add_binding(name, IndexBinding(count))

    def pop(self, name: str) -> StructuredBinding[V]:
        try:
            return self._bindings.pop(name)
        except KeyError:
            raise ParameterBindingNotFound(name) from None

    def add_optional_bindings(
        self, names: Iterable[str], bindings: StructuredBindings[V] | None
    ) -> None:
        for name in sorted(names):
            inner = None if bindings is None else bindings.pop(name)
            self.add_binding(name, OptionalBinding(inner))

    def add_zero_or_more_bindings(
        self, names: Iterable[str], iterations: Sequence[StructuredBindings[V]]
    ) -> None:
        for name in sorted(names):
            self.add_binding(
                name, ZeroOrMoreBinding(tuple(it.pop(name) for it in iterations))
            )

    def add_one_or_more_bindings(
        self, names: Iterable[str], iterations: Sequence[StructuredBindings[V]]
    ) -> None:
        assert iterations, "one-or-more repetition matched nothing"
        for name in sorted(names):
            self.add_binding(
                name, OneOrMoreBinding(tuple(it.pop(name) for it in iterations))
            )

    def merge(self, other: Mapping[str, StructuredBinding[V]]) -> None:
        for name, binding in other.items():
            self.add_binding(name, binding)

    def map(self, f: Callable[[V], W]) -> StructuredBindings[W]:
        return StructuredBindings({k: b.map(f) for k, b in self._bindings.items()})

    def unstructure(self) -> dict[str, Any]:
        return {k: unstructure(b) for k, b in self._bindings.items()}

    def view(self) -> StructuredBindingView[V]:
        return StructuredBindingView(self._bindings)


class StructuredBindingView(Mapping[str, StructuredBinding[V]]):
    """Read-only window over some bindings.

    Descending into an optional or a repetition iteration gives a new view
    whose bindings are the inner ones of that branch or iteration.
    """

    def __init__(self, bindings: Mapping[str, StructuredBinding[V]]):
        self._bindings = bindings

    def __getitem__(self, name: str) -> StructuredBinding[V]:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"StructuredBindingView({dict(self._bindings)!r})"

    def _get(self, name: str, kind: BindingKind) -> Any:
        try:
            binding = self._bindings[name]
        except KeyError:
            raise ParameterBindingNotFound(name) from None
        if binding.kind != kind:
            raise StructuredBindingTypeMismatch(name, kind, binding.kind)
        return binding

    def get_value(self, name: str) -> V:
        return self._get(name, BindingKind.VALUE).value

    def get_maybe_value(self, name: str) -> V | None:
        if name not in self._bindings:
            return None
        return self.get_value(name)

    def get_index_len(self, name: str) -> int:
        return self._get(name, BindingKind.INDEX).count

    def get_maybe_index_len(self, name: str) -> int | None:
        if name not in self._bindings:
            return None
        return self.get_index_len(name)

    def project(
        self, names: Iterable[str], optional: frozenset[str] = frozenset()
    ) -> StructuredBindingView[V]:
        """Restrict the view to `names`, which must all be bound unless `optional`."""
        projected = {}
        for name in names:
            if name in self._bindings:
                projected[name] = self._bindings[name]
            elif name not in optional:
                raise ParameterBindingNotFound(name)
        return StructuredBindingView(projected)

    def try_project(
        self, names: Iterable[str], optional: frozenset[str] = frozenset()
    ) -> StructuredBindingView[V] | None:
        names = list(names)
        if not all(name in self._bindings or name in optional for name in names):
            return None
        return self.project(names, optional)

    def optional_view(self) -> StructuredBindingView[V] | None:
        """Inner bindings of an optional, `None` if it did not match."""
        inner = {}
        absent = False
        for name in self._bindings:
            binding: OptionalBinding = self._get(name, BindingKind.OPTIONAL)
            if binding.binding is None:
                absent = True
            else:
                inner[name] = binding.binding
        if absent:
            return None
        return StructuredBindingView(inner)

    def repetition_len(self, kind: BindingKind) -> int:
        """Common length of the repetition lists in this view."""
        lengths = {
            name: len(self._get(name, kind).bindings) for name in sorted(self._bindings)
        }
        if not lengths:
            return 0
        first, expected = next(iter(lengths.items()))
        for name, length in lengths.items():
            if length != expected:
                raise RepetitionLenMismatch(name, expected, length, what="repetition")
        if kind == BindingKind.ONE_OR_MORE and expected == 0:
            raise RepetitionLenMismatch(first, "at least 1", 0, what="repetition")
        return expected

    def repetition_view(
        self, kind: BindingKind, index: int
    ) -> StructuredBindingView[V] | None:
        inner = {}
        for name in self._bindings:
            binding: RepetitionBinding = self._get(name, kind)
            if index >= len(binding.bindings):
                return None
            inner[name] = binding.bindings[index]
        return StructuredBindingView(inner)

    def zero_or_more_view(self, index: int) -> StructuredBindingView[V] | None:
        return self.repetition_view(BindingKind.ZERO_OR_MORE, index)

    def one_or_more_view(self, index: int) -> StructuredBindingView[V] | None:
        return self.repetition_view(BindingKind.ONE_OR_MORE, index)


__all__ = (
    "BindingKind",
    "IndexBinding",
    "OneOrMoreBinding",
    "OptionalBinding",
    "StructuredBinding",
    "StructuredBindingView",
    "StructuredBindings",
    "ValueBinding",
    "ZeroOrMoreBinding",
    "unstructure",
)
