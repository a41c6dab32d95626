from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from ..bindings.structured import (
    BindingKind,
    IndexBinding,
    OneOrMoreBinding,
    OptionalBinding,
    StructuredBinding,
    StructuredBindings,
    ValueBinding,
    ZeroOrMoreBinding,
)
from ..errors import (
    NoParameterInRepetition,
    ParameterUsedInIncompatibleRepetitions,
    SchemaError,
    StructuredBindingTypeMismatch,
)
from ..tokens import Span
from .items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    PatternItem,
    ZeroOrMoreItem,
)

_NESTED_KINDS = (
    BindingKind.OPTIONAL,
    BindingKind.ZERO_OR_MORE,
    BindingKind.ONE_OR_MORE,
)


@dataclass
class ParameterSchema:
    """Names bound at one level of repetition nesting.

    `parameters` bind values and `indices` bind repetition counts at this
    level. Names bound inside repetitions live in the nested schemas, one per
    repetition kind, shared by all repetitions of that kind at this level.
    """

    parameters: set[str] = field(default_factory=set)
    indices: set[str] = field(default_factory=set)
    optional: ParameterSchema | None = None
    zero_or_more: ParameterSchema | None = None
    one_or_more: ParameterSchema | None = None
    spans: dict[str, Span | None] = field(
        default_factory=dict, compare=False, repr=False
    )

    @classmethod
    def extract(
        cls, items: Iterable[PatternItem], enclosing: frozenset[str] = frozenset()
    ) -> ParameterSchema:
        """Build the schema of `items`, checking every repetition binds something.

        `enclosing` holds the indices declared by the repetitions around
        `items`; references to them read a live counter and bind nothing.
        """
        schema = cls()
        for item in items:
            match item:
                case Parameter(name=name, span=span):
                    schema.parameters.add(name)
                    schema.spans.setdefault(name, span)
                case IndexReference(name=name, span=span):
                    if name not in enclosing:
                        schema.indices.add(name)
                        schema.spans.setdefault(name, span)
                case GroupItem(items=inner):
                    schema.merge(cls.extract(inner, enclosing))
                case OptionalItem(items=inner, span=span):
                    nested = cls._extract_repetition(inner, enclosing, "optional", span)
                    schema.optional = _merge_nested(schema.optional, nested)
                case ZeroOrMoreItem(items=inner, index=index, span=span):
                    nested = cls._extract_repetition(
                        inner, schema._declare(index, span, enclosing), "zero-or-more", span
                    )
                    schema.zero_or_more = _merge_nested(schema.zero_or_more, nested)
                case OneOrMoreItem(items=inner, index=index, span=span):
                    nested = cls._extract_repetition(
                        inner, schema._declare(index, span, enclosing), "one-or-more", span
                    )
                    schema.one_or_more = _merge_nested(schema.one_or_more, nested)
        return schema

    @classmethod
    def _extract_repetition(
        cls,
        items: Iterable[PatternItem],
        enclosing: frozenset[str],
        repetition: str,
        span: Span | None,
    ) -> ParameterSchema:
        nested = cls.extract(items, enclosing)
        if nested.is_empty():
            raise NoParameterInRepetition(repetition, span)
        return nested

    def _declare(
        self, index: str | None, span: Span | None, enclosing: frozenset[str]
    ) -> frozenset[str]:
        if index is None:
            return enclosing
        self.indices.add(index)
        self.spans.setdefault(index, span)
        return enclosing | {index}

    # ---- Structure ---- #

    def nested(self) -> Iterator[tuple[BindingKind, ParameterSchema]]:
        for kind in _NESTED_KINDS:
            schema = self.get_nested(kind)
            if schema is not None:
                yield kind, schema

    def get_nested(self, kind: BindingKind) -> ParameterSchema | None:
        match kind:
            case BindingKind.OPTIONAL:
                return self.optional
            case BindingKind.ZERO_OR_MORE:
                return self.zero_or_more
            case BindingKind.ONE_OR_MORE:
                return self.one_or_more
        raise ValueError(f"{kind} is not a repetition kind")

    def merge(self, other: ParameterSchema) -> ParameterSchema:
        self.parameters |= other.parameters
        self.indices |= other.indices
        for name, span in other.spans.items():
            self.spans.setdefault(name, span)
        self.optional = _merge_nested(self.optional, other.optional)
        self.zero_or_more = _merge_nested(self.zero_or_more, other.zero_or_more)
        self.one_or_more = _merge_nested(self.one_or_more, other.one_or_more)
        return self

    def is_empty(self) -> bool:
        return (
            not self.parameters
            and not self.indices
            and all(nested.is_empty() for _, nested in self.nested())
        )

    def span_of(self, name: str) -> Span | None:
        if name in self.spans:
            return self.spans[name]
        for _, nested in self.nested():
            span = nested.span_of(name)
            if span is not None:
                return span
        return None

    def names(self) -> set[str]:
        names = self.parameters | self.indices
        for _, nested in self.nested():
            names |= nested.names()
        return names

    def assert_parameters_disjoint(self) -> set[str]:
        """Check no name is bound in two places, returning all bound names."""
        names = set(self.parameters)
        self._assert_disjoint(names, self.indices)
        names |= self.indices
        for _, nested in self.nested():
            nested_names = nested.assert_parameters_disjoint()
            self._assert_disjoint(names, nested_names, nested)
            names |= nested_names
        return names

    def _assert_disjoint(
        self, names: set[str], other: set[str], where: ParameterSchema | None = None
    ) -> None:
        overlap = names & other
        if overlap:
            name = min(overlap)
            span = (where or self).span_of(name) or self.span_of(name)
            raise ParameterUsedInIncompatibleRepetitions(name, span)

    def is_superschema(self, other: ParameterSchema) -> bool:
        if not (
            self.parameters >= other.parameters and self.indices >= other.indices
        ):
            return False
        for kind, theirs in other.nested():
            mine = self.get_nested(kind)
            if mine is None or not mine.is_superschema(theirs):
                return False
        return True

    def is_subschema(self, other: ParameterSchema) -> bool:
        return other.is_superschema(self)

    def classify(self, name: str) -> tuple[BindingKind, ...] | None:
        """Binding shape of `name`, outermost first, e.g. `(zero_or_more, value)`."""
        if name in self.parameters:
            return (BindingKind.VALUE,)
        if name in self.indices:
            return (BindingKind.INDEX,)
        for kind, nested in self.nested():
            path = nested.classify(name)
            if path is not None:
                return (kind, *path)
        return None

    # ---- Bindings ---- #

    def structure(self, values: Mapping[str, Any]) -> StructuredBindings:
        """Turn plain Python values into bindings shaped like this schema.

        Lists stand for repetitions, `None` for an absent optional and ints
        for indices. Values that already are bindings are checked and kept.
        """
        bindings = StructuredBindings()
        for name, value in values.items():
            path = self.classify(name)
            if path is None:
                raise SchemaError(f"Unknown parameter `{name}`")
            bindings.add_binding(name, _structure(name, value, path))
        return bindings

    def check(self, bindings: Mapping[str, StructuredBinding]) -> None:
        for name, binding in bindings.items():
            path = self.classify(name)
            if path is not None:
                _check(name, binding, path)


def _merge_nested(
    schema: ParameterSchema | None, other: ParameterSchema | None
) -> ParameterSchema | None:
    if other is None:
        return schema
    if schema is None:
        return ParameterSchema().merge(other)
    return schema.merge(other)


_BINDING_TYPES = (
    ValueBinding,
    IndexBinding,
    OptionalBinding,
    ZeroOrMoreBinding,
    OneOrMoreBinding,
)


def _check(name: str, binding: StructuredBinding, path: tuple[BindingKind, ...]):
    kind, *rest = path
    if binding.kind != kind:
        raise StructuredBindingTypeMismatch(name, kind, binding.kind)
    match binding:
        case OptionalBinding(binding=inner) if inner is not None:
            _check(name, inner, tuple(rest))
        case ZeroOrMoreBinding(bindings=inner) | OneOrMoreBinding(bindings=inner):
            for b in inner:
                _check(name, b, tuple(rest))


def _structure(name: str, value: Any, path: tuple[BindingKind, ...]) -> StructuredBinding:
    if isinstance(value, _BINDING_TYPES):
        _check(name, value, path)
        return value

    kind, *rest = path
    match kind:
        case BindingKind.VALUE:
            return ValueBinding(value)
        case BindingKind.INDEX:
            if not isinstance(value, int) or isinstance(value, bool):
                raise StructuredBindingTypeMismatch(name, kind, type(value).__name__)
            return IndexBinding(value)
        case BindingKind.OPTIONAL:
            if value is None:
                return OptionalBinding(None)
            return OptionalBinding(_structure(name, value, tuple(rest)))

    if not isinstance(value, (list, tuple)):
        raise StructuredBindingTypeMismatch(name, kind, type(value).__name__)
    inner = tuple(_structure(name, v, tuple(rest)) for v in value)
    if kind == BindingKind.ZERO_OR_MORE:
        return ZeroOrMoreBinding(inner)
    return OneOrMoreBinding(inner)


__all__ = ("ParameterSchema",)
