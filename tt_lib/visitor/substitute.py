from __future__ import annotations

from typing import Any, TypeVar

from ..bindings.structured import BindingKind, StructuredBindingView
from ..errors import PatternError, RepetitionLenMismatch
from ..pattern.items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    ZeroOrMoreItem,
    declared_indices,
)
from ..pattern.payload import TokenizeBinding
from ..tokens import Group, Ident, Literal, Punct, PunctChar, TokenTree
from .core import OneOrMoreVisitor, OptionalVisitor, PatternVisitor

P = TypeVar("P")


def check_index_len(
    bindings: StructuredBindingView[Any], index_len: tuple[str, int] | None
) -> None:
    """A repetition that declares a bound index must iterate that many times."""
    if index_len is None:
        return
    name, count = index_len
    expected = bindings.get_maybe_index_len(name)
    if expected is not None and expected != count:
        raise RepetitionLenMismatch(name, expected, count)


class SubstitutionVisitor(PatternVisitor[P]):
    def __init__(self, bindings: StructuredBindingView[Any]):
        self.bindings = bindings
        self.tokens: list[TokenTree] = []

    def visit_parameter(self, parameter: Parameter[P]) -> None:
        payload = parameter.payload
        if not isinstance(payload, TokenizeBinding):
            raise TypeError(f"Payload of `{parameter.name}` cannot render: {payload!r}")
        value = self.bindings.get_value(parameter.name)
        self.tokens += payload.tokenize_binding(value)

    def visit_index(self, index: IndexReference, current: int | None) -> None:
        if current is None:
            current = self.bindings.get_index_len(index.name)
        self.tokens.append(Literal(str(current)))

    def visit_ident(self, ident: Ident) -> None:
        self.tokens.append(ident)

    def visit_literal(self, literal: Literal) -> None:
        self.tokens.append(literal)

    def visit_punct(self, punct: Punct) -> None:
        self.tokens.append(punct)

    def pre_visit_group(self, group: GroupItem[P]) -> SubstitutionVisitor[P]:
        return SubstitutionVisitor(self.bindings)

    def post_visit_group(
        self, group: GroupItem[P], visitor: SubstitutionVisitor[P]
    ) -> None:
        self.tokens.append(Group(group.delimiter, tuple(visitor.tokens), group.span))

    def pre_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str]
    ) -> SubstitutionOptionalVisitor[P]:
        projected = self.bindings.project(names, declared_indices(optional.items))
        return SubstitutionOptionalVisitor(projected.optional_view())

    def post_visit_optional(
        self,
        optional: OptionalItem[P],
        names: frozenset[str],
        visitor: SubstitutionOptionalVisitor[P],
    ) -> None:
        self.tokens += visitor.tokens

    def pre_visit_zero_or_more(
        self, repetition: ZeroOrMoreItem[P], names: frozenset[str]
    ) -> SubstitutionRepetitionVisitor[P]:
        return SubstitutionRepetitionVisitor(
            self.bindings.project(names, declared_indices(repetition.items)),
            BindingKind.ZERO_OR_MORE,
        )

    def post_visit_zero_or_more(
        self,
        repetition: ZeroOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: SubstitutionRepetitionVisitor[P],
    ) -> None:
        check_index_len(self.bindings, index_len)
        self.tokens += visitor.tokens

    def pre_visit_one_or_more(
        self, repetition: OneOrMoreItem[P], names: frozenset[str]
    ) -> SubstitutionRepetitionVisitor[P]:
        return SubstitutionRepetitionVisitor(
            self.bindings.project(names, declared_indices(repetition.items)),
            BindingKind.ONE_OR_MORE,
        )

    def post_visit_one_or_more(
        self,
        repetition: OneOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: SubstitutionRepetitionVisitor[P],
    ) -> None:
        check_index_len(self.bindings, index_len)
        self.tokens += visitor.tokens


class SubstitutionOptionalVisitor(OptionalVisitor[P]):
    def __init__(self, bindings: StructuredBindingView[Any] | None):
        self.bindings = bindings
        self.tokens: list[TokenTree] = []

    def pre_visit_once(self) -> SubstitutionVisitor[P] | None:
        if self.bindings is None:
            return None
        return SubstitutionVisitor(self.bindings)

    def post_visit_once(
        self, visitor: SubstitutionVisitor[P], error: PatternError | None
    ) -> None:
        if error is not None:
            raise error
        self.tokens = visitor.tokens


class SubstitutionRepetitionVisitor(OneOrMoreVisitor[P]):
    """Renders one iteration per position of the bound lists."""

    def __init__(self, bindings: StructuredBindingView[Any], kind: BindingKind):
        self.bindings = bindings
        self.kind = kind
        self.length = bindings.repetition_len(kind)
        self.index = 0
        self.tokens: list[TokenTree] = []

    def pre_visit_first(self) -> SubstitutionVisitor[P] | None:
        return self.pre_visit_iteration()

    def pre_visit_iteration(self) -> SubstitutionVisitor[P] | None:
        view = self.bindings.repetition_view(self.kind, self.index)
        if view is None or self.index >= self.length:
            return None
        return SubstitutionVisitor(view)

    def post_visit_iteration(
        self, visitor: SubstitutionVisitor[P], error: PatternError | None
    ) -> bool:
        if error is not None:
            raise error
        self.tokens += visitor.tokens
        self.index += 1
        return True

    def visit_maybe_separator(self, separator: PunctChar) -> bool:
        if self.index >= self.length:
            return False
        self.tokens.append(Punct((separator,)))
        return True


__all__ = (
    "SubstitutionOptionalVisitor",
    "SubstitutionRepetitionVisitor",
    "SubstitutionVisitor",
    "check_index_len",
)
