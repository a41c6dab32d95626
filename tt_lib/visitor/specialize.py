from __future__ import annotations

from typing import Any, TypeVar

from ..bindings.structured import BindingKind, StructuredBindingView
from ..errors import PatternError
from ..pattern.items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    PatternItem,
    RepetitionItem,
    ZeroOrMoreItem,
    declared_indices,
)
from ..pattern.options import PatternSyntax
from ..pattern.parse import parse_items
from ..pattern.payload import PayloadType, TokenizeBinding
from ..tokens import Ident, Literal, Punct, PunctChar
from .core import OneOrMoreVisitor, OptionalVisitor, PatternVisitor
from .substitute import check_index_len

P = TypeVar("P")


class SpecializationVisitor(PatternVisitor[P]):
    """Builds a new pattern with the bound parts of this one filled in.

    Rendered values are parsed again as pattern items, so a value may itself
    contain parameters. Constructs with unbound names are kept as they are.
    """

    def __init__(
        self,
        bindings: StructuredBindingView[Any],
        syntax: PatternSyntax,
        payload_type: PayloadType[P],
    ):
        self.bindings = bindings
        self.syntax = syntax
        self.payload_type = payload_type
        self.items: list[PatternItem[P]] = []

    def nested(self, bindings: StructuredBindingView[Any]) -> SpecializationVisitor[P]:
        return SpecializationVisitor(bindings, self.syntax, self.payload_type)

    def visit_parameter(self, parameter: Parameter[P]) -> None:
        if parameter.name not in self.bindings:
            self.items.append(parameter)
            return
        payload = parameter.payload
        if not isinstance(payload, TokenizeBinding):
            raise TypeError(f"Payload of `{parameter.name}` cannot render: {payload!r}")
        tokens = payload.tokenize_binding(self.bindings.get_value(parameter.name))
        self.items += parse_items(
            tokens, syntax=self.syntax, payload_type=self.payload_type
        )

    def visit_index(self, index: IndexReference, current: int | None) -> None:
        if current is None:
            current = self.bindings.get_maybe_index_len(index.name)
        if current is None:
            self.items.append(index)
        else:
            self.items.append(Literal(str(current)))

    def visit_ident(self, ident: Ident) -> None:
        self.items.append(ident)

    def visit_literal(self, literal: Literal) -> None:
        self.items.append(literal)

    def visit_punct(self, punct: Punct) -> None:
        self.items.append(punct)

    def pre_visit_group(self, group: GroupItem[P]) -> SpecializationVisitor[P]:
        return self.nested(self.bindings)

    def post_visit_group(
        self, group: GroupItem[P], visitor: SpecializationVisitor[P]
    ) -> None:
        self.items.append(GroupItem(group.delimiter, tuple(visitor.items), group.span))

    def pre_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str]
    ) -> SpecializationOptionalVisitor[P]:
        projected = self.bindings.try_project(names, declared_indices(optional.items))
        if projected is None:
            return SpecializationOptionalVisitor(self, None, keep=True)
        return SpecializationOptionalVisitor(self, projected.optional_view())

    def post_visit_optional(
        self,
        optional: OptionalItem[P],
        names: frozenset[str],
        visitor: SpecializationOptionalVisitor[P],
    ) -> None:
        if visitor.keep:
            self.items.append(optional)
        else:
            self.items += visitor.items

    def pre_visit_zero_or_more(
        self, repetition: ZeroOrMoreItem[P], names: frozenset[str]
    ) -> SpecializationRepetitionVisitor[P]:
        return self._repetition_visitor(repetition, names, BindingKind.ZERO_OR_MORE)

    def post_visit_zero_or_more(
        self,
        repetition: ZeroOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: SpecializationRepetitionVisitor[P],
    ) -> None:
        self._unroll(repetition, index_len, visitor)

    def pre_visit_one_or_more(
        self, repetition: OneOrMoreItem[P], names: frozenset[str]
    ) -> SpecializationRepetitionVisitor[P]:
        return self._repetition_visitor(repetition, names, BindingKind.ONE_OR_MORE)

    def post_visit_one_or_more(
        self,
        repetition: OneOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: SpecializationRepetitionVisitor[P],
    ) -> None:
        self._unroll(repetition, index_len, visitor)

    def _repetition_visitor(
        self, repetition: RepetitionItem[P], names: frozenset[str], kind: BindingKind
    ) -> SpecializationRepetitionVisitor[P]:
        projected = self.bindings.try_project(
            names, declared_indices(repetition.items)
        )
        return SpecializationRepetitionVisitor(self, projected, kind)

    def _unroll(
        self,
        repetition: RepetitionItem[P],
        index_len: tuple[str, int] | None,
        visitor: SpecializationRepetitionVisitor[P],
    ) -> None:
        if visitor.bindings is None:
            self.items.append(repetition)
            return
        check_index_len(self.bindings, index_len)
        self.items += visitor.items


class SpecializationOptionalVisitor(OptionalVisitor[P]):
    def __init__(
        self,
        parent: SpecializationVisitor[P],
        bindings: StructuredBindingView[Any] | None,
        keep: bool = False,
    ):
        self.parent = parent
        self.bindings = bindings
        self.keep = keep
        self.items: list[PatternItem[P]] = []

    def pre_visit_once(self) -> SpecializationVisitor[P] | None:
        if self.bindings is None:
            return None
        return self.parent.nested(self.bindings)

    def post_visit_once(
        self, visitor: SpecializationVisitor[P], error: PatternError | None
    ) -> None:
        if error is not None:
            raise error
        self.items = visitor.items


class SpecializationRepetitionVisitor(OneOrMoreVisitor[P]):
    """Unrolls a repetition whose names are all bound, `bindings` is `None` otherwise."""

    def __init__(
        self,
        parent: SpecializationVisitor[P],
        bindings: StructuredBindingView[Any] | None,
        kind: BindingKind,
    ):
        self.parent = parent
        self.bindings = bindings
        self.kind = kind
        self.length = 0 if bindings is None else bindings.repetition_len(kind)
        self.index = 0
        self.items: list[PatternItem[P]] = []

    def pre_visit_first(self) -> SpecializationVisitor[P] | None:
        return self.pre_visit_iteration()

    def pre_visit_iteration(self) -> SpecializationVisitor[P] | None:
        if self.bindings is None or self.index >= self.length:
            return None
        view = self.bindings.repetition_view(self.kind, self.index)
        assert view is not None
        return self.parent.nested(view)

    def post_visit_iteration(
        self, visitor: SpecializationVisitor[P], error: PatternError | None
    ) -> bool:
        if error is not None:
            raise error
        self.items += visitor.items
        self.index += 1
        return True

    def visit_maybe_separator(self, separator: PunctChar) -> bool:
        if self.index >= self.length:
            return False
        self.items.append(Punct((separator,)))
        return True


__all__ = (
    "SpecializationOptionalVisitor",
    "SpecializationRepetitionVisitor",
    "SpecializationVisitor",
)
