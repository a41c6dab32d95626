from __future__ import annotations

from typing import TypeVar

from ..pattern.items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    ZeroOrMoreItem,
)
from ..pattern.payload import DummyTokens
from ..tokens import Group, Ident, Literal, Punct, PunctChar, TokenTree
from .core import OneOrMoreVisitor, OptionalVisitor, PatternVisitor

P = TypeVar("P")


class OnceVisitor(OneOrMoreVisitor[P], OptionalVisitor[P]):
    """Walks the contents of an optional or repetition exactly once."""

    def __init__(self, visitor: CollectVisitor[P]):
        self.visitor = visitor
        self.done = False

    def pre_visit_once(self) -> CollectVisitor[P]:
        self.done = True
        return self.visitor

    def pre_visit_first(self) -> CollectVisitor[P]:
        return self.pre_visit_once()

    def pre_visit_iteration(self) -> CollectVisitor[P] | None:
        if self.done:
            return None
        return self.pre_visit_once()

    def visit_maybe_separator(self, separator: PunctChar) -> bool:
        return False


class CollectVisitor(PatternVisitor[P]):
    """Gathers every parameter of a pattern, first occurrence wins."""

    def __init__(self, parameters: dict[str, Parameter[P]] | None = None):
        self.parameters: dict[str, Parameter[P]] = (
            {} if parameters is None else parameters
        )

    def nested(self) -> CollectVisitor[P]:
        return type(self)(self.parameters)

    def absorb(self, visitor: CollectVisitor[P]) -> None:
        pass

    def visit_parameter(self, parameter: Parameter[P]) -> None:
        self.parameters.setdefault(parameter.name, parameter)

    def pre_visit_group(self, group: GroupItem[P]) -> CollectVisitor[P]:
        return self.nested()

    def pre_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str]
    ) -> OnceVisitor[P]:
        return OnceVisitor(self.nested())

    def post_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str], visitor: OnceVisitor[P]
    ) -> None:
        self.absorb(visitor.visitor)

    def pre_visit_zero_or_more(
        self, repetition: ZeroOrMoreItem[P], names: frozenset[str]
    ) -> OnceVisitor[P]:
        return OnceVisitor(self.nested())

    def post_visit_zero_or_more(
        self,
        repetition: ZeroOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: OnceVisitor[P],
    ) -> None:
        self.absorb(visitor.visitor)

    def pre_visit_one_or_more(
        self, repetition: OneOrMoreItem[P], names: frozenset[str]
    ) -> OnceVisitor[P]:
        return OnceVisitor(self.nested())

    def post_visit_one_or_more(
        self,
        repetition: OneOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: OnceVisitor[P],
    ) -> None:
        self.absorb(visitor.visitor)


class DummySubstitutionVisitor(CollectVisitor[P]):
    """Renders a pattern with placeholder tokens for every parameter.

    Each optional and repetition is emitted once, so the output has the
    shape of the smallest non-trivial input the pattern accepts.
    """

    def __init__(self, parameters: dict[str, Parameter[P]] | None = None):
        super().__init__(parameters)
        self.tokens: list[TokenTree] = []

    def absorb(self, visitor: CollectVisitor[P]) -> None:
        assert isinstance(visitor, DummySubstitutionVisitor)
        self.tokens += visitor.tokens

    def visit_parameter(self, parameter: Parameter[P]) -> None:
        super().visit_parameter(parameter)
        payload = parameter.payload
        if not isinstance(payload, DummyTokens):
            raise TypeError(f"Payload of `{parameter.name}` has no dummy tokens")
        self.tokens += payload.dummy_tokens()

    def visit_index(self, index: IndexReference, current: int | None) -> None:
        self.tokens.append(Literal(str(current or 0)))

    def visit_ident(self, ident: Ident) -> None:
        self.tokens.append(ident)

    def visit_literal(self, literal: Literal) -> None:
        self.tokens.append(literal)

    def visit_punct(self, punct: Punct) -> None:
        self.tokens.append(punct)

    def post_visit_group(
        self, group: GroupItem[P], visitor: DummySubstitutionVisitor[P]
    ) -> None:
        self.tokens.append(Group(group.delimiter, tuple(visitor.tokens), group.span))


__all__ = ("CollectVisitor", "DummySubstitutionVisitor", "OnceVisitor")
