""""""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import ContextManager, Generic, Iterable, TypeVar

from ..bindings.index import IndexBindings, IndexBindingScope
from ..errors import PatternError
from ..pattern.items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    PatternItem,
    ZeroOrMoreItem,
    referenced_names,
)
from ..tokens import Ident, Literal, Punct, PunctChar
from ..utils import debug_log

P = TypeVar("P")


# ---------------------------------------------------------------------------- #
#                                   Visitors                                   #
# ---------------------------------------------------------------------------- #


class PatternVisitor(ABC, Generic[P]):
    def visit_parameter(self, parameter: Parameter[P]) -> None:
        pass

    def visit_index(self, index: IndexReference, current: int | None) -> None:
        """`current` is the live count if a repetition around declares the index."""
        pass

    def visit_ident(self, ident: Ident) -> None:
        pass

    def visit_literal(self, literal: Literal) -> None:
        pass

    def visit_punct(self, punct: Punct) -> None:
        pass

    @abstractmethod
    def pre_visit_group(self, group: GroupItem[P]) -> PatternVisitor[P]: ...

    def post_visit_group(self, group: GroupItem[P], visitor: PatternVisitor[P]) -> None:
        pass

    @abstractmethod
    def pre_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str]
    ) -> OptionalVisitor[P]: ...

    def post_visit_optional(
        self,
        optional: OptionalItem[P],
        names: frozenset[str],
        visitor: OptionalVisitor[P],
    ) -> None:
        pass

    @abstractmethod
    def pre_visit_zero_or_more(
        self, repetition: ZeroOrMoreItem[P], names: frozenset[str]
    ) -> ZeroOrMoreVisitor[P]: ...

    def post_visit_zero_or_more(
        self,
        repetition: ZeroOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: ZeroOrMoreVisitor[P],
    ) -> None:
        pass

    @abstractmethod
    def pre_visit_one_or_more(
        self, repetition: OneOrMoreItem[P], names: frozenset[str]
    ) -> OneOrMoreVisitor[P]: ...

    def post_visit_one_or_more(
        self,
        repetition: OneOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: OneOrMoreVisitor[P],
    ) -> None:
        pass

    def visit_end(self) -> None:
        pass


class OptionalVisitor(ABC, Generic[P]):
    @abstractmethod
    def pre_visit_once(self) -> PatternVisitor[P] | None:
        """Visitor for the optional's contents, `None` to skip them."""
        ...

    def post_visit_once(
        self, visitor: PatternVisitor[P], error: PatternError | None
    ) -> None:
        if error is not None:
            raise error


class ZeroOrMoreVisitor(ABC, Generic[P]):
    @abstractmethod
    def pre_visit_iteration(self) -> PatternVisitor[P] | None:
        """Visitor for the next iteration, `None` to stop repeating."""
        ...

    def post_visit_iteration(
        self, visitor: PatternVisitor[P], error: PatternError | None
    ) -> bool:
        """Whether the iteration counts. Repeating stops at the first that doesn't."""
        if error is not None:
            raise error
        return True

    @abstractmethod
    def visit_maybe_separator(self, separator: PunctChar) -> bool:
        """Whether another iteration follows the separator."""
        ...


class OneOrMoreVisitor(ZeroOrMoreVisitor[P]):
    @abstractmethod
    def pre_visit_first(self) -> PatternVisitor[P] | None:
        """Visitor for the mandatory first iteration, `None` to skip the repetition."""
        ...


# ---------------------------------------------------------------------------- #
#                                     Walk                                     #
# ---------------------------------------------------------------------------- #


def visit_items(
    items: Iterable[PatternItem[P]],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int = 0,
) -> None:
    for item in items:
        visit_item(item, index_bindings, visitor, depth)


def visit_item(
    item: PatternItem[P],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int = 0,
) -> None:
    match item:
        case Parameter():
            visitor.visit_parameter(item)
        case IndexReference(name=name):
            visitor.visit_index(item, index_bindings.get_maybe_index(name))
        case Ident():
            visitor.visit_ident(item)
        case Literal():
            visitor.visit_literal(item)
        case Punct():
            visitor.visit_punct(item)
        case GroupItem():
            _visit_group(item, index_bindings, visitor, depth)
        case OptionalItem():
            _visit_optional(item, index_bindings, visitor, depth)
        case ZeroOrMoreItem():
            _visit_zero_or_more(item, index_bindings, visitor, depth)
        case OneOrMoreItem():
            _visit_one_or_more(item, index_bindings, visitor, depth)
        case _:
            raise TypeError(f"Not a pattern item: {item!r}")


def _visit_group(
    group: GroupItem[P],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int,
) -> None:
    debug_log(f"Group {group.delimiter.open}...{group.delimiter.close}", depth)
    group_visitor = visitor.pre_visit_group(group)
    visit_items(group.items, index_bindings, group_visitor, depth + 1)
    group_visitor.visit_end()
    visitor.post_visit_group(group, group_visitor)


def _visit_optional(
    optional: OptionalItem[P],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int,
) -> None:
    names = referenced_names(optional.items, index_bindings.active())
    optional_visitor = visitor.pre_visit_optional(optional, names)

    once_visitor = optional_visitor.pre_visit_once()
    if once_visitor is not None:
        debug_log("Optional", depth)
        error = _visit_speculatively(optional.items, index_bindings, once_visitor, depth)
        optional_visitor.post_visit_once(once_visitor, error)

    visitor.post_visit_optional(optional, names, optional_visitor)


def _index_scope(
    index_bindings: IndexBindings, index: str | None
) -> ContextManager[IndexBindingScope | None]:
    if index is None:
        return nullcontext()
    return index_bindings.scope(index)


def _names(
    repetition: ZeroOrMoreItem[P] | OneOrMoreItem[P], index_bindings: IndexBindings
) -> frozenset[str]:
    enclosing = index_bindings.active()
    if repetition.index is not None:
        enclosing |= {repetition.index}
    return referenced_names(repetition.items, enclosing)


def _visit_zero_or_more(
    repetition: ZeroOrMoreItem[P],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int,
) -> None:
    names = _names(repetition, index_bindings)
    repetition_visitor = visitor.pre_visit_zero_or_more(repetition, names)

    with _index_scope(index_bindings, repetition.index) as scope:
        count = _visit_iterations(
            repetition, index_bindings, repetition_visitor, scope, 0, depth
        )

    index_len = None if repetition.index is None else (repetition.index, count)
    visitor.post_visit_zero_or_more(repetition, names, index_len, repetition_visitor)


def _visit_one_or_more(
    repetition: OneOrMoreItem[P],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int,
) -> None:
    names = _names(repetition, index_bindings)
    repetition_visitor = visitor.pre_visit_one_or_more(repetition, names)

    with _index_scope(index_bindings, repetition.index) as scope:
        count = 0
        first_visitor = repetition_visitor.pre_visit_first()
        if first_visitor is not None:
            debug_log("Iteration 0 (first)", depth)
            visit_items(repetition.items, index_bindings, first_visitor, depth + 1)
            committed = repetition_visitor.post_visit_iteration(first_visitor, None)
            assert committed, "first iteration of one-or-more must count"
            if scope is not None:
                scope.increment()
            count = _visit_iterations(
                repetition, index_bindings, repetition_visitor, scope, 1, depth
            )

    index_len = None if repetition.index is None else (repetition.index, count)
    visitor.post_visit_one_or_more(repetition, names, index_len, repetition_visitor)


def _visit_iterations(
    repetition: ZeroOrMoreItem[P] | OneOrMoreItem[P],
    index_bindings: IndexBindings,
    repetition_visitor: ZeroOrMoreVisitor[P],
    scope: IndexBindingScope | None,
    count: int,
    depth: int,
) -> int:
    while True:
        if (
            count
            and repetition.separator is not None
            and not repetition_visitor.visit_maybe_separator(repetition.separator)
        ):
            break

        iteration_visitor = repetition_visitor.pre_visit_iteration()
        if iteration_visitor is None:
            break

        debug_log(f"Iteration {count}", depth)
        error = _visit_speculatively(
            repetition.items, index_bindings, iteration_visitor, depth
        )
        if not repetition_visitor.post_visit_iteration(iteration_visitor, error):
            debug_log(f"Iteration {count} discarded", depth)
            break

        count += 1
        if scope is not None:
            scope.increment()
    return count


def _visit_speculatively(
    items: Iterable[PatternItem[P]],
    index_bindings: IndexBindings,
    visitor: PatternVisitor[P],
    depth: int,
) -> PatternError | None:
    try:
        visit_items(items, index_bindings, visitor, depth + 1)
    except PatternError as e:
        debug_log(f"Failed: {e}", depth)
        return e
    return None


__all__ = (
    "OneOrMoreVisitor",
    "OptionalVisitor",
    "PatternVisitor",
    "ZeroOrMoreVisitor",
    "visit_item",
    "visit_items",
)
