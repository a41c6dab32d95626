from __future__ import annotations

from typing import Any, TypeVar

from ..bindings.structured import StructuredBindings
from ..cursor import Mark, TokenCursor
from ..errors import MatchError, PatternError, ZeroWidthRepetition
from ..expect import expect_end, expect_token_tree
from ..pattern.items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    ZeroOrMoreItem,
)
from ..pattern.options import MatchOptions
from ..pattern.payload import ParseBinding
from ..tokens import Group, Ident, Literal, Punct, PunctChar
from ..utils import debug_log
from .core import OneOrMoreVisitor, OptionalVisitor, PatternVisitor

P = TypeVar("P")


class MatchVisitor(PatternVisitor[P]):
    def __init__(
        self,
        cursor: TokenCursor,
        options: MatchOptions,
        *,
        depth: int = 0,
        end_message: str = "expected end of input",
    ):
        self.cursor = cursor
        self.options = options
        self.depth = depth
        self.end_message = end_message
        self.bindings: StructuredBindings[Any] = StructuredBindings()

    def visit_parameter(self, parameter: Parameter[P]) -> None:
        payload = parameter.payload
        if not isinstance(payload, ParseBinding):
            raise TypeError(f"Payload of `{parameter.name}` cannot parse: {payload!r}")
        value = payload.parse_binding(self.cursor)
        debug_log(f"Bound `{parameter.name}` to `{value}`", self.depth)
        self.bindings.add_value_binding(parameter.name, value)

    def visit_index(self, index: IndexReference, current: int | None) -> None:
        token = self.cursor.peek()
        if not isinstance(token, Literal) or not token.raw.isdigit():
            raise MatchError(f"expected index `{index.name}`", self.cursor.span())
        if current is not None and int(token.raw) != current:
            raise MatchError(f"expected `{current}`", self.cursor.span())
        self.cursor.next()
        if current is None:
            self.bindings.add_index_len(index.name, int(token.raw))

    def visit_ident(self, ident: Ident) -> None:
        expect_token_tree(self.cursor, ident)

    def visit_literal(self, literal: Literal) -> None:
        expect_token_tree(self.cursor, literal)

    def visit_punct(self, punct: Punct) -> None:
        expect_token_tree(self.cursor, punct)

    def visit_end(self) -> None:
        expect_end(self.cursor, self.end_message)

    def pre_visit_group(self, group: GroupItem[P]) -> MatchVisitor[P]:
        token = self.cursor.peek()
        if not isinstance(token, Group) or token.delimiter != group.delimiter:
            raise MatchError(f"expected `{group.delimiter.open}`", self.cursor.span())
        self.cursor.next()
        return MatchVisitor(
            TokenCursor(token.inner, token.span),
            self.options,
            depth=self.depth + 1,
            end_message="expected end of group",
        )

    def post_visit_group(self, group: GroupItem[P], visitor: MatchVisitor[P]) -> None:
        self.bindings.merge(visitor.bindings)

    def pre_visit_optional(
        self, optional: OptionalItem[P], names: frozenset[str]
    ) -> MatchOptionalVisitor[P]:
        return MatchOptionalVisitor(self.cursor.fork(), self.options, self.depth + 1)

    def post_visit_optional(
        self,
        optional: OptionalItem[P],
        names: frozenset[str],
        visitor: MatchOptionalVisitor[P],
    ) -> None:
        self.cursor.advance_to(visitor.cursor)
        self.bindings.add_optional_bindings(names, visitor.bindings)

    def pre_visit_zero_or_more(
        self, repetition: ZeroOrMoreItem[P], names: frozenset[str]
    ) -> MatchRepetitionVisitor[P]:
        return MatchRepetitionVisitor(self.cursor.fork(), self.options, self.depth + 1)

    def post_visit_zero_or_more(
        self,
        repetition: ZeroOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: MatchRepetitionVisitor[P],
    ) -> None:
        self.cursor.advance_to(visitor.cursor)
        self.bindings.add_zero_or_more_bindings(names, visitor.iterations)
        if index_len is not None:
            self.bindings.add_index_len(*index_len)

    def pre_visit_one_or_more(
        self, repetition: OneOrMoreItem[P], names: frozenset[str]
    ) -> MatchRepetitionVisitor[P]:
        return MatchRepetitionVisitor(self.cursor.fork(), self.options, self.depth + 1)

    def post_visit_one_or_more(
        self,
        repetition: OneOrMoreItem[P],
        names: frozenset[str],
        index_len: tuple[str, int] | None,
        visitor: MatchRepetitionVisitor[P],
    ) -> None:
        self.cursor.advance_to(visitor.cursor)
        self.bindings.add_one_or_more_bindings(names, visitor.iterations)
        if index_len is not None:
            self.bindings.add_index_len(*index_len)


class MatchOptionalVisitor(OptionalVisitor[P]):
    def __init__(self, cursor: TokenCursor, options: MatchOptions, depth: int):
        self.cursor = cursor
        self.options = options
        self.depth = depth
        self.bindings: StructuredBindings[Any] | None = None

    def pre_visit_once(self) -> MatchVisitor[P]:
        return MatchVisitor(self.cursor.fork(), self.options, depth=self.depth)

    def post_visit_once(
        self, visitor: MatchVisitor[P], error: PatternError | None
    ) -> None:
        if error is None:
            self.cursor.advance_to(visitor.cursor)
            self.bindings = visitor.bindings
            return
        if not isinstance(error, MatchError):
            raise error
        debug_log("Optional absent, rolled back", self.depth)


class MatchRepetitionVisitor(OneOrMoreVisitor[P]):
    """Matches iterations until one fails, then rolls back to the last success.

    A separator is a whole punctuation run equal to the separator character.
    It is taken before each iteration but only kept if the iteration after it
    matches, so a trailing separator is left in the input.
    """

    def __init__(self, cursor: TokenCursor, options: MatchOptions, depth: int):
        self.cursor = cursor
        self.options = options
        self.depth = depth
        self.iterations: list[StructuredBindings[Any]] = []
        self._mandatory = False
        self._iteration_start: Mark = cursor.mark()
        self._separator_mark: Mark | None = None

    def pre_visit_first(self) -> MatchVisitor[P]:
        self._mandatory = True
        return self.pre_visit_iteration()

    def pre_visit_iteration(self) -> MatchVisitor[P]:
        if self._separator_mark is None:
            self._iteration_start = self.cursor.mark()
        return MatchVisitor(self.cursor.fork(), self.options, depth=self.depth)

    def visit_maybe_separator(self, separator: PunctChar) -> bool:
        token = self.cursor.peek()
        if not isinstance(token, Punct) or token.text != separator.char:
            return False
        self._separator_mark = self._iteration_start = self.cursor.mark()
        self.cursor.next()
        return True

    def post_visit_iteration(
        self, visitor: MatchVisitor[P], error: PatternError | None
    ) -> bool:
        if error is not None:
            if not isinstance(error, MatchError):
                raise error
            self._rollback_separator()
            return False

        if not self._mandatory and visitor.cursor.mark() == self._iteration_start:
            if self.options["zero_width"] == "error":
                raise ZeroWidthRepetition(self.cursor.span())
            debug_log("Iteration consumed nothing, stopping", self.depth)
            self._rollback_separator()
            return False

        self._mandatory = False
        self._separator_mark = None
        self.cursor.advance_to(visitor.cursor)
        self.iterations.append(visitor.bindings)
        return True

    def _rollback_separator(self) -> None:
        if self._separator_mark is not None:
            self.cursor.reset(self._separator_mark)
            self._separator_mark = None


__all__ = ("MatchOptionalVisitor", "MatchRepetitionVisitor", "MatchVisitor")
