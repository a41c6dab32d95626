from __future__ import annotations

from typing import Any, Generic, Iterable, Mapping, TypeVar, Unpack

from ..bindings.index import IndexBindings
from ..bindings.structured import StructuredBindings
from ..cursor import TokenCursor
from ..errors import PatternError, SchemaError
from ..lexer import lex
from ..tokens import TokenStream, TokenTree
from ..utils import capture_trace, debug_log
from ..visitor.collect import CollectVisitor, DummySubstitutionVisitor
from ..visitor.core import PatternVisitor, visit_items
from ..visitor.match import MatchVisitor
from ..visitor.specialize import SpecializationVisitor
from ..visitor.substitute import SubstitutionVisitor
from .items import Parameter, PatternItem, format_items, items_to_tokens
from .options import DEFAULT_SYNTAX, PartialMatchOptions, PatternSyntax, resolve_options
from .parse import parse_items
from .payload import FragmentSpec, PayloadType
from .schema import ParameterSchema

P = TypeVar("P")


class Pattern(Generic[P]):
    """A validated pattern: its items, schema and the syntax it was written in.

    Build one with `Pattern.parse` or `parse_pattern`, construction is the only
    step that can reject a pattern.
    """

    def __init__(
        self,
        items: Iterable[PatternItem[P]],
        *,
        syntax: PatternSyntax = DEFAULT_SYNTAX,
        payload_type: PayloadType[P] = FragmentSpec,
    ):
        self.items: tuple[PatternItem[P], ...] = tuple(items)
        self.syntax = syntax
        self.payload_type = payload_type
        self.schema = ParameterSchema.extract(self.items)
        self.parameters: frozenset[str] = frozenset(
            self.schema.assert_parameters_disjoint()
        )

    @classmethod
    def parse(
        cls,
        tokens: Iterable[TokenTree],
        *,
        syntax: PatternSyntax = DEFAULT_SYNTAX,
        payload_type: PayloadType[P] = FragmentSpec,
    ) -> Pattern[P]:
        items = parse_items(tokens, syntax=syntax, payload_type=payload_type)
        return cls(items, syntax=syntax, payload_type=payload_type)

    def __repr__(self) -> str:
        return f"Pattern({str(self)!r})"

    def __str__(self) -> str:
        return format_items(self.items, self.syntax)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return self.items == other.items and self.syntax == other.syntax

    def __hash__(self) -> int:
        return hash((self.items, self.syntax))

    def to_tokens(self) -> TokenStream:
        return items_to_tokens(self.items, self.syntax)

    # ---- Traversals ---- #

    def visit_pattern(self, visitor: PatternVisitor[P]) -> None:
        visit_items(self.items, IndexBindings(), visitor)
        visitor.visit_end()

    def match(
        self,
        tokens: Iterable[TokenTree] | str,
        **options: Unpack[PartialMatchOptions],
    ) -> StructuredBindings[Any]:
        resolved = resolve_options(options)
        if isinstance(tokens, str):
            tokens = lex(tokens)
        visitor: MatchVisitor[P] = MatchVisitor(TokenCursor(tuple(tokens)), resolved)

        with capture_trace(resolved["trace"]) as sink:
            debug_log(f"Matching {self}", 0)
            try:
                self.visit_pattern(visitor)
            except PatternError as e:
                if sink is not None:
                    e.add_note(f"Traceback:\n{sink.getvalue()}")
                raise
        return visitor.bindings

    def _structure(self, bindings: Mapping[str, Any]) -> StructuredBindings[Any]:
        if isinstance(bindings, StructuredBindings):
            self.schema.check(bindings)
            return bindings
        return self.schema.structure(bindings)

    def substitute(self, bindings: Mapping[str, Any]) -> TokenStream:
        """Render the pattern with `bindings` filled in.

        `bindings` is either the result of `match` or a plain mapping, which
        is shaped through the schema first (lists for repetitions, `None` for
        an absent optional).
        """
        visitor: SubstitutionVisitor[P] = SubstitutionVisitor(
            self._structure(bindings).view()
        )
        self.visit_pattern(visitor)
        return tuple(visitor.tokens)

    def specialize(self, bindings: Mapping[str, Any]) -> Pattern[P]:
        visitor: SpecializationVisitor[P] = SpecializationVisitor(
            self._structure(bindings).view(), self.syntax, self.payload_type
        )
        self.visit_pattern(visitor)
        return Pattern(visitor.items, syntax=self.syntax, payload_type=self.payload_type)

    def collect_parameters(self) -> dict[str, Parameter[P]]:
        visitor: CollectVisitor[P] = CollectVisitor()
        self.visit_pattern(visitor)
        return visitor.parameters

    def dummy_tokens(self) -> TokenStream:
        visitor: DummySubstitutionVisitor[P] = DummySubstitutionVisitor()
        self.visit_pattern(visitor)
        return tuple(visitor.tokens)

    # ---- Parameters ---- #

    def missing_parameters(self, other: Pattern[Any]) -> set[str]:
        """Parameters of `other` this pattern does not bind."""
        return set(other.parameters - self.parameters)

    def assert_parameters_superset(self, other: Pattern[Any]) -> None:
        missing = self.missing_parameters(other)
        if missing:
            name = min(missing)
            raise SchemaError(
                f"Parameter `{name}` is not bound by pattern `{self}`",
                other.schema.span_of(name),
            )


def parse_pattern(
    source: str,
    *,
    syntax: PatternSyntax = DEFAULT_SYNTAX,
    payload_type: PayloadType[Any] = FragmentSpec,
) -> Pattern[Any]:
    return Pattern.parse(lex(source), syntax=syntax, payload_type=payload_type)


__all__ = ("Pattern", "parse_pattern")
