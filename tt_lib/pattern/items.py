from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, TypeAlias, TypeVar, Union

from ..tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    PunctChar,
    Span,
    TokenTree,
)
from .options import PatternSyntax

P = TypeVar("P")


@dataclass(frozen=True)
class Parameter(Generic[P]):
    name: str
    payload: P
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IndexReference:
    """`$@name`: the ordinal of the enclosing repetition that declares `name`.

    Outside any such repetition it stands for the `Index` binding of `name`.
    """

    name: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class GroupItem(Generic[P]):
    delimiter: Delimiter
    items: tuple[PatternItem[P], ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class OptionalItem(Generic[P]):
    items: tuple[PatternItem[P], ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ZeroOrMoreItem(Generic[P]):
    items: tuple[PatternItem[P], ...]
    index: str | None = None
    separator: PunctChar | None = None
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class OneOrMoreItem(Generic[P]):
    items: tuple[PatternItem[P], ...]
    index: str | None = None
    separator: PunctChar | None = None
    span: Span | None = field(default=None, compare=False, repr=False)


RepetitionItem: TypeAlias = Union[ZeroOrMoreItem[P], OneOrMoreItem[P]]
PatternItem: TypeAlias = Union[
    Ident,
    Literal,
    Punct,
    Parameter[P],
    IndexReference,
    GroupItem[P],
    OptionalItem[P],
    ZeroOrMoreItem[P],
    OneOrMoreItem[P],
]


def referenced_names(
    items: Iterable[PatternItem[P]], enclosing: frozenset[str] = frozenset()
) -> frozenset[str]:
    """Names that matching `items` binds.

    These are parameters, indices declared by repetitions and index references
    that no repetition in `enclosing` declares.
    """
    names: set[str] = set()
    for item in items:
        match item:
            case Parameter(name=name):
                names.add(name)
            case IndexReference(name=name):
                if name not in enclosing:
                    names.add(name)
            case GroupItem(items=inner) | OptionalItem(items=inner):
                names |= referenced_names(inner, enclosing)
            case ZeroOrMoreItem(index=index, items=inner) | OneOrMoreItem(
                index=index, items=inner
            ):
                if index is None:
                    names |= referenced_names(inner, enclosing)
                else:
                    names |= referenced_names(inner, enclosing | {index})
                    names.add(index)
    return frozenset(names)


def declared_indices(items: Iterable[PatternItem[P]]) -> frozenset[str]:
    """Indices declared by the repetitions nested anywhere in `items`."""
    names: set[str] = set()
    for item in items:
        match item:
            case GroupItem(items=inner) | OptionalItem(items=inner):
                names |= declared_indices(inner)
            case ZeroOrMoreItem(index=index, items=inner) | OneOrMoreItem(
                index=index, items=inner
            ):
                names |= declared_indices(inner)
                if index is not None:
                    names.add(index)
    return frozenset(names)


# ---- Rendering ---- #


def _operator(item: RepetitionItem, syntax: PatternSyntax) -> str:
    op = (
        syntax.zero_or_more
        if isinstance(item, ZeroOrMoreItem)
        else syntax.one_or_more
    )
    if item.separator is None:
        return op
    return item.separator.char + op


def items_to_tokens(
    items: Iterable[PatternItem], syntax: PatternSyntax
) -> tuple[TokenTree, ...]:
    """Render pattern items back into the token trees they were parsed from."""
    tokens: list[TokenTree] = []
    for item in items:
        match item:
            case Parameter(name=name, payload=payload):
                tokens += [Punct.from_str(syntax.escape), Ident(name)]
                tokens += payload.to_tokens()
            case IndexReference(name=name):
                tokens += [Punct.from_str(syntax.escape + syntax.index_sigil), Ident(name)]
            case GroupItem(delimiter=delimiter, items=inner):
                tokens.append(Group(delimiter, items_to_tokens(inner, syntax)))
            case OptionalItem(items=inner):
                tokens += [
                    Punct.from_str(syntax.escape),
                    Group(Delimiter.PAREN, items_to_tokens(inner, syntax)),
                    Punct.from_str(syntax.optional),
                ]
            case ZeroOrMoreItem(index=index, items=inner) | OneOrMoreItem(
                index=index, items=inner
            ):
                tokens.append(Punct.from_str(syntax.escape))
                if index is not None:
                    tokens.append(Group(Delimiter.BRACKET, (Ident(index),)))
                tokens += [
                    Group(Delimiter.PAREN, items_to_tokens(inner, syntax)),
                    Punct.from_str(_operator(item, syntax)),
                ]
            case _:
                tokens.append(item)
    return tuple(tokens)


def format_items(items: Iterable[PatternItem], syntax: PatternSyntax) -> str:
    parts = []
    for item in items:
        match item:
            case Parameter(name=name, payload=payload):
                descriptor = "".join(str(t) for t in payload.to_tokens())
                parts.append(f"{syntax.escape}{name}{descriptor}")
            case IndexReference(name=name):
                parts.append(f"{syntax.escape}{syntax.index_sigil}{name}")
            case GroupItem(delimiter=delimiter, items=inner):
                parts.append(
                    f"{delimiter.open}{format_items(inner, syntax)}{delimiter.close}"
                )
            case OptionalItem(items=inner):
                parts.append(
                    f"{syntax.escape}({format_items(inner, syntax)}){syntax.optional}"
                )
            case ZeroOrMoreItem(index=index, items=inner) | OneOrMoreItem(
                index=index, items=inner
            ):
                declared = "" if index is None else f"[{index}]"
                parts.append(
                    f"{syntax.escape}{declared}({format_items(inner, syntax)})"
                    f"{_operator(item, syntax)}"
                )
            case _:
                parts.append(str(item))
    return " ".join(parts)


__all__ = (
    "GroupItem",
    "IndexReference",
    "OneOrMoreItem",
    "OptionalItem",
    "Parameter",
    "PatternItem",
    "RepetitionItem",
    "ZeroOrMoreItem",
    "declared_indices",
    "format_items",
    "items_to_tokens",
    "referenced_names",
)
