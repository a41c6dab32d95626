from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable, TypeAlias, Union


@dataclass(frozen=True)
class Span:
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Delimiter(StrEnum):
    PAREN = "paren"
    BRACE = "brace"
    BRACKET = "bracket"

    @property
    def open(self) -> str:
        return _OPEN_CHARS[self]

    @property
    def close(self) -> str:
        return _CLOSE_CHARS[self]

    @classmethod
    def from_open(cls, char: str) -> Delimiter | None:
        return _BY_OPEN.get(char)

    @classmethod
    def from_close(cls, char: str) -> Delimiter | None:
        return _BY_CLOSE.get(char)


_OPEN_CHARS = {Delimiter.PAREN: "(", Delimiter.BRACE: "{", Delimiter.BRACKET: "["}
_CLOSE_CHARS = {Delimiter.PAREN: ")", Delimiter.BRACE: "}", Delimiter.BRACKET: "]"}
_BY_OPEN = {char: delimiter for delimiter, char in _OPEN_CHARS.items()}
_BY_CLOSE = {char: delimiter for delimiter, char in _CLOSE_CHARS.items()}

DELIMITER_CHARS = frozenset(_BY_OPEN) | frozenset(_BY_CLOSE)


# ---- Token trees ---- #


@dataclass(frozen=True)
class Ident:
    name: str
    span: Span | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    """Numbers and strings, kept as their source text."""

    raw: str
    span: Span | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class PunctChar:
    char: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Punct:
    """A run of adjacent punctuation characters, e.g. `->` or `::`."""

    chars: tuple[PunctChar, ...]

    def __post_init__(self):
        if not self.chars:
            raise ValueError("empty punctuation run")

    @classmethod
    def from_str(cls, text: str, span: Span | None = None) -> Punct:
        if span is None:
            return cls(tuple(PunctChar(char) for char in text))
        return cls(
            tuple(
                PunctChar(char, Span(span.line, span.column + i))
                for i, char in enumerate(text)
            )
        )

    @property
    def text(self) -> str:
        return "".join(c.char for c in self.chars)

    @property
    def span(self) -> Span | None:
        return self.chars[0].span

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Group:
    delimiter: Delimiter
    inner: tuple[TokenTree, ...]
    span: Span | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return unparse((self,))


TokenTree: TypeAlias = Union[Ident, Literal, Punct, Group]
TokenStream: TypeAlias = tuple[TokenTree, ...]


def unparse(tokens: Iterable[TokenTree]) -> str:
    """Render token trees back to text, one space between adjacent trees."""
    parts = []
    for token in tokens:
        match token:
            case Group(delimiter=delimiter, inner=inner):
                parts.append(f"{delimiter.open}{unparse(inner)}{delimiter.close}")
            case _:
                parts.append(str(token))
    return " ".join(parts)


__all__ = (
    "DELIMITER_CHARS",
    "Delimiter",
    "Group",
    "Ident",
    "Literal",
    "Punct",
    "PunctChar",
    "Span",
    "TokenStream",
    "TokenTree",
    "unparse",
)
