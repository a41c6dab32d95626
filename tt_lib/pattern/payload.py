"""Pluggable payload strategies.

A parameter in a pattern carries an opaque payload. The engine never looks
inside it: it asks the payload to parse input during matching, to render a
bound value during substitution and to produce placeholder tokens. The
payload *type* parses the descriptor written after the parameter name.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, TypeVar, runtime_checkable

from ..cursor import TokenCursor
from ..errors import BindingRenderError, MatchError, PatternSyntaxError
from ..lexer import lex
from ..tokens import Delimiter, Group, Ident, Literal, Punct, TokenStream, TokenTree

V_co = TypeVar("V_co", covariant=True)
V_contra = TypeVar("V_contra", contravariant=True)
P_co = TypeVar("P_co", covariant=True)


@runtime_checkable
class ParseBinding(Protocol[V_co]):
    @abstractmethod
    def parse_binding(self, cursor: TokenCursor) -> V_co:
        """Consume a prefix of `cursor`, raising `MatchError` if it does not fit."""
        ...


@runtime_checkable
class TokenizeBinding(Protocol[V_contra]):
    @abstractmethod
    def tokenize_binding(self, value: V_contra) -> TokenStream: ...


@runtime_checkable
class DummyTokens(Protocol):
    @abstractmethod
    def dummy_tokens(self) -> TokenStream: ...


class PayloadType(Protocol[P_co]):
    def parse_descriptor(self, cursor: TokenCursor) -> P_co: ...


# ---- Default payload ---- #


class FragmentKind(StrEnum):
    IDENT = "ident"
    LITERAL = "literal"
    PUNCT = "punct"
    TT = "tt"
    GROUP = "group"
    TTS = "tts"


_EXPECTED = {
    FragmentKind.IDENT: "identifier",
    FragmentKind.LITERAL: "literal",
    FragmentKind.PUNCT: "punctuation",
    FragmentKind.TT: "token tree",
    FragmentKind.GROUP: "group",
}

_KIND_TYPES: dict[FragmentKind, type | tuple[type, ...]] = {
    FragmentKind.IDENT: Ident,
    FragmentKind.LITERAL: Literal,
    FragmentKind.PUNCT: Punct,
    FragmentKind.TT: (Ident, Literal, Punct, Group),
    FragmentKind.GROUP: Group,
}


@dataclass(frozen=True)
class FragmentSpec:
    """`$name:kind` where kind is one of `FragmentKind`, `tt` when omitted.

    `tts` takes every remaining token tree of the enclosing group and binds
    them as a tuple. The other kinds take exactly one token tree.
    """

    kind: FragmentKind = FragmentKind.TT

    @classmethod
    def parse_descriptor(cls, cursor: TokenCursor) -> FragmentSpec:
        colon = cursor.peek_punct_char()
        if colon is None or colon.char != ":" or cursor.is_joint():
            return cls()
        cursor.next_punct_char()

        kind = cursor.next()
        if not isinstance(kind, Ident):
            raise PatternSyntaxError("Expected fragment kind after `:`", colon.span)
        try:
            return cls(FragmentKind(kind.name))
        except ValueError:
            expected = ", ".join(f"`{k}`" for k in FragmentKind)
            raise PatternSyntaxError(
                f"Unknown fragment kind `{kind.name}`, expected one of {expected}",
                kind.span,
            ) from None

    def to_tokens(self) -> TokenStream:
        if self.kind == FragmentKind.TT:
            return ()
        return (Punct.from_str(":"), Ident(self.kind.value))

    def parse_binding(self, cursor: TokenCursor) -> Any:
        if self.kind == FragmentKind.TTS:
            trees = cursor.remaining()
            while cursor.next() is not None:
                pass
            return trees

        token = cursor.peek()
        if not isinstance(token, _KIND_TYPES[self.kind]):
            raise MatchError(f"expected {_EXPECTED[self.kind]}", cursor.span())
        cursor.next()
        return token

    def tokenize_binding(self, value: Any) -> TokenStream:
        if isinstance(value, str):
            value = self._lex_value(value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            value = Literal(repr(value))

        if self.kind == FragmentKind.TTS:
            if isinstance(value, (Ident, Literal, Punct, Group)):
                return (value,)
            trees = tuple(value)
            if not all(isinstance(t, (Ident, Literal, Punct, Group)) for t in trees):
                raise BindingRenderError(f"Cannot render {value!r} as token trees")
            return trees

        if not isinstance(value, _KIND_TYPES[self.kind]):
            raise BindingRenderError(
                f"Cannot render {value!r} as {_EXPECTED[self.kind]}"
            )
        return (value,)

    def _lex_value(self, text: str) -> TokenTree | TokenStream:
        trees = lex(text)
        if self.kind == FragmentKind.TTS:
            return trees
        if len(trees) != 1:
            raise BindingRenderError(
                f"Cannot render {text!r} as {_EXPECTED[self.kind]}: "
                f"found {len(trees)} token trees"
            )
        return trees[0]

    def dummy_tokens(self) -> TokenStream:
        match self.kind:
            case FragmentKind.IDENT | FragmentKind.TT:
                return (Ident("__dummy"),)
            case FragmentKind.LITERAL:
                return (Literal("0"),)
            case FragmentKind.PUNCT:
                return (Punct.from_str("+"),)
            case FragmentKind.GROUP:
                return (Group(Delimiter.PAREN, ()),)
            case FragmentKind.TTS:
                return ()


__all__ = (
    "DummyTokens",
    "FragmentKind",
    "FragmentSpec",
    "ParseBinding",
    "PayloadType",
    "TokenizeBinding",
)
