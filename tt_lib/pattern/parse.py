from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from ..cursor import TokenCursor
from ..errors import PatternSyntaxError
from ..tokens import Delimiter, Group, Ident, Literal, Punct, PunctChar, Span, TokenTree
from .items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    PatternItem,
    ZeroOrMoreItem,
)
from .options import DEFAULT_SYNTAX, PatternSyntax
from .payload import FragmentSpec, PayloadType

P = TypeVar("P")


class PatternParser(Generic[P]):
    """Recursive descent over one level of token trees.

    Punctuation is read a character at a time so that the escape character can
    appear in the middle of a run, as in `a,$x`.
    """

    def __init__(
        self,
        cursor: TokenCursor,
        syntax: PatternSyntax,
        payload_type: PayloadType[P],
    ):
        self.cursor = cursor
        self.syntax = syntax
        self.payload_type = payload_type

    def nested(self, group: Group) -> PatternParser[P]:
        return PatternParser(
            TokenCursor(group.inner, group.span), self.syntax, self.payload_type
        )

    def parse_items(self) -> tuple[PatternItem[P], ...]:
        items: list[PatternItem[P]] = []
        while not self.cursor.is_empty():
            items.append(self.parse_item())
        return tuple(items)

    def parse_item(self) -> PatternItem[P]:
        char = self.cursor.peek_punct_char()
        if char is not None:
            if char.char == self.syntax.escape:
                return self.parse_escape()
            return self.parse_punct_run()

        token = self.cursor.next()
        match token:
            case Group(delimiter=delimiter, span=span):
                return GroupItem(delimiter, self.nested(token).parse_items(), span)
            case Ident() | Literal():
                return token
        raise AssertionError(f"unexpected token {token!r}")

    def parse_punct_run(self) -> Punct:
        chars: list[PunctChar] = []
        while (char := self.cursor.peek_punct_char()) is not None:
            if char.char == self.syntax.escape:
                break
            joint = self.cursor.is_joint()
            self.cursor.next_punct_char()
            chars.append(char)
            if not joint:
                break
        return Punct(tuple(chars))

    def parse_escape(self) -> PatternItem[P]:
        escape = self.cursor.next_punct_char()
        assert escape is not None
        span = escape.span

        char = self.cursor.peek_punct_char()
        if char is not None and char.char == self.syntax.index_sigil:
            self.cursor.next_punct_char()
            return IndexReference(self.expect_ident("index name"), span)

        token = self.cursor.peek()
        match token:
            case Ident(name=name):
                self.cursor.next()
                payload = self.payload_type.parse_descriptor(self.cursor)
                return Parameter(name, payload, span)
            case Group(delimiter=Delimiter.PAREN | Delimiter.BRACKET):
                return self.parse_repetition(span)

        raise PatternSyntaxError(
            f"Expected parameter name, `{self.syntax.index_sigil}`, `(` or `[` "
            f"after `{self.syntax.escape}`",
            self.cursor.span() or span,
        )

    def parse_repetition(self, span: Span | None) -> PatternItem[P]:
        index = None
        token = self.cursor.peek()
        if isinstance(token, Group) and token.delimiter == Delimiter.BRACKET:
            self.cursor.next()
            match token.inner:
                case (Ident(name=name),):
                    index = name
                case _:
                    raise PatternSyntaxError(
                        "Expected a single index name inside `[...]`", token.span
                    )

        group = self.cursor.next()
        if not isinstance(group, Group) or group.delimiter != Delimiter.PAREN:
            raise PatternSyntaxError("Expected `(` to open repetition", span)
        items = self.nested(group).parse_items()

        op = self.cursor.next_punct_char()
        if op is None:
            raise PatternSyntaxError(
                "Expected repetition operator after `)`", self.cursor.span() or span
            )

        if op.char == self.syntax.optional:
            if index is not None:
                raise PatternSyntaxError(
                    f"Optional repetition cannot declare index `{index}`", span
                )
            return OptionalItem(items, span)

        separator = None
        if op.char not in self.syntax.repetition_operators:
            separator = op
            op = self.cursor.next_punct_char()
            if op is None or op.char not in self.syntax.repetition_operators:
                raise PatternSyntaxError(
                    f"Expected `{self.syntax.zero_or_more}` or "
                    f"`{self.syntax.one_or_more}` after separator `{separator.char}`",
                    separator.span,
                )

        if op.char == self.syntax.zero_or_more:
            return ZeroOrMoreItem(items, index, separator, span)
        return OneOrMoreItem(items, index, separator, span)

    def expect_ident(self, what: str) -> str:
        token = self.cursor.peek()
        if not isinstance(token, Ident):
            raise PatternSyntaxError(f"Expected {what}", self.cursor.span())
        self.cursor.next()
        return token.name


def parse_items(
    tokens: Iterable[TokenTree],
    *,
    syntax: PatternSyntax = DEFAULT_SYNTAX,
    payload_type: PayloadType = FragmentSpec,
) -> tuple[PatternItem, ...]:
    cursor = TokenCursor(tuple(tokens))
    return PatternParser(cursor, syntax, payload_type).parse_items()


__all__ = ("PatternParser", "parse_items")
