from __future__ import annotations

from typing import Iterable

from .cursor import TokenCursor
from .errors import MatchError, TrailingInput
from .tokens import Group, Punct, TokenTree


def expect_token_tree(cursor: TokenCursor, expected: TokenTree) -> None:
    match expected:
        case Punct():
            actual = cursor.peek()
            if not isinstance(actual, Punct) or actual.text != expected.text:
                raise MatchError(f"expected `{expected.text}`", cursor.span())
            cursor.next()
        case Group(delimiter=delimiter):
            actual = cursor.peek()
            if not isinstance(actual, Group) or actual.delimiter != delimiter:
                raise MatchError(f"expected `{delimiter.open}`", cursor.span())
            cursor.next()
            inner = TokenCursor(actual.inner, actual.span)
            expect_tokens(inner, expected.inner)
            expect_end(inner, "expected end of group")
        case _:
            actual = cursor.peek()
            if actual != expected:
                raise MatchError(f"expected `{expected}`", cursor.span())
            cursor.next()


def expect_tokens(cursor: TokenCursor, expected: Iterable[TokenTree]) -> None:
    for token in expected:
        expect_token_tree(cursor, token)


def expect_end(cursor: TokenCursor, message: str = "expected end of input") -> None:
    if not cursor.is_empty():
        raise TrailingInput(message, cursor.span())


__all__ = ("expect_end", "expect_token_tree", "expect_tokens")
