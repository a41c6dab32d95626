from __future__ import annotations

import copy
from typing import Sequence, TypeAlias

from .tokens import Punct, PunctChar, Span, TokenStream, TokenTree

Mark: TypeAlias = tuple[int, int]


class TokenCursor:
    """A position inside one level of a token stream.

    Punctuation runs can be read whole (`peek`/`next`) or one character at a
    time (`peek_punct_char`/`next_punct_char`), so the pattern parser can split an
    escape character off a run such as `,$`. `mark`/`reset` save and
    restore the position for speculative parsing.
    """

    def __init__(self, tokens: Sequence[TokenTree], end: Span | None = None):
        self.tokens: TokenStream = tuple(tokens)
        self.end = end
        self._index = 0
        self._offset = 0

    def __repr__(self) -> str:
        return f"TokenCursor(at={self.mark()}, remaining={self.remaining()!r})"

    def mark(self) -> Mark:
        return (self._index, self._offset)

    def reset(self, mark: Mark) -> None:
        self._index, self._offset = mark

    def fork(self) -> TokenCursor:
        return copy.copy(self)

    def advance_to(self, other: TokenCursor) -> None:
        assert other.tokens is self.tokens, "cursors walk different streams"
        assert other.mark() >= self.mark(), "cannot move a cursor backwards"
        self.reset(other.mark())

    def is_empty(self) -> bool:
        return self._index >= len(self.tokens)

    def span(self) -> Span | None:
        """Location of the next token, or of the end of this level."""
        if self.is_empty():
            return self.end
        token = self.tokens[self._index]
        if isinstance(token, Punct):
            return token.chars[self._offset].span
        return token.span

    # ---- Whole trees ---- #

    def peek(self) -> TokenTree | None:
        if self.is_empty():
            return None
        token = self.tokens[self._index]
        if self._offset:
            assert isinstance(token, Punct)
            return Punct(token.chars[self._offset :])
        return token

    def next(self) -> TokenTree | None:
        token = self.peek()
        if token is not None:
            self._index += 1
            self._offset = 0
        return token

    def remaining(self) -> TokenStream:
        first = self.peek()
        if first is None:
            return ()
        return (first, *self.tokens[self._index + 1 :])

    # ---- Punctuation characters ---- #

    def peek_punct_char(self) -> PunctChar | None:
        token = self.tokens[self._index] if not self.is_empty() else None
        if not isinstance(token, Punct):
            return None
        return token.chars[self._offset]

    def is_joint(self) -> bool:
        """Whether the current character is followed by another in the same run."""
        token = self.tokens[self._index] if not self.is_empty() else None
        return isinstance(token, Punct) and self._offset + 1 < len(token.chars)

    def next_punct_char(self) -> PunctChar | None:
        char = self.peek_punct_char()
        if char is None:
            return None
        if self.is_joint():
            self._offset += 1
        else:
            self._index += 1
            self._offset = 0
        return char


__all__ = ("Mark", "TokenCursor")
