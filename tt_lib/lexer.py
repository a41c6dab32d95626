"""Turn source text into token trees using the stdlib tokenizer."""

from __future__ import annotations

import tokenize
from io import StringIO

from .errors import PatternSyntaxError
from .tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    PunctChar,
    Punct,
    Span,
    TokenStream,
    TokenTree,
)

_SKIPPED = frozenset(
    {
        tokenize.NEWLINE,
        tokenize.NL,
        tokenize.COMMENT,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.ENDMARKER,
    }
)


class _Lexer:
    def __init__(self, source: str):
        # Wrapping in parentheses keeps the tokenizer from emitting INDENT/DEDENT
        self.source = f"({source}\n)"
        self.lines = StringIO(self.source).readlines()
        self.stack: list[tuple[Delimiter, Span, list[TokenTree]]] = []
        self.trees: list[TokenTree] = []
        self.run: list[PunctChar] = []
        self.run_end: tuple[int, int] | None = None
        self.fstring_depth = 0
        self.fstring_start: tuple[int, int] = (0, 0)

    def span(self, position: tuple[int, int]) -> Span:
        line, column = position
        return Span(line, column - 1 if line == 1 else column)

    def text(self, start: tuple[int, int], end: tuple[int, int]) -> str:
        (start_line, start_col), (end_line, end_col) = start, end
        if start_line == end_line:
            return self.lines[start_line - 1][start_col:end_col]
        return (
            self.lines[start_line - 1][start_col:]
            + "".join(self.lines[start_line : end_line - 1])
            + self.lines[end_line - 1][:end_col]
        )

    def lex(self) -> TokenStream:
        readline = StringIO(self.source).readline
        try:
            for token in tokenize.generate_tokens(readline):
                self.feed(token)
        except (tokenize.TokenError, SyntaxError) as e:
            raise PatternSyntaxError(f"Cannot tokenize input: {e.args[0]}") from e

        self.flush()
        if self.stack:
            delimiter, span, _ = self.stack[-1]
            raise PatternSyntaxError(f"Unclosed `{delimiter.open}`", span)

        wrapper, *rest = self.trees
        if rest:
            # A stray closing delimiter ended the wrapping group early
            raise PatternSyntaxError("Unmatched closing delimiter", rest[0].span)
        assert isinstance(wrapper, Group)
        return wrapper.inner

    def feed(self, token: tokenize.TokenInfo) -> None:
        name = tokenize.tok_name[token.type]

        # Python 3.12+ splits f-strings into parts, stitch them back into one literal
        if self.fstring_depth:
            if name == "FSTRING_START":
                self.fstring_depth += 1
            elif name == "FSTRING_END":
                self.fstring_depth -= 1
                if not self.fstring_depth:
                    raw = self.text(self.fstring_start, token.end)
                    self.push(Literal(raw, self.span(self.fstring_start)))
            return
        if name == "FSTRING_START":
            self.fstring_depth = 1
            self.fstring_start = token.start
            return

        if token.type in _SKIPPED:
            return

        span = self.span(token.start)
        match token.type:
            case tokenize.NAME:
                self.push(Ident(token.string, span))
            case tokenize.NUMBER | tokenize.STRING:
                self.push(Literal(token.string, span))
            case tokenize.OP | tokenize.ERRORTOKEN:
                if token.string and not token.string.isspace():
                    self.punct(token, span)
            case _:
                raise PatternSyntaxError(f"Unexpected token {token.string!r}", span)

    def punct(self, token: tokenize.TokenInfo, span: Span) -> None:
        if (delimiter := Delimiter.from_open(token.string)) is not None:
            self.flush()
            self.stack.append((delimiter, span, self.trees))
            self.trees = []
            return

        if (delimiter := Delimiter.from_close(token.string)) is not None:
            self.flush()
            if not self.stack or self.stack[-1][0] != delimiter:
                raise PatternSyntaxError(f"Unmatched `{token.string}`", span)
            _, open_span, parent = self.stack.pop()
            group = Group(delimiter, tuple(self.trees), open_span)
            self.trees = parent
            self.trees.append(group)
            return

        if self.run and self.run_end != token.start:
            self.flush()
        self.run.extend(
            PunctChar(char, Span(span.line, span.column + i))
            for i, char in enumerate(token.string)
        )
        self.run_end = token.end

    def push(self, tree: TokenTree) -> None:
        self.flush()
        self.trees.append(tree)

    def flush(self) -> None:
        if self.run:
            self.trees.append(Punct(tuple(self.run)))
            self.run = []
            self.run_end = None


def lex(source: str) -> TokenStream:
    return _Lexer(source).lex()


__all__ = ("lex",)
