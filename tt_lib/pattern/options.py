from __future__ import annotations

from typing import Literal, TypeAlias, TypedDict

from pydantic import field_validator
from pydantic.dataclasses import dataclass

from ..tokens import DELIMITER_CHARS

# ---------------------------------------------------------------------------- #
#                                Pattern syntax                                #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class PatternSyntax:
    """Punctuation characters that introduce pattern constructs.

    `$name` is a parameter, `$@name` an index reference, and `$( ... )?`,
    `$( ... )*`, `$( ... )+` the repetitions. Every character must be a
    single punctuation character and all of them must be distinct.
    """

    escape: str = "$"
    index_sigil: str = "@"
    optional: str = "?"
    zero_or_more: str = "*"
    one_or_more: str = "+"

    @field_validator("escape", "index_sigil", "optional", "zero_or_more", "one_or_more")
    @classmethod
    def _check_punctuation(cls, value: str) -> str:
        if (
            len(value) != 1
            or value.isalnum()
            or value.isspace()
            or value == "_"
            or value in DELIMITER_CHARS
        ):
            raise ValueError(f"expected a single punctuation character, got {value!r}")
        return value

    def __post_init__(self):
        chars = (
            self.escape,
            self.index_sigil,
            self.optional,
            self.zero_or_more,
            self.one_or_more,
        )
        if len(set(chars)) != len(chars):
            raise ValueError(f"pattern syntax characters must be distinct: {chars}")

    @property
    def repetition_operators(self) -> tuple[str, str]:
        return (self.zero_or_more, self.one_or_more)


DEFAULT_SYNTAX = PatternSyntax()


# ---------------------------------------------------------------------------- #
#                                 Match options                                #
# ---------------------------------------------------------------------------- #

ZeroWidthPolicy: TypeAlias = Literal["stop", "error"]


class PartialMatchOptions(TypedDict, total=False):
    zero_width: ZeroWidthPolicy
    trace: bool


class MatchOptions(TypedDict, total=True):
    zero_width: ZeroWidthPolicy
    trace: bool


_DEFAULT_OPTIONS: MatchOptions = {
    "zero_width": "stop",
    "trace": False,
}


def resolve_options(options: PartialMatchOptions) -> MatchOptions:
    unknown = set(options) - set(_DEFAULT_OPTIONS)
    if unknown:
        raise TypeError(f"Unknown match options: {sorted(unknown)}")
    return {**_DEFAULT_OPTIONS, **options}


__all__ = (
    "DEFAULT_SYNTAX",
    "MatchOptions",
    "PartialMatchOptions",
    "PatternSyntax",
    "resolve_options",
)
