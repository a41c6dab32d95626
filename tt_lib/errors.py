from __future__ import annotations

from typing import Any

from .tokens import Span


class PatternError(Exception):
    def __init__(self, message: str, span: Span | None = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.span}: {self.message}"


# ---- Construction ---- #


class PatternSyntaxError(PatternError):
    pass


class SchemaError(PatternError):
    pass


class NoParameterInRepetition(SchemaError):
    def __init__(self, repetition: str, span: Span | None = None):
        super().__init__(f"No parameter used in {repetition} repetition", span)
        self.repetition = repetition


class ParameterUsedInIncompatibleRepetitions(SchemaError):
    def __init__(self, parameter: str, span: Span | None = None):
        super().__init__(
            f"Parameter `{parameter}` used in incompatible repetitions", span
        )
        self.parameter = parameter


# ---- Matching ---- #


class MatchError(PatternError):
    """Input does not fit the pattern. Inside repetitions this stops iterating."""


class TrailingInput(MatchError):
    pass


class ZeroWidthRepetition(PatternError):
    def __init__(self, span: Span | None = None):
        super().__init__("Repetition iteration consumed no input", span)


class StructuredBindingMergeError(PatternError):
    pass


class ParameterBindingMismatch(StructuredBindingMergeError):
    def __init__(self, parameter: str, value: Any, existing: Any):
        super().__init__(
            f"Cannot bind parameter `{parameter}` to value `{value}`: "
            f"already has value `{existing}`"
        )
        self.parameter = parameter
        self.value = value
        self.existing = existing


# ---- Substitution ---- #


class SubstitutionError(PatternError):
    pass


SpecializationError = SubstitutionError


class StructuredBindingLookupError(SubstitutionError):
    def __init__(self, message: str, parameter: str):
        super().__init__(message)
        self.parameter = parameter


class ParameterBindingNotFound(StructuredBindingLookupError):
    def __init__(self, parameter: str):
        super().__init__(f"Expected binding for parameter `{parameter}`", parameter)


class StructuredBindingTypeMismatch(StructuredBindingLookupError):
    def __init__(self, parameter: str, expected: str, found: str):
        super().__init__(
            f"Expected parameter `{parameter}` to have binding of type `{expected}`: "
            f"found binding of type `{found}`",
            parameter,
        )
        self.expected = expected
        self.found = found


class RepetitionLenMismatch(SubstitutionError):
    def __init__(
        self, parameter: str, expected: int | str, found: int, what: str = "index"
    ):
        super().__init__(
            f"Expected {what} `{parameter}` to count to `{expected}`: "
            f"counted to `{found}`"
        )
        self.parameter = parameter
        self.expected = expected
        self.found = found


class BindingRenderError(SubstitutionError):
    pass


__all__ = (
    "BindingRenderError",
    "MatchError",
    "NoParameterInRepetition",
    "ParameterBindingMismatch",
    "ParameterBindingNotFound",
    "ParameterUsedInIncompatibleRepetitions",
    "PatternError",
    "PatternSyntaxError",
    "RepetitionLenMismatch",
    "SchemaError",
    "SpecializationError",
    "StructuredBindingLookupError",
    "StructuredBindingMergeError",
    "StructuredBindingTypeMismatch",
    "SubstitutionError",
    "TrailingInput",
    "ZeroWidthRepetition",
)
