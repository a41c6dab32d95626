from .items import (
    GroupItem,
    IndexReference,
    OneOrMoreItem,
    OptionalItem,
    Parameter,
    PatternItem,
    ZeroOrMoreItem,
    referenced_names,
)
from .options import DEFAULT_SYNTAX, MatchOptions, PartialMatchOptions, PatternSyntax
from .parse import PatternParser, parse_items
from .pattern import Pattern, parse_pattern
from .payload import (
    DummyTokens,
    FragmentKind,
    FragmentSpec,
    ParseBinding,
    PayloadType,
    TokenizeBinding,
)
from .schema import ParameterSchema

__all__ = (
    "Pattern",
    "parse_pattern",
    "parse_items",
    "PatternParser",
    # Items
    "GroupItem",
    "IndexReference",
    "OneOrMoreItem",
    "OptionalItem",
    "Parameter",
    "PatternItem",
    "ZeroOrMoreItem",
    "referenced_names",
    # Options
    "DEFAULT_SYNTAX",
    "MatchOptions",
    "PartialMatchOptions",
    "PatternSyntax",
    # Payloads
    "DummyTokens",
    "FragmentKind",
    "FragmentSpec",
    "ParseBinding",
    "PayloadType",
    "TokenizeBinding",
    # Schema
    "ParameterSchema",
)
