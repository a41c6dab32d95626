import dataclasses
from typing import Any

from . import bindings, pattern
from .bindings import (
    BindingKind,
    IndexBinding,
    OneOrMoreBinding,
    OptionalBinding,
    StructuredBinding,
    StructuredBindings,
    StructuredBindingView,
    ValueBinding,
    ZeroOrMoreBinding,
)
from .cursor import TokenCursor
from .errors import (
    BindingRenderError,
    MatchError,
    NoParameterInRepetition,
    ParameterBindingMismatch,
    ParameterBindingNotFound,
    ParameterUsedInIncompatibleRepetitions,
    PatternError,
    PatternSyntaxError,
    RepetitionLenMismatch,
    SchemaError,
    SpecializationError,
    StructuredBindingLookupError,
    StructuredBindingMergeError,
    StructuredBindingTypeMismatch,
    SubstitutionError,
    TrailingInput,
    ZeroWidthRepetition,
)
from .lexer import lex
from .pattern import Pattern, PatternSyntax, parse_pattern
from .tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    PunctChar,
    Span,
    TokenStream,
    TokenTree,
    unparse,
)
from .visitor import (
    OneOrMoreVisitor,
    OptionalVisitor,
    PatternVisitor,
    ZeroOrMoreVisitor,
)


def dump(
    node: Any,
    annotate_fields=True,
    *,
    indent: int | str | None = None,
) -> str:
    """
    Return a formatted dump of a token tree, pattern item or binding.  This
    is mainly useful for debugging purposes.  If annotate_fields is true (by
    default), the returned string will show the names and the values for
    fields.  If annotate_fields is false, the result string will be more
    compact by omitting unambiguous field names.  Spans are never dumped.  If
    indent is a non-negative integer or string, then the tree will be
    pretty-printed with that indent level. None (the default) selects the
    single line representation.
    """

    def _format(node, level=0):
        if isinstance(indent, str):
            level += 1
            prefix = "\n" + indent * level
            sep = ",\n" + indent * level
        else:
            prefix = ""
            sep = ", "
        if dataclasses.is_dataclass(node) and not isinstance(node, type):
            args = []
            allsimple = True
            keywords = annotate_fields
            for field in dataclasses.fields(node):
                if field.name == "span":
                    continue
                value = getattr(node, field.name)
                if value is None and field.default is None:
                    keywords = True
                    continue
                value, simple = _format(value, level)
                allsimple = allsimple and simple
                if keywords:
                    args.append("%s=%s" % (field.name, value))
                else:
                    args.append(value)
            if allsimple and len(args) <= 3:
                return "%s(%s)" % (node.__class__.__name__, ", ".join(args)), not args
            return "%s(%s%s)" % (node.__class__.__name__, prefix, sep.join(args)), False
        elif isinstance(node, (list, tuple)):
            if not node:
                return "()" if isinstance(node, tuple) else "[]", True
            left, right = "()" if isinstance(node, tuple) else "[]"
            return "%s%s%s" % (
                left,
                prefix + sep.join(_format(x, level)[0] for x in node),
                right,
            ), False
        return repr(node), True

    if indent is not None and not isinstance(indent, str):
        indent = " " * indent
    return _format(node)[0]


__all__ = (
    # Tokens
    "Delimiter",
    "Group",
    "Ident",
    "Literal",
    "Punct",
    "PunctChar",
    "Span",
    "TokenStream",
    "TokenTree",
    "TokenCursor",
    "lex",
    "unparse",
    # Patterns
    "Pattern",
    "PatternSyntax",
    "parse_pattern",
    # Bindings
    "BindingKind",
    "IndexBinding",
    "OneOrMoreBinding",
    "OptionalBinding",
    "StructuredBinding",
    "StructuredBindings",
    "StructuredBindingView",
    "ValueBinding",
    "ZeroOrMoreBinding",
    # Visitors
    "PatternVisitor",
    "OptionalVisitor",
    "ZeroOrMoreVisitor",
    "OneOrMoreVisitor",
    # Errors
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
    "dump",
)
