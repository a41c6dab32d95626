from .index import IndexBindings, IndexBindingScope
from .structured import (
    BindingKind,
    IndexBinding,
    OneOrMoreBinding,
    OptionalBinding,
    StructuredBinding,
    StructuredBindings,
    StructuredBindingView,
    ValueBinding,
    ZeroOrMoreBinding,
    unstructure,
)

__all__ = (
    "IndexBindings",
    "IndexBindingScope",
    "BindingKind",
    "IndexBinding",
    "OneOrMoreBinding",
    "OptionalBinding",
    "StructuredBinding",
    "StructuredBindings",
    "StructuredBindingView",
    "ValueBinding",
    "ZeroOrMoreBinding",
    "unstructure",
)
