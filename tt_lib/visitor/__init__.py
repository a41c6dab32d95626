from .collect import (
    CollectVisitor,
    DummySubstitutionVisitor,
)
from .core import (
    OneOrMoreVisitor,
    OptionalVisitor,
    PatternVisitor,
    ZeroOrMoreVisitor,
    visit_items,
)
from .match import (
    MatchVisitor,
)
from .specialize import (
    SpecializationVisitor,
)
from .substitute import (
    SubstitutionVisitor,
)

__all__ = [
    # Core visitor
    "PatternVisitor",
    "OptionalVisitor",
    "ZeroOrMoreVisitor",
    "OneOrMoreVisitor",
    "visit_items",
    # Traversals
    "MatchVisitor",
    "SubstitutionVisitor",
    "SpecializationVisitor",
    "CollectVisitor",
    "DummySubstitutionVisitor",
]
