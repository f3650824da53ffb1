"""Filter compilation and topic matching.

This package provides:
- compile_filter: raw filter mapping -> FilterSpec with ABSENT markers
- compile_topic_predicate: FilterSpec topics -> one predicate
- render_predicate / evaluate_predicate: predicate -> SQL, or -> bool for a record
"""

from logquery.filters.compiler import compile_filter, normalize_hash
from logquery.filters.topics import (
    PairOp,
    Predicate,
    Predicates,
    SlotMatch,
    SlotMatches,
    compile_topic_predicate,
    evaluate_predicate,
    render_predicate,
)

__all__ = [
    "compile_filter",
    "normalize_hash",
    "PairOp",
    "Predicate",
    "Predicates",
    "SlotMatch",
    "SlotMatches",
    "compile_topic_predicate",
    "evaluate_predicate",
    "render_predicate",
]
