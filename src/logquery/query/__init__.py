"""Query composition and execution.

This package provides:
- Stream: composable SELECT used by both retrieval strategies
- apply_consensus / apply_paging: stream transformers shared by both strategies
- compose_query: FilterSpec + PagingCursor -> one SQL statement
- list_logs / list_logs_frame: compile, compose, execute, map rows
"""

from logquery.query.composer import ComposedQuery, Strategy, compose_query, select_strategy
from logquery.query.gates import apply_consensus, apply_paging
from logquery.query.service import list_logs, list_logs_frame
from logquery.query.stream import Stream

__all__ = [
    "ComposedQuery",
    "Strategy",
    "Stream",
    "apply_consensus",
    "apply_paging",
    "compose_query",
    "list_logs",
    "list_logs_frame",
    "select_strategy",
]
