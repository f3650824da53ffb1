"""Core data models, configurations, errors and constants.

This package provides:
- Data models (FilterSpec, PagingCursor, LogEntry, LogRecord, TransactionContext)
- Configuration classes (QueryConfig, StoreConfig)
- Error hierarchy rooted at LogQueryError
"""

from logquery.core.config import QueryConfig, StoreConfig
from logquery.core.errors import (
    InvalidCursorError,
    InvalidFilterError,
    LogQueryError,
    MissingRangeError,
    QueryFailed,
    StorageUnavailable,
)
from logquery.core.models import (
    ABSENT,
    FIRST_PAGE,
    FilterSpec,
    LogEntry,
    LogPage,
    LogRecord,
    PagingCursor,
    TransactionContext,
    next_cursor,
)

__all__ = [
    "QueryConfig",
    "StoreConfig",
    "InvalidCursorError",
    "InvalidFilterError",
    "LogQueryError",
    "MissingRangeError",
    "QueryFailed",
    "StorageUnavailable",
    "ABSENT",
    "FIRST_PAGE",
    "FilterSpec",
    "LogEntry",
    "LogPage",
    "LogRecord",
    "PagingCursor",
    "TransactionContext",
    "next_cursor",
]
