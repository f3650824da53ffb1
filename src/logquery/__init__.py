from __future__ import annotations

from .core.config import QueryConfig, StoreConfig
from .core.errors import (
    InvalidCursorError,
    InvalidFilterError,
    LogQueryError,
    MissingRangeError,
    QueryFailed,
    StorageUnavailable,
)
from .core.models import ABSENT, FIRST_PAGE, FilterSpec, LogEntry, LogPage, PagingCursor, next_cursor
from .filters.compiler import compile_filter
from .query.composer import compose_query
from .query.service import list_logs, list_logs_frame
from .storage.duckdb_store import DuckDBLogStore

__version__ = "0.1.0"

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
    "PagingCursor",
    "next_cursor",
    "compile_filter",
    "compose_query",
    "list_logs",
    "list_logs_frame",
    "DuckDBLogStore",
]
