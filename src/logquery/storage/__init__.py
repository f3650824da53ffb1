"""Storage adapters for the log store interface.

This package provides:
- DuckDBLogStore: read-only store over DuckDB files, parquet globs or DataFrames
- get_connection: DuckDB connection context manager with performance PRAGMAs
"""

from logquery.storage.duckdb_store import DuckDBLogStore, get_connection

__all__ = [
    "DuckDBLogStore",
    "get_connection",
]
