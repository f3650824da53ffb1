"""
duckdb_store.py
---------------

DuckDB implementation of the log store.

The `logs` and `transactions` relations come from one of:
    - tables already present in a DuckDB database file (opened read-only),
    - parquet globs, exposed as views over `read_parquet(..., union_by_name=true)`,
    - pandas DataFrames, cast to the Arrow store schemas and registered.

Every `execute` call opens its own connection with performance PRAGMAs and
closes it afterwards, so concurrent callers never share connection state.
DuckDB errors are translated into `StorageUnavailable` / `QueryFailed`.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import duckdb
import pandas as pd
import pyarrow as pa

from logquery.core.config import StoreConfig
from logquery.core.errors import QueryFailed, StorageUnavailable
from logquery.core.interfaces import ILogStore, QueryResult
from logquery.core.models import LOGS_SCHEMA, TRANSACTIONS_SCHEMA
from logquery.logger import get_logger
from logquery.sql_queries import LOGS_TABLE, TRANSACTIONS_TABLE

logger = get_logger(__name__)

CREATE_PARQUET_VIEW = "CREATE OR REPLACE TEMP VIEW {name} AS SELECT * FROM read_parquet({path}, union_by_name=true)"


# =====================================================================
# DuckDB connection setup
# =====================================================================

@contextmanager
def get_connection(
    database: str = ":memory:",
    *,
    memory_limit: str = "8GB",
    threads: int = 8,
) -> Iterator[duckdb.DuckDBPyConnection]:
    """Context manager for DuckDB connections with optimized PRAGMAs.

    Args:
        database: Database file, or ":memory:".
        memory_limit: Maximum memory allocation for DuckDB.
        threads: Number of threads for parallel execution.

    Yields:
        DuckDB connection with configured performance settings. File
        databases are opened read-only.

    Raises:
        StorageUnavailable: the database cannot be opened.
    """
    read_only = database != ":memory:"
    try:
        con = duckdb.connect(database, read_only=read_only)
    except duckdb.Error as exc:
        raise StorageUnavailable(f"cannot open DuckDB database {database!r}: {exc}") from exc
    try:
        con.execute(f"PRAGMA threads={int(threads)}")
        con.execute(f"PRAGMA memory_limit='{memory_limit}'")
        con.execute("PRAGMA enable_object_cache=true")
        yield con
    finally:
        con.close()


def _sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def frame_to_table(frame: pd.DataFrame, schema: pa.Schema) -> pa.Table:
    """Cast a DataFrame to the given store schema (column order and types)."""
    missing = [name for name in schema.names if name not in frame.columns]
    if missing:
        raise ValueError(f"frame is missing columns: {missing}")
    return pa.Table.from_pandas(frame[schema.names], schema=schema, preserve_index=False)


class DuckDBLogStore(ILogStore):
    """Read-only log store backed by DuckDB."""

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        tables: dict[str, pa.Table] | None = None,
    ) -> None:
        self.config = config or StoreConfig()
        self._tables = dict(tables or {})

    @classmethod
    def from_frames(
        cls,
        logs: pd.DataFrame,
        transactions: pd.DataFrame,
        config: StoreConfig | None = None,
    ) -> DuckDBLogStore:
        """In-memory store over two DataFrames (columns as in the store schemas)."""
        return cls(
            config,
            tables={
                LOGS_TABLE: frame_to_table(logs, LOGS_SCHEMA),
                TRANSACTIONS_TABLE: frame_to_table(transactions, TRANSACTIONS_SCHEMA),
            },
        )

    def _attach_sources(self, con: duckdb.DuckDBPyConnection) -> None:
        for name, table in self._tables.items():
            con.register(name, table)
        for name, path in ((LOGS_TABLE, self.config.logs_source), (TRANSACTIONS_TABLE, self.config.transactions_source)):
            if path:
                con.execute(CREATE_PARQUET_VIEW.format(name=name, path=_sql_string(path)))

    def execute(self, sql: str, params: Sequence[Any]) -> QueryResult:
        with get_connection(
            self.config.database,
            memory_limit=self.config.memory_limit,
            threads=self.config.threads,
        ) as con:
            try:
                self._attach_sources(con)
                cursor = con.execute(sql, list(params))
                columns = [d[0] for d in cursor.description]
                rows = cursor.fetchall()
            except duckdb.IOException as exc:
                raise StorageUnavailable(str(exc)) from exc
            except duckdb.Error as exc:
                raise QueryFailed(str(exc)) from exc
            finally:
                for name in self._tables:
                    con.unregister(name)

        logger.debug("store returned %d rows", len(rows))
        return QueryResult(columns=columns, rows=rows)

    def query_frame(self, sql: str, params: Sequence[Any]) -> pd.DataFrame:
        """Same as `execute`, materialized as a pandas DataFrame."""
        result = self.execute(sql, params)
        return pd.DataFrame.from_records(result.rows, columns=result.columns)
