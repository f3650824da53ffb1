from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(slots=True)
class QueryResult:
    """Materialized result of one statement: column names plus row tuples."""

    columns: list[str]
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# ILogStore
# ---------------------------------------------------------------------------


@runtime_checkable
class ILogStore(Protocol):
    """
    Read-only access to the durable log/transaction store.

    Domain expectations:
    - Two relations are queryable by name: `logs` and `transactions`
      (columns as in `LOGS_SCHEMA` / `TRANSACTIONS_SCHEMA`).
    - Statements use `?` positional parameters.
    - The store supports range scans, joins, ORDER BY and LIMIT server-side.
    - Failures surface as `StorageUnavailable` or `QueryFailed`; the store
      does not retry.
    """

    def execute(self, sql: str, params: Sequence[Any]) -> QueryResult:
        """
        Run one statement and materialize its rows.

        Implementations:
        - DuckDBLogStore (parquet files, DuckDB database or in-memory frames)
        - Any DB-API backend speaking the same SQL dialect
        """
        ...
