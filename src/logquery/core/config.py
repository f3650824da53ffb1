from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from logquery.core.constants import PAGING_MODES

PagingMode = Literal["keyset", "legacy"]


@dataclass(frozen=True)
class QueryConfig:
    """Policy knobs for composing log queries."""

    # Fail with MissingRangeError when from_block/to_block is absent;
    # when False an absent bound imposes no restriction.
    require_block_range: bool = True
    # "keyset": (block_number, index) > cursor, lexicographically.
    # "legacy": index > log_index AND block_number >= block_number.
    paging_mode: PagingMode = "keyset"

    def __post_init__(self) -> None:
        if self.paging_mode not in PAGING_MODES:
            raise ValueError(f"paging_mode must be one of {PAGING_MODES}, got {self.paging_mode!r}")


@dataclass(frozen=True)
class StoreConfig:
    """Configuration for the DuckDB-backed log store."""

    database: str = ":memory:"
    logs_source: str | None = None  # parquet glob exposed as the `logs` view
    transactions_source: str | None = None  # parquet glob exposed as the `transactions` view
    memory_limit: str = "8GB"
    threads: int = 8


DEFAULT_QUERY_CONFIG = QueryConfig()
