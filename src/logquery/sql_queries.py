"""
sql_queries.py
--------------

SQL building blocks for the log queries.

Static pieces (projections, join clauses) are constants; dynamic predicates
are carried as `SqlFragment` values so that SQL text and its `?` parameters
always travel together and are combined in the same order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from logquery.core.constants import LOG_FIELDS, PAGE_STATS_FIELDS, SORT_KEY, TRANSACTION_FIELDS


@dataclass(frozen=True, slots=True)
class SqlFragment:
    """A piece of SQL plus its positional parameters."""

    sql: str
    params: tuple[Any, ...] = field(default=())

    @staticmethod
    def all_of(parts: Iterable[SqlFragment]) -> SqlFragment:
        """AND-combine fragments; an empty input is TRUE."""
        return _combine(list(parts), "AND", empty="TRUE")

    @staticmethod
    def any_of(parts: Iterable[SqlFragment]) -> SqlFragment:
        """OR-combine fragments; an empty input is FALSE."""
        return _combine(list(parts), "OR", empty="FALSE")


TRUE = SqlFragment("TRUE")
FALSE = SqlFragment("FALSE")


def _combine(parts: list[SqlFragment], op: str, *, empty: str) -> SqlFragment:
    if not parts:
        return SqlFragment(empty)
    if len(parts) == 1:
        return parts[0]
    sql = f" {op} ".join(f"({p.sql})" for p in parts)
    params: tuple[Any, ...] = tuple(x for p in parts for x in p.params)
    return SqlFragment(sql, params)


def quote_ident(name: str) -> str:
    """Double-quote an identifier (`index` and `type` are keywords)."""
    return '"' + name.replace('"', '""') + '"'


def qualified(alias: str, column: str) -> str:
    return f"{alias}.{quote_ident(column)}"


def in_list(column_sql: str, values: Sequence[Any]) -> SqlFragment:
    """`column IN (?, ?, ...)`; an empty list matches nothing."""
    if not values:
        return FALSE
    placeholders = ", ".join("?" for _ in values)
    return SqlFragment(f"{column_sql} IN ({placeholders})", tuple(values))


# =====================================================================
# RELATIONS
# =====================================================================

LOGS_TABLE = "logs"
TRANSACTIONS_TABLE = "transactions"


# =====================================================================
# PROJECTIONS
# =====================================================================

def log_projection(alias: str) -> list[str]:
    """Select-list items for the log half of a merged record."""
    return [f"{qualified(alias, c)} AS {quote_ident(c)}" for c in LOG_FIELDS]


def transaction_projection(alias: str) -> list[str]:
    """Select-list items for the transaction/block half of a merged record."""
    return [f"{qualified(alias, src)} AS {quote_ident(out)}" for out, src in TRANSACTION_FIELDS.items()]


# Strategy B transaction sub-query: transactions keyed by hash, renamed to
# the merged-record names.
BLOCK_TRANSACTION_PROJECTION = ", ".join(
    [f"tx.{quote_ident('hash')} AS {quote_ident('transaction_hash')}"] + transaction_projection("tx")
)


# =====================================================================
# ADDRESS STRATEGY PAGE
# =====================================================================

# Name of the CTE holding the capped log page.
PAGE_CTE = "page"

# One row describing the capped page: its size and its last sort key.
PAGE_STATS_QUERY = (
    "SELECT count(*) OVER () AS {rows}, {block} AS {last_block}, {index} AS {last_index}, {tx} AS {last_tx}\n"
    "FROM {page}\n"
    "ORDER BY {block} DESC, {index} DESC, {tx} DESC\n"
    "LIMIT 1"
).format(
    rows=quote_ident(PAGE_STATS_FIELDS[0]),
    last_block=quote_ident(PAGE_STATS_FIELDS[1]),
    last_index=quote_ident(PAGE_STATS_FIELDS[2]),
    last_tx=quote_ident(PAGE_STATS_FIELDS[3]),
    block=quote_ident(SORT_KEY[0]),
    index=quote_ident(SORT_KEY[1]),
    tx=quote_ident(SORT_KEY[2]),
    page=PAGE_CTE,
)
