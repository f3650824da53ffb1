"""Query composer: FilterSpec + PagingCursor -> one SQL statement.

Two retrieval strategies, selected only by whether an address is given:

- ADDRESS (strategy A): scan logs by (address_hash, block_number), page and
  cap at the log level, then join the page to its transactions, re-check the
  address on the joined rows and apply the consensus filter last (consensus
  is only known after the join).
- TOPIC (strategy B): topics carry no block information, so the block range
  and the consensus filter are applied to a transactions sub-query, logs are
  matched on topics only and joined to it; paging, ordering and the cap are
  applied to the joined stream.

Both produce rows with the merged-record columns ordered by
(block_number, index, transaction_hash). The address strategy also carries
the size and last sort key of its capped log page on every row, so callers
can resume after rows the consensus filter removed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from logquery.core.config import DEFAULT_QUERY_CONFIG, QueryConfig
from logquery.core.constants import ENTRY_FIELDS, LOG_FIELDS, MAX_ROWS, PAGE_STATS_FIELDS, SORT_KEY, TRANSACTION_FIELDS
from logquery.core.errors import MissingRangeError
from logquery.core.models import FIRST_PAGE, FilterSpec, PagingCursor, is_absent
from logquery.filters.topics import compile_topic_predicate, render_predicate
from logquery.logger import get_logger
from logquery.query.gates import apply_consensus, apply_paging
from logquery.query.stream import Stream
from logquery.sql_queries import (
    BLOCK_TRANSACTION_PROJECTION,
    LOGS_TABLE,
    PAGE_CTE,
    PAGE_STATS_QUERY,
    TRANSACTIONS_TABLE,
    SqlFragment,
    log_projection,
    qualified,
    quote_ident,
    transaction_projection,
)

logger = get_logger(__name__)


class Strategy(enum.Enum):
    ADDRESS = "address"
    TOPIC = "topic"


@dataclass(frozen=True, slots=True)
class ComposedQuery:
    """The single statement a list_logs call runs."""

    strategy: Strategy
    sql: str
    params: tuple[Any, ...]


def select_strategy(spec: FilterSpec) -> Strategy:
    return Strategy.ADDRESS if spec.has_address else Strategy.TOPIC


def block_range(stream: Stream, spec: FilterSpec, config: QueryConfig) -> Stream:
    """Restrict `stream` to [from_block, to_block]; absent bounds per config."""
    missing = [name for name in ("from_block", "to_block") if is_absent(getattr(spec, name))]
    if missing and config.require_block_range:
        raise MissingRangeError(missing)

    block_number = stream.col("block_number")
    if not is_absent(spec.from_block):
        stream = stream.where(SqlFragment(f"{block_number} >= ?", (spec.from_block,)))
    if not is_absent(spec.to_block):
        stream = stream.where(SqlFragment(f"{block_number} <= ?", (spec.to_block,)))
    return stream


# ---------------------------------------------------------------------------
# Strategy A: address-anchored
# ---------------------------------------------------------------------------


def _address_query(spec: FilterSpec, cursor: PagingCursor, config: QueryConfig) -> SqlFragment:
    topic_predicate = compile_topic_predicate(spec)

    log_columns = {c: qualified("log", c) for c in (*LOG_FIELDS, "block_number")}
    logs = Stream(
        source=SqlFragment(f"{LOGS_TABLE} AS log"),
        columns=log_columns,
        select=tuple(log_projection("log")) + (f"{qualified('log', 'block_number')} AS {quote_ident('block_number')}",),
    )
    logs = logs.where(render_predicate(topic_predicate, logs.col))
    logs = logs.where(SqlFragment(f"{logs.col('address_hash')} = ?", (spec.address_hash,)))
    logs = block_range(logs, spec, config)
    logs = apply_paging(logs, cursor, config.paging_mode)
    logs = logs.ordered_by(*SORT_KEY).limited(MAX_ROWS)
    page = logs.render()

    joined_columns = {c: qualified(PAGE_CTE, c) for c in LOG_FIELDS}
    joined_columns.update({out: qualified("tx", src) for out, src in TRANSACTION_FIELDS.items()})
    joined = Stream(
        source=SqlFragment(
            f"{PAGE_CTE}\n"
            f"JOIN {TRANSACTIONS_TABLE} AS tx ON {qualified(PAGE_CTE, 'transaction_hash')} = {qualified('tx', 'hash')}"
        ),
        columns=joined_columns,
        select=tuple(log_projection(PAGE_CTE) + transaction_projection("tx")),
    )

    merged = joined.wrap("merged", ENTRY_FIELDS)
    merged = merged.where(SqlFragment(f"{merged.col('address_hash')} = ?", (spec.address_hash,)))
    merged = apply_consensus(merged, spec.allow_non_consensus)
    kept = merged.render()

    # The stats row survives a page the consensus filter emptied; its entry
    # columns are then NULL.
    stats_columns = ", ".join(qualified("stats", name) for name in PAGE_STATS_FIELDS)
    order = ", ".join(f"{qualified('kept', name)} ASC" for name in SORT_KEY)
    sql = (
        f"WITH {PAGE_CTE} AS (\n{page.sql}\n)\n"
        f"SELECT kept.*, {stats_columns}\n"
        f"FROM (\n{PAGE_STATS_QUERY}\n) AS stats\n"
        f"LEFT JOIN (\n{kept.sql}\n) AS kept ON TRUE\n"
        f"ORDER BY {order}"
    )
    return SqlFragment(sql, page.params + kept.params)


# ---------------------------------------------------------------------------
# Strategy B: topic-anchored
# ---------------------------------------------------------------------------


def _topic_query(spec: FilterSpec, cursor: PagingCursor, config: QueryConfig) -> SqlFragment:
    topic_predicate = compile_topic_predicate(spec)

    transactions = Stream(
        source=SqlFragment(f"{TRANSACTIONS_TABLE} AS tx"),
        columns={out: qualified("tx", src) for out, src in TRANSACTION_FIELDS.items()},
        select=(BLOCK_TRANSACTION_PROJECTION,),
    )
    transactions = block_range(transactions, spec, config)
    transactions = apply_consensus(transactions, spec.allow_non_consensus)
    block_transactions = transactions.render()

    columns = {c: qualified("log", c) for c in LOG_FIELDS}
    columns.update({out: qualified("bt", out) for out in TRANSACTION_FIELDS})
    joined = Stream(
        source=SqlFragment(
            f"{LOGS_TABLE} AS log\n"
            f"JOIN (\n{block_transactions.sql}\n) AS bt "
            f"ON {qualified('bt', 'transaction_hash')} = {qualified('log', 'transaction_hash')}",
            block_transactions.params,
        ),
        columns=columns,
        select=tuple(log_projection("log") + [f"{qualified('bt', out)} AS {quote_ident(out)}" for out in TRANSACTION_FIELDS]),
    )
    joined = joined.where(render_predicate(topic_predicate, joined.col))
    joined = apply_paging(joined, cursor, config.paging_mode)
    joined = joined.ordered_by(*SORT_KEY).limited(MAX_ROWS)
    return joined.render()


def compose_query(
    spec: FilterSpec,
    cursor: PagingCursor | None = None,
    *,
    config: QueryConfig = DEFAULT_QUERY_CONFIG,
) -> ComposedQuery:
    """Build the statement for `spec` and `cursor` without running it.

    Raises:
        MissingRangeError: a block bound is absent and `config.require_block_range` is set.
    """
    cursor = cursor or FIRST_PAGE
    strategy = select_strategy(spec)
    if strategy is Strategy.TOPIC and not spec.active_slots:
        logger.warning("no address and no topic given; matching every log in the block range")

    if strategy is Strategy.ADDRESS:
        fragment = _address_query(spec, cursor, config)
    else:
        fragment = _topic_query(spec, cursor, config)

    logger.debug("composed %s query (%d params)", strategy.value, len(fragment.params))
    return ComposedQuery(strategy=strategy, sql=fragment.sql, params=fragment.params)
