"""
service.py
----------

Entry points answering "which logs match this filter?".

Each call compiles the raw filter, composes one statement, runs it against
the store and maps the rows to `LogEntry` records. Nothing is cached and no
state is kept between calls; storage errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pandas as pd

from logquery.core.config import DEFAULT_QUERY_CONFIG, QueryConfig
from logquery.core.constants import ENTRY_FIELDS
from logquery.core.interfaces import ILogStore
from logquery.core.models import FilterSpec, LogEntry, LogPage, PagingCursor
from logquery.filters.compiler import compile_filter
from logquery.logger import get_logger
from logquery.query.composer import compose_query

logger = get_logger(__name__)


def _to_page(columns: list[str], rows: list[tuple[Any, ...]]) -> LogPage:
    scanned: int | None = None
    last_key: PagingCursor | None = None
    entries: list[LogEntry] = []
    for row in rows:
        values = dict(zip(columns, row))
        if "page_rows" in values:
            scanned = values["page_rows"]
            last_key = PagingCursor(
                block_number=values["page_last_block"],
                log_index=values["page_last_index"],
                transaction_hash=values["page_last_transaction"],
            )
        # the stats row of a page emptied by the consensus filter
        if values["index"] is None:
            continue
        entries.append(LogEntry.from_row(columns, row))
    return LogPage(entries, scanned=scanned, last_key=last_key)


def list_logs(
    store: ILogStore,
    filter: Mapping[str, Any] | FilterSpec,
    paging: PagingCursor | None = None,
    *,
    config: QueryConfig = DEFAULT_QUERY_CONFIG,
) -> LogPage:
    """Get the logs that meet the criteria in a given filter.

    Required filter parameters:

    * `from_block`
    * `to_block`
    * `address_hash` and/or `{x}_topic`
    * When multiple `{x}_topic` params are provided, the corresponding
      `topic{x}_{x}_opr` param decides how the pair combines ("and"/"or").
      A pair without an operator does not constrain the result.

    Supported `{x}_topic`s: first_topic, second_topic, third_topic, fourth_topic
    (a single hash or a list of candidate hashes).

    Supported `topic{x}_{x}_opr`s: topic0_1_opr, topic0_2_opr, topic0_3_opr,
    topic1_2_opr, topic1_3_opr, topic2_3_opr.

    `allow_non_consensus=True` includes logs from non-canonical blocks.

    Args:
        store: Log store to query.
        filter: Raw filter mapping, or an already compiled FilterSpec.
        paging: Cursor from the previous page; None for the first page.
        config: Range and paging policy.

    Returns:
        A LogPage of at most 1000 entries ordered by (block_number, index,
        transaction_hash). Pass it to `next_cursor` to get the next page.

    Raises:
        InvalidFilterError / MissingRangeError: the filter cannot be used.
        StorageUnavailable / QueryFailed: the store failed.
    """
    spec = compile_filter(filter)
    query = compose_query(spec, paging, config=config)
    result = store.execute(query.sql, query.params)
    entries = _to_page(result.columns, result.rows)
    logger.debug("list_logs strategy=%s rows=%d", query.strategy.value, len(entries))
    return entries


def list_logs_frame(
    store: ILogStore,
    filter: Mapping[str, Any] | FilterSpec,
    paging: PagingCursor | None = None,
    *,
    config: QueryConfig = DEFAULT_QUERY_CONFIG,
) -> pd.DataFrame:
    """`list_logs` as a DataFrame with one column per merged-record field."""
    entries = list_logs(store, filter, paging, config=config)
    return pd.DataFrame([e.to_dict() for e in entries], columns=list(ENTRY_FIELDS))
