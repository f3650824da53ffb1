"""Consensus filter and pagination gate.

Both are stream transformers: they only need the stream to resolve
`block_consensus`, `block_number`, `index` and `transaction_hash`, so either
retrieval strategy can apply them at whichever level those columns exist.
"""

from __future__ import annotations

from logquery.core.config import PagingMode
from logquery.core.models import PagingCursor, is_absent
from logquery.query.stream import Stream
from logquery.sql_queries import SqlFragment


def apply_consensus(stream: Stream, allow_non_consensus: bool) -> Stream:
    """Keep only rows of consensus blocks unless non-consensus rows are allowed."""
    if allow_non_consensus:
        return stream
    return stream.where(SqlFragment(f"{stream.col('block_consensus')} = TRUE"))


def apply_paging(stream: Stream, cursor: PagingCursor, mode: PagingMode = "keyset") -> Stream:
    """Restrict `stream` to rows after `cursor`; the first page passes through.

    keyset: (block_number, index[, transaction_hash]) > cursor, compared
            lexicographically; transaction_hash takes part only when the
            cursor carries one.
    legacy: index > cursor.log_index AND block_number >= cursor.block_number,
            which also drops rows of later blocks whose index is not above
            cursor.log_index.
    """
    if cursor.is_first_page:
        return stream

    block_number = stream.col("block_number")
    index = stream.col("index")
    if mode == "legacy":
        return stream.where(
            SqlFragment(
                f"{index} > ? AND {block_number} >= ?",
                (cursor.log_index, cursor.block_number),
            )
        )
    if mode == "keyset":
        if is_absent(cursor.transaction_hash):
            return stream.where(
                SqlFragment(
                    f"{block_number} > ? OR ({block_number} = ? AND {index} > ?)",
                    (cursor.block_number, cursor.block_number, cursor.log_index),
                )
            )
        transaction_hash = stream.col("transaction_hash")
        return stream.where(
            SqlFragment(
                f"{block_number} > ? OR ({block_number} = ? AND "
                f"({index} > ? OR ({index} = ? AND {transaction_hash} > ?)))",
                (
                    cursor.block_number,
                    cursor.block_number,
                    cursor.log_index,
                    cursor.log_index,
                    cursor.transaction_hash,
                ),
            )
        )
    raise ValueError(f"unknown paging mode: {mode!r}")
