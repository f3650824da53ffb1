from __future__ import annotations

# Hard cap on rows returned by a single list_logs call.
MAX_ROWS = 1_000

# Topic slot columns, in topic-array order.
TOPIC_SLOTS: tuple[str, ...] = ("first_topic", "second_topic", "third_topic", "fourth_topic")

# Pair operator field -> (slot a, slot b), in canonical pair order.
TOPIC_PAIR_OPERATORS: dict[str, tuple[str, str]] = {
    "topic0_1_opr": ("first_topic", "second_topic"),
    "topic0_2_opr": ("first_topic", "third_topic"),
    "topic0_3_opr": ("first_topic", "fourth_topic"),
    "topic1_2_opr": ("second_topic", "third_topic"),
    "topic1_3_opr": ("second_topic", "fourth_topic"),
    "topic2_3_opr": ("third_topic", "fourth_topic"),
}

# Log columns carried into every merged record.
LOG_FIELDS: tuple[str, ...] = (
    "data",
    "first_topic",
    "second_topic",
    "third_topic",
    "fourth_topic",
    "index",
    "address_hash",
    "transaction_hash",
    "type",
)

# Transaction/block columns merged onto each log (output name -> transactions column).
TRANSACTION_FIELDS: dict[str, str] = {
    "gas_price": "gas_price",
    "gas_used": "gas_used",
    "transaction_index": "index",
    "block_hash": "block_hash",
    "block_number": "block_number",
    "block_timestamp": "block_timestamp",
    "block_consensus": "block_consensus",
}

ENTRY_FIELDS: tuple[str, ...] = LOG_FIELDS + tuple(TRANSACTION_FIELDS)

PAGING_MODES: tuple[str, ...] = ("keyset", "legacy")

# Sort key of every result; transaction_hash separates rows of competing
# blocks that share (block_number, index).
SORT_KEY: tuple[str, ...] = ("block_number", "index", "transaction_hash")

# Columns describing the capped log page of the address strategy, carried on
# each result row next to the merged-record fields.
PAGE_STATS_FIELDS: tuple[str, ...] = ("page_rows", "page_last_block", "page_last_index", "page_last_transaction")
