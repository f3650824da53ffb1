"""Core data models for log queries.

This module defines:
- `ABSENT`: the "caller didn't ask" marker used by every optional field.
- `LogRecord` / `TransactionContext`: the two stored row shapes.
- `LogEntry`: one log merged with its transaction/block context (the output).
- `FilterSpec`: a fully populated filter, as produced by the filter compiler.
- `PagingCursor`: keyset cursor used to resume a truncated result set.
- `LogPage`: list of entries that remembers the capped page it came from.

Design notes
------------
- `ABSENT` is falsy but is never equal to `None`, `()` or `False`, so an
  empty topic tuple ("match nothing") stays distinct from an unset slot.
- Hashes are lowercased 0x-hex strings; block timestamps are unix seconds.
- `LOGS_SCHEMA` / `TRANSACTIONS_SCHEMA` pin the Arrow types of the store tables.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

import pyarrow as pa

from logquery.core.constants import ENTRY_FIELDS, MAX_ROWS, TOPIC_PAIR_OPERATORS, TOPIC_SLOTS
from logquery.core.errors import InvalidCursorError


class Absent(enum.Enum):
    """Singleton type of the `ABSENT` marker."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent.ABSENT


def is_absent(value: Any) -> bool:
    return value is ABSENT


# === Store schemas (Arrow) ===

LOGS_SCHEMA = pa.schema(
    [
        pa.field("data", pa.string()),
        pa.field("first_topic", pa.string()),
        pa.field("second_topic", pa.string()),
        pa.field("third_topic", pa.string()),
        pa.field("fourth_topic", pa.string()),
        pa.field("index", pa.int64()),
        pa.field("address_hash", pa.string()),
        pa.field("transaction_hash", pa.string()),
        pa.field("type", pa.string()),
        pa.field("block_number", pa.int64()),
    ]
)

TRANSACTIONS_SCHEMA = pa.schema(
    [
        pa.field("hash", pa.string()),
        pa.field("gas_price", pa.int64()),
        pa.field("gas_used", pa.int64()),
        pa.field("index", pa.int64()),
        pa.field("block_hash", pa.string()),
        pa.field("block_number", pa.int64()),
        pa.field("block_timestamp", pa.int64()),
        pa.field("block_consensus", pa.bool_()),
    ]
)


# === Stored rows ===


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Event log as written by the ingestion pipeline."""

    address_hash: str
    transaction_hash: str
    index: int
    block_number: int
    data: str = "0x"
    first_topic: str | None = None
    second_topic: str | None = None
    third_topic: str | None = None
    fourth_topic: str | None = None
    type: str | None = None


@dataclass(slots=True, frozen=True)
class TransactionContext:
    """Transaction row carrying the block context of its logs."""

    hash: str
    index: int
    block_hash: str
    block_number: int
    block_consensus: bool
    block_timestamp: int | None = None
    gas_price: int | None = None
    gas_used: int | None = None


# === Output record ===


@dataclass(slots=True, frozen=True)
class LogEntry:
    """One log merged with its transaction and block context."""

    data: str | None
    first_topic: str | None
    second_topic: str | None
    third_topic: str | None
    fourth_topic: str | None
    index: int
    address_hash: str
    transaction_hash: str
    type: str | None
    gas_price: int | None
    gas_used: int | None
    transaction_index: int
    block_hash: str
    block_number: int
    block_timestamp: int | None
    block_consensus: bool

    @classmethod
    def from_row(cls, columns: Sequence[str], row: Sequence[Any]) -> LogEntry:
        """Build an entry from a result row, ignoring columns it does not carry."""
        values = dict(zip(columns, row))
        return cls(**{name: values.get(name) for name in ENTRY_FIELDS})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# === Filter ===

TopicMatch = tuple[str, ...]


@dataclass(slots=True, frozen=True)
class FilterSpec:
    """Complete filter; every field the caller did not set is `ABSENT`."""

    from_block: int | Absent = ABSENT
    to_block: int | Absent = ABSENT
    address_hash: str | Absent = ABSENT
    first_topic: TopicMatch | Absent = ABSENT
    second_topic: TopicMatch | Absent = ABSENT
    third_topic: TopicMatch | Absent = ABSENT
    fourth_topic: TopicMatch | Absent = ABSENT
    topic0_1_opr: str | Absent = ABSENT
    topic0_2_opr: str | Absent = ABSENT
    topic0_3_opr: str | Absent = ABSENT
    topic1_2_opr: str | Absent = ABSENT
    topic1_3_opr: str | Absent = ABSENT
    topic2_3_opr: str | Absent = ABSENT
    allow_non_consensus: bool = False

    def topic(self, slot: str) -> TopicMatch | Absent:
        if slot not in TOPIC_SLOTS:
            raise KeyError(slot)
        return getattr(self, slot)

    def operator(self, name: str) -> str | Absent:
        if name not in TOPIC_PAIR_OPERATORS:
            raise KeyError(name)
        return getattr(self, name)

    @property
    def active_slots(self) -> list[str]:
        """Topic slots holding a match tuple (an empty tuple counts)."""
        return [slot for slot in TOPIC_SLOTS if not is_absent(getattr(self, slot))]

    @property
    def has_address(self) -> bool:
        return not is_absent(self.address_hash)


# === Paging ===


@dataclass(slots=True, frozen=True)
class PagingCursor:
    """Sort key of the last row already returned; all fields ABSENT = first page.

    `transaction_hash` is optional. When set, rows sharing the cursor's
    (block_number, index) are resumed by transaction hash, which keeps logs of
    a forked block and of the canonical block at the same height apart.
    """

    block_number: int | Absent = ABSENT
    log_index: int | Absent = ABSENT
    transaction_hash: str | Absent = ABSENT

    def __post_init__(self) -> None:
        # None is accepted as a synonym for ABSENT
        for name in ("block_number", "log_index", "transaction_hash"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, ABSENT)
        if is_absent(self.block_number) != is_absent(self.log_index):
            raise InvalidCursorError("paging cursor needs both block_number and log_index, or neither")
        if is_absent(self.block_number) and not is_absent(self.transaction_hash):
            raise InvalidCursorError("paging cursor transaction_hash needs block_number and log_index")

    @property
    def is_first_page(self) -> bool:
        return is_absent(self.block_number) and is_absent(self.log_index)

    @classmethod
    def after(cls, entry: LogEntry) -> PagingCursor:
        """Cursor resuming right after `entry`."""
        return cls(block_number=entry.block_number, log_index=entry.index, transaction_hash=entry.transaction_hash)


FIRST_PAGE = PagingCursor()


class LogPage(list):
    """Entries of one list_logs call, plus the capped page they were cut from.

    `scanned` counts the rows of that capped page and `last_key` points after
    its last row. In the address strategy the consensus filter runs after the
    cap, so both can differ from `len(self)` and the last entry.
    """

    def __init__(
        self,
        entries: Iterable[LogEntry] = (),
        *,
        scanned: int | None = None,
        last_key: PagingCursor | None = None,
    ) -> None:
        super().__init__(entries)
        self.scanned = len(self) if scanned is None else scanned
        if last_key is None and self:
            last_key = PagingCursor.after(self[-1])
        self.last_key = last_key


def next_cursor(entries: Sequence[LogEntry], page_size: int = MAX_ROWS) -> PagingCursor | None:
    """Return the cursor for the following page, or None when the page was not truncated.

    A `LogPage` is judged by the capped page it was cut from, so a page that
    lost rows to the consensus filter still yields a cursor.
    """
    if isinstance(entries, LogPage):
        scanned, last_key = entries.scanned, entries.last_key
    else:
        scanned = len(entries)
        last_key = PagingCursor.after(entries[-1]) if entries else None
    if scanned < page_size or last_key is None:
        return None
    return last_key
