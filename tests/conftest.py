from typing import Any

import pandas as pd
import pytest

from logquery.storage.duckdb_store import DuckDBLogStore

ADDR_A = "0x" + "aa" * 20
ADDR_B = "0x" + "bb" * 20


def topic(n: int) -> str:
    """Full-width 0x topic hash for a small integer."""
    return "0x" + f"{n:064x}"


T1, T2, T3, T4, T5, T6 = (topic(n) for n in range(1, 7))


def tx_hash(name: str) -> str:
    return "0x" + name.encode().hex().ljust(64, "0")


def make_tx(name: str, block: int, *, consensus: bool = True, index: int = 0, fork: bool = False) -> dict[str, Any]:
    return {
        "hash": tx_hash(name),
        "gas_price": 1_000_000_000 + block,
        "gas_used": 21_000 + index,
        "index": index,
        "block_hash": topic(10_000 + block + (500 if fork else 0)),
        "block_number": block,
        "block_timestamp": 1_700_000_000 + 12 * block,
        "block_consensus": consensus,
    }


def make_log(
    tx: str,
    block: int,
    index: int,
    address: str,
    first: str | None = None,
    second: str | None = None,
    third: str | None = None,
    fourth: str | None = None,
) -> dict[str, Any]:
    return {
        "data": "0x" + f"{block:04x}{index:04x}",
        "first_topic": first,
        "second_topic": second,
        "third_topic": third,
        "fourth_topic": fourth,
        "index": index,
        "address_hash": address,
        "transaction_hash": tx_hash(tx),
        "type": None,
        "block_number": block,
    }


# name -> log row; names are used by tests to state expectations
LOGS: dict[str, dict[str, Any]] = {
    "L1": make_log("tx1", 1, 0, ADDR_A, T1, T3),
    "L2": make_log("tx1", 1, 1, ADDR_B, T2, T4),
    "L3": make_log("tx2", 2, 0, ADDR_A, T5, T3),
    "L4": make_log("tx2", 2, 1, ADDR_B, T5, T6),
    "L5": make_log("tx3", 3, 2, ADDR_A, T1, T6),
    "L6": make_log("tx3b", 3, 0, ADDR_A, T2, T3),  # non-consensus block
    "L7": make_log("tx5", 5, 0, ADDR_B, T2),
    "L8": make_log("tx7", 7, 0, ADDR_A, T1),  # outside 1..5
    "L9": make_log("tx100", 100, 3, ADDR_A, T1),
    "L10": make_log("tx100", 100, 1, ADDR_A, T2),
    "L11": make_log("tx100", 100, 2, ADDR_B, T1),
    "L12": make_log("tx100", 100, 0, ADDR_A, T1),
}

TRANSACTIONS = [
    make_tx("tx1", 1),
    make_tx("tx2", 2),
    make_tx("tx3", 3, index=1),
    make_tx("tx3b", 3, consensus=False, fork=True),
    make_tx("tx5", 5),
    make_tx("tx7", 7),
    make_tx("tx100", 100),
]


def key_of(name: str) -> tuple[int, int]:
    row = LOGS[name]
    return (row["block_number"], row["index"])


def keys(entries) -> list[tuple[int, int]]:
    return [(e.block_number, e.index) for e in entries]


@pytest.fixture
def logs_frame() -> pd.DataFrame:
    return pd.DataFrame(list(LOGS.values()))


@pytest.fixture
def transactions_frame() -> pd.DataFrame:
    return pd.DataFrame(TRANSACTIONS)


@pytest.fixture
def store(logs_frame: pd.DataFrame, transactions_frame: pd.DataFrame) -> DuckDBLogStore:
    return DuckDBLogStore.from_frames(logs_frame, transactions_frame)


@pytest.fixture
def big_store() -> DuckDBLogStore:
    """1200 consensus logs from one address over 12 blocks, 100 logs per block."""
    txs = [make_tx(f"big{b}", b) for b in range(1, 13)]
    logs = [
        make_log(f"big{b}", b, i, ADDR_A, T1 if i % 2 == 0 else T2)
        for b in range(1, 13)
        for i in range(100)
    ]
    return DuckDBLogStore.from_frames(pd.DataFrame(logs), pd.DataFrame(txs))
