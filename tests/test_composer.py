import pytest

from conftest import ADDR_A, T1, T2, T3

from logquery.core.config import QueryConfig
from logquery.core.errors import MissingRangeError
from logquery.core.models import FilterSpec, PagingCursor
from logquery.filters.compiler import compile_filter
from logquery.query.composer import Strategy, compose_query, select_strategy


def test_strategy_depends_only_on_address():
    assert select_strategy(FilterSpec(address_hash=ADDR_A)) is Strategy.ADDRESS
    assert select_strategy(FilterSpec(address_hash=ADDR_A, first_topic=(T1,))) is Strategy.ADDRESS
    assert select_strategy(FilterSpec(first_topic=(T1,))) is Strategy.TOPIC


def test_address_query_shape_and_params():
    spec = compile_filter({"from_block": 100, "to_block": 100, "address_hash": ADDR_A, "first_topic": T1})
    query = compose_query(spec)

    assert query.strategy is Strategy.ADDRESS
    # topic, address, range (log level), then the address re-check on the joined rows
    assert query.params == (T1, ADDR_A, 100, 100, ADDR_A)
    assert 'log."address_hash" = ?' in query.sql
    assert 'log."block_number" >= ?' in query.sql
    assert "LIMIT 1000" in query.sql
    assert 'JOIN transactions AS tx ON page."transaction_hash" = tx."hash"' in query.sql
    assert query.sql.startswith("WITH page AS (\nSELECT ")
    assert query.sql.endswith('ORDER BY kept."block_number" ASC, kept."index" ASC, kept."transaction_hash" ASC')
    assert 'count(*) OVER () AS "page_rows"' in query.sql
    assert 'LEFT JOIN (' in query.sql
    assert '(merged."block_consensus" = TRUE)' in query.sql


def test_address_query_pages_at_log_level():
    spec = FilterSpec(from_block=1, to_block=9, address_hash=ADDR_A)
    query = compose_query(spec, PagingCursor(block_number=3, log_index=2))

    assert 'log."block_number" > ? OR (log."block_number" = ? AND log."index" > ?)' in query.sql
    assert query.params == (ADDR_A, 1, 9, 3, 3, 2, ADDR_A)


def test_cursor_with_transaction_hash_breaks_ties_at_log_level():
    tx = "0x" + "cc" * 32
    spec = FilterSpec(from_block=1, to_block=9, address_hash=ADDR_A, allow_non_consensus=True)
    query = compose_query(spec, PagingCursor(block_number=3, log_index=0, transaction_hash=tx))

    assert (
        'log."block_number" > ? OR (log."block_number" = ? AND '
        '(log."index" > ? OR (log."index" = ? AND log."transaction_hash" > ?)))'
    ) in query.sql
    assert query.params == (ADDR_A, 1, 9, 3, 3, 0, 0, tx, ADDR_A)


def test_topic_query_puts_range_and_consensus_on_transactions():
    spec = compile_filter(
        {
            "from_block": 1,
            "to_block": 5,
            "first_topic": [T1, T2],
            "second_topic": T3,
            "topic0_1_opr": "or",
        }
    )
    query = compose_query(spec)

    assert query.strategy is Strategy.TOPIC
    assert query.params == (1, 5, T1, T2, T3)
    assert '(tx."block_number" >= ?) AND (tx."block_number" <= ?) AND (tx."block_consensus" = TRUE)' in query.sql
    assert 'log."block_number"' not in query.sql
    assert 'ORDER BY bt."block_number" ASC, log."index" ASC, log."transaction_hash" ASC\nLIMIT 1000' in query.sql
    assert "page_rows" not in query.sql


def test_allow_non_consensus_drops_consensus_clause():
    for spec in (
        FilterSpec(from_block=1, to_block=5, first_topic=(T1,), allow_non_consensus=True),
        FilterSpec(from_block=1, to_block=5, address_hash=ADDR_A, allow_non_consensus=True),
    ):
        assert "block_consensus\" = TRUE" not in compose_query(spec).sql


@pytest.mark.parametrize(
    "spec, missing",
    [
        (FilterSpec(first_topic=(T1,)), ["from_block", "to_block"]),
        (FilterSpec(from_block=1, address_hash=ADDR_A), ["to_block"]),
    ],
)
def test_missing_range_fails_fast(spec, missing):
    with pytest.raises(MissingRangeError) as excinfo:
        compose_query(spec)
    assert excinfo.value.missing == missing


def test_missing_range_can_be_permissive():
    spec = FilterSpec(from_block=4, first_topic=(T1,))
    query = compose_query(spec, config=QueryConfig(require_block_range=False))

    assert query.params == (4, T1)
    assert 'tx."block_number" <= ?' not in query.sql


def test_invalid_paging_mode_is_rejected_by_config():
    with pytest.raises(ValueError):
        QueryConfig(paging_mode="offset")  # type: ignore[arg-type]
