import pytest

from conftest import T1, T2, T3, T4, T5

from logquery.core.models import FilterSpec
from logquery.filters.topics import (
    ALWAYS,
    PairOp,
    Predicates,
    SlotMatches,
    compile_topic_predicate,
    evaluate_predicate,
    pair_predicate,
    render_predicate,
    slot_match,
)


def record(first=None, second=None, third=None, fourth=None):
    return {"first_topic": first, "second_topic": second, "third_topic": third, "fourth_topic": fourth}


def plain(column: str) -> str:
    return column


def test_slot_match_variants():
    spec = FilterSpec(first_topic=(T1,), second_topic=(T1, T2), third_topic=())

    assert slot_match(spec, "first_topic") == SlotMatches.Equals(T1)
    assert slot_match(spec, "second_topic") == SlotMatches.MemberOf((T1, T2))
    assert slot_match(spec, "third_topic") == SlotMatches.MemberOf(())
    assert slot_match(spec, "fourth_topic") == SlotMatches.Absent()


@pytest.mark.parametrize(
    "value, expected",
    [("and", PairOp.AND), ("or", PairOp.OR), ("xor", PairOp.SKIP), (None, PairOp.SKIP)],
)
def test_pair_op_parse(value, expected):
    assert PairOp.parse(value) is expected


def test_no_active_slot_is_always_true():
    pred = compile_topic_predicate(FilterSpec())

    assert pred == ALWAYS
    assert render_predicate(pred, plain).sql == "TRUE"
    assert evaluate_predicate(pred, record())


def test_single_slot_is_membership():
    pred = compile_topic_predicate(FilterSpec(second_topic=(T1, T2)))
    frag = render_predicate(pred, plain)

    assert frag.sql == "second_topic IN (?, ?)"
    assert frag.params == (T1, T2)
    assert evaluate_predicate(pred, record(second=T2))
    assert not evaluate_predicate(pred, record(first=T1))


def test_empty_match_list_matches_nothing():
    pred = compile_topic_predicate(FilterSpec(first_topic=()))

    assert render_predicate(pred, plain).sql == "FALSE"
    assert not evaluate_predicate(pred, record(first=T1))


@pytest.mark.parametrize(
    "first, second, expected_and, expected_or",
    [
        (T1, T2, True, True),
        (T1, T3, True, True),
        (T1, T4, False, True),
        (T5, T2, False, True),
        (T5, T4, False, False),
        (None, None, False, False),
    ],
)
def test_pair_truth_table(first, second, expected_and, expected_or):
    base = dict(first_topic=(T1,), second_topic=(T2, T3))
    pred_and = compile_topic_predicate(FilterSpec(**base, topic0_1_opr="and"))
    pred_or = compile_topic_predicate(FilterSpec(**base, topic0_1_opr="or"))

    assert evaluate_predicate(pred_and, record(first, second)) is expected_and
    assert evaluate_predicate(pred_or, record(first, second)) is expected_or


def test_pair_renders_with_combinator():
    spec = FilterSpec(first_topic=(T1,), second_topic=(T2, T3), topic0_1_opr="or")
    frag = render_predicate(compile_topic_predicate(spec), plain)

    assert frag.sql == "(first_topic = ?) OR (second_topic IN (?, ?))"
    assert frag.params == (T1, T2, T3)


def test_omitted_operator_adds_no_constraint():
    spec = FilterSpec(first_topic=(T1,), second_topic=(T2,))
    pred = compile_topic_predicate(spec)

    assert pred == ALWAYS
    assert evaluate_predicate(pred, record(T5, T5))


def test_unknown_operator_adds_no_constraint():
    spec = FilterSpec(first_topic=(T1,), second_topic=(T2,), topic0_1_opr="xor")

    assert compile_topic_predicate(spec) == ALWAYS


def test_pairs_are_anded_in_canonical_order():
    spec = FilterSpec(
        first_topic=(T1,),
        second_topic=(T2,),
        third_topic=(T3,),
        topic1_2_opr="or",
        topic0_1_opr="and",
    )
    pred = compile_topic_predicate(spec)
    frag = render_predicate(pred, plain)

    assert isinstance(pred, Predicates.All)
    assert frag.sql == (
        "((first_topic = ?) AND (second_topic = ?)) AND ((second_topic = ?) OR (third_topic = ?))"
    )
    assert frag.params == (T1, T2, T2, T3)
    assert evaluate_predicate(pred, record(T1, T2, T5))
    assert not evaluate_predicate(pred, record(T1, T4, T3))


def test_only_unpaired_slot_is_left_unconstrained():
    # first/second are tied by an operator, third has no pair operator at all
    spec = FilterSpec(first_topic=(T1,), second_topic=(T2,), third_topic=(T3,), topic0_1_opr="and")
    pred = compile_topic_predicate(spec)

    assert evaluate_predicate(pred, record(T1, T2, T5))
    assert not evaluate_predicate(pred, record(T1, T5, T3))


def test_operator_with_absent_slot_reduces_to_present_slot():
    pred = pair_predicate("first_topic", SlotMatches.Equals(T1), "fourth_topic", SlotMatches.Absent(), PairOp.OR)

    assert pred == Predicates.Match(column="first_topic", match=SlotMatches.Equals(T1))
    assert pair_predicate("first_topic", SlotMatches.Absent(), "second_topic", SlotMatches.Absent(), PairOp.AND) is None


def test_render_uses_column_mapping():
    pred = compile_topic_predicate(FilterSpec(fourth_topic=(T4,)))
    frag = render_predicate(pred, lambda c: f'log."{c}"')

    assert frag.sql == 'log."fourth_topic" = ?'
