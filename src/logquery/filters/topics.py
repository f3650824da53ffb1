"""Topic matcher: compile the topic part of a FilterSpec into one predicate.

Each topic slot becomes a tagged match value and each pair operator a tagged
combinator:
- `SlotMatches.Absent` / `SlotMatches.Equals(value)` / `SlotMatches.MemberOf(values)`
- `PairOp.AND` / `PairOp.OR` / `PairOp.SKIP`

With two or more active slots only pairs carrying an "and"/"or" operator
constrain the result; a pair without one is SKIP even when both of its slots
are set, which widens the result rather than rejecting the filter.

Predicates render to parameterized SQL (`render_predicate`) and evaluate
directly against a record mapping (`evaluate_predicate`).
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from logquery.core.constants import TOPIC_PAIR_OPERATORS
from logquery.core.models import FilterSpec, is_absent
from logquery.sql_queries import TRUE, SqlFragment, in_list


# ---- Slot matches ----
class SlotMatches:
    @dataclass(frozen=True)
    class Absent:
        pass

    @dataclass(frozen=True)
    class Equals:
        value: str

    @dataclass(frozen=True)
    class MemberOf:
        values: tuple[str, ...]


SlotMatch = SlotMatches.Absent | SlotMatches.Equals | SlotMatches.MemberOf


class PairOp(enum.Enum):
    AND = "and"
    OR = "or"
    SKIP = "skip"

    @classmethod
    def parse(cls, value: Any) -> PairOp:
        """Map an operator field to a combinator; anything but and/or is SKIP."""
        if value == "and":
            return cls.AND
        if value == "or":
            return cls.OR
        return cls.SKIP


# ---- Predicate tree ----
class Predicates:
    @dataclass(frozen=True)
    class Always:
        pass

    @dataclass(frozen=True)
    class Match:
        column: str
        match: SlotMatches.Equals | SlotMatches.MemberOf

    @dataclass(frozen=True)
    class All:
        parts: tuple[Predicate, ...]

    @dataclass(frozen=True)
    class AnyOf:
        parts: tuple[Predicate, ...]


Predicate = Predicates.Always | Predicates.Match | Predicates.All | Predicates.AnyOf

ALWAYS = Predicates.Always()


def slot_match(spec: FilterSpec, slot: str) -> SlotMatch:
    """Tagged match for one topic slot of `spec`."""
    values = spec.topic(slot)
    if is_absent(values):
        return SlotMatches.Absent()
    if len(values) == 1:
        return SlotMatches.Equals(values[0])
    return SlotMatches.MemberOf(tuple(values))


def _slot_predicate(slot: str, match: SlotMatch) -> Predicate | None:
    if isinstance(match, SlotMatches.Absent):
        return None
    return Predicates.Match(column=slot, match=match)


def pair_predicate(slot_a: str, match_a: SlotMatch, slot_b: str, match_b: SlotMatch, op: PairOp) -> Predicate | None:
    """Predicate contributed by one slot pair, or None when it adds no constraint.

    A pair whose operator is set but one of whose slots is absent reduces to
    the match of the slot that is present.
    """
    if op is PairOp.SKIP:
        return None
    pred_a = _slot_predicate(slot_a, match_a)
    pred_b = _slot_predicate(slot_b, match_b)
    if pred_a is None or pred_b is None:
        return pred_a or pred_b
    if op is PairOp.AND:
        return Predicates.All((pred_a, pred_b))
    return Predicates.AnyOf((pred_a, pred_b))


def compile_topic_predicate(spec: FilterSpec) -> Predicate:
    """Compile the topic slots and pair operators of `spec` into one predicate."""
    active = spec.active_slots
    if not active:
        return ALWAYS
    if len(active) == 1:
        slot = active[0]
        return Predicates.Match(column=slot, match=slot_match(spec, slot))  # type: ignore[arg-type]

    conjuncts: list[Predicate] = []
    for operator, (slot_a, slot_b) in TOPIC_PAIR_OPERATORS.items():
        pred = pair_predicate(
            slot_a,
            slot_match(spec, slot_a),
            slot_b,
            slot_match(spec, slot_b),
            PairOp.parse(spec.operator(operator)),
        )
        if pred is not None:
            conjuncts.append(pred)

    if not conjuncts:
        return ALWAYS
    if len(conjuncts) == 1:
        return conjuncts[0]
    return Predicates.All(tuple(conjuncts))


def render_predicate(pred: Predicate, column: Callable[[str], str]) -> SqlFragment:
    """Render `pred` to SQL; `column` maps a slot name to its SQL expression."""
    match pred:
        case Predicates.Always():
            return TRUE
        case Predicates.Match(column=slot, match=SlotMatches.Equals(value=value)):
            return SqlFragment(f"{column(slot)} = ?", (value,))
        case Predicates.Match(column=slot, match=SlotMatches.MemberOf(values=values)):
            return in_list(column(slot), values)
        case Predicates.All(parts=parts):
            return SqlFragment.all_of(render_predicate(p, column) for p in parts)
        case Predicates.AnyOf(parts=parts):
            return SqlFragment.any_of(render_predicate(p, column) for p in parts)
    raise RuntimeError(f"Unsupported predicate: {pred!r}")


def evaluate_predicate(pred: Predicate, record: Mapping[str, Any]) -> bool:
    """Evaluate `pred` against a log record given as a mapping of column -> value."""
    match pred:
        case Predicates.Always():
            return True
        case Predicates.Match(column=slot, match=SlotMatches.Equals(value=value)):
            return record.get(slot) == value
        case Predicates.Match(column=slot, match=SlotMatches.MemberOf(values=values)):
            return record.get(slot) in values
        case Predicates.All(parts=parts):
            return all(evaluate_predicate(p, record) for p in parts)
        case Predicates.AnyOf(parts=parts):
            return any(evaluate_predicate(p, record) for p in parts)
    raise RuntimeError(f"Unsupported predicate: {pred!r}")
