"""Filter compiler: raw filter mapping -> complete FilterSpec.

The raw mapping is what an API layer hands over (any subset of the filter
fields, values possibly still strings). Parsing goes through a pydantic model
so numeric strings become ints; everything the caller left out, or set to
None, becomes `ABSENT`.

Nothing here checks whether the filter makes sense: a missing block range is
the query composer's business, hashes are only normalized to lowercase
0x-hex, and pair operators are kept exactly as given ("AND" is not "and").
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from eth_utils import add_0x_prefix, to_hex
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from logquery.core.constants import TOPIC_PAIR_OPERATORS, TOPIC_SLOTS
from logquery.core.errors import InvalidFilterError
from logquery.core.models import ABSENT, FilterSpec, TopicMatch
from logquery.logger import get_logger

logger = get_logger(__name__)

HashInput = str | bytes


class RawLogFilter(BaseModel):
    """Loosely typed filter as received from callers."""

    model_config = ConfigDict(extra="ignore")

    from_block: int | None = None
    to_block: int | None = None
    address_hash: HashInput | None = None
    first_topic: HashInput | list[HashInput] | None = None
    second_topic: HashInput | list[HashInput] | None = None
    third_topic: HashInput | list[HashInput] | None = None
    fourth_topic: HashInput | list[HashInput] | None = None
    topic0_1_opr: str | None = None
    topic0_2_opr: str | None = None
    topic0_3_opr: str | None = None
    topic1_2_opr: str | None = None
    topic1_3_opr: str | None = None
    topic2_3_opr: str | None = None
    allow_non_consensus: bool | None = None

    @field_validator("from_block", "to_block", mode="before")
    @classmethod
    def _parse_hex_block(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower().startswith("0x"):
            return int(v.strip(), 16)
        return v


def normalize_hash(value: HashInput) -> str:
    """Lowercased 0x-hex form of a hash given as str or raw bytes."""
    if isinstance(value, bytes):
        return to_hex(value)
    return add_0x_prefix(value.strip().lower())


def _topic_match(value: HashInput | list[HashInput]) -> TopicMatch:
    if isinstance(value, list):
        return tuple(normalize_hash(v) for v in value)
    return (normalize_hash(value),)


def compile_filter(raw: Mapping[str, Any] | FilterSpec) -> FilterSpec:
    """Normalize a partial filter into a FilterSpec with explicit ABSENT markers.

    Args:
        raw: Mapping holding any subset of the filter fields. A FilterSpec is
            returned unchanged.

    Returns:
        FilterSpec where every field the caller did not provide is ABSENT.

    Raises:
        InvalidFilterError: a value cannot be coerced (e.g. a non-numeric block).
    """
    if isinstance(raw, FilterSpec):
        return raw

    unknown = set(raw) - set(RawLogFilter.model_fields)
    if unknown:
        logger.debug("ignoring unknown filter keys: %s", sorted(unknown))

    try:
        parsed = RawLogFilter.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidFilterError(str(exc)) from exc

    fields: dict[str, Any] = {}
    for name in ("from_block", "to_block"):
        value = getattr(parsed, name)
        fields[name] = ABSENT if value is None else value

    fields["address_hash"] = ABSENT if parsed.address_hash is None else normalize_hash(parsed.address_hash)

    for slot in TOPIC_SLOTS:
        value = getattr(parsed, slot)
        fields[slot] = ABSENT if value is None else _topic_match(value)

    for name in TOPIC_PAIR_OPERATORS:
        value = getattr(parsed, name)
        fields[name] = ABSENT if value is None else value

    fields["allow_non_consensus"] = bool(parsed.allow_non_consensus)
    return FilterSpec(**fields)
