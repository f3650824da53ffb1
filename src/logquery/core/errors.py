"""Exception hierarchy for log queries.

Filter and cursor problems subclass `ValueError` so API layers can map them to
client errors; storage problems do not.
"""

from __future__ import annotations


class LogQueryError(Exception):
    """Base exception for logquery."""


class InvalidFilterError(LogQueryError, ValueError):
    """A raw filter value could not be coerced into a FilterSpec field."""


class MissingRangeError(InvalidFilterError):
    """`from_block` or `to_block` is absent and the block range is required."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"missing block range bound(s): {', '.join(missing)}")


class InvalidCursorError(LogQueryError, ValueError):
    """A paging cursor has only one of `block_number` / `log_index` set."""


class StorageUnavailable(LogQueryError):
    """The log store could not be opened or read."""


class QueryFailed(LogQueryError):
    """The log store rejected or failed to run the composed query."""
