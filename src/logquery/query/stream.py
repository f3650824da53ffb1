"""Composable relation used by both retrieval strategies.

A `Stream` is a SELECT under construction: a FROM source, the select list,
accumulated WHERE conditions, ordering and a row limit. Callers address
columns by logical name (`block_number`, `index`, `block_consensus`, topic
slots...) and the stream resolves them to the SQL expression valid at its
level, so the same gate can restrict a bare log scan or a joined stream.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from logquery.sql_queries import SqlFragment, quote_ident


@dataclass(frozen=True)
class Stream:
    source: SqlFragment
    columns: Mapping[str, str]
    select: tuple[str, ...]
    conditions: tuple[SqlFragment, ...] = field(default=())
    order_by: tuple[str, ...] = field(default=())
    limit: int | None = None

    def col(self, name: str) -> str:
        """SQL expression of logical column `name` at this level."""
        try:
            return self.columns[name]
        except KeyError:
            raise KeyError(f"stream has no column {name!r}") from None

    def where(self, condition: SqlFragment) -> Stream:
        return replace(self, conditions=self.conditions + (condition,))

    def ordered_by(self, *names: str) -> Stream:
        return replace(self, order_by=tuple(f"{self.col(n)} ASC" for n in names))

    def limited(self, n: int) -> Stream:
        return replace(self, limit=n)

    def render(self) -> SqlFragment:
        """Render to one SELECT statement; parameters follow SQL text order."""
        lines = [f"SELECT {', '.join(self.select)}", f"FROM {self.source.sql}"]
        params: list[Any] = list(self.source.params)
        if self.conditions:
            where = SqlFragment.all_of(self.conditions)
            lines.append(f"WHERE {where.sql}")
            params.extend(where.params)
        if self.order_by:
            lines.append(f"ORDER BY {', '.join(self.order_by)}")
        if self.limit is not None:
            lines.append(f"LIMIT {int(self.limit)}")
        return SqlFragment("\n".join(lines), tuple(params))

    def wrap(self, alias: str, names: Iterable[str]) -> Stream:
        """Use this stream as a subquery exposing `names` under `alias`."""
        inner = self.render()
        names = list(names)
        return Stream(
            source=SqlFragment(f"(\n{inner.sql}\n) AS {alias}", inner.params),
            columns={n: f"{alias}.{quote_ident(n)}" for n in names},
            select=tuple(f"{alias}.{quote_ident(n)}" for n in names),
        )
