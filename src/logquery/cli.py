import json
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from .core.config import QueryConfig, StoreConfig
from .core.constants import TOPIC_PAIR_OPERATORS, TOPIC_SLOTS
from .core.errors import LogQueryError
from .core.models import LogEntry, PagingCursor, next_cursor
from .logger import configure_logging
from .query.service import list_logs
from .storage.duckdb_store import DuckDBLogStore

console = Console()
err_console = Console(stderr=True)


def _topic_option(slot: str):
    flag = "--" + slot.replace("_", "-")
    return click.option(flag, slot, multiple=True, help=f"Candidate {slot.replace('_', ' ')} hash; repeat for a list")


def _operator_option(name: str):
    flag = "--" + name.replace("_", "-")
    return click.option(flag, name, type=click.Choice(["and", "or"]), default=None, help=f"Combinator for {name[:-4]}")


def _with_topic_options(fn):
    for name in reversed(list(TOPIC_PAIR_OPERATORS)):
        fn = _operator_option(name)(fn)
    for slot in reversed(TOPIC_SLOTS):
        fn = _topic_option(slot)(fn)
    return fn


def _render_table(entries: list[LogEntry]) -> Table:
    table = Table(show_lines=False)
    for name in ("block", "idx", "address", "transaction", "first_topic", "consensus"):
        table.add_column(name)
    for e in entries:
        table.add_row(
            str(e.block_number),
            str(e.index),
            e.address_hash,
            e.transaction_hash,
            e.first_topic or "",
            "yes" if e.block_consensus else "no",
        )
    return table


@click.group()
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level")
def cli(log_level: str) -> None:
    """logquery: filter event logs joined with their block context."""
    configure_logging(log_level)


@cli.command("logs")
@click.option("--database", default=":memory:", show_default=True, help="DuckDB database file")
@click.option("--logs", "logs_source", default=None, help="Parquet glob exposed as the logs table")
@click.option("--transactions", "transactions_source", default=None, help="Parquet glob exposed as the transactions table")
@click.option("--from-block", type=str, default=None, help="First block (decimal or 0x-hex)")
@click.option("--to-block", type=str, default=None, help="Last block, inclusive")
@click.option("--address", "address_hash", default=None, help="Emitter address")
@_with_topic_options
@click.option("--allow-non-consensus/--consensus-only", default=False, show_default=True)
@click.option("--after-block", type=int, default=None, help="Cursor block_number from the previous page")
@click.option("--after-index", type=int, default=None, help="Cursor log_index from the previous page")
@click.option("--after-tx", default=None, help="Cursor transaction_hash from the previous page")
@click.option(
    "--paging-mode",
    type=click.Choice(["keyset", "legacy"]),
    default="keyset",
    show_default=True,
    help="Cursor comparison",
)
@click.option(
    "--require-range/--allow-open-range",
    default=True,
    show_default=True,
    help="Fail when --from-block/--to-block is missing",
)
@click.option("--json", "as_json", is_flag=True, help="Print one JSON object per log")
def logs_cmd(
    database: str,
    logs_source: str | None,
    transactions_source: str | None,
    after_block: int | None,
    after_index: int | None,
    after_tx: str | None,
    paging_mode: str,
    require_range: bool,
    as_json: bool,
    **filter_options: Any,
) -> None:
    """List logs matching address/topic filters within a block range."""
    raw_filter: dict[str, Any] = {}
    for key, value in filter_options.items():
        if key in TOPIC_SLOTS:
            if value:
                raw_filter[key] = list(value)
        elif value is not None:
            raw_filter[key] = value

    store = DuckDBLogStore(
        StoreConfig(
            database=database,
            logs_source=logs_source,
            transactions_source=transactions_source,
        )
    )
    config = QueryConfig(require_block_range=require_range, paging_mode=paging_mode)  # type: ignore[arg-type]

    try:
        cursor = PagingCursor(block_number=after_block, log_index=after_index, transaction_hash=after_tx)
        entries = list_logs(store, raw_filter, cursor, config=config)
    except LogQueryError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        for entry in entries:
            click.echo(json.dumps(entry.to_dict(), separators=(",", ":")))
    else:
        console.print(_render_table(entries))
        console.print(f"[bold]done[/]: {len(entries)} logs")

    nxt = next_cursor(entries)
    if nxt is not None:
        err_console.print(
            f"[yellow]more results[/]: --after-block {nxt.block_number} "
            f"--after-index {nxt.log_index} --after-tx {nxt.transaction_hash}"
        )


if __name__ == "__main__":
    cli()
