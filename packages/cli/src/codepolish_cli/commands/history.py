"""history command — display recent review pairs from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from codepolish_cli.context import get_store
from codepolish_store.base import MAX_HISTORY_LIMIT
from codepolish_store.errors import StoreError

console = Console()


def _first_line(code: str, width: int = 40) -> str:
    line = code.strip().splitlines()[0] if code.strip() else ""
    return line if len(line) <= width else line[: width - 1] + "…"


@click.command("history")
@click.option(
    "--limit",
    type=click.IntRange(1, MAX_HISTORY_LIMIT),
    default=20,
    show_default=True,
    help="Maximum number of records to show.",
)
@click.pass_context
def history_cmd(ctx, limit: int):
    """Show the most recent reviewed code pairs, newest first."""
    try:
        records = get_store(ctx).list_history(limit=limit)
    except StoreError as e:
        raise click.ClickException(str(e)) from e

    if not records:
        console.print("[yellow]No history records found.[/yellow]")
        return

    table = Table(title="Review History", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", justify="right", width=4)
    table.add_column("Reviewed At", width=19)
    table.add_column("Language", width=10)
    table.add_column("Time", width=10)
    table.add_column("CC", justify="right", width=4)
    table.add_column("Original")
    table.add_column("Improved")

    for r in records:
        table.add_row(
            str(r.id),
            r.timestamp[:19].replace("T", " "),
            r.language,
            r.time_complexity,
            str(r.cyclomatic_complexity),
            _first_line(r.original_code),
            _first_line(r.improved_code),
        )

    console.print(table)
