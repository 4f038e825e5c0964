"""stats command — aggregate patterns across the review history."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from codepolish_cli.context import get_store
from codepolish_store.errors import StoreError

console = Console()


@click.command("stats")
@click.option("--top", default=5, show_default=True, help="Number of top entries to show per category.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show which languages and complexities dominate the recent history.

    Only the most recent records (the same window GET /api/history serves)
    are aggregated.
    """
    store = get_store(ctx)
    try:
        total = store.count()
        records = store.list_history()
    except StoreError as e:
        raise click.ClickException(str(e)) from e

    if not records:
        console.print("[yellow]No history records found.[/yellow]")
        return

    language_counter = Counter(r.language for r in records)
    time_counter = Counter(r.time_complexity for r in records)
    avg_cc = sum(r.cyclomatic_complexity for r in records) / len(records)

    # --- Summary ---
    console.print("\n[bold]History stats[/bold]")
    console.print(f"  Total records:     {total}")
    console.print(f"  Window analysed:   {len(records)}")
    console.print(f"  Avg cyclomatic:    {avg_cc:.1f}")

    # --- Languages ---
    lang_table = Table(title=f"Top {top} Languages", show_header=True)
    lang_table.add_column("Language", style="bold")
    lang_table.add_column("Records", justify="right")
    lang_table.add_column("% of window", justify="right")
    for language, count in language_counter.most_common(top):
        lang_table.add_row(language, str(count), f"{count / len(records) * 100:.1f}%")
    console.print(lang_table)

    # --- Time complexity ---
    time_table = Table(title=f"Top {top} Time Complexities", show_header=True)
    time_table.add_column("Time complexity")
    time_table.add_column("Records", justify="right")
    for label, count in time_counter.most_common(top):
        time_table.add_row(label, str(count))
    console.print(time_table)
