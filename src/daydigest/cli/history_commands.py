"""History command: inspect or reset the persisted topic history."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich import box
from rich.table import Table

from daydigest.cli.main import console


@click.command()
@click.option("--data-dir", default=None, help="Override data directory")
@click.option("--reset", is_flag=True, default=False, help="Delete the topic history")
@click.option("--limit", default=25, type=int, help="Maximum topics to show (default 25)")
def history(data_dir: str | None, reset: bool, limit: int):
    """Show the topics tracked across days, most frequent first."""
    from daydigest.core.config import DigestConfig
    from daydigest.core.errors import DigestError
    from daydigest.history.store import HistoryStore

    try:
        config = DigestConfig.load(None)
        if data_dir:
            config.data_dir = Path(data_dir).expanduser()
        store = HistoryStore(config.history_path)

        if reset:
            if store.reset():
                console.print(f"[green]Removed topic history[/green] {store.path}")
            else:
                console.print(f"[dim]No topic history at {store.path}[/dim]")
            return

        snapshot = store.load()
    except DigestError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not snapshot.topics:
        console.print(f"[dim]No topics tracked yet ({store.path})[/dim]")
        return

    ranked = sorted(
        snapshot.topics.items(),
        key=lambda item: (-item[1].day_count, item[0]),
    )
    table = Table(title=f"Topic History ({len(snapshot.topics)} topics)", box=box.ROUNDED)
    table.add_column("Topic", style="bold")
    table.add_column("Days", justify="right", style="green")
    table.add_column("First seen")
    table.add_column("Last seen")
    for name, record in ranked[:limit]:
        table.add_row(name, str(record.day_count), record.first_seen, record.last_seen)
    console.print(table)
