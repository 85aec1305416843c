"""daydigest CLI main entry point and shared utilities."""

from __future__ import annotations

import os

import click
from rich.console import Console

console = Console()

# Color per recurrence trend
TREND_STYLES = {
    "new": "green",
    "returning": "cyan",
    "rising": "yellow",
    "stable": "blue",
    "declining": "dim",
}


def get_trend_style(trend: str) -> str:
    return TREND_STYLES.get(trend, "white")


def is_demo_mode() -> bool:
    """Deterministic output with no timings, for snapshot tests."""
    return os.environ.get("DAYDIGEST_DEMO", "").strip() == "1"


@click.group()
def main():
    """daydigest: privacy-tiered daily activity digests."""
    pass


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from daydigest.cli.history_commands import history  # noqa: E402
from daydigest.cli.info_commands import info  # noqa: E402
from daydigest.cli.run_commands import run  # noqa: E402
from daydigest.cli.validate_commands import validate  # noqa: E402

main.add_command(run)
main.add_command(validate)
main.add_command(history)
main.add_command(info)
