"""Info command: daydigest info."""

from __future__ import annotations

import platform
import sys

import click
from rich import box
from rich.table import Table

from daydigest.cli.main import console


def _get_version() -> str:
    """Get the daydigest package version from metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("daydigest")
    except PackageNotFoundError:
        return "unknown"


def _get_python_version() -> str:
    """Get the Python version (first line only)."""
    return sys.version.split("\n")[0]


def _get_platform_info() -> str:
    return f"{platform.system()} {platform.machine()}"


def _show_system_info() -> None:
    table = Table(box=box.ROUNDED, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Version", _get_version())
    table.add_row("Python", _get_python_version())
    table.add_row("Platform", _get_platform_info())

    console.print(table)


def _show_config(config) -> None:
    from daydigest.core.config import redact_api_key

    table = Table(
        title="Resolved Configuration",
        box=box.ROUNDED,
        show_header=False,
        padding=(0, 2),
    )
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Privacy tier", config.privacy_tier.value)
    table.add_row("Data dir", str(config.data_dir))
    table.add_row("Topic history", str(config.history_path))
    table.add_row("Prompts dir", str(config.prompts_dir) if config.prompts_dir else "[dim]built-in[/dim]")
    table.add_row("Sanitization", f"{config.sanitize.level} (enabled: {config.sanitize.enabled})")
    if config.sensitivity.enabled:
        table.add_row(
            "Sensitivity",
            f"{config.sensitivity.action}: {', '.join(config.sensitivity.categories) or 'custom only'}"
            f" (+{len(config.sensitivity.custom_domains)} custom)",
        )
    else:
        table.add_row("Sensitivity", "[dim]off[/dim]")
    table.add_row(
        "Dedup",
        f"{config.dedup.max_visits_per_domain} per domain, {config.dedup.max_other_total} other",
    )
    table.add_row(
        "Patterns",
        f"window {config.patterns.cooccurrence_window}m, min cluster {config.patterns.min_cluster_size}, "
        f"recurrence {'on' if config.patterns.track_recurrence else 'off'}",
    )

    llm = config.classify.llm
    table.add_row("LLM classify", "on" if config.classify.use_llm else "off")
    table.add_row("LLM", f"{llm.model} ({llm.provider})")
    table.add_row("API key", redact_api_key(llm.resolve_api_key()) or "[dim]not set[/dim]")

    console.print(table)


@click.command()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON config file")
def info(config_path: str | None):
    """Display version, platform, and the resolved configuration."""
    from pathlib import Path

    from daydigest.core.config import DigestConfig
    from daydigest.core.errors import ConfigError

    console.print("[bold cyan]daydigest[/bold cyan] [dim]privacy-tiered daily activity digests[/dim]\n")
    _show_system_info()
    console.print()

    try:
        config = DigestConfig.load(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[yellow]Could not resolve configuration:[/yellow] {e}")
        return
    _show_config(config)
