"""Run command: daydigest run."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich import box
from rich.table import Table

from daydigest.cli.main import console, get_trend_style, is_demo_mode
from daydigest.core.errors import DigestError


def _print_stage_table(run_log: dict) -> None:
    table = Table(title="Stages", box=box.ROUNDED)
    table.add_column("Stage", style="bold", no_wrap=True)
    table.add_column("In", justify="right")
    table.add_column("Out", justify="right", style="green")
    table.add_column("LLM calls", justify="right", style="cyan")
    table.add_column("Fallbacks", justify="right", style="yellow")

    for name, stage in run_log.get("stages", {}).items():
        table.add_row(
            name,
            str(stage["items_in"]),
            str(stage["items_out"]),
            str(stage["llm_calls"]),
            str(stage["fallbacks"]),
        )
    console.print(table)


def _print_patterns(result) -> None:
    patterns = result.patterns

    if patterns.temporal_clusters:
        table = Table(title="Temporal Clusters", box=box.ROUNDED)
        table.add_column("Cluster", style="bold")
        table.add_column("Events", justify="right")
        table.add_column("Intensity", justify="right")
        for cluster in patterns.temporal_clusters[:8]:
            table.add_row(cluster.label, str(cluster.event_count), f"{cluster.intensity:.1f}/h")
        console.print(table)

    if patterns.recurrence_signals:
        table = Table(title="Recurrence", box=box.ROUNDED)
        table.add_column("Topic", style="bold")
        table.add_column("Trend")
        table.add_column("Days", justify="right")
        for signal in patterns.recurrence_signals[:12]:
            style = get_trend_style(signal.trend)
            table.add_row(signal.topic, f"[{style}]{signal.trend}[/{style}]", str(signal.day_count))
        console.print(table)

    console.print(
        f"[bold]Focus:[/bold] {patterns.focus_score:.2f}  "
        f"[bold]Activity concentration:[/bold] {patterns.activity_concentration_score:.2f}"
    )


def _print_leak_report(result) -> None:
    report = result.leak_report
    if report is None:
        return
    if report.passed:
        console.print(f"[bold]Leak check ({report.tier.value}):[/bold] [green]passed[/green]")
        return
    console.print(f"[bold]Leak check ({report.tier.value}):[/bold] [red]blocked[/red]")
    for violation in report.violations:
        console.print(f"  [red]•[/red] {violation}")
    for secret in report.secrets_found:
        console.print(f"  [red]•[/red] {secret}")


@click.command()
@click.argument("activity_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--date", "day", default=None, help="Digest day as YYYY-MM-DD (default: today)")
@click.option("--tier", default=None, help="Privacy tier: standard, rag, classified, deidentified")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON config file")
@click.option("--data-dir", default=None, help="Override data directory (history, logs)")
@click.option("--no-history", is_flag=True, default=False, help="Do not read or write topic history")
@click.option("--llm", "use_llm", is_flag=True, default=False, help="Use LLM-assisted classification")
@click.option("--out", "out_path", default=None, type=click.Path(dir_okay=False),
              help="Write the full JSON result to this file")
@click.option("--json", "output_json", is_flag=True, help="Print the JSON result instead of tables")
@click.option("--verbose", "-v", count=True, help="Verbosity level: -v per-stage, -vv LLM batch details")
def run(
    activity_json: str,
    day: str | None,
    tier: str | None,
    config_path: str | None,
    data_dir: str | None,
    no_history: bool,
    use_llm: bool,
    out_path: str | None,
    output_json: bool,
    verbose: int,
):
    """Build the digest prompt for one day of activity.

    ACTIVITY_JSON is an activity export with visits, searches, shell,
    assistant and commits arrays.
    """
    from daydigest.core.config import DigestConfig
    from daydigest.core.errors import atomic_write
    from daydigest.core.models import PrivacyTier
    from daydigest.pipeline import run_digest
    from daydigest.sources.json_export import load_activity

    try:
        config = DigestConfig.load(Path(config_path) if config_path else None)
        if tier:
            config.privacy_tier = PrivacyTier.parse(tier)
        if data_dir:
            config.data_dir = Path(data_dir).expanduser()
        if use_llm:
            config.classify.use_llm = True
        activity = load_activity(activity_json)
        result = run_digest(
            activity,
            config,
            today=day,
            use_history=not no_history,
            verbosity=verbose,
        )
    except DigestError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    payload = result.to_dict()
    if out_path:
        atomic_write(Path(out_path), json.dumps(payload, indent=2, ensure_ascii=False))

    if output_json:
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    console.print(
        f"\n[bold]{result.date}[/bold]  tier [cyan]{result.tier.value}[/cyan]  "
        f"{result.record_count} records, {result.collapsed_count} collapsed, "
        f"{result.sensitive_count} sensitive, {result.excluded_count} excluded"
    )
    _print_stage_table(result.run_log)
    _print_patterns(result)
    _print_leak_report(result)
    if result.history_error:
        console.print(f"[yellow]Topic history was unreadable:[/yellow] {result.history_error}")
    if not is_demo_mode():
        console.print(f"[bold]Time:[/bold] {result.total_time:.2f}s")
    if out_path:
        console.print(f"[green]Wrote result[/green] → {out_path}")
