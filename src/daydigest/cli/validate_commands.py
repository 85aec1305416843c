"""Validate command: leak-scan tier-bound text."""

from __future__ import annotations

import json
import sys

import click
from rich import box
from rich.table import Table

from daydigest.cli.main import console


@click.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--tier", required=True, help="Privacy tier: standard, rag, classified, deidentified")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def validate(source, tier: str, output_json: bool):
    """Check text against a privacy tier's leak rules.

    SOURCE is a file path, or - for stdin. Exits 1 when the text fails.
    """
    from daydigest.core.errors import ConfigError
    from daydigest.core.models import PrivacyTier
    from daydigest.privacy.leaks import validate_leaks

    try:
        parsed_tier = PrivacyTier.parse(tier)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    report = validate_leaks(source.read(), parsed_tier)

    if output_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        status = "[green]passed[/green]" if report.passed else "[red]failed[/red]"
        console.print(f"[bold]{parsed_tier.value}[/bold]: {status}")
        if not report.passed:
            table = Table(box=box.ROUNDED)
            table.add_column("Kind", style="bold")
            table.add_column("Detail")
            for violation in report.violations:
                table.add_row("violation", violation)
            for secret in report.secrets_found:
                table.add_row("[red]secret[/red]", secret)
            for url in report.urls_found:
                table.add_row("url", url)
            for command in report.commands_found:
                table.add_row("command", command)
            console.print(table)

    if not report.passed:
        sys.exit(1)
