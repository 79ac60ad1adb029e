"""CLI command: policypilot verify — structural check of policy YAML."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from policypilot.config import PolicyPilotConfig
from policypilot.policy.validator import VerificationResult, verify_policy_file

console = Console(stderr=True)


@click.command()
@click.argument(
    "policy_file",
    type=click.Path(exists=True, dir_okay=False),
    required=False,
)
@click.pass_context
def verify(ctx: click.Context, policy_file: str | None) -> None:
    """Validate POLICY_FILE (default: <output-dir>/policy.yaml)."""
    config: PolicyPilotConfig = ctx.obj["config"]
    path = Path(policy_file) if policy_file else config.policy_file
    if not path.is_file():
        console.print(f"[red]Policy file not found: {path}[/red]")
        sys.exit(1)

    console.print(f"[bold]PolicyPilot[/bold] verifying [cyan]{path}[/cyan]\n")
    result = verify_policy_file(path)
    _print_result(result)

    if not result.valid:
        sys.exit(1)


def _print_result(result: VerificationResult) -> None:
    if result.policies:
        table = Table(title="Documents", show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("Kind")
        table.add_column("Namespace", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Status")

        for info in result.policies:
            status = "[green]valid[/green]" if info.valid else "[red]invalid[/red]"
            table.add_row(
                str(info.index),
                escape(info.kind),
                escape(info.namespace),
                escape(info.name),
                status,
            )
        console.print(table)

    for info in result.policies:
        for error in info.errors:
            console.print(f"  [red]document {info.index}:[/red] {escape(error)}")
    for error in result.errors:
        console.print(f"  [red]{escape(error)}[/red]")
    for warning in result.warnings:
        console.print(f"  [yellow]{escape(warning)}[/yellow]")

    if result.valid:
        console.print(f"\n[green]All {len(result.policies)} policies valid.[/green]")
    else:
        invalid = sum(1 for p in result.policies if not p.valid)
        console.print(
            f"\n[red]Verification failed: {invalid} of {len(result.policies)} "
            "documents invalid.[/red]"
        )
