"""CLI command: policypilot propose — synthesize least-privilege policies."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from policypilot.cli.common import check_namespace, load_flows
from policypilot.config import PolicyPilotConfig
from policypilot.flows.reader import FlowFileError
from policypilot.policy.models import Policy
from policypilot.policy.serializer import write_policies
from policypilot.policy.synthesizer import NoFlowsProvidedError, PolicySynthesizer

console = Console(stderr=True)


@click.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Flow file (default: <output-dir>/flows.json).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output YAML file (default: <output-dir>/policy.yaml).",
)
@click.option(
    "--namespace",
    "-n",
    callback=check_namespace,
    default=None,
    help="Only synthesize policies for this destination namespace.",
)
@click.pass_context
def propose(
    ctx: click.Context,
    input_file: str | None,
    output: str | None,
    namespace: str | None,
) -> None:
    """Synthesize minimal CiliumNetworkPolicies from observed flows."""
    config: PolicyPilotConfig = ctx.obj["config"]
    input_path = Path(input_file) if input_file else config.flows_file
    output_path = Path(output) if output else config.policy_file

    console.print(f"[bold]PolicyPilot[/bold] reading flows from [cyan]{input_path}[/cyan]")
    try:
        total, records = load_flows(input_path)
    except FlowFileError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    synthesizer = PolicySynthesizer(namespace=namespace)
    synthesizer.observe_all(records)
    try:
        policies = synthesizer.synthesize()
    except NoFlowsProvidedError:
        console.print("[red]No flows to synthesize from.[/red]")
        sys.exit(1)

    console.print(f"Parsed {len(records)} of {total} flows")
    if not policies:
        console.print(
            "[yellow]No policies synthesized: flows lack destination labels, "
            "source labels or ports.[/yellow]"
        )
        sys.exit(1)

    _print_policies(policies)
    write_policies(policies, output_path)
    console.print(f"\n[green]{len(policies)} policies written to {output_path}[/green]")


def _print_policies(policies: list[Policy]) -> None:
    table = Table(title="Proposed policies", show_lines=False)
    table.add_column("Namespace", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Rules", justify="right")
    table.add_column("Ports")

    for policy in policies:
        ports = sorted(
            {f"{p.port}/{p.protocol.value}" for r in policy.rules for p in r.ports},
            key=lambda s: (int(s.split("/")[0]), s),
        )
        table.add_row(
            policy.namespace,
            policy.name,
            str(len(policy.rules)),
            ", ".join(ports),
        )

    console.print(table)
