"""CLI command: policypilot explain — HTML report of flows and policies."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from policypilot.cli.common import check_namespace, load_flows
from policypilot.config import PolicyPilotConfig
from policypilot.flows.reader import FlowFileError
from policypilot.policy.synthesizer import NoFlowsProvidedError, PolicySynthesizer
from policypilot.report import build_report, write_html_report

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
    help="HTML report path (default: <output-dir>/report.html).",
)
@click.option(
    "--namespace",
    "-n",
    callback=check_namespace,
    default=None,
    help="Only report on this destination namespace.",
)
@click.pass_context
def explain(
    ctx: click.Context,
    input_file: str | None,
    output: str | None,
    namespace: str | None,
) -> None:
    """Write an HTML report with a service graph and the proposed policies."""
    config: PolicyPilotConfig = ctx.obj["config"]
    input_path = Path(input_file) if input_file else config.flows_file
    output_path = Path(output) if output else config.report_file

    try:
        _, records = load_flows(input_path)
    except FlowFileError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    synthesizer = PolicySynthesizer(namespace=namespace)
    synthesizer.observe_all(records)
    try:
        policies = synthesizer.synthesize()
    except NoFlowsProvidedError:
        console.print("[red]No flows to explain.[/red]")
        sys.exit(1)

    flows = [
        r for r in records if not namespace or r.destination.namespace == namespace
    ]
    write_html_report(build_report(flows, policies), output_path)
    console.print(f"[green]Report written to {output_path}[/green]")
