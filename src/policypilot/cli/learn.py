"""CLI command: policypilot learn — read or capture Hubble flows."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from policypilot.config import PolicyPilotConfig
from policypilot.flows.capture import CaptureError, HubbleCapture
from policypilot.flows.reader import (
    FlowFileError,
    parse_flows,
    read_flow_collection,
    write_flow_collection,
)

console = Console(stderr=True)


@click.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Flow file to read (collection JSON or Hubble NDJSON).",
)
@click.option(
    "--capture",
    is_flag=True,
    help="Capture flows with 'hubble observe -o json' instead of reading a file.",
)
@click.option("--since", default=None, help="Capture flows since, e.g. 5m.")
@click.option("--last", type=int, default=None, help="Capture the last N flows.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where to save the normalized flows (default: <output-dir>/flows.json).",
)
@click.pass_context
def learn(
    ctx: click.Context,
    input_file: str | None,
    capture: bool,
    since: str | None,
    last: int | None,
    output: str | None,
) -> None:
    """Read flows from a file or Hubble and save them for synthesis."""
    config: PolicyPilotConfig = ctx.obj["config"]
    output_path = Path(output) if output else config.flows_file

    if capture and input_file:
        raise click.UsageError("--capture and --input are mutually exclusive")

    if capture:
        extra: list[str] = []
        if since:
            extra += ["--since", since]
        if last is not None:
            extra += ["--last", str(last)]
        raw_path = output_path.with_suffix(".ndjson")
        console.print(f"[bold]PolicyPilot[/bold] capturing flows with {config.hubble_cli}")
        try:
            input_file = str(HubbleCapture(config.hubble_cli).capture(raw_path, extra))
        except CaptureError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)

    if not input_file:
        input_file = str(config.flows_file)
        if not Path(input_file).is_file():
            console.print(f"[yellow]No flow file found at {input_file}.[/yellow]")
            console.print(
                "  Capture with [cyan]hubble observe -o json > flows.json[/cyan], "
                "or pass --input / --capture."
            )
            sys.exit(1)

    console.print(f"Reading flows from [cyan]{input_file}[/cyan]")
    try:
        collection = read_flow_collection(input_file)
    except FlowFileError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    records = parse_flows(collection)
    console.print(
        f"Loaded {len(collection.flows)} flows (parsed {len(records)} successfully)"
    )

    write_flow_collection(collection, output_path)
    console.print(f"[green]Flows saved to {output_path}[/green]")
