"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from policypilot import __version__
from policypilot.config import PolicyPilotConfig


@click.group()
@click.version_option(version=__version__, prog_name="policypilot")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for generated files (default: out, or $POLICYPILOT_OUTPUT_DIR).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, output_dir: str | None, verbose: bool) -> None:
    """PolicyPilot — least-privilege Cilium policies from observed Hubble flows."""
    config = PolicyPilotConfig.load()
    if output_dir:
        config.output_dir = Path(output_dir)
    config.verbose = verbose
    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from policypilot.cli.explain import explain  # noqa: F811
    from policypilot.cli.learn import learn  # noqa: F811
    from policypilot.cli.propose import propose  # noqa: F811
    from policypilot.cli.verify import verify  # noqa: F811

    main.add_command(learn)
    main.add_command(propose)
    main.add_command(verify)
    main.add_command(explain)


_register_commands()
