"""Helpers shared by CLI commands."""

from __future__ import annotations

import re
from pathlib import Path

import click

from policypilot.flows.models import FlowRecord
from policypilot.flows.reader import parse_flows, read_flow_collection

_NAMESPACE_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
_NAMESPACE_MAX_LEN = 63


def check_namespace(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    """Click callback: accept only valid Kubernetes namespace names."""
    if not value:
        return None
    if len(value) > _NAMESPACE_MAX_LEN:
        raise click.BadParameter(
            f"namespace name too long (max {_NAMESPACE_MAX_LEN} characters): {value}"
        )
    if not _NAMESPACE_RE.match(value):
        raise click.BadParameter(
            f"invalid namespace name: {value} (must be lowercase alphanumeric with hyphens)"
        )
    return value


def load_flows(path: str | Path) -> tuple[int, list[FlowRecord]]:
    """Read a flow file. Returns (raw flow count, parsed records)."""
    collection = read_flow_collection(path)
    return len(collection.flows), parse_flows(collection)
