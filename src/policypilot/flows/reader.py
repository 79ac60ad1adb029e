"""Read Hubble flow exports and normalize them into FlowRecords.

Two on-disk formats are accepted:

1. A batched collection: ``{"schema": "...", "flows": [{...}, ...]}``
2. Hubble's NDJSON export (``hubble observe -o json``), one
   ``{"flow": {...}, "node_name": ..., "time": ...}`` object per line.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from policypilot.flows.models import Endpoint, FlowRecord, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "cpp.flows.v1"

_IP_VERSIONS = {"IPv4": 4, "IPv6": 6}


class FlowFileError(ValueError):
    """The flow file could not be read in any supported format."""


@dataclass
class FlowCollection:
    """Raw flow dicts plus the schema identifier they were stored under."""

    schema: str = DEFAULT_SCHEMA
    flows: list[dict[str, Any]] = field(default_factory=list)


def read_flow_collection(path: str | Path) -> FlowCollection:
    """Read a flow file in batched JSON or NDJSON format."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FlowFileError(f"Failed to read flows file {path}: {e}") from e
    return load_flow_collection(text)


def load_flow_collection(text: str) -> FlowCollection:
    """Parse flow file contents, trying the batched format before NDJSON."""
    collection = _load_batched(text)
    if collection is not None:
        return collection

    collection = _load_ndjson(text)
    if collection.flows:
        return collection

    raise FlowFileError(
        "Failed to parse flows: not a flow collection or Hubble NDJSON export"
    )


def _load_batched(text: str) -> FlowCollection | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    schema = data.get("schema")
    raw_flows = data.get("flows")
    if not schema or not isinstance(schema, str) or not isinstance(raw_flows, list):
        return None

    flows = [_normalize(f) for f in raw_flows if isinstance(f, dict)]
    skipped = len(raw_flows) - len(flows)
    if skipped:
        logger.debug("Skipped %d non-object entries in flow collection", skipped)
    return FlowCollection(schema=schema, flows=flows)


def _load_ndjson(text: str) -> FlowCollection:
    flows: list[dict[str, Any]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping unparseable line %d", lineno)
            continue
        flow = obj.get("flow") if isinstance(obj, dict) else None
        if isinstance(flow, dict):
            flows.append(_normalize(flow))
    return FlowCollection(schema=DEFAULT_SCHEMA, flows=flows)


def _normalize(flow: dict[str, Any]) -> dict[str, Any]:
    """Rename field-name variants seen across Hubble versions."""
    flow = dict(flow)
    if "IP" in flow and "ip" not in flow:
        flow["ip"] = flow.pop("IP")
    ip = flow.get("ip")
    if isinstance(ip, dict) and ip.get("ipVersion") in _IP_VERSIONS:
        flow["ip"] = {**ip, "ipVersion": _IP_VERSIONS[ip["ipVersion"]]}
    return flow


def parse_labels(label_strings: list[str]) -> dict[str, str]:
    """Convert ``["key=value", ...]`` into a label dict.

    Splits on the first ``=``; a bare ``key`` maps to an empty value.
    """
    labels: dict[str, str] = {}
    for label in label_strings or ():
        if not label:
            continue
        key, _, value = label.partition("=")
        labels[key] = value
    return labels


def _parse_endpoint(raw: Any) -> Endpoint:
    if not isinstance(raw, dict):
        return Endpoint()
    return Endpoint(
        labels=parse_labels(raw.get("labels") or []),
        namespace=raw.get("namespace") or "",
        pod_name=raw.get("pod_name") or "",
    )


def parse_flow(raw: dict[str, Any]) -> FlowRecord:
    """Extract the policy-relevant fields of one raw flow dict."""
    if not isinstance(raw, dict):
        raise ValueError("Flow must be a mapping")

    protocol = Protocol.TCP
    port = 0
    l4 = raw.get("l4") or {}
    tcp = l4.get("TCP")
    udp = l4.get("UDP")
    if isinstance(tcp, dict):
        port = tcp.get("destination_port") or 0
    elif isinstance(udp, dict):
        protocol = Protocol.UDP
        port = udp.get("destination_port") or 0

    return FlowRecord(
        source=_parse_endpoint(raw.get("source")),
        destination=_parse_endpoint(raw.get("destination")),
        port=int(port),
        protocol=protocol,
        verdict=raw.get("verdict") or "",
    )


def parse_flows(collection: FlowCollection) -> list[FlowRecord]:
    """Parse every flow in a collection, skipping the ones that fail."""
    records: list[FlowRecord] = []
    for i, raw in enumerate(collection.flows):
        try:
            records.append(parse_flow(raw))
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug("Skipping flow %d: %s", i, e)
    return records


def write_flow_collection(collection: FlowCollection, path: str | Path) -> None:
    """Write a collection as indented JSON, creating the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"schema": collection.schema, "flows": collection.flows}
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
