"""Service graph built from flows, rendered as a Mermaid diagram."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from policypilot.flows.models import FlowRecord

_LABEL_KEYS = ("k8s:app", "app", "name", "component")
_ID_KEYS = ("k8s:app", "app")

_ID_SEPARATORS = re.compile(r"[:._ ]")
_REPEATED_DASH = re.compile(r"-{2,}")


@dataclass(frozen=True)
class Node:
    id: str
    label: str
    namespace: str


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    port: int
    protocol: str

    @property
    def label(self) -> str:
        return f"{self.protocol}:{self.port}"


@dataclass
class Graph:
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def to_mermaid(self) -> str:
        lines = ["graph TD"]
        for node in self.nodes:
            if node.namespace:
                lines.append(f"    {node.id}[{node.label}<br/>ns: {node.namespace}]")
            else:
                lines.append(f"    {node.id}[{node.label}]")
        for edge in self.edges:
            lines.append(f"    {edge.source} -->|{edge.label}| {edge.target}")
        return "\n".join(lines) + "\n"


def sanitize_id(raw: str) -> str:
    """Make a string safe to use as a Mermaid node id."""
    node_id = _ID_SEPARATORS.sub("-", raw.lower())
    node_id = _REPEATED_DASH.sub("-", node_id)
    return node_id.strip("-")


def _first_value(labels: dict[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if key in labels:
            return labels[key]
    if labels:
        return labels[min(labels)]
    return None


def node_id(labels: dict[str, str], namespace: str) -> str:
    value = _first_value(labels, _ID_KEYS)
    if value is None:
        return sanitize_id(namespace)
    return sanitize_id(f"{namespace}-{value}")


def node_label(labels: dict[str, str]) -> str:
    value = _first_value(labels, _LABEL_KEYS)
    return "unknown" if value is None else value


def build_graph(flows: Iterable[FlowRecord]) -> Graph:
    """Collect one node per endpoint and one edge per distinct connection."""
    nodes: dict[str, Node] = {}
    edges: set[Edge] = set()

    for flow in flows:
        src, dst = flow.source, flow.destination
        if not src.labels or not dst.labels:
            continue

        src_id = node_id(src.labels, src.namespace)
        dst_id = node_id(dst.labels, dst.namespace)
        nodes.setdefault(src_id, Node(src_id, node_label(src.labels), src.namespace))
        nodes.setdefault(dst_id, Node(dst_id, node_label(dst.labels), dst.namespace))
        edges.add(Edge(src_id, dst_id, flow.port, flow.protocol.value))

    return Graph(
        nodes=[nodes[k] for k in sorted(nodes)],
        edges=sorted(edges, key=lambda e: (e.source, e.target, e.port, e.protocol)),
    )
