"""HTML report: flow statistics, service graph and proposed policies."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, PackageLoader

from policypilot.flows.models import FlowRecord
from policypilot.graph import Graph, build_graph
from policypilot.policy.models import Policy
from policypilot.policy.serializer import policy_to_yaml

_MERMAID_JS = "https://cdn.jsdelivr.net/npm/mermaid/dist/mermaid.min.js"
_TEMPLATE = "report.html"

_env = Environment(
    loader=PackageLoader("policypilot", "templates"),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class ReportData:
    """Everything the report renders."""

    flow_count: int
    policy_count: int
    policies: list[Policy]
    graph: Graph
    namespaces: list[str] = field(default_factory=list)
    protocols: dict[str, int] = field(default_factory=dict)
    generated_at: float = field(default_factory=time.time)


def build_report(flows: list[FlowRecord], policies: list[Policy]) -> ReportData:
    namespaces = {f.source.namespace for f in flows} | {
        f.destination.namespace for f in flows
    }
    protocols = Counter(f.protocol.value for f in flows)
    return ReportData(
        flow_count=len(flows),
        policy_count=len(policies),
        policies=list(policies),
        graph=build_graph(flows),
        namespaces=sorted(ns for ns in namespaces if ns),
        protocols=dict(sorted(protocols.items())),
    )


def render_html(data: ReportData) -> str:
    """Render the report as a standalone HTML page."""
    template = _env.get_template(_TEMPLATE)
    return template.render(
        data=data,
        mermaid_js=_MERMAID_JS,
        generated=time.strftime(
            "%Y-%m-%d %H:%M:%S", time.localtime(data.generated_at)
        ),
        stats=[
            ("Flows", data.flow_count),
            ("Policies", data.policy_count),
            ("Namespaces", len(data.namespaces)),
        ],
        mermaid=data.graph.to_mermaid(),
        policies=[(p, policy_to_yaml(p)) for p in data.policies],
    ) + "\n"


def write_html_report(data: ReportData, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(data), encoding="utf-8")
    return path
