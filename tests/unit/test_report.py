"""Tests for the HTML report."""

from __future__ import annotations

from pathlib import Path

from policypilot.flows.models import FlowRecord
from policypilot.policy.synthesizer import synthesize_policies
from policypilot.report import build_report, render_html, write_html_report


def test_build_report_stats(demo_flows: list[FlowRecord]):
    policies = synthesize_policies(demo_flows)
    data = build_report(demo_flows, policies)
    assert data.flow_count == len(demo_flows)
    assert data.policy_count == 3
    assert data.namespaces == ["default", "demo", "kube-system"]
    assert data.protocols == {"TCP": 5, "UDP": 1}
    assert len(data.graph.nodes) == 4


def test_render_html_escapes_content(make_flow):
    flows = [make_flow({"app": "<script>"}, {"app": "api"}, 80)]
    html = render_html(build_report(flows, synthesize_policies(flows)))
    assert html.startswith("<!DOCTYPE html>")
    assert "<script>-" not in html
    assert "&lt;script&gt;" in html
    assert "default/api-policy" in html


def test_write_html_report(tmp_path: Path, demo_flows: list[FlowRecord]):
    out = tmp_path / "out" / "report.html"
    data = build_report(demo_flows, synthesize_policies(demo_flows))
    assert write_html_report(data, out) == out
    text = out.read_text(encoding="utf-8")
    assert "PolicyPilot Report" in text
    assert "graph TD" in text
    assert "backend-policy" in text


def test_render_html_escapes_namespace_and_lists_protocols(make_flow):
    flows = [
        make_flow({"app": "web"}, {"app": "api"}, 53, "UDP", dst_ns="a&b"),
    ]
    page = render_html(build_report(flows, synthesize_policies(flows)))
    assert "<h3>a&amp;b/api-policy</h3>" in page
    assert "<li>UDP: 1</li>" in page
    assert 'class="mermaid"' in page
    assert "--&gt;" in page
