"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from policypilot.flows.models import Endpoint, FlowRecord, Protocol


def _make_flow(
    src: dict[str, str] | None = None,
    dst: dict[str, str] | None = None,
    port: int = 8080,
    protocol: Protocol | str = Protocol.TCP,
    src_ns: str = "default",
    dst_ns: str = "default",
) -> FlowRecord:
    return FlowRecord(
        source=Endpoint(labels=dict(src or {}), namespace=src_ns),
        destination=Endpoint(labels=dict(dst or {}), namespace=dst_ns),
        port=port,
        protocol=protocol,
        verdict="FORWARDED",
    )


@pytest.fixture
def make_flow():
    """Factory for FlowRecords with sensible defaults."""
    return _make_flow


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def collection_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "flows_collection.json"


@pytest.fixture
def ndjson_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "flows.ndjson"


@pytest.fixture
def valid_policies_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "valid_policies.yaml"


@pytest.fixture
def invalid_policies_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "invalid_policies.yaml"


@pytest.fixture
def demo_flows() -> list[FlowRecord]:
    """A small three-tier app plus some flows that synthesize nothing."""
    return [
        _make_flow({"app": "frontend"}, {"app": "backend"}, 8080, dst_ns="demo", src_ns="demo"),
        _make_flow({"app": "frontend"}, {"app": "backend"}, 8443, dst_ns="demo", src_ns="demo"),
        _make_flow({"app": "backend"}, {"app": "database"}, 5432, dst_ns="demo", src_ns="demo"),
        _make_flow({"app": "backend"}, {"k8s-app": "kube-dns"}, 53, Protocol.UDP, dst_ns="kube-system", src_ns="demo"),
        _make_flow({}, {"app": "backend"}, 8080, dst_ns="demo"),
        _make_flow({"app": "frontend"}, {}, 8080, dst_ns="demo"),
    ]
