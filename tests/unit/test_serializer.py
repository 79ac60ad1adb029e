"""Tests for YAML rendering of policies."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from policypilot.flows.models import Protocol
from policypilot.policy.models import PermissionRule, Policy, PortProtocol
from policypilot.policy.serializer import (
    policies_to_yaml,
    policy_to_dict,
    policy_to_yaml,
    write_policies,
)


@pytest.fixture
def catalog_policy() -> Policy:
    return Policy(
        name="catalog-policy",
        namespace="default",
        selector={"tier": "backend", "app": "catalog"},
        rules=(
            PermissionRule(
                source_labels={"app": "frontend"},
                ports=(PortProtocol(8080), PortProtocol(8081, Protocol.UDP)),
            ),
        ),
    )


def test_policy_to_dict_shape(catalog_policy: Policy):
    data = policy_to_dict(catalog_policy)
    assert data["apiVersion"] == "cilium.io/v2"
    assert data["kind"] == "CiliumNetworkPolicy"
    assert data["metadata"] == {"name": "catalog-policy", "namespace": "default"}
    assert data["spec"]["endpointSelector"] == {
        "matchLabels": {"app": "catalog", "tier": "backend"}
    }
    assert data["spec"]["ingress"] == [
        {
            "fromEndpoints": [{"matchLabels": {"app": "frontend"}}],
            "toPorts": [
                {
                    "ports": [
                        {"port": "8080", "protocol": "TCP"},
                        {"port": "8081", "protocol": "UDP"},
                    ]
                }
            ],
        }
    ]


def test_labels_emitted_in_key_order(catalog_policy: Policy):
    text = policy_to_yaml(catalog_policy)
    assert text.index("app: catalog") < text.index("tier: backend")


def test_top_level_key_order(catalog_policy: Policy):
    keys = list(yaml.safe_load(policy_to_yaml(catalog_policy)))
    assert keys == ["apiVersion", "kind", "metadata", "spec"]


def test_port_emitted_as_string(catalog_policy: Policy):
    data = yaml.safe_load(policy_to_yaml(catalog_policy))
    port = data["spec"]["ingress"][0]["toPorts"][0]["ports"][0]["port"]
    assert port == "8080"


def test_multi_document_separators(catalog_policy: Policy):
    other = Policy(
        name="db-policy",
        namespace="default",
        selector={"app": "db"},
        rules=(PermissionRule({"app": "catalog"}, (PortProtocol(5432),)),),
    )
    text = policies_to_yaml([catalog_policy, other])
    assert not text.startswith("---")
    assert not text.rstrip().endswith("---")
    assert text.count("\n---\n") == 1
    docs = list(yaml.safe_load_all(text))
    assert [d["metadata"]["name"] for d in docs] == ["catalog-policy", "db-policy"]


def test_single_policy_has_no_separator(catalog_policy: Policy):
    assert "---" not in policies_to_yaml([catalog_policy])


def test_empty_list_serializes_to_empty_string():
    assert policies_to_yaml([]) == ""


def test_write_policies(tmp_path: Path, catalog_policy: Policy):
    out = tmp_path / "out" / "policy.yaml"
    written = write_policies([catalog_policy], out)
    assert written == out
    assert out.read_text(encoding="utf-8") == policy_to_yaml(catalog_policy)


def test_write_policies_refuses_empty(tmp_path: Path):
    with pytest.raises(ValueError, match="No policies"):
        write_policies([], tmp_path / "policy.yaml")
