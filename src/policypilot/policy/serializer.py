"""Render policies as CiliumNetworkPolicy YAML.

Ordering is fixed upstream by the grouping and synthesis steps; this
module only emits structure. Label maps are written in key order so the
same label set always produces the same bytes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from policypilot.policy.models import PermissionRule, Policy

DOCUMENT_SEPARATOR = "---\n"


def _labels(labels: dict[str, str]) -> dict[str, str]:
    return {k: labels[k] for k in sorted(labels)}


def _rule_to_dict(rule: PermissionRule) -> dict[str, Any]:
    return {
        "fromEndpoints": [{"matchLabels": _labels(rule.source_labels)}],
        "toPorts": [
            {
                "ports": [
                    {"port": str(p.port), "protocol": p.protocol.value}
                    for p in rule.ports
                ]
            }
        ],
    }


def policy_to_dict(policy: Policy) -> dict[str, Any]:
    """Structure a policy the way the Cilium CRD expects it."""
    return {
        "apiVersion": policy.api_version,
        "kind": policy.kind,
        "metadata": {"name": policy.name, "namespace": policy.namespace},
        "spec": {
            "endpointSelector": {"matchLabels": _labels(policy.selector)},
            "ingress": [_rule_to_dict(r) for r in policy.rules],
        },
    }


def policy_to_yaml(policy: Policy) -> str:
    result: str = yaml.dump(
        policy_to_dict(policy), default_flow_style=False, sort_keys=False
    )
    return result


def policies_to_yaml(policies: list[Policy]) -> str:
    """One document per policy, ``---`` between consecutive documents."""
    return DOCUMENT_SEPARATOR.join(policy_to_yaml(p) for p in policies)


def write_policies(policies: list[Policy], path: str | Path) -> Path:
    """Write policies to a YAML file, creating the parent directory."""
    if not policies:
        raise ValueError("No policies to write")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(policies_to_yaml(policies), encoding="utf-8")
    return path
