"""Synthesize minimal ingress policies from observed flows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from policypilot.flows.models import FlowRecord
from policypilot.policy.grouping import (
    AuthorizationUnit,
    group_by_destination,
    group_by_source,
)
from policypilot.policy.models import PermissionRule, Policy, PortProtocol
from policypilot.policy.serializer import policies_to_yaml

logger = logging.getLogger(__name__)

# Label keys tried, in order, when naming a policy
_NAME_KEYS = ("app", "k8s:app", "name", "component")

_FALLBACK_NAME = "default-policy"


class NoFlowsProvidedError(ValueError):
    """Synthesis was asked to run on an empty flow collection."""


def policy_name(labels: dict[str, str]) -> str:
    """Derive a policy name from the destination labels."""
    for key in _NAME_KEYS:
        if key in labels:
            return f"{labels[key]}-policy"
    if labels:
        return f"{labels[min(labels)]}-policy"
    return _FALLBACK_NAME


def derive_rules(flows: Iterable[FlowRecord]) -> tuple[PermissionRule, ...]:
    """One rule per source label set, with its deduplicated ports."""
    rules: list[PermissionRule] = []
    for group in group_by_source(flows):
        ports = {PortProtocol(port=f.port, protocol=f.protocol) for f in group.flows}
        rules.append(
            PermissionRule(
                source_labels=group.labels,
                ports=tuple(sorted(ports, key=lambda p: p.sort_key)),
            )
        )
    return tuple(rules)


def synthesize_unit(unit: AuthorizationUnit) -> Policy | None:
    """Build the policy for one unit, or None if no rule could be formed."""
    rules = derive_rules(unit.flows)
    if not rules:
        return None
    return Policy(
        name=policy_name(unit.labels),
        namespace=unit.namespace,
        selector=dict(unit.labels),
        rules=rules,
    )


def synthesize_policies(flows: Sequence[FlowRecord]) -> list[Policy]:
    """Generate one policy per destination identity seen in ``flows``.

    Raises NoFlowsProvidedError on empty input. A non-empty input that
    yields nothing synthesizable returns an empty list.
    """
    if not flows:
        raise NoFlowsProvidedError("No flows provided")

    policies: list[Policy] = []
    for unit in group_by_destination(flows):
        policy = synthesize_unit(unit)
        if policy is not None:
            policies.append(policy)
    return policies


class PolicySynthesizer:
    """Accumulates flows and turns them into policies.

    Usage:
        1. Create a synthesizer
        2. Feed it FlowRecords via observe() / observe_all()
        3. Call synthesize() to produce Policy objects
        4. Call export_yaml() to get the multi-document YAML string
    """

    def __init__(self, namespace: str | None = None) -> None:
        self._namespace = namespace
        self._flows: list[FlowRecord] = []

    @property
    def flow_count(self) -> int:
        return len(self._flows)

    def observe(self, flow: FlowRecord) -> None:
        """Record a flow, honouring the destination namespace filter."""
        if self._namespace and flow.destination.namespace != self._namespace:
            return
        self._flows.append(flow)

    def observe_all(self, flows: Iterable[FlowRecord]) -> None:
        for flow in flows:
            self.observe(flow)

    def synthesize(self) -> list[Policy]:
        policies = synthesize_policies(self._flows)
        logger.debug(
            "Synthesized %d policies from %d flows", len(policies), len(self._flows)
        )
        return policies

    def export_yaml(self) -> str:
        """Export the synthesized policies as a YAML string."""
        return policies_to_yaml(self.synthesize())
