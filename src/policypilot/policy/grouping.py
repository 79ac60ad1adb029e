"""Group flows into authorization units by destination, then by source.

Label maps have no meaningful order, so every comparison and every sort
goes through ``canonical_labels``: the sorted ``key=value`` pairs joined
with commas. Two flows whose labels hold the same pairs in a different
order land in the same group.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from policypilot.flows.models import FlowRecord


def canonical_labels(labels: dict[str, str]) -> str:
    """Deterministic text form of a label set."""
    return ",".join(sorted(f"{k}={v}" for k, v in labels.items()))


def identity_key(namespace: str, labels: dict[str, str]) -> str:
    return f"{namespace}:{canonical_labels(labels)}"


@dataclass
class AuthorizationUnit:
    """All flows sharing one destination namespace and label set."""

    namespace: str
    labels: dict[str, str]
    flows: list[FlowRecord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return identity_key(self.namespace, self.labels)


@dataclass
class SourceGroup:
    """Flows into one unit that share a source label set."""

    labels: dict[str, str]
    flows: list[FlowRecord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return canonical_labels(self.labels)


def group_by_destination(flows: Iterable[FlowRecord]) -> list[AuthorizationUnit]:
    """Partition flows into units, ordered by namespace then labels.

    Flows without a destination namespace or destination labels have no
    authorization target and are left out.
    """
    units: dict[str, AuthorizationUnit] = {}
    for flow in flows:
        dst = flow.destination
        if not dst.namespace or not dst.labels:
            continue
        key = identity_key(dst.namespace, dst.labels)
        unit = units.get(key)
        if unit is None:
            unit = AuthorizationUnit(namespace=dst.namespace, labels=dict(dst.labels))
            units[key] = unit
        unit.flows.append(flow)

    return sorted(
        units.values(), key=lambda u: (u.namespace, canonical_labels(u.labels))
    )


def group_by_source(flows: Iterable[FlowRecord]) -> list[SourceGroup]:
    """Partition a unit's flows by source labels, ordered by canonical labels.

    Unlabeled sources cannot be expressed as a selector and flows without
    a destination port cannot be expressed as a port rule; both are dropped.
    """
    groups: dict[str, SourceGroup] = {}
    for flow in flows:
        if not flow.source.labels or flow.port == 0:
            continue
        key = canonical_labels(flow.source.labels)
        group = groups.get(key)
        if group is None:
            group = SourceGroup(labels=dict(flow.source.labels))
            groups[key] = group
        group.flows.append(flow)

    return [groups[key] for key in sorted(groups)]
