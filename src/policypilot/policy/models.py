"""Policy data models — immutable dataclasses produced by the synthesizer."""

from __future__ import annotations

from dataclasses import dataclass

from policypilot.flows.models import Protocol

API_VERSION = "cilium.io/v2"
KIND = "CiliumNetworkPolicy"


@dataclass(frozen=True)
class PortProtocol:
    """A destination port and the protocol it was observed with."""

    port: int
    protocol: Protocol = Protocol.TCP

    @property
    def sort_key(self) -> tuple[int, str]:
        """Ports order numerically (80 before 443), then by protocol name."""
        return (self.port, self.protocol.value)


@dataclass(frozen=True)
class PermissionRule:
    """Allow one source identity to reach a set of ports."""

    source_labels: dict[str, str]
    ports: tuple[PortProtocol, ...] = ()


@dataclass(frozen=True)
class Policy:
    """A synthesized least-privilege policy for one destination identity."""

    name: str
    namespace: str
    selector: dict[str, str]
    rules: tuple[PermissionRule, ...] = ()
    api_version: str = API_VERSION
    kind: str = KIND
