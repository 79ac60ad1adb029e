"""Flow data models — one observed connection after normalization."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

_MAX_PORT = 65535


class Protocol(enum.Enum):
    """Transport protocol of an observed flow."""

    TCP = "TCP"
    UDP = "UDP"

    @classmethod
    def parse(cls, value: Protocol | str | None) -> Protocol:
        """Normalize a protocol name, defaulting to TCP when absent."""
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.TCP
        if not isinstance(value, str):
            raise ValueError(f"Unsupported flow protocol: {value!r}")
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Unsupported flow protocol: {value!r}") from None


@dataclass(frozen=True)
class Endpoint:
    """One side of a connection: pod labels, namespace and pod name."""

    labels: dict[str, str] = field(default_factory=dict)
    namespace: str = ""
    pod_name: str = ""


@dataclass(frozen=True)
class FlowRecord:
    """A single observed connection, immutable once created.

    ``port`` is the destination port; ``0`` means the flow carried no
    usable port. ``verdict`` is kept for reporting only.
    """

    source: Endpoint
    destination: Endpoint
    port: int = 0
    protocol: Protocol = Protocol.TCP
    verdict: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.port <= _MAX_PORT:
            raise ValueError(f"Port out of range: {self.port}")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "protocol", Protocol.parse(self.protocol))
