"""Structural validation of CiliumNetworkPolicy YAML.

Documents are parsed into plain dicts/lists and walked field by field;
nothing here touches the synthesizer's dataclasses, so hand-edited files
are checked exactly like generated ones. Every violation in a document is
collected before moving to the next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

EXPECTED_API_VERSION = "cilium.io/v2"
EXPECTED_KIND = "CiliumNetworkPolicy"
VALID_PROTOCOLS = frozenset({"TCP", "UDP", "ICMP", "SCTP"})

_SEPARATOR = "---"


@dataclass
class PolicyInfo:
    """Validation result for one document."""

    index: int
    name: str = ""
    namespace: str = ""
    kind: str = ""
    valid: bool = True
    errors: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.valid = False
        self.errors.append(message)


@dataclass
class VerificationResult:
    """Aggregate result over every document in a file."""

    valid: bool = True
    policies: list[PolicyInfo] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def split_documents(text: str) -> list[str]:
    """Split multi-document YAML on ``---`` lines, dropping blank documents."""
    documents: list[str] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.rstrip() == _SEPARATOR:
            documents.append("\n".join(current))
            current = []
            continue
        current.append(line)
    documents.append("\n".join(current))
    return [doc + "\n" for doc in documents if doc.strip()]


def verify_policy_file(path: str | Path) -> VerificationResult:
    """Read a policy file and validate every document in it."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read policy file %s: %s", path, e)
        return VerificationResult(
            valid=False, errors=[f"failed to read policy file: {e}"]
        )
    return validate_policies(text)


def validate_policies(text: str) -> VerificationResult:
    result = VerificationResult()

    for index, doc in enumerate(split_documents(text), start=1):
        info = validate_document(doc, index)
        if not info.valid:
            result.valid = False
        result.policies.append(info)

    if not result.policies:
        result.valid = False
        result.errors.append("no valid policies found in file")

    logger.debug(
        "Validated %d documents (valid=%s)", len(result.policies), result.valid
    )
    return result


def validate_document(doc: str, index: int = 1) -> PolicyInfo:
    """Validate a single YAML document."""
    info = PolicyInfo(index=index)
    try:
        data = yaml.safe_load(doc)
    except yaml.YAMLError as e:
        info.add_error(f"invalid YAML syntax: {e}")
        return info

    if not isinstance(data, dict):
        info.add_error("document must be a mapping")
        return info

    _check_header(data, info)
    _check_metadata(data, info)
    _check_spec(data, info)
    return info


def _check_header(data: dict, info: PolicyInfo) -> None:
    api_version = data.get("apiVersion")
    if not isinstance(api_version, str):
        info.add_error("missing required field: apiVersion")
    elif api_version != EXPECTED_API_VERSION:
        info.add_error(
            f"invalid apiVersion: expected '{EXPECTED_API_VERSION}', "
            f"got '{api_version}'"
        )

    kind = data.get("kind")
    if not isinstance(kind, str):
        info.add_error("missing required field: kind")
    else:
        info.kind = kind
        if kind != EXPECTED_KIND:
            info.add_error(
                f"invalid kind: expected '{EXPECTED_KIND}', got '{kind}'"
            )


def _check_metadata(data: dict, info: PolicyInfo) -> None:
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        info.add_error("missing required field: metadata")
        return

    name = metadata.get("name")
    if not isinstance(name, str):
        info.add_error("missing required field: metadata.name")
    elif not name:
        info.add_error("metadata.name cannot be empty")
    else:
        info.name = name

    namespace = metadata.get("namespace")
    if isinstance(namespace, str):
        info.namespace = namespace


def _check_spec(data: dict, info: PolicyInfo) -> None:
    spec = data.get("spec")
    if not isinstance(spec, dict):
        info.add_error("missing required field: spec")
        return

    selector = spec.get("endpointSelector")
    if not isinstance(selector, dict):
        info.add_error("missing required field: spec.endpointSelector")
    else:
        match_labels = selector.get("matchLabels")
        if not isinstance(match_labels, dict):
            info.add_error(
                "missing required field: spec.endpointSelector.matchLabels"
            )
        elif not match_labels:
            info.add_error("spec.endpointSelector.matchLabels cannot be empty")

    for direction, peers in (("ingress", "fromEndpoints"), ("egress", "toEndpoints")):
        rules = spec.get(direction)
        if rules is None:
            continue
        if not isinstance(rules, list):
            info.add_error(f"spec.{direction} must be a list")
            continue
        for i, rule in enumerate(rules):
            for error in _rule_errors(rule, peers):
                info.add_error(f"{direction}[{i}]: {error}")


def _rule_errors(rule: Any, peers: str) -> list[str]:
    if not isinstance(rule, dict):
        return ["rule must be a mapping"]

    errors: list[str] = []
    endpoints = rule.get(peers)
    if endpoints is not None:
        if not isinstance(endpoints, list):
            errors.append(f"{peers} must be a list")
        else:
            for i, ep in enumerate(endpoints):
                if not isinstance(ep, dict):
                    errors.append(f"{peers}[{i}] must be a mapping")
                    continue
                match_labels = ep.get("matchLabels")
                if not isinstance(match_labels, dict):
                    errors.append(f"{peers}[{i}] missing matchLabels")
                elif not match_labels:
                    errors.append(f"{peers}[{i}].matchLabels cannot be empty")

    to_ports = rule.get("toPorts")
    if to_ports is not None:
        if not isinstance(to_ports, list):
            errors.append("toPorts must be a list")
        else:
            for i, port_rule in enumerate(to_ports):
                errors.extend(
                    f"toPorts[{i}]: {error}" for error in _port_rule_errors(port_rule)
                )
    return errors


def _port_rule_errors(port_rule: Any) -> list[str]:
    if not isinstance(port_rule, dict):
        return ["port rule must be a mapping"]

    ports = port_rule.get("ports")
    if not isinstance(ports, list):
        return ["missing required field: ports"]
    if not ports:
        return ["ports array cannot be empty"]

    errors: list[str] = []
    for i, entry in enumerate(ports):
        if not isinstance(entry, dict):
            errors.append(f"ports[{i}] must be a mapping")
            continue

        port = entry.get("port")
        if port is None:
            errors.append(f"ports[{i}] missing required field: port")
        elif not isinstance(port, str):
            errors.append(f"ports[{i}].port must be a string")
        elif not port:
            errors.append(f"ports[{i}].port cannot be empty")

        protocol = entry.get("protocol")
        if protocol is None:
            errors.append(f"ports[{i}] missing required field: protocol")
        elif not isinstance(protocol, str) or protocol.upper() not in VALID_PROTOCOLS:
            errors.append(
                f"ports[{i}].protocol unsupported: '{protocol}' "
                "(must be TCP, UDP, ICMP, or SCTP)"
            )
    return errors
