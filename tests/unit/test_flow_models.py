"""Tests for flow data models."""

import dataclasses

import pytest

from policypilot.flows.models import Endpoint, FlowRecord, Protocol


def test_protocol_values():
    assert Protocol.TCP.value == "TCP"
    assert Protocol.UDP.value == "UDP"


def test_protocol_parse_defaults_to_tcp():
    assert Protocol.parse(None) == Protocol.TCP
    assert Protocol.parse("") == Protocol.TCP


def test_protocol_parse_case_insensitive():
    assert Protocol.parse("udp") == Protocol.UDP
    assert Protocol.parse(Protocol.UDP) == Protocol.UDP


def test_protocol_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Unsupported"):
        Protocol.parse("HTTP")


def test_endpoint_defaults():
    ep = Endpoint()
    assert ep.labels == {}
    assert ep.namespace == ""
    assert ep.pod_name == ""


def test_flow_record_defaults():
    flow = FlowRecord(source=Endpoint(), destination=Endpoint())
    assert flow.port == 0
    assert flow.protocol == Protocol.TCP
    assert flow.verdict == ""


def test_flow_record_normalizes_protocol_string():
    flow = FlowRecord(source=Endpoint(), destination=Endpoint(), port=53, protocol="udp")
    assert flow.protocol == Protocol.UDP


@pytest.mark.parametrize("port", [-1, 65536])
def test_flow_record_rejects_out_of_range_port(port: int):
    with pytest.raises(ValueError, match="Port out of range"):
        FlowRecord(source=Endpoint(), destination=Endpoint(), port=port)


def test_flow_record_frozen():
    flow = FlowRecord(source=Endpoint(), destination=Endpoint(), port=80)
    with pytest.raises(dataclasses.FrozenInstanceError):
        flow.port = 443  # type: ignore[misc]


@pytest.mark.parametrize("value", [6, 17.0, ["TCP"]])
def test_protocol_parse_rejects_non_string(value):
    with pytest.raises(ValueError, match="Unsupported"):
        Protocol.parse(value)
