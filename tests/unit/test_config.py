"""Tests for environment-driven configuration."""

from pathlib import Path

from policypilot.config import PolicyPilotConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("POLICYPILOT_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("POLICYPILOT_HUBBLE_CLI", raising=False)
    config = PolicyPilotConfig.load()
    assert config.output_dir == Path("out")
    assert config.hubble_cli == "hubble"
    assert config.flows_file == Path("out/flows.json")
    assert config.policy_file == Path("out/policy.yaml")
    assert config.report_file == Path("out/report.html")


def test_env_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("POLICYPILOT_OUTPUT_DIR", str(tmp_path))
    monkeypatch.setenv("POLICYPILOT_HUBBLE_CLI", "/opt/hubble")
    config = PolicyPilotConfig.load()
    assert config.output_dir == tmp_path
    assert config.hubble_cli == "/opt/hubble"
    assert config.policy_file == tmp_path / "policy.yaml"
