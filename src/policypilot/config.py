"""Global configuration — output paths, Hubble CLI location, env vars."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class PolicyPilotConfig:
    """Application-wide configuration."""

    output_dir: Path = Path("out")
    hubble_cli: str = "hubble"
    verbose: bool = False

    @property
    def flows_file(self) -> Path:
        return self.output_dir / "flows.json"

    @property
    def policy_file(self) -> Path:
        return self.output_dir / "policy.yaml"

    @property
    def report_file(self) -> Path:
        return self.output_dir / "report.html"

    @classmethod
    def load(cls) -> PolicyPilotConfig:
        """Load config from environment variables with local defaults."""
        config = cls()

        env_output = os.environ.get("POLICYPILOT_OUTPUT_DIR")
        if env_output:
            config.output_dir = Path(env_output)

        env_cli = os.environ.get("POLICYPILOT_HUBBLE_CLI")
        if env_cli:
            config.hubble_cli = env_cli

        return config
