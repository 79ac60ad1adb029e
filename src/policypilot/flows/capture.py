"""Capture flows by running ``hubble observe -o json``."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class CaptureError(RuntimeError):
    """The hubble CLI could not be run or exited with an error."""


class HubbleCapture:
    """Runs the Hubble CLI and streams its JSON output into a file.

    ``extra_args`` are passed through verbatim, e.g. ``("--since", "5m")``
    or ``("--last", "100")``.
    """

    def __init__(self, cli: str = "hubble") -> None:
        self.cli = cli

    def command(self, extra_args: Sequence[str] = ()) -> list[str]:
        return [self.cli, "observe", "-o", "json", *extra_args]

    def capture(self, output_file: str | Path, extra_args: Sequence[str] = ()) -> Path:
        """Run the capture; returns the path written."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.command(extra_args)
        logger.info("Running %s", " ".join(cmd))

        try:
            with output_file.open("w", encoding="utf-8") as out:
                subprocess.run(cmd, stdout=out, stderr=subprocess.PIPE, check=True, text=True)
        except FileNotFoundError as e:
            logger.error("Hubble CLI not found: %s", self.cli)
            raise CaptureError(f"Hubble CLI not found: {self.cli}") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            logger.error("hubble observe failed (exit %d): %s", e.returncode, stderr)
            raise CaptureError(
                f"hubble observe failed with exit code {e.returncode}: {stderr}"
            ) from e

        return output_file
