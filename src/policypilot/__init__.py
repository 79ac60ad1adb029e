"""PolicyPilot — least-privilege Cilium policies from observed Hubble flows."""

__version__ = "0.1.0"
