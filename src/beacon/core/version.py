"""Agent identity reported to the intake server."""
from __future__ import annotations

AGENT_NAME = "beacon-python"
VERSION = "1.0.0"
