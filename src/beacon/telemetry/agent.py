"""Process-scoped agent that owns the intake connection."""
from __future__ import annotations

import atexit
import logging
import threading
from typing import Any, Dict, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.logging import setup_logging
from ..metadata.model import Metadata
from ..metadata.serializer import Serializer
from ..transport.connection import Connection

logger = logging.getLogger("beacon.agent")


class Agent:
    """Serializes events and hands them to the streaming connection."""

    def __init__(self, settings: Optional[Settings] = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.serializer = Serializer()
        self.metadata = Metadata.build(self.settings)
        self.connection = Connection(
            self.settings,
            self.serializer.serialize(self.metadata),
            transport=transport,
        )
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        if self.settings.log_level:
            setup_logging(self.settings.log_level, ("beacon", self.settings.logger.name))
        self._started = True
        atexit.register(self.stop)
        logger.info("Beacon agent started for service %s", self.settings.service_name)

    def report(self, kind: str, data: Dict[str, Any]) -> None:
        """Fire-and-forget delivery of one event, e.g. ``report("transaction", {...})``."""

        self.connection.write(self.serializer.dumps(kind, data))

    def flush(self) -> None:
        self.connection.flush()

    def stop(self) -> None:
        """Deliver what is buffered and release the connection."""

        self.connection.close()
        if self._started:
            atexit.unregister(self.stop)
            self._started = False
            logger.info("Beacon agent stopped")


_agent: Optional[Agent] = None
_agent_lock = threading.Lock()


def start(**overrides: Any) -> Agent:
    """Start the process-wide agent. Repeated calls return the running instance."""

    global _agent
    with _agent_lock:
        if _agent is None:
            settings = Settings(**overrides) if overrides else get_settings()
            _agent = Agent(settings)
            _agent.start()
        return _agent


def stop() -> None:
    global _agent
    with _agent_lock:
        if _agent is not None:
            _agent.stop()
            _agent = None


def get_agent() -> Optional[Agent]:
    return _agent
