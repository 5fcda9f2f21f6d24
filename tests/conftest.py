"""Shared fixtures: an in-process intake server double."""

import gzip
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

import httpx
import pytest

from beacon.core.config import Settings
from beacon.metadata.model import Metadata
from beacon.metadata.serializer import Serializer
from beacon.transport.connection import Connection


@dataclass
class ReceivedRequest:
    method: str
    url: str
    headers: httpx.Headers
    raw: bytes
    body: bytes

    @property
    def lines(self) -> List[str]:
        return self.body.decode("utf-8").splitlines()


class Intake(httpx.BaseTransport):
    """Drains streamed uploads like the real intake and records what arrived.

    ``failure`` runs before the body is read, the way a refused connection or
    a TLS handshake error surfaces before any chunk is sent. ``active`` counts
    uploads whose bodies are still being streamed.
    """

    def __init__(self, status_code: int = 202) -> None:
        self.status_code = status_code
        self.requests: List[ReceivedRequest] = []
        self.active = 0
        self.max_active = 0
        self.failure: Optional[Callable[[httpx.Request], Optional[Exception]]] = None
        self._lock = threading.Lock()

    @property
    def transport(self) -> httpx.BaseTransport:
        return self

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if self.failure is not None:
            exc = self.failure(request)
            if exc is not None:
                raise exc
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            raw = request.read()
        finally:
            with self._lock:
                self.active -= 1
        body = gzip.decompress(raw) if request.headers.get("Content-Encoding") == "gzip" else raw
        with self._lock:
            self.requests.append(ReceivedRequest(request.method, str(request.url), request.headers, raw, body))
        return httpx.Response(self.status_code, text="" if self.status_code < 300 else "intake unavailable")

    @property
    def last(self) -> ReceivedRequest:
        return self.requests[-1]


@pytest.fixture
def intake() -> Intake:
    return Intake()


@pytest.fixture
def make_connection(intake):
    """Build connections against the intake double and flush them after the test."""

    created: List[Connection] = []

    def factory(**overrides) -> Connection:
        overrides.setdefault("http_compression", False)
        settings = Settings(**overrides)
        metadata = Serializer().serialize(Metadata.build(settings))
        connection = Connection(settings, metadata, transport=intake.transport)
        created.append(connection)
        return connection

    yield factory
    for connection in created:
        connection.close()
