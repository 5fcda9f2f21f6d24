"""Lifecycle of the single streaming upload to the intake server."""
from __future__ import annotations

import enum
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

import httpx

from ..core.config import Settings
from ..core.http import build_client
from .encoder import StreamEncoder
from .headers import build_headers, events_url
from .outcome import DeliveryOutcome
from .pipe import ChunkPipe

logger = logging.getLogger("beacon.transport.connection")


class ConnectionState(enum.Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    CLOSING = "closing"


@dataclass(slots=True)
class _Stream:
    """One open-to-close upload: its body pipe, encoder, worker and watchdog."""

    instance: int
    pipe: ChunkPipe
    encoder: StreamEncoder
    watchdog: Optional[threading.Timer] = None
    outcome: Optional[DeliveryOutcome] = None
    finished: threading.Event = field(default_factory=threading.Event)


class Connection:
    """Streams NDJSON events to ``{server_url}/intake/v2/events``.

    At most one chunked POST is open at a time. It is opened lazily by
    :meth:`write` and closed by whichever comes first: :meth:`flush`, the
    ``api_request_size`` wire-byte threshold, or the ``api_request_time``
    watchdog. Delivery failures are logged through ``settings.logger`` and
    never raised to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        metadata: bytes,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._metadata = metadata
        self._transport = transport
        self._url = events_url(settings)
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()
        self._state = ConnectionState.IDLE
        self._stream: _Stream | None = None
        self._instances = itertools.count(1)

    @property
    def metadata(self) -> bytes:
        return self._metadata

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def bytes_written(self) -> int:
        with self._lock:
            return self._stream.encoder.bytes_written if self._stream else 0

    def write(self, payload: str) -> None:
        if self._settings.disable_send:
            return
        try:
            line = payload.encode("utf-8") + b"\n"
        except UnicodeEncodeError as exc:
            self._settings.logger.error("Dropping event that cannot be encoded as UTF-8: %r", exc)
            return
        failure = None
        with self._lock:
            if self._stream is None:
                self._open()
            stream = self._stream
            assert stream is not None
            stream.encoder.append(line)
            if stream.finished.is_set():
                failure = self._close()
            elif stream.encoder.bytes_written >= self._settings.api_request_size:
                logger.debug("Request size reached (%s bytes), closing stream %s", stream.encoder.bytes_written, stream.instance)
                failure = self._close()
        self._report(failure)

    def flush(self) -> None:
        with self._lock:
            if self._stream is None:
                return
            failure = self._close()
        self._report(failure)

    def close(self) -> None:
        """Flush the open stream, if any, and release the HTTP client."""

        self.flush()
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def _report(self, failure: Optional[str]) -> None:
        # logged outside the lock so handlers may write through this connection
        if failure is not None:
            self._settings.logger.error("%s", failure)

    # -- internals; callers hold self._lock --

    def _open(self) -> None:
        if self._client is None:
            self._client = build_client(self._settings, transport=self._transport)
        instance = next(self._instances)
        pipe = ChunkPipe()
        stream = _Stream(
            instance=instance,
            pipe=pipe,
            encoder=StreamEncoder(pipe, compress=self._settings.http_compression),
        )
        worker = threading.Thread(
            target=self._deliver,
            args=(self._client, stream),
            name=f"beacon-stream-{instance}",
            daemon=True,
        )
        stream.watchdog = threading.Timer(self._settings.api_request_time, self._on_deadline, args=(instance,))
        stream.watchdog.daemon = True

        self._stream = stream
        self._state = ConnectionState.STREAMING
        stream.encoder.append(self._metadata + b"\n")
        worker.start()
        stream.watchdog.start()
        logger.debug("Opened stream %s to %s", instance, self._url)

    def _close(self) -> Optional[str]:
        """Finish the active stream and return the failure to log, if any."""

        stream = self._stream
        assert stream is not None
        self._state = ConnectionState.CLOSING
        if stream.watchdog is not None:
            stream.watchdog.cancel()
        stream.encoder.close()
        failure = None
        wait = self._settings.server_timeout * 2
        if not stream.finished.wait(wait):
            failure = f"Intake request for stream {stream.instance} did not finish within {wait}s, abandoning it"
        elif stream.outcome is not None and not stream.outcome.ok:
            failure = stream.outcome.describe()
        self._stream = None
        self._state = ConnectionState.IDLE
        logger.debug("Closed stream %s", stream.instance)
        return failure

    def _on_deadline(self, instance: int) -> None:
        with self._lock:
            if self._stream is None or self._stream.instance != instance:
                return
            logger.debug("Request time reached, closing stream %s", instance)
            failure = self._close()
        self._report(failure)

    def _deliver(self, client: httpx.Client, stream: _Stream) -> None:
        """Run the POST on the worker thread; never touches connection state."""

        try:
            response = client.post(self._url, content=stream.pipe, headers=build_headers(self._settings))
        except Exception as exc:
            # Swallow delivery errors so telemetry never fails the host process
            stream.outcome = DeliveryOutcome.from_exception(exc)
        else:
            stream.outcome = DeliveryOutcome.from_response(response)
        finally:
            stream.pipe.abandon()
            stream.finished.set()
