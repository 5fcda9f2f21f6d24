"""In-memory byte pipe that feeds a chunked request body."""
from __future__ import annotations

import queue
import threading
from typing import Iterator

_END_OF_STREAM = object()


class PipeClosedError(RuntimeError):
    """Raised when bytes are written to a pipe that was already closed."""


class ChunkPipe:
    """Writers push bytes, the HTTP client iterates them as request chunks.

    Iteration blocks until data arrives and ends once :meth:`close` is called.
    After the reading side has gone away (:meth:`abandon`) writes are dropped.
    """

    def __init__(self) -> None:
        self._chunks: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._closed = False
        self._abandoned = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def abandoned(self) -> bool:
        return self._abandoned.is_set()

    def write(self, data: bytes) -> int:
        if self._closed:
            raise PipeClosedError("write to closed pipe")
        if data and not self._abandoned.is_set():
            self._chunks.put(data)
        return len(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._chunks.put(_END_OF_STREAM)

    def abandon(self) -> None:
        self._abandoned.set()

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self._chunks.get()
            if chunk is _END_OF_STREAM:
                return
            yield chunk  # type: ignore[misc]
