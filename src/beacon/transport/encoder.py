"""Optional gzip encoding of the streamed request body."""
from __future__ import annotations

import zlib
from typing import Optional, Protocol

_GZIP_WBITS = 16 + zlib.MAX_WBITS


class ByteSink(Protocol):
    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...


class StreamEncoder:
    """Writes one growing body to ``sink``, gzip-compressed when ``compress`` is set.

    Each :meth:`append` is sync-flushed through the compressor so the bytes
    reach the sink immediately. ``bytes_written`` counts what the sink
    received, i.e. wire bytes, not logical payload bytes.
    """

    def __init__(self, sink: ByteSink, *, compress: bool = True, level: int = zlib.Z_DEFAULT_COMPRESSION) -> None:
        self._sink = sink
        self._compressor: Optional["zlib._Compress"] = (
            zlib.compressobj(level, zlib.DEFLATED, _GZIP_WBITS) if compress else None
        )
        self.bytes_written = 0

    @property
    def compressed(self) -> bool:
        return self._compressor is not None

    def append(self, data: bytes) -> int:
        if self._compressor is None:
            return self._emit(data)
        chunk = self._compressor.compress(data) + self._compressor.flush(zlib.Z_SYNC_FLUSH)
        return self._emit(chunk)

    def close(self) -> None:
        if self._compressor is not None:
            self._emit(self._compressor.flush(zlib.Z_FINISH))
        self._sink.close()

    def _emit(self, chunk: bytes) -> int:
        if not chunk:
            return 0
        self._sink.write(chunk)
        self.bytes_written += len(chunk)
        return len(chunk)
