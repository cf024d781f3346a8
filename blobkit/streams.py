"""
BlobKit — Stream helpers.

Provides:
- MemoryBlobStream: borrowed async view over a store-owned ``bytearray``
- read_chunk / write_chunk: call ``read``/``write`` on sync or async objects
- copy_stream: chunked copy between any source and sink

Sources and sinks are duck-typed. Anything with ``read(size)`` is a source
and anything with ``write(data)`` is a sink; the call may return a value
(``io.BytesIO``, open binary files) or an awaitable (aiofiles handles,
:class:`MemoryBlobStream`).
"""

from __future__ import annotations

import inspect
import io
from typing import Any

DEFAULT_CHUNK_SIZE = 64 * 1024


async def read_chunk(source: Any, size: int = -1) -> bytes:
    """Read up to ``size`` bytes from a sync or async source."""
    data = source.read(size)
    if inspect.isawaitable(data):
        data = await data
    return bytes(data) if data else b""


async def write_chunk(sink: Any, data: bytes) -> None:
    """Write ``data`` to a sync or async sink."""
    result = sink.write(data)
    if inspect.isawaitable(result):
        await result


async def copy_stream(source: Any, sink: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Copy ``source`` to ``sink`` until the source is exhausted.

    Returns:
        Number of bytes copied
    """
    total = 0
    while True:
        chunk = await read_chunk(source, chunk_size)
        if not chunk:
            break
        await write_chunk(sink, chunk)
        total += len(chunk)
    return total


async def read_all(source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytearray:
    """Drain a source into a fresh ``bytearray``."""
    buffer = bytearray()
    while True:
        chunk = await read_chunk(source, chunk_size)
        if not chunk:
            break
        buffer += chunk
    return buffer


class MemoryBlobStream:
    """
    Borrowed, non-owning async view over a blob buffer.

    The buffer belongs to the store. Each view keeps its own cursor, so two
    readers never move each other's position, but writes go straight into
    the shared buffer and are visible to every other view and to ``get``.
    Closing a view only closes the view.

    Usage::

        stream = await store.open_write("log.txt")
        async with stream:
            await stream.write(b"appended")
    """

    __slots__ = ("_buffer", "_position", "_readable", "_writable", "_closed", "name")

    def __init__(
        self,
        buffer: bytearray,
        *,
        name: str = "",
        position: int = 0,
        readable: bool = True,
        writable: bool = False,
    ):
        self._buffer = buffer
        self._position = position
        self._readable = readable
        self._writable = writable
        self._closed = False
        self.name = name

    # ── Capabilities ─────────────────────────────────────────────────

    def readable(self) -> bool:
        return self._readable

    def writable(self) -> bool:
        return self._writable

    def seekable(self) -> bool:
        return True

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._buffer)

    # ── I/O ──────────────────────────────────────────────────────────

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the cursor (all remaining if negative)."""
        self._check_open()
        if not self._readable:
            raise io.UnsupportedOperation("read")
        start = min(self._position, len(self._buffer))
        end = len(self._buffer) if size is None or size < 0 else min(start + size, len(self._buffer))
        data = bytes(self._buffer[start:end])
        self._position = end
        return data

    async def write(self, data: bytes) -> int:
        """Write at the cursor, overwriting or extending the shared buffer."""
        self._check_open()
        if not self._writable:
            raise io.UnsupportedOperation("write")
        data = bytes(data)
        if self._position > len(self._buffer):
            # Seeking past the end then writing pads with NUL bytes
            self._buffer.extend(b"\x00" * (self._position - len(self._buffer)))
        self._buffer[self._position:self._position + len(data)] = data
        self._position += len(data)
        return len(data)

    async def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = len(self._buffer) + offset
        else:
            raise ValueError(f"Invalid whence ({whence})")
        if position < 0:
            raise ValueError(f"Negative seek position {position}")
        self._position = position
        return position

    async def tell(self) -> int:
        self._check_open()
        return self._position

    async def flush(self) -> None:
        self._check_open()

    async def close(self) -> None:
        """Close this view. The underlying blob is left untouched."""
        self._closed = True

    # ── Context manager ──────────────────────────────────────────────

    async def __aenter__(self) -> MemoryBlobStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed blob stream")

    def __repr__(self) -> str:
        mode = ("r" if self._readable else "") + ("w" if self._writable else "")
        return f"<MemoryBlobStream name={self.name!r} mode={mode!r} pos={self._position} size={len(self._buffer)}>"
