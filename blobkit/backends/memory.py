"""
BlobKit — In-memory backend.

Holds every blob as a ``bytearray`` in a per-instance dict guarded by an
asyncio.Lock. Intended for tests and ephemeral caching; nothing survives
:meth:`MemoryBlobStore.shutdown`.

Concurrency model:
- ``put`` builds the new buffer outside the lock and swaps the entry under
  it, so each key is last-writer-wins.
- ``get``/``get_bytes`` copy the buffer; streams from ``open_read`` and
  ``open_write`` are borrowed views over the live buffer with their own
  cursors. Concurrent writers on one key need external coordination.
- ``lock`` is a no-op handle: this engine provides no mutual exclusion.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Union

from ..core import BlobDescriptor, BlobLock, BlobStore, DEFAULT_ENCODING
from ..faults import BlobNotFoundFault, BlobStoreDisposedFault
from ..matching import filter_wildcard
from ..streams import DEFAULT_CHUNK_SIZE, MemoryBlobStream, read_all, write_chunk

logger = logging.getLogger("blobkit.backends.memory")


class MemoryBlobStore(BlobStore):
    """
    In-memory blob store.

    Besides the store contract it offers positional introspection for test
    harnesses::

        store = MemoryBlobStore()
        await store.put_text("bob", "fred")
        assert len(store) == 1
        assert store["bob"] == b"fred"
        assert store[0] == b"fred"
    """

    __slots__ = (
        "_blobs",
        "_lock",
        "_disposed",
        "chunk_size",
        "encoding",
    )

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        Initialize an empty store.

        Args:
            chunk_size: Bytes per read when draining a source
            encoding: Default codec for get_text/put_text
        """
        self._blobs: Dict[str, bytearray] = {}
        self._lock = asyncio.Lock()
        self._disposed = False
        self.chunk_size = chunk_size
        self.encoding = encoding

    @property
    def name(self) -> str:
        return "memory"

    # ── Introspection ────────────────────────────────────────────────

    @property
    def count(self) -> int:
        """Number of stored blobs."""
        return len(self._blobs)

    def __len__(self) -> int:
        return len(self._blobs)

    def __getitem__(self, key: Union[str, int]) -> bytes:
        """Copy of a blob's content by identifier or by insertion position."""
        if isinstance(key, int):
            buffers = list(self._blobs.values())
            return bytes(buffers[key])
        return bytes(self._blobs[key])

    async def clear(self) -> None:
        """Remove every blob, keeping the store usable."""
        self._check_disposed("clear")
        async with self._lock:
            for buffer in self._blobs.values():
                buffer.clear()
            self._blobs.clear()

    # ── Contract ─────────────────────────────────────────────────────

    async def get(self, blob_id: str, destination: Any) -> None:
        """Copy the blob into ``destination`` without touching the stored buffer."""
        self._check_disposed("get")
        async with self._lock:
            buffer = self._blobs.get(blob_id)
            if buffer is None:
                raise BlobNotFoundFault(blob_id)
            data = bytes(buffer)
        await write_chunk(destination, data)

    async def get_bytes(self, blob_id: str) -> bytes:
        self._check_disposed("get_bytes")
        async with self._lock:
            buffer = self._blobs.get(blob_id)
            if buffer is None:
                raise BlobNotFoundFault(blob_id)
            return bytes(buffer)

    async def put(self, blob_id: str, source: Any) -> None:
        """Replace the blob wholesale with the content of ``source``."""
        self._check_disposed("put")
        buffer = await read_all(source, self.chunk_size)
        async with self._lock:
            self._check_disposed("put")
            self._blobs[blob_id] = buffer
        logger.debug(f"Stored blob {blob_id!r} ({len(buffer)} bytes)")

    async def delete(self, blob_id: str) -> None:
        self._check_disposed("delete")
        async with self._lock:
            buffer = self._blobs.pop(blob_id, None)
        if buffer is not None:
            buffer.clear()
            logger.debug(f"Deleted blob {blob_id!r}")

    async def exists(self, blob_id: str) -> bool:
        self._check_disposed("exists")
        return blob_id in self._blobs

    async def find(self, pattern: str) -> List[str]:
        """Present identifiers matching ``pattern``, in insertion order."""
        self._check_disposed("find")
        async with self._lock:
            keys = list(self._blobs.keys())
        return filter_wildcard(keys, pattern)

    async def open_read(self, blob_id: str) -> MemoryBlobStream:
        """Borrowed read view with its own cursor at position 0."""
        self._check_disposed("open_read")
        async with self._lock:
            buffer = self._blobs.get(blob_id)
            if buffer is None:
                raise BlobNotFoundFault(blob_id)
        return MemoryBlobStream(buffer, name=blob_id, readable=True, writable=False)

    async def open_write(self, blob_id: str) -> MemoryBlobStream:
        """
        Borrowed write view positioned at the end of the blob.

        An empty blob is created first when ``blob_id`` is absent. Writes go
        straight into the stored buffer.
        """
        self._check_disposed("open_write")
        async with self._lock:
            buffer = self._blobs.get(blob_id)
            if buffer is None:
                buffer = bytearray()
                self._blobs[blob_id] = buffer
        return MemoryBlobStream(
            buffer,
            name=blob_id,
            position=len(buffer),
            readable=True,
            writable=True,
        )

    def lock(self, blob_id: str) -> BlobLock:
        """No-op hold; always succeeds and enforces nothing."""
        self._check_disposed("lock")
        return BlobLock(blob_id)

    async def as_async_iterable(self) -> AsyncIterator[BlobDescriptor]:
        """Yield one descriptor per blob present when iteration starts."""
        self._check_disposed("as_async_iterable")
        keys = list(self._blobs.keys())
        for key in keys:
            await asyncio.sleep(0)
            yield BlobDescriptor(name=key)

    async def shutdown(self) -> None:
        """Dispose every buffer and clear the mapping. Idempotent."""
        if self._disposed:
            return
        async with self._lock:
            self._disposed = True
            count = len(self._blobs)
            for buffer in self._blobs.values():
                buffer.clear()
            self._blobs.clear()
        logger.info(f"Memory blob store shut down ({count} blobs released)")

    # ── Private helpers ──────────────────────────────────────────────

    def _check_disposed(self, operation: str) -> None:
        if self._disposed:
            raise BlobStoreDisposedFault(self.name, operation)
