"""
BlobKit — Core types and the blob store contract.

Defines the descriptor returned by enumeration, the lock handle, and the
abstract :class:`BlobStore` every engine implements. The convenience layer
(bytes/text forms, enumeration, async iteration) is written once here against
the stream primitives and inherited by every engine.
"""

from __future__ import annotations

import asyncio
import inspect
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Union,
)

from .streams import DEFAULT_CHUNK_SIZE

logger = logging.getLogger("blobkit.core")

DEFAULT_ENCODING = "utf-8"


# ============================================================================
# Blob Descriptor
# ============================================================================

@dataclass(frozen=True, slots=True)
class BlobDescriptor:
    """
    Identity and metadata of one stored blob.

    The in-memory and file-system engines only fill ``name``; the optional
    fields exist for richer engines.
    """
    name: str
    deleted: bool = False
    enabled: bool = True
    version: Optional[str] = None
    content_type: str = ""
    expires: Optional[datetime] = None
    metadata: Optional[Dict[str, str]] = None
    tags: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for diagnostics."""
        return {
            "name": self.name,
            "deleted": self.deleted,
            "enabled": self.enabled,
            "version": self.version,
            "content_type": self.content_type,
            "expires": self.expires.isoformat() if self.expires else None,
            "metadata": dict(self.metadata) if self.metadata is not None else None,
            "tags": dict(self.tags) if self.tags is not None else None,
        }


BlobAction = Callable[[BlobDescriptor], Union[Awaitable[Any], Any]]


# ============================================================================
# Lock Handle
# ============================================================================

class BlobLock:
    """
    Release handle returned by :meth:`BlobStore.lock`.

    Used as an async context manager; the hold is released when the block
    exits. ``release`` is idempotent. The base handle enforces nothing on its
    own; engines that provide mutual exclusion pass an ``on_release`` callback.
    """

    __slots__ = ("blob_id", "_released", "_on_release")

    def __init__(self, blob_id: str, on_release: Optional[Callable[[], Any]] = None):
        self.blob_id = blob_id
        self._released = False
        self._on_release = on_release

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._on_release is not None:
            self._on_release()

    async def __aenter__(self) -> BlobLock:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"<BlobLock blob_id={self.blob_id!r} released={self._released}>"


# ============================================================================
# Blob Store Contract
# ============================================================================

class BlobStore(ABC):
    """
    Abstract blob store — defines the storage contract.

    Identifiers are opaque, case-sensitive strings, conventionally
    ``/``-delimited. Sources passed to :meth:`put` need ``read(size)`` and
    sinks passed to :meth:`get` need ``write(data)``; either may be sync or
    async.

    Usage::

        async with MemoryBlobStore() as store:
            await store.put_text("docs/readme.txt", "hello")
            assert await store.get_text("docs/readme.txt") == "hello"
            for blob_id in await store.find("docs/*.txt"):
                ...
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = DEFAULT_ENCODING

    # ── Primitives ───────────────────────────────────────────────────

    @abstractmethod
    async def get(self, blob_id: str, destination: Any) -> None:
        """
        Write the full content of a blob into ``destination``.

        Raises:
            BlobNotFoundFault: If no blob is stored under ``blob_id``
        """
        ...

    @abstractmethod
    async def put(self, blob_id: str, source: Any) -> None:
        """Store the full content read from ``source`` under ``blob_id``."""
        ...

    @abstractmethod
    async def delete(self, blob_id: str) -> None:
        """Remove a blob. Deleting an absent blob is not an error."""
        ...

    @abstractmethod
    async def exists(self, blob_id: str) -> bool:
        """Check whether a blob is currently stored under ``blob_id``."""
        ...

    @abstractmethod
    async def find(self, pattern: str) -> List[str]:
        """
        List present identifiers matching a wildcard filter.

        Args:
            pattern: ``*`` matches any run of characters, ``?`` one character

        Returns:
            Matching identifiers
        """
        ...

    @abstractmethod
    async def open_read(self, blob_id: str) -> Any:
        """
        Open a readable async stream positioned at the start of the blob.

        Raises:
            BlobNotFoundFault: If no blob is stored under ``blob_id``
        """
        ...

    @abstractmethod
    async def open_write(self, blob_id: str) -> Any:
        """Open a writable async stream, creating an empty blob if needed."""
        ...

    @abstractmethod
    def lock(self, blob_id: str) -> BlobLock:
        """
        Acquire a hold on a blob for the duration of an ``async with`` block.

        Mutual exclusion strength is engine-defined.
        """
        ...

    @abstractmethod
    def as_async_iterable(self) -> AsyncIterator[BlobDescriptor]:
        """Lazily yield a descriptor for every present blob."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Release every resource held by the store. Terminal."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name for diagnostics."""
        ...

    # ── Convenience layer ────────────────────────────────────────────

    async def get_bytes(self, blob_id: str) -> bytes:
        """Buffer the whole blob in memory and return it."""
        buffer = io.BytesIO()
        await self.get(blob_id, buffer)
        return buffer.getvalue()

    async def get_text(self, blob_id: str, encoding: Optional[str] = None) -> str:
        """
        Return the blob decoded as text.

        Trailing NUL bytes are stripped before decoding.
        """
        data = await self.get_bytes(blob_id)
        return data.rstrip(b"\x00").decode(encoding or self.encoding)

    async def put_bytes(self, blob_id: str, data: bytes) -> None:
        """Store a byte string."""
        await self.put(blob_id, io.BytesIO(bytes(data)))

    async def put_text(self, blob_id: str, text: str, encoding: Optional[str] = None) -> None:
        """
        Store a string.

        Trailing NUL bytes are stripped from the encoded bytes.
        """
        data = text.encode(encoding or self.encoding).rstrip(b"\x00")
        await self.put(blob_id, io.BytesIO(data))

    async def enumerate(
        self,
        pattern: str,
        action: BlobAction,
        asynchronous: bool = True,
    ) -> None:
        """
        Invoke ``action`` once per blob matching ``pattern``.

        When ``asynchronous`` is True every invocation is launched before any
        is awaited and the call returns once all have settled; the first
        failure (in enumeration order) is then re-raised. When False the
        invocations run one at a time in ``find`` order and the first failure
        propagates immediately.

        Args:
            pattern: Wildcard filter
            action: Sync or async callable receiving a BlobDescriptor
            asynchronous: Run invocations concurrently
        """
        blob_ids = await self.find(pattern)

        if not asynchronous:
            for blob_id in blob_ids:
                result = action(BlobDescriptor(name=blob_id))
                if inspect.isawaitable(result):
                    await result
            return

        tasks = []
        for blob_id in blob_ids:
            tasks.append(_as_coroutine(action, BlobDescriptor(name=blob_id)))

        if not tasks:
            return

        results = await asyncio.gather(*tasks, return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.debug(f"{len(errors)} of {len(tasks)} enumerate actions failed on {self.name}")
            raise errors[0]

    def __aiter__(self) -> AsyncIterator[BlobDescriptor]:
        return self.as_async_iterable()

    # ── Lifecycle ────────────────────────────────────────────────────

    async def __aenter__(self) -> BlobStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


async def _as_coroutine(action: BlobAction, blob: BlobDescriptor) -> Any:
    """Run a sync or async action as one coroutine."""
    result = action(blob)
    if inspect.isawaitable(result):
        result = await result
    return result
