"""
BlobKit — File-system backend.

Maps every identifier to one file under a root directory. No sidecar
metadata is written. File I/O goes through aiofiles; directory scans run in
the default executor.

Behaviour worth knowing:
- ``put`` APPENDS to an existing file instead of replacing it. Delete first
  when a clean overwrite is needed.
- ``put`` creates a missing parent directory chain and retries once.
- ``delete`` retries while the file still exists and swallows failures.
- ``lock`` and ``open_write`` are not supported.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, AsyncIterator, List, Union

import aiofiles
import aiofiles.os

from ..core import BlobDescriptor, BlobLock, BlobStore, DEFAULT_ENCODING
from ..faults import BlobNotFoundFault, BlobStoreDisposedFault, BlobUnsupportedFault
from ..matching import filter_wildcard
from ..streams import DEFAULT_CHUNK_SIZE, copy_stream

logger = logging.getLogger("blobkit.backends.filesystem")

DEFAULT_DELETE_RETRIES = 20
DEFAULT_DELETE_RETRY_DELAY = 0.05


class FileBlobStore(BlobStore):
    """
    File-system blob store rooted at one directory.

    Usage::

        store = FileBlobStore("/var/lib/blobs")
        await store.put_text("reports/2024/q1.txt", "...")
        ids = await store.find("reports/*.txt")
    """

    __slots__ = (
        "_root",
        "_delete_retries",
        "_delete_retry_delay",
        "_disposed",
        "chunk_size",
        "encoding",
    )

    def __init__(
        self,
        root: Union[str, Path],
        *,
        create_root: bool = True,
        delete_retries: int = DEFAULT_DELETE_RETRIES,
        delete_retry_delay: float = DEFAULT_DELETE_RETRY_DELAY,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        Initialize file store.

        Args:
            root: Directory that holds every blob
            create_root: Create the root directory if it is missing
            delete_retries: Attempts made by delete() before giving up
            delete_retry_delay: Seconds to wait between delete attempts
            chunk_size: Bytes per read when copying streams
            encoding: Default codec for get_text/put_text
        """
        self._root = os.fspath(root)
        self._delete_retries = delete_retries
        self._delete_retry_delay = delete_retry_delay
        self._disposed = False
        self.chunk_size = chunk_size
        self.encoding = encoding

        if create_root:
            os.makedirs(self._root, exist_ok=True)

    @property
    def name(self) -> str:
        return "file"

    @property
    def root(self) -> str:
        """Root directory path."""
        return self._root

    # ── Path handling ────────────────────────────────────────────────

    def resolve_path(self, blob_id: str) -> str:
        """
        Map an identifier to a path under the root.

        ``/`` becomes the host separator, ``~`` is removed, leading separators
        are stripped and doubled separators collapse. This keeps ordinary
        identifiers inside the root but is not a sandbox: ``..`` segments are
        passed through.
        """
        relative = blob_id.replace("/", os.sep).replace("~", "").lstrip(os.sep)
        path = os.path.join(self._root, relative)
        double = os.sep + os.sep
        while double in path:
            path = path.replace(double, os.sep)
        return path

    @staticmethod
    async def ensure_path_exists(file_path: Union[str, Path]) -> bool:
        """
        Create the parent directory chain of ``file_path``.

        Returns:
            True if directories were created, False if they already existed
        """
        parent = os.path.dirname(os.fspath(file_path))
        if not parent or await aiofiles.os.path.isdir(parent):
            return False
        await aiofiles.os.makedirs(parent, exist_ok=True)
        return True

    # ── Contract ─────────────────────────────────────────────────────

    async def get(self, blob_id: str, destination: Any) -> None:
        """Stream the file into ``destination``."""
        stream = await self.open_read(blob_id)
        try:
            await copy_stream(stream, destination, self.chunk_size)
        finally:
            await stream.close()

    async def open_read(self, blob_id: str) -> Any:
        """Open the file read-only through aiofiles."""
        self._check_disposed("open_read")
        path = self.resolve_path(blob_id)
        try:
            return await aiofiles.open(path, "rb")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            # A directory, or a path running through a file, is not a blob
            raise BlobNotFoundFault(blob_id, metadata={"path": path}) from None

    async def put(self, blob_id: str, source: Any) -> None:
        """
        Append the content of ``source`` to the blob's file.

        When the open fails with FileNotFoundError the parent directory chain
        is ensured and the write retried exactly once. The chain may already
        have been created by a concurrent put, so the retry does not depend
        on this call creating it. A second failure, or any other error,
        propagates unchanged.
        """
        self._check_disposed("put")
        path = self.resolve_path(blob_id)
        try:
            written = await self._append(path, source)
        except FileNotFoundError:
            created = await self.ensure_path_exists(path)
            logger.debug(f"Retrying write to {path!r} (directories created: {created})")
            written = await self._append(path, source)
        logger.debug(f"Appended {written} bytes to {path!r}")

    async def delete(self, blob_id: str) -> None:
        """
        Best-effort delete.

        While the file still exists, try to remove it up to ``delete_retries``
        times with a fixed delay in between. Failures are never raised.
        """
        self._check_disposed("delete")
        path = self.resolve_path(blob_id)
        attempts = 0
        last_error = None

        while await aiofiles.os.path.isfile(path) and attempts < self._delete_retries:
            attempts += 1
            try:
                await aiofiles.os.remove(path)
                return
            except OSError as e:
                last_error = e
                logger.debug(f"Delete attempt {attempts} for {path!r} failed: {e}")
            await asyncio.sleep(self._delete_retry_delay)

        if attempts >= self._delete_retries and last_error is not None:
            logger.warning(f"Giving up deleting {path!r} after {attempts} attempts: {last_error}")

    async def exists(self, blob_id: str) -> bool:
        """Check for a file at the identifier's resolved path."""
        self._check_disposed("exists")
        return await aiofiles.os.path.isfile(self.resolve_path(blob_id))

    async def find(self, pattern: str) -> List[str]:
        """Root-relative identifiers (``/``-separated, sorted) matching ``pattern``."""
        self._check_disposed("find")
        loop = asyncio.get_running_loop()
        names = await loop.run_in_executor(None, self._scan)
        return filter_wildcard(names, pattern)

    async def open_write(self, blob_id: str) -> Any:
        raise BlobUnsupportedFault(self.name, "open_write")

    def lock(self, blob_id: str) -> BlobLock:
        raise BlobUnsupportedFault(self.name, "lock")

    async def as_async_iterable(self) -> AsyncIterator[BlobDescriptor]:
        """
        Walk the tree lazily, one directory at a time.

        Each step of the walk runs in the default executor so listing a large
        directory never blocks the event loop.
        """
        self._check_disposed("as_async_iterable")
        loop = asyncio.get_running_loop()
        walker = os.walk(self._root)
        while True:
            entry = await loop.run_in_executor(None, next, walker, None)
            if entry is None:
                break
            dirpath, _dirnames, filenames = entry
            for filename in filenames:
                await asyncio.sleep(0)
                yield BlobDescriptor(name=self._relative_id(os.path.join(dirpath, filename)))

    async def shutdown(self) -> None:
        """Nothing is held open between calls; marks the store disposed."""
        self._disposed = True

    # ── Private helpers ──────────────────────────────────────────────

    async def _append(self, path: str, source: Any) -> int:
        async with aiofiles.open(path, "ab") as f:
            return await copy_stream(source, f, self.chunk_size)

    def _scan(self) -> List[str]:
        """Blocking recursive listing of every file under the root."""
        names = []
        for dirpath, _dirnames, filenames in os.walk(self._root):
            for filename in filenames:
                names.append(self._relative_id(os.path.join(dirpath, filename)))
        names.sort()
        return names

    def _relative_id(self, full_path: str) -> str:
        relative = os.path.relpath(full_path, self._root)
        return relative.replace(os.sep, "/")

    def _check_disposed(self, operation: str) -> None:
        if self._disposed:
            raise BlobStoreDisposedFault(self.name, operation)
