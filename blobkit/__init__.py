"""
BlobKit — Async blob storage behind one contract.

Store, fetch, enumerate and delete named binary blobs without caring where
the bytes live:
- **Contract**: ``BlobStore`` with stream primitives and a shared
  bytes/text convenience layer
- **Backends**: ``MemoryBlobStore`` (concurrency-safe, ephemeral) and
  ``FileBlobStore`` (one file per blob under a root directory)
- **Matching**: ``*`` / ``?`` wildcard filters for ``find`` and ``enumerate``
- **Faults**: typed ``BlobNotFoundFault`` / ``BlobUnsupportedFault``
- **Config**: ``BlobStoreConfig`` from mappings, env vars or ``.env`` files

Usage::

    from blobkit import create_blob_store

    store = create_blob_store({"backend": "file", "root": "/tmp/blobs"})
    await store.put_text("bob", "fred")
    assert await store.get_text("bob") == "fred"
    await store.delete("bob")
"""

__version__ = "0.1.0"

from .core import (
    BlobDescriptor,
    BlobLock,
    BlobStore,
)

from .backends.memory import MemoryBlobStore
from .backends.filesystem import FileBlobStore

from .streams import MemoryBlobStream, copy_stream

from .matching import matches_wildcard, filter_wildcard

from .config import (
    BlobStoreConfig,
    build_blob_store_config,
    load_blob_store_config,
    configure_logging,
)

from .providers import create_blob_store

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    ConfigInvalidFault,
    BlobFault,
    BlobNotFoundFault,
    BlobUnsupportedFault,
    BlobStoreDisposedFault,
)

__all__ = [
    # Core
    "BlobDescriptor",
    "BlobLock",
    "BlobStore",
    # Backends
    "MemoryBlobStore",
    "FileBlobStore",
    # Streams
    "MemoryBlobStream",
    "copy_stream",
    # Matching
    "matches_wildcard",
    "filter_wildcard",
    # Config
    "BlobStoreConfig",
    "build_blob_store_config",
    "load_blob_store_config",
    "configure_logging",
    "create_blob_store",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "ConfigInvalidFault",
    "BlobFault",
    "BlobNotFoundFault",
    "BlobUnsupportedFault",
    "BlobStoreDisposedFault",
]
