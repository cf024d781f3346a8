"""
BlobKit — Store factory.

Builds the configured engine from a :class:`BlobStoreConfig` so application
code only ever holds a :class:`BlobStore`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .config import BlobStoreConfig, build_blob_store_config, load_blob_store_config
from .core import BlobStore
from .backends.filesystem import FileBlobStore
from .backends.memory import MemoryBlobStore
from .faults import ConfigInvalidFault

logger = logging.getLogger("blobkit.providers")


def create_blob_store(
    config: Optional[Union[BlobStoreConfig, Mapping[str, Any]]] = None,
) -> BlobStore:
    """
    Factory: create a blob store from configuration.

    Args:
        config: BlobStoreConfig, a raw mapping, or None to load from the
            environment

    Returns:
        Configured BlobStore

    Raises:
        ConfigInvalidFault: If the configuration is invalid
    """
    if config is None:
        config = load_blob_store_config()
    elif not isinstance(config, BlobStoreConfig):
        config = build_blob_store_config(config)
    else:
        config.validate()

    backend_type = config.backend.lower()

    if backend_type == "memory":
        store: BlobStore = MemoryBlobStore(
            chunk_size=config.chunk_size,
            encoding=config.encoding,
        )

    elif backend_type == "file":
        store = FileBlobStore(
            config.root,
            create_root=config.create_root,
            delete_retries=config.delete_retries,
            delete_retry_delay=config.delete_retry_delay,
            chunk_size=config.chunk_size,
            encoding=config.encoding,
        )

    else:
        raise ConfigInvalidFault("backend", f"unknown blob store backend {backend_type!r}")

    logger.info(f"Blob store created (backend={store.name})")
    return store
