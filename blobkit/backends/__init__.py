"""
BlobKit Backends — Storage engines.
"""

from .memory import MemoryBlobStore
from .filesystem import FileBlobStore

__all__ = [
    "MemoryBlobStore",
    "FileBlobStore",
]
