"""
Shared test fixtures for the BlobKit test suite.
"""

import pytest

from blobkit.backends.memory import MemoryBlobStore
from blobkit.backends.filesystem import FileBlobStore


# ============================================================================
# Store fixtures
# ============================================================================


@pytest.fixture
def memory_store():
    """Fresh, empty MemoryBlobStore."""
    return MemoryBlobStore()


@pytest.fixture
def file_root(tmp_path):
    """Root directory for a FileBlobStore."""
    return tmp_path / "blobs"


@pytest.fixture
def file_store(file_root):
    """FileBlobStore with a short delete retry delay."""
    return FileBlobStore(file_root, delete_retry_delay=0.001)


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    """Each engine in turn, for contract-level tests."""
    if request.param == "memory":
        return MemoryBlobStore()
    return FileBlobStore(tmp_path / "blobs", delete_retry_delay=0.001)

