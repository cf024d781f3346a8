"""
Tests for BlobStoreConfig, environment loading and the store factory.
"""

import logging
import os

import pytest

from blobkit.backends.filesystem import FileBlobStore
from blobkit.backends.memory import MemoryBlobStore
from blobkit.config import (
    BlobStoreConfig,
    build_blob_store_config,
    configure_logging,
    load_blob_store_config,
)
from blobkit.faults import ConfigInvalidFault
from blobkit.providers import create_blob_store


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any BLOBKIT_ variables inherited from the shell."""
    for key in list(os.environ):
        if key.startswith("BLOBKIT_"):
            monkeypatch.delenv(key)
    return monkeypatch


# ============================================================================
# BlobStoreConfig
# ============================================================================


class TestBlobStoreConfig:

    def test_defaults(self):
        config = BlobStoreConfig()
        assert config.backend == "memory"
        assert config.root is None
        assert config.delete_retries == 20
        assert config.delete_retry_delay == 0.05
        assert config.chunk_size == 65536
        assert config.encoding == "utf-8"
        config.validate()

    def test_to_dict(self):
        d = BlobStoreConfig(backend="file", root="/tmp/x").to_dict()
        assert d["backend"] == "file"
        assert d["root"] == "/tmp/x"
        assert set(d) == {
            "backend", "root", "create_root", "delete_retries",
            "delete_retry_delay", "chunk_size", "encoding", "log_level",
        }

    @pytest.mark.parametrize("kwargs,key", [
        ({"backend": "s3"}, "backend"),
        ({"backend": "file"}, "root"),
        ({"delete_retries": 0}, "delete_retries"),
        ({"delete_retry_delay": -1}, "delete_retry_delay"),
        ({"chunk_size": 0}, "chunk_size"),
        ({"encoding": "no-such-codec"}, "encoding"),
        ({"log_level": "LOUD"}, "log_level"),
    ])
    def test_invalid(self, kwargs, key):
        with pytest.raises(ConfigInvalidFault) as exc_info:
            BlobStoreConfig(**kwargs).validate()
        assert exc_info.value.metadata["key"] == key


class TestBuildConfig:

    def test_coerces_strings(self):
        config = build_blob_store_config({
            "backend": "file",
            "root": "/tmp/blobs",
            "create_root": "false",
            "delete_retries": "5",
            "delete_retry_delay": "0.5",
        })
        assert config.create_root is False
        assert config.delete_retries == 5
        assert config.delete_retry_delay == 0.5

    def test_ignores_unknown_and_none(self):
        config = build_blob_store_config({"unknown": 1, "root": None})
        assert config.root is None

    def test_bad_boolean(self):
        with pytest.raises(ConfigInvalidFault):
            build_blob_store_config({"create_root": "maybe"})

    def test_bad_number(self):
        with pytest.raises(ConfigInvalidFault) as exc_info:
            build_blob_store_config({"delete_retries": "many"})
        assert exc_info.value.metadata["key"] == "delete_retries"


class TestLoadConfig:

    def test_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("BLOBKIT_BACKEND", "file")
        clean_env.setenv("BLOBKIT_ROOT", str(tmp_path))
        clean_env.setenv("BLOBKIT_DELETE_RETRIES", "3")
        config = load_blob_store_config()
        assert config.backend == "file"
        assert config.root == str(tmp_path)
        assert config.delete_retries == 3

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BLOBKIT_BACKEND=file\nBLOBKIT_ROOT=/srv/blobs\nOTHER=1\n")
        config = load_blob_store_config(env_file=str(env_file))
        assert config.backend == "file"
        assert config.root == "/srv/blobs"

    def test_environment_beats_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BLOBKIT_CHUNK_SIZE=100\n")
        clean_env.setenv("BLOBKIT_CHUNK_SIZE", "200")
        config = load_blob_store_config(env_file=str(env_file))
        assert config.chunk_size == 200

    def test_overrides_win(self, clean_env):
        clean_env.setenv("BLOBKIT_CHUNK_SIZE", "200")
        config = load_blob_store_config(overrides={"chunk_size": 300})
        assert config.chunk_size == 300

    def test_custom_prefix(self, clean_env):
        clean_env.setenv("APP_BLOBS_ENCODING", "latin-1")
        config = load_blob_store_config(env_prefix="APP_BLOBS_")
        assert config.encoding == "latin-1"


class TestConfigureLogging:

    def test_sets_package_level(self):
        logger = logging.getLogger("blobkit")
        previous = logger.level
        try:
            configure_logging(BlobStoreConfig(log_level="debug"))
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)


# ============================================================================
# Factory
# ============================================================================


class TestCreateBlobStore:

    def test_memory_from_mapping(self):
        store = create_blob_store({"backend": "memory", "encoding": "latin-1"})
        assert isinstance(store, MemoryBlobStore)
        assert store.encoding == "latin-1"

    def test_file_from_config(self, tmp_path):
        root = tmp_path / "blobs"
        store = create_blob_store(BlobStoreConfig(
            backend="file", root=str(root), delete_retries=4,
        ))
        assert isinstance(store, FileBlobStore)
        assert store.root == str(root)
        assert root.is_dir()

    def test_from_environment(self, clean_env):
        store = create_blob_store()
        assert isinstance(store, MemoryBlobStore)

    def test_invalid_config(self):
        with pytest.raises(ConfigInvalidFault):
            create_blob_store(BlobStoreConfig(backend="file"))

    def test_unknown_backend(self):
        with pytest.raises(ConfigInvalidFault):
            create_blob_store({"backend": "ftp"})

    @pytest.mark.asyncio
    async def test_created_store_round_trip(self, tmp_path):
        store = create_blob_store({"backend": "file", "root": str(tmp_path / "b")})
        async with store:
            await store.put_text("bob", "fred")
            assert await store.get_text("bob") == "fred"
