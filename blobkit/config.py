"""
BlobKit — Store configuration.

``BlobStoreConfig`` is a plain dataclass. It can be built from a mapping
(e.g. a section of an application config file) or loaded from environment
variables, optionally layered over a ``.env`` file:

    CLI/env vars  >  .env file  >  dataclass defaults

Recognised variables (with the default ``BLOBKIT_`` prefix)::

    BLOBKIT_BACKEND=file
    BLOBKIT_ROOT=/var/lib/blobs
    BLOBKIT_DELETE_RETRIES=20
    BLOBKIT_DELETE_RETRY_DELAY=0.05
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from .faults import ConfigInvalidFault

logger = logging.getLogger("blobkit.config")

BACKENDS = ("memory", "file")


@dataclass
class BlobStoreConfig:
    """
    Blob store configuration.

    Consumed by :func:`blobkit.providers.create_blob_store`.
    """
    backend: str = "memory"          # "memory" or "file"
    root: Optional[str] = None       # Root directory for the file backend
    create_root: bool = True         # Create root on construction

    # File backend delete policy
    delete_retries: int = 20
    delete_retry_delay: float = 0.05

    # Stream copying / text
    chunk_size: int = 64 * 1024
    encoding: str = "utf-8"

    # Observability
    log_level: str = "WARNING"

    def validate(self) -> None:
        """
        Check field values.

        Raises:
            ConfigInvalidFault: On the first invalid field
        """
        if self.backend not in BACKENDS:
            raise ConfigInvalidFault("backend", f"expected one of {BACKENDS}, got {self.backend!r}")
        if self.backend == "file" and not self.root:
            raise ConfigInvalidFault("root", "required for the file backend")
        if self.delete_retries < 1:
            raise ConfigInvalidFault("delete_retries", "must be >= 1")
        if self.delete_retry_delay < 0:
            raise ConfigInvalidFault("delete_retry_delay", "must be >= 0")
        if self.chunk_size < 1:
            raise ConfigInvalidFault("chunk_size", "must be >= 1")
        try:
            "".encode(self.encoding)
        except LookupError:
            raise ConfigInvalidFault("encoding", f"unknown codec {self.encoding!r}") from None
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigInvalidFault("log_level", f"unknown level {self.log_level!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "backend": self.backend,
            "root": self.root,
            "create_root": self.create_root,
            "delete_retries": self.delete_retries,
            "delete_retry_delay": self.delete_retry_delay,
            "chunk_size": self.chunk_size,
            "encoding": self.encoding,
            "log_level": self.log_level,
        }


def build_blob_store_config(config_dict: Mapping[str, Any]) -> BlobStoreConfig:
    """
    Build BlobStoreConfig from a dictionary.

    Unknown keys are ignored. String values (as read from the environment)
    are coerced to the field's type.

    Raises:
        ConfigInvalidFault: If a value cannot be coerced or fails validation
    """
    defaults = BlobStoreConfig()
    values: Dict[str, Any] = {}
    for f in fields(BlobStoreConfig):
        if f.name not in config_dict or config_dict[f.name] is None:
            continue
        values[f.name] = _coerce(f.name, config_dict[f.name], getattr(defaults, f.name))

    config = BlobStoreConfig(**values)
    config.validate()
    return config


def load_blob_store_config(
    env_prefix: str = "BLOBKIT_",
    env_file: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> BlobStoreConfig:
    """
    Load configuration from a ``.env`` file and the process environment.

    Args:
        env_prefix: Prefix of the variables to read
        env_file: Optional path of a ``.env`` file read through python-dotenv
        overrides: Values that win over every other source

    Returns:
        Validated BlobStoreConfig
    """
    data: Dict[str, Any] = {}

    if env_file:
        for key, value in dotenv_values(env_file).items():
            if key.startswith(env_prefix) and value is not None:
                data[key[len(env_prefix):].lower()] = value

    for key, value in os.environ.items():
        if key.startswith(env_prefix):
            data[key[len(env_prefix):].lower()] = value

    if overrides:
        data.update(overrides)

    return build_blob_store_config(data)


def configure_logging(config: BlobStoreConfig) -> None:
    """Apply ``config.log_level`` to the ``blobkit`` logger tree."""
    logging.getLogger("blobkit").setLevel(config.log_level.upper())


def _coerce(key: str, value: Any, default: Any) -> Any:
    """Coerce a raw value to the type of the field default."""
    if not isinstance(value, str):
        return value
    if isinstance(default, bool):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ConfigInvalidFault(key, f"expected a boolean, got {value!r}")
    try:
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except ValueError:
        raise ConfigInvalidFault(key, f"expected a {type(default).__name__}, got {value!r}") from None
    return value
