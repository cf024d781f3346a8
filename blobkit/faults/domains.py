"""
BlobKit Faults - Concrete fault types.

- CONFIG faults: raised while building or validating a BlobStoreConfig
- STORAGE faults: raised by blob store engines
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


FaultDomain.STORAGE = FaultDomain("storage", "Blob store faults", severity=Severity.WARN)


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults. Never retryable."""

    def __init__(self, code: str, message: str, *, metadata: Optional[dict[str, Any]] = None):
        super().__init__(
            code,
            message,
            domain=FaultDomain.CONFIG,
            retryable=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """A configuration value is missing, malformed or out of range."""

    def __init__(self, key: str, reason: str, *, metadata: Optional[dict[str, Any]] = None):
        self.key = key
        super().__init__(
            "CONFIG_INVALID",
            f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **(metadata or {})},
        )


# ============================================================================
# STORAGE Faults
# ============================================================================

class BlobFault(Fault):
    """Base class for all blob store faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Optional[Severity] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code,
            message,
            domain=FaultDomain.STORAGE,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class BlobNotFoundFault(BlobFault):
    """No blob is stored under the requested identifier."""

    def __init__(self, blob_id: str, *, metadata: Optional[dict[str, Any]] = None):
        self.blob_id = blob_id
        super().__init__(
            "BLOB_NOT_FOUND",
            f"Blob '{blob_id}' not found",
            metadata={"blob_id": blob_id, **(metadata or {})},
        )


class BlobUnsupportedFault(BlobFault):
    """The engine does not implement the requested operation."""

    def __init__(self, backend: str, operation: str, *, metadata: Optional[dict[str, Any]] = None):
        self.operation = operation
        super().__init__(
            "BLOB_OPERATION_UNSUPPORTED",
            f"Blob store '{backend}' does not support {operation}()",
            severity=Severity.ERROR,
            metadata={"backend": backend, "operation": operation, **(metadata or {})},
        )


class BlobStoreDisposedFault(BlobFault):
    """The store was shut down; no further operations are accepted."""

    def __init__(self, backend: str, operation: str, *, metadata: Optional[dict[str, Any]] = None):
        super().__init__(
            "BLOB_STORE_DISPOSED",
            f"Blob store '{backend}' is shut down, cannot {operation}()",
            severity=Severity.FATAL,
            metadata={"backend": backend, "operation": operation, **(metadata or {})},
        )
