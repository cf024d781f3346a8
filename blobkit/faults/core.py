"""
BlobKit Faults - Core types.

Defines:
- Severity levels
- FaultDomain (named fault area carrying its default severity and retry policy)
- Fault base class (structured exception raised by stores and config)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """How loudly a caller should report a fault."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"     # Store or configuration unusable


class FaultDomain:
    """
    Functional area a fault belongs to.

    Subsystems register their domain as a class attribute
    (``FaultDomain.STORAGE = FaultDomain("storage", ...)``). A fault that
    does not set ``severity`` or ``retryable`` takes them from its domain.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
    ):
        self.name = name
        self.description = description
        self.severity = severity
        self.retryable = retryable

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain({self.name!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return self.name == other

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.CONFIG = FaultDomain("config", "Configuration errors", severity=Severity.FATAL)


class Fault(Exception):
    """
    Structured exception with a stable, machine-readable ``code``.

    Callers branch on ``code`` or on the concrete subclass, and log
    ``to_dict()``. ``metadata`` holds the identifiers involved (blob id,
    config key, backend name).

    Example::

        try:
            await store.get_text("missing")
        except BlobNotFoundFault as fault:
            logger.warning("blob lookup failed", extra=fault.to_dict())
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity if severity is not None else domain.severity
        self.retryable = retryable if retryable is not None else domain.retryable
        self.metadata = dict(metadata) if metadata else {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, "
            f"domain={self.domain.name}, severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for structured logging."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.name,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }
