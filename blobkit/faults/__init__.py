"""
BlobKit Faults - structured fault handling for blob stores.

Failures are typed fault signals carrying a stable code, a domain and a
severity, so callers can branch on ``fault.code`` and log ``fault.to_dict()``.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain registry
- Severity: Severity levels
- Config and storage fault types
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    BlobFault,
    BlobNotFoundFault,
    BlobUnsupportedFault,
    BlobStoreDisposedFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Storage
    "BlobFault",
    "BlobNotFoundFault",
    "BlobUnsupportedFault",
    "BlobStoreDisposedFault",
]
