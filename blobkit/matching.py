"""
BlobKit — Wildcard matching for blob identifiers.

Filters use two wildcards only:
- ``*`` matches any run of characters (including ``/``)
- ``?`` matches exactly one character

Everything else matches literally and case-sensitively, so ``[`` and ``]``
carry no special meaning the way they do in :mod:`fnmatch`.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Pattern


@lru_cache(maxsize=256)
def compile_wildcard(pattern: str) -> Pattern[str]:
    """Translate a wildcard filter into an anchored regular expression."""
    parts: List[str] = []
    for char in pattern:
        if char == "*":
            # Collapse runs of stars; "**" is the same as "*"
            if parts and parts[-1] == ".*":
                continue
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches_wildcard(name: str, pattern: str) -> bool:
    """Return True if ``name`` matches the whole wildcard ``pattern``."""
    if pattern == "*":
        return True
    return compile_wildcard(pattern).fullmatch(name) is not None


def filter_wildcard(names: Iterable[str], pattern: str) -> List[str]:
    """Keep the names matching ``pattern``, preserving input order."""
    if pattern == "*":
        return list(names)
    regex = compile_wildcard(pattern)
    return [name for name in names if regex.fullmatch(name) is not None]
