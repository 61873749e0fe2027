"""
Key pattern utilities.

Glob-style matching for cache keys: '*' matches any substring and every
other character is literal. Matches are unanchored ("anywhere" in the key).
"""

from __future__ import annotations

import re
from typing import Pattern

from core.errors import InvalidPatternError

WILDCARD = "*"


def compile_glob(pattern: str) -> Pattern[str]:
    """Compile a key glob into an unanchored regex.

    Every regex metacharacter is escaped; only '*' becomes '.*'.
    """
    if not isinstance(pattern, str):
        raise InvalidPatternError(f"Pattern must be a string, got {type(pattern).__name__}")
    if not pattern:
        raise InvalidPatternError("Pattern is empty")

    parts = pattern.split(WILDCARD)
    regex = ".*".join(re.escape(p) for p in parts)
    try:
        return re.compile(regex)
    except re.error as e:
        raise InvalidPatternError(f"Invalid pattern: {pattern!r}") from e


def match_glob(key: str, pattern: str) -> bool:
    """Return True if the key contains a match for the glob."""
    return compile_glob(pattern).search(key) is not None
