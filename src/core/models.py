"""Dataclasses shared by the cache engine and its services.

CacheEntry is the mutable per-key record; CacheStats and RateLimitResult
are immutable snapshots handed back to callers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, Optional


@dataclass(slots=True)
class CacheEntry:
    # Timestamps are monotonic milliseconds
    value: Any
    created_at: float
    expires_at: Optional[float] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)
    access_count: int = 0
    last_accessed: float = 0.0

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time statistics for a cache instance.

    Rates are percentages (0-100). memory_usage_estimate is in bytes and
    only approximate.
    """

    size: int
    hit_rate: float
    miss_rate: float
    eviction_count: int
    memory_usage_estimate: int

    hits: int = 0
    misses: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: float  # epoch seconds
