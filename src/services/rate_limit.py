"""
Sliding-window request limiting on top of the cache.

Each identifier keeps a log of its accepted request times (monotonic ms)
under one key that expires with the window. Rejected requests are not
logged. Logs live only as long as the cache instance, so this is not a
replacement for a shared server-side limiter.
"""

from __future__ import annotations

import time
from typing import List

from core.errors import ValidationError
from core.interfaces import CacheBackend
from core.models import RateLimitResult


def rate_limit_key(identifier: str) -> str:
    return f"ratelimit:{identifier}"


def _now_ms() -> float:
    return time.monotonic_ns() / 1_000_000


def check_rate_limit(
    cache: CacheBackend,
    identifier: str,
    limit: int,
    window_seconds: int,
) -> RateLimitResult:
    """Record one request for identifier if the window has room.

    reset_time is epoch seconds: when the oldest logged request leaves the
    window for a rejected call, one full window from now for an accepted one.
    """
    ident = str(identifier if identifier is not None else "").strip()
    if not ident:
        raise ValidationError("Missing rate limit identifier")

    limit = int(limit)
    window_ms = int(window_seconds) * 1000
    if limit <= 0 or window_ms <= 0:
        raise ValidationError("limit and window_seconds must be positive")

    key = rate_limit_key(ident)
    now = _now_ms()
    window_start = now - window_ms

    logged = cache.get(key) or []
    recent: List[float] = [t for t in logged if t > window_start]

    if len(recent) >= limit:
        wait_ms = recent[0] + window_ms - now
        return RateLimitResult(
            allowed=False,
            remaining=0,
            reset_time=time.time() + wait_ms / 1000.0,
        )

    recent.append(now)
    cache.set(key, recent, ttl=window_ms)

    return RateLimitResult(
        allowed=True,
        remaining=limit - len(recent),
        reset_time=time.time() + window_ms / 1000.0,
    )
