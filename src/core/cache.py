"""In-memory TTL cache with tag and pattern invalidation.

Entries carry an optional monotonic expiration timestamp (milliseconds) and
a set of tags used for bulk invalidation. Expiration is lazy: a key is
checked when it is read, and due entries are swept after every write and
before keys()/size(). Due entries are found through a min-heap ordered by
expiration time, so a sweep only touches what has actually expired.
"""

from __future__ import annotations

import heapq
import itertools
import json
import logging
import math
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.errors import CacheTypeError, ValidationError
from core.models import CacheEntry, CacheStats
from core.patterns import compile_glob

logger = logging.getLogger(__name__)

_MISSING = object()

# Heap records are (expires_at, seq, key)
_HeapRecord = Tuple[float, int, str]


def _now_ms() -> float:
    # Monotonic clock so expiry is immune to wall-clock adjustments
    return time.monotonic_ns() / 1_000_000


def _validate_ttl(ttl: Any) -> None:
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
        raise ValidationError(f"ttl must be a positive number of milliseconds, got {ttl!r}")


def _normalize_tags(tags: Optional[Iterable[str]]) -> frozenset:
    if not tags:
        return frozenset()
    if isinstance(tags, str):
        return frozenset((tags,))
    return frozenset(str(t) for t in tags)


class CacheManager:
    """Key-value store with per-entry TTL, tags and hit/miss statistics.

    All public methods are synchronous and serialized by one re-entrant
    lock. Stored values are opaque; read paths never return an entry whose
    expiration time has passed.
    """

    def __init__(
        self,
        *,
        sweep_on_write: bool = True,
        fallback_entry_bytes: int = 1024,
        bytes_per_char: int = 2,
    ) -> None:
        self._sweep_on_write = bool(sweep_on_write)
        self._fallback_entry_bytes = max(0, int(fallback_entry_bytes))
        self._bytes_per_char = max(1, int(bytes_per_char))

        self._store: Dict[str, CacheEntry] = {}
        self._expiry_heap: List[_HeapRecord] = []
        # key -> seq of its current heap record; older records are stale
        self._expiry_seq: Dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    # ---- writes ----

    def set(
        self,
        key: str,
        value: Any,
        *,
        ttl: Optional[float] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        """Insert or fully replace the entry for key.

        ttl is in milliseconds; without it the entry never expires on its own.
        """
        if ttl is not None:
            _validate_ttl(ttl)
        entry_tags = _normalize_tags(tags)

        with self._lock:
            now = _now_ms()
            self._remove(key)
            self._store[key] = CacheEntry(
                value=value,
                created_at=now,
                expires_at=None if ttl is None else now + ttl,
                tags=entry_tags,
                access_count=0,
                last_accessed=now,
            )
            if ttl is not None:
                self._track_expiry(key, now + ttl)

            if self._sweep_on_write:
                self._sweep(now)

    def incr(self, key: str, amount: int = 1, *, ttl: Optional[float] = None) -> int:
        """Add amount to an integer counter and return the new value.

        A live counter keeps its TTL and tags. A missing or expired key
        starts over at amount, expiring after ttl when given.
        """
        with self._lock:
            entry = self._live_entry(key, _now_ms())
            if entry is None:
                self.set(key, amount, ttl=ttl)
                return amount

            if isinstance(entry.value, bool) or not isinstance(entry.value, int):
                raise CacheTypeError(f"Value at {key!r} is not an integer counter")

            entry.value += amount
            return entry.value

    def set_ttl(self, key: str, ttl: float) -> bool:
        """Replace the expiration of a live key. Returns False if absent."""
        _validate_ttl(ttl)
        with self._lock:
            now = _now_ms()
            entry = self._live_entry(key, now)
            if entry is None:
                return False

            entry.expires_at = now + ttl
            self._track_expiry(key, entry.expires_at)
            return True

    # ---- reads ----

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for key, or default on a miss."""
        with self._lock:
            now = _now_ms()
            entry = self._live_entry(key, now)
            if entry is None:
                self._misses += 1
                return default

            self._hits += 1
            entry.access_count += 1
            entry.last_accessed = now
            return entry.value

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], Any],
        *,
        ttl: Optional[float] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Any:
        """Look-aside helper: return the cached value or compute and store it."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        # factory runs outside the lock
        value = factory()
        self.set(key, value, ttl=ttl, tags=tags)
        return value

    def has(self, key: str) -> bool:
        """Presence check that leaves statistics and access bookkeeping alone."""
        with self._lock:
            return self._live_entry(key, _now_ms()) is not None

    exists = has

    def get_ttl(self, key: str) -> int:
        """Milliseconds until expiry; -1 if absent or never expiring, 0 if due."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None or entry.expires_at is None:
                return -1
            return max(0, math.ceil(entry.expires_at - _now_ms()))

    def keys(self) -> List[str]:
        with self._lock:
            self._sweep(_now_ms())
            return list(self._store)

    def size(self) -> int:
        with self._lock:
            self._sweep(_now_ms())
            return len(self._store)

    # ---- deletes ----

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._remove(key)

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a '*' glob, regardless of expiry state."""
        regex = compile_glob(pattern)
        with self._lock:
            matched = [k for k in self._store if regex.search(k)]
            for k in matched:
                self._remove(k)

        logger.debug("delete_pattern %r removed %d keys", pattern, len(matched))
        return len(matched)

    def delete_by_tag(self, tag: str) -> int:
        """Delete every entry whose tags contain tag exactly."""
        with self._lock:
            matched = [k for k, e in self._store.items() if tag in e.tags]
            for k in matched:
                self._remove(k)

        logger.debug("delete_by_tag %r removed %d keys", tag, len(matched))
        return len(matched)

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        with self._lock:
            self._store.clear()
            self._expiry_heap.clear()
            self._expiry_seq.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def cleanup(self) -> int:
        """Sweep expired entries now. Returns the number evicted."""
        with self._lock:
            return self._sweep(_now_ms())

    # ---- stats ----

    def get_stats(self) -> CacheStats:
        with self._lock:
            self._sweep(_now_ms())
            total = self._hits + self._misses
            hit_rate = (self._hits / total) * 100 if total else 0.0
            miss_rate = (self._misses / total) * 100 if total else 0.0

            return CacheStats(
                size=len(self._store),
                hit_rate=hit_rate,
                miss_rate=miss_rate,
                eviction_count=self._evictions,
                memory_usage_estimate=self._estimate_memory(),
                hits=self._hits,
                misses=self._misses,
            )

    def _estimate_memory(self) -> int:
        total = 0
        for key, entry in self._store.items():
            try:
                chars = len(key) + len(json.dumps(entry.value))
            except (TypeError, ValueError, OverflowError, RecursionError):
                logger.debug("Value at %r is not JSON serializable; using fallback size", key)
                total += self._fallback_entry_bytes
                continue
            total += chars * self._bytes_per_char
        return total

    # ---- dunder ----

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    # ---- internals (caller holds the lock) ----

    def _live_entry(self, key: str, now: float) -> Optional[CacheEntry]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            self._remove(key)
            self._evictions += 1
            return None
        return entry

    def _remove(self, key: str) -> bool:
        self._expiry_seq.pop(key, None)
        return self._store.pop(key, None) is not None

    def _track_expiry(self, key: str, expires_at: float) -> None:
        seq = next(self._seq)
        self._expiry_seq[key] = seq
        heapq.heappush(self._expiry_heap, (expires_at, seq, key))

        # Rebuild when stale records dominate (keys overwritten or deleted)
        if len(self._expiry_heap) > 2 * len(self._expiry_seq) + 64:
            self._expiry_heap = [
                (self._store[k].expires_at, s, k) for k, s in self._expiry_seq.items()
            ]
            heapq.heapify(self._expiry_heap)

    def _sweep(self, now: float) -> int:
        evicted = 0
        heap = self._expiry_heap
        while heap and heap[0][0] <= now:
            _, seq, key = heapq.heappop(heap)
            if self._expiry_seq.get(key) != seq:
                continue
            self._remove(key)
            evicted += 1

        if evicted:
            self._evictions += evicted
            logger.debug("Swept %d expired cache entries", evicted)
        return evicted
