"""Core protocol definitions.

Defines the CacheBackend protocol the services (invalidation, memoization,
rate limiting) are written against, so any store exposing the same calls
can stand in for the in-memory CacheManager.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol


class CacheBackend(Protocol):
    """Contract for a key-value cache with TTL and tag support."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(
        self,
        key: str,
        value: Any,
        *,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        ...

    def has(self, key: str) -> bool:
        ...

    def delete(self, key: str) -> bool:
        ...

    def delete_pattern(self, pattern: str) -> int:
        ...

    def delete_by_tag(self, tag: str) -> int:
        ...

    def incr(self, key: str, amount: int = 1, *, ttl: Optional[int] = None) -> int:
        ...

    def get_ttl(self, key: str) -> int:
        ...
