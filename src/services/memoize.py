"""Result caching for expensive sync and async callables.

cache_response wraps a function so repeated calls with the same arguments
are served from a CacheBackend. Keys are '<name>:<json args>'.
"""

from __future__ import annotations

import functools
import inspect
import json
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from core.interfaces import CacheBackend

_MISSING = object()


def make_cache_key(name: str, args: Sequence[Any], kwargs: Optional[Mapping[str, Any]] = None) -> str:
    """Build a deterministic key from a function name and its arguments."""
    key = f"{name}:{json.dumps(list(args), separators=(',', ':'), default=str)}"
    if kwargs:
        key += json.dumps(dict(kwargs), separators=(",", ":"), sort_keys=True, default=str)
    return key


def cache_response(
    cache: CacheBackend,
    *,
    ttl: Optional[float] = None,
    tags: Optional[Iterable[str]] = None,
    key_prefix: Optional[str] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator caching a function's return value for ttl milliseconds.

    None results are never stored, so a failed lookup is retried next call.
    """
    tag_list = list(tags) if tags else None

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        name = key_prefix or fn.__name__

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                key = make_cache_key(name, args, kwargs)
                cached = cache.get(key, _MISSING)
                if cached is not _MISSING:
                    return cached

                result = await fn(*args, **kwargs)
                if result is not None:
                    cache.set(key, result, ttl=ttl, tags=tag_list)
                return result

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = make_cache_key(name, args, kwargs)
            cached = cache.get(key, _MISSING)
            if cached is not _MISSING:
                return cached

            result = fn(*args, **kwargs)
            if result is not None:
                cache.set(key, result, ttl=ttl, tags=tag_list)
            return result

        return wrapper

    return decorator
