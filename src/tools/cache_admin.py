"""MCP tools for inspecting and invalidating the host's cache.

Registers read-only tools (cache_stats, cache_keys) and invalidation tools
(cache_delete, cache_delete_pattern, cache_delete_by_tag, cache_clear)
against one injected CacheManager.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from core.cache import CacheManager
from core.errors import ValidationError
from core.patterns import compile_glob


def register(mcp: FastMCP, *, cache: CacheManager) -> None:
    @mcp.tool(name="cache_stats")
    async def cache_stats() -> Dict[str, Any]:
        """Return size, hit/miss rates, eviction count and a memory estimate."""
        return cache.get_stats().as_dict()

    @mcp.tool(name="cache_keys")
    async def cache_keys(pattern: Optional[str] = None) -> List[str]:
        """List live keys, optionally filtered by a '*' glob (sorted).

        Raises:
          InvalidPatternError if pattern is empty.
        """
        keys = cache.keys()
        if pattern is None:
            return sorted(keys)
        regex = compile_glob(pattern)
        return sorted(k for k in keys if regex.search(k))

    @mcp.tool(name="cache_delete")
    async def cache_delete(key: str) -> bool:
        """Delete one key. Returns whether it was present."""
        if not key:
            raise ValidationError("Missing key")
        return cache.delete(key)

    @mcp.tool(name="cache_delete_pattern")
    async def cache_delete_pattern(pattern: str) -> int:
        """Delete all keys matching a '*' glob. Returns the number removed."""
        return cache.delete_pattern(pattern)

    @mcp.tool(name="cache_delete_by_tag")
    async def cache_delete_by_tag(tag: str) -> int:
        """Delete all entries carrying tag. Returns the number removed."""
        if not tag or not tag.strip():
            raise ValidationError("Missing tag")
        return cache.delete_by_tag(tag)

    @mcp.tool(name="cache_clear")
    async def cache_clear() -> bool:
        """Drop every entry and reset statistics."""
        cache.clear()
        return True
