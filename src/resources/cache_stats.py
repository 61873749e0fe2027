import json

from mcp.server.fastmcp import FastMCP

from core.cache import CacheManager


def register_resources(mcp: FastMCP, *, cache: CacheManager) -> None:
    """
    Register cache status resources for the MCP server.
    """

    @mcp.resource(
        "cache://stats",
        mime_type="application/json",
        description="Current cache statistics"
    )
    def stats() -> str:
        return json.dumps(cache.get_stats().as_dict())
