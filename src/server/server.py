"""Server bootstrap for the ledger cache admin service.

Creates the FastMCP instance and the process-wide CacheManager, wires the
cache into tools and resources, and starts the MCP server (stdio transport).
"""

import logging

from mcp.server.fastmcp import FastMCP

from config import CACHE_BYTES_PER_CHAR, CACHE_FALLBACK_ENTRY_BYTES, CACHE_SWEEP_ON_WRITE, LOG_LEVEL
from core.cache import CacheManager

from tools.cache_admin import register as register_cache_admin

from resources.cache_stats import register_resources

mcp = FastMCP("ledger-cache")


def build_cache() -> CacheManager:
    return CacheManager(
        sweep_on_write=CACHE_SWEEP_ON_WRITE,
        fallback_entry_bytes=CACHE_FALLBACK_ENTRY_BYTES,
        bytes_per_char=CACHE_BYTES_PER_CHAR,
    )


cache = build_cache()


def register_all() -> None:
    register_cache_admin(mcp, cache=cache)
    register_resources(mcp, cache=cache)


register_all()


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
