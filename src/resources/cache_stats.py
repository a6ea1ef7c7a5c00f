import json
from typing import Any

from mcp.server.fastmcp import FastMCP

from core.cache import TTLCache


def register_resources(mcp: FastMCP, *, cache: TTLCache[Any]) -> None:
    """
    Register cache resources for the MCP server.
    """

    @mcp.resource(
        "cache://stats",
        mime_type="application/json",
        description="Current statistics of the shared in-memory cache"
    )
    def cache_stats() -> str:
        return json.dumps(cache.get_stats().as_dict())
