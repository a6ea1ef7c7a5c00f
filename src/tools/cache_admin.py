"""MCP tools that inspect and administer the shared TTL cache.

Registers 'cache_stats', 'cache_keys', 'cache_get', 'cache_delete',
'cache_clear' and 'cache_set_max_size' against one injected TTLCache.
"""

from __future__ import annotations

from typing import Any, Dict, List

from mcp.server.fastmcp import FastMCP

from core.cache import TTLCache
from core.errors import ValidationError


def _require_key(key: str) -> str:
    k = (key or "").strip()
    if not k:
        raise ValidationError("key must be non-empty")
    return k


def register(mcp: FastMCP, *, cache: TTLCache[Any]) -> None:
    @mcp.tool(name="cache_stats")
    async def cache_stats() -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
          size, max_size, pending_timers, expired (past deadline but not yet
          removed) and hit_ratio (an estimate, not measured).
        """
        return cache.get_stats().as_dict()

    @mcp.tool(name="cache_keys")
    async def cache_keys(prefix: str = "") -> List[str]:
        """List live (non-expired) cache keys, optionally filtered by prefix, sorted."""
        return sorted(k for k in cache.keys() if k.startswith(prefix or ""))

    @mcp.tool(name="cache_get")
    async def cache_get(key: str) -> Dict[str, Any]:
        """Look up a key.

        Returns:
          {"key", "found", "value"}; value is null when the key is absent or expired.
        """
        k = _require_key(key)
        found = cache.has(k)
        return {"key": k, "found": found, "value": cache.get(k) if found else None}

    @mcp.tool(name="cache_delete")
    async def cache_delete(key: str) -> Dict[str, Any]:
        """Delete a key and report whether it existed."""
        k = _require_key(key)
        return {"key": k, "deleted": cache.delete(k)}

    @mcp.tool(name="cache_clear")
    async def cache_clear() -> Dict[str, Any]:
        """Remove every entry and pending expiry timer."""
        cleared = cache.get_stats().size
        cache.clear()
        return {"cleared": cleared}

    @mcp.tool(name="cache_set_max_size")
    async def cache_set_max_size(max_size: int) -> Dict[str, Any]:
        """Change the size cap and trim the oldest entries immediately.

        Raises:
          ValidationError if max_size is not a positive integer.
        """
        cache.set_max_size(max_size)
        return cache.get_stats().as_dict()
