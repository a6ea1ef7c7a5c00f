"""MCP tool that fetches JSON from the configured upstream API through the cache.

Registers 'fetch_json', a thin adapter over ApiClient.get_json.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from clients.api_client import ApiClient


def register(mcp: FastMCP, *, api_client: ApiClient) -> None:
    @mcp.tool(name="fetch_json")
    async def fetch_json(
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """GET an upstream endpoint and return its JSON body.

        Identical requests are answered from the cache until their TTL expires.

        Params:
          - endpoint: path relative to API_BASE_URL (e.g. "/users").
          - params: optional query parameters; their order does not matter.
          - ttl_seconds: cache lifetime for this response (default: cache default).

        Raises:
          ValidationError for an empty endpoint; NotFoundError on 404;
          RateLimitedError when the upstream budget is exhausted;
          ExternalServiceError for other upstream failures.
        """
        return await api_client.get_json(endpoint, params, ttl_seconds=ttl_seconds)
