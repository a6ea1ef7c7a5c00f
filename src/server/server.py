"""Server bootstrap for the TTL cache MCP service.

Configures logging, creates the process-wide TTLCache once, wires the
rate limiter, API client, tools and resources to that same instance, and
starts the MCP server (stdio transport).
"""

import logging

from mcp.server.fastmcp import FastMCP

from clients.api_client import ApiClient
from config import (
    API_BASE_URL,
    API_TIMEOUT,
    CACHE_CLEANUP_INTERVAL_MS,
    CACHE_DEFAULT_TTL_SECONDS,
    CACHE_ENABLE_LOGGING,
    CACHE_MAX_SIZE,
    HTTP_VERIFY,
    LOG_LEVEL,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)
from core.cache import TTLCache
from core.log_format import setup_logging
from core.rate_limiter import RateLimiter

from tools.cache_admin import register as register_cache_admin
from tools.fetch_json import register as register_fetch_json

from resources.cache_stats import register_resources

setup_logging(LOG_LEVEL)

mcp = FastMCP("ttl-cache-mcp")

# The one shared cache for this process; everything below receives it explicitly.
cache = TTLCache(
    default_ttl_seconds=CACHE_DEFAULT_TTL_SECONDS,
    max_size=CACHE_MAX_SIZE,
    cleanup_interval_ms=CACHE_CLEANUP_INTERVAL_MS,
    logger=logging.getLogger("ttl_cache"),
    enable_logging=CACHE_ENABLE_LOGGING,
)


def register_tools() -> None:
    rate_limiter = RateLimiter(
        cache,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
        max_requests=RATE_LIMIT_MAX_REQUESTS,
    )
    api_client = ApiClient(
        base_url=API_BASE_URL,
        cache=cache,
        timeout=API_TIMEOUT,
        verify=HTTP_VERIFY,
        rate_limiter=rate_limiter,
    )

    register_cache_admin(mcp, cache=cache)
    register_fetch_json(mcp, api_client=api_client)


def register_all() -> None:
    register_tools()
    register_resources(mcp, cache=cache)


register_all()


def main() -> None:
    try:
        mcp.run(transport="stdio")
    finally:
        cache.destroy()


if __name__ == "__main__":
    main()
