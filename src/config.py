"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (cache
sizing and expiry, logging level, upstream API and request budget).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Cache
CACHE_DEFAULT_TTL_SECONDS = _env_float("CACHE_DEFAULT_TTL_SECONDS", 300.0)
CACHE_MAX_SIZE = _env_int("CACHE_MAX_SIZE", 1000)
CACHE_CLEANUP_INTERVAL_MS = _env_int("CACHE_CLEANUP_INTERVAL_MS", 60_000)
CACHE_ENABLE_LOGGING = _env_bool("CACHE_ENABLE_LOGGING", True)

# Logging (stderr; stdout carries the MCP stdio transport)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", False)

# Upstream API served through the cache
API_BASE_URL = os.environ.get("API_BASE_URL", "https://jsonplaceholder.typicode.com").strip()
API_TIMEOUT = _env_float("API_TIMEOUT", 20.0)

# Upstream request budget, counted in the cache
RATE_LIMIT_WINDOW_SECONDS = _env_float("RATE_LIMIT_WINDOW_SECONDS", 900.0)
RATE_LIMIT_MAX_REQUESTS = _env_int("RATE_LIMIT_MAX_REQUESTS", 100)
