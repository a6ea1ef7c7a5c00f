"""Cached JSON API client.

Wraps GET requests against a single upstream base URL with the shared
TTLCache: identical requests (same endpoint and parameters, in any order)
are served from the cache until their TTL runs out. An optional
`core.rate_limiter.RateLimiter` caps how often the upstream host is hit.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import httpx

from core.cache import TTLCache
from core.errors import ExternalServiceError, NotFoundError, RateLimitedError, ValidationError
from core.inputs import normalize_endpoint
from core.rate_limiter import RateLimiter


class ApiClient:
    """Async JSON client whose responses are cached per request key.

    Key behavior:
      - get_json(endpoint, params) -> parsed JSON body
      - Cache keys come from TTLCache.generate_key (order-independent params).
      - Failed calls (HTTP errors, refusals by the rate limiter) are never cached.
    """

    JSON_ACCEPT = "application/json"

    def __init__(
        self,
        *,
        base_url: str,
        cache: TTLCache[Any],
        timeout: float = 20.0,
        verify: bool = False,
        ttl_seconds: Optional[float] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._base_url = (base_url or "").strip().rstrip("/")
        if not self._base_url:
            raise ValidationError("base_url must be non-empty")

        self._cache = cache
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._ttl_seconds = ttl_seconds
        self._rate_limiter = rate_limiter
        self._host = urlsplit(self._base_url).netloc or self._base_url

    async def get_json(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """GET `endpoint` and return its JSON body, using the cache when possible."""
        path = normalize_endpoint(endpoint)
        query = dict(params or {})
        key = self._cache.generate_key(path, query)
        ttl = ttl_seconds if ttl_seconds is not None else self._ttl_seconds

        async def produce() -> Any:
            return await self._fetch_json(path, query)

        return await self._cache.get_or_set(key, produce, ttl)

    # --- HTTP helpers ---

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": self.JSON_ACCEPT, "User-Agent": "ttl-cache-mcp"},
            timeout=self._timeout,
            verify=self._verify,
        )

    def _check_rate_limit(self) -> None:
        if self._rate_limiter is None:
            return
        decision = self._rate_limiter.hit(self._host)
        if not decision.allowed:
            raise RateLimitedError(
                f"Too many requests to {self._host}; retry in {decision.retry_after}s",
                retry_after=decision.retry_after,
            )

    async def _fetch_json(self, path: str, params: Mapping[str, Any]) -> Any:
        self._check_rate_limit()

        try:
            async with self._create_client() as client:
                resp = await client.get(path, params=params or None)
                if resp.status_code == 404:
                    raise NotFoundError(f"Endpoint not found: {path}")
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Upstream returned an error ({path}): {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to call upstream ({path}): {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"Upstream returned invalid JSON ({path})") from e
