"""Cache-backed request counter.

Counts requests per client id in the shared TTLCache:
- Each allowed hit stores count + 1 and restarts the window TTL.
- Once the count reaches max_requests, hits are refused until the counter
  expires; retry_after is the window length rounded up to whole seconds.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from core.inputs import normalize_positive
from core.models import RateLimitDecision

if TYPE_CHECKING:
    from core.cache import TTLCache


class RateLimiter:
    # Fixed-window request counter stored in the cache
    def __init__(
        self,
        cache: "TTLCache[int]",
        *,
        window_seconds: float = 15 * 60,
        max_requests: int = 100,
        key_prefix: str = "rateLimit",
    ) -> None:
        self._cache = cache
        self._window_seconds = normalize_positive(window_seconds, name="window_seconds")
        self._max_requests = int(normalize_positive(max_requests, name="max_requests"))
        self._key_prefix = key_prefix

    @property
    def retry_after(self) -> int:
        return int(math.ceil(self._window_seconds))

    def hit(self, client_id: str) -> RateLimitDecision:
        key = self._key(client_id)
        current = self._cache.get(key, 0) or 0

        if current >= self._max_requests:
            return RateLimitDecision(allowed=False, remaining=0, retry_after=self.retry_after)

        self._cache.set(key, current + 1, self._window_seconds)
        return RateLimitDecision(allowed=True, remaining=self._max_requests - current - 1)

    def reset(self, client_id: str) -> bool:
        return self._cache.delete(self._key(client_id))

    def _key(self, client_id: str) -> str:
        return f"{self._key_prefix}:{client_id}"
