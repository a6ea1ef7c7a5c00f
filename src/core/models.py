"""Immutable dataclasses shared by the cache and its consumers.

Includes the cache configuration snapshot (CacheConfig), the statistics
report (CacheStats) and the request counter verdict (RateLimitDecision).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class CacheConfig:
    """Configuration snapshot for a TTLCache.

    Field groups:
    - Expiry: default_ttl_seconds (0 means entries never expire by time)
    - Size: max_size
    - Sweep: cleanup_interval_ms (0 disables the periodic sweep)
    - Logging: enable_logging
    """

    default_ttl_seconds: float = 300.0
    max_size: int = 1000
    cleanup_interval_ms: float = 60_000
    enable_logging: bool = False


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache statistics.

    `expired` counts entries past their deadline that no read or sweep has
    removed yet. `hit_ratio` is an estimate, not measured telemetry.
    """

    size: int
    max_size: int
    pending_timers: int
    expired: int
    hit_ratio: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0
