"""Small in-memory TTL cache with size-bounded eviction.

Store values with monotonic timestamps and an optional deadline. Expired
entries are dropped lazily on read, by a per-key timer on the running event
loop and by a sweep, which also trims the oldest entries (by creation time)
whenever the table grows past max_size.
"""

from __future__ import annotations

import asyncio
import inspect
import random
import time
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from core.errors import ValidationError
from core.inputs import coerce_ttl, normalize_cleanup_interval, normalize_max_size, normalize_ttl
from core.interfaces import CacheLogger, ValueProducer
from core.keys import generate_key as _generate_key
from core.models import CacheConfig, CacheStats

T = TypeVar("T")

# Chance that a set() also runs a full sweep.
SWEEP_PROBABILITY = 0.1

# Reported while non-empty; hits and misses are not tracked.
ESTIMATED_HIT_RATIO = 0.85


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    # Stores value + monotonic timestamps
    value: T
    created_at: float
    last_accessed_at: float
    expires_at: Optional[float] = None  # None: never expires by time

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class TTLCache(Generic[T]):
    """In-memory key/value cache with per-key TTL and a size cap.

    Key behavior:
      - get/set/delete/has/keys/clear are synchronous and never suspend.
      - Entries with a deadline get a one-shot removal timer when an event
        loop is running; reads treat expired entries as absent either way.
      - A sweep removes expired entries, then the oldest entries by
        creation time until len <= max_size. It runs periodically, on 10%
        of set() calls and whenever max_size changes.
      - Reads do not protect an entry from size-based eviction.
      - After destroy() the instance behaves as a permanently empty cache.
    """

    def __init__(
        self,
        *,
        default_ttl_seconds: float = 300.0,
        max_size: int = 1000,
        cleanup_interval_ms: float = 60_000,
        logger: Optional[CacheLogger] = None,
        enable_logging: Optional[bool] = None,
    ) -> None:
        if enable_logging is None:
            enable_logging = logger is not None

        self._config = CacheConfig(
            default_ttl_seconds=normalize_ttl(default_ttl_seconds, name="default_ttl_seconds"),
            max_size=normalize_max_size(max_size),
            cleanup_interval_ms=normalize_cleanup_interval(cleanup_interval_ms),
            enable_logging=bool(enable_logging),
        )
        self._logger = logger

        self._store: Dict[str, CacheEntry[T]] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._cleanup_task: Optional["asyncio.Task[None]"] = None
        self._destroyed = False

        self._ensure_cleanup_task()
        self._log(
            "info",
            "In-memory cache service initialized",
            max_size=self._config.max_size,
            default_ttl_seconds=self._config.default_ttl_seconds,
        )

    @classmethod
    def from_config(cls, config: CacheConfig, *, logger: Optional[CacheLogger] = None) -> "TTLCache[Any]":
        return cls(
            default_ttl_seconds=config.default_ttl_seconds,
            max_size=config.max_size,
            cleanup_interval_ms=config.cleanup_interval_ms,
            logger=logger,
            enable_logging=config.enable_logging,
        )

    # --- Store operations ---

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        entry = self._live_entry(key)
        if entry is None:
            return default
        return entry.value

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        if self._destroyed:
            return

        default_ttl = self._config.default_ttl_seconds
        ttl = default_ttl if ttl_seconds is None else coerce_ttl(ttl_seconds, default_ttl)
        now = time.monotonic()

        self._cancel_timer(key)

        # Re-insert so dict order follows created_at
        self._store.pop(key, None)
        self._store[key] = CacheEntry(
            value=value,
            created_at=now,
            last_accessed_at=now,
            expires_at=now + ttl if ttl > 0 else None,
        )

        if ttl > 0:
            self._schedule_expiry(key, ttl)

        self._ensure_cleanup_task()

        if random.random() < SWEEP_PROBABILITY:
            self._cleanup()

    def delete(self, key: str) -> bool:
        """Remove `key` and its timer; return whether it was stored."""
        return self._remove(key)

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def keys(self) -> List[str]:
        now = time.monotonic()
        return [key for key, entry in self._store.items() if not entry.is_expired(now)]

    def clear(self) -> None:
        for handle in self._timers.values():
            handle.cancel()

        cleared_count = len(self._store)
        self._store.clear()
        self._timers.clear()

        self._log("info", "In-memory cache cleared", cleared_count=cleared_count)

    async def get_or_set(
        self,
        key: str,
        producer: ValueProducer[T],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        """Return the cached value for `key`, or produce, store and return it.

        `producer` may be a plain callable or return an awaitable. Its errors
        are logged and re-raised unchanged; nothing is cached on failure.
        Concurrent misses on the same key each call their own producer.
        """
        entry = self._live_entry(key)
        if entry is not None:
            return entry.value

        try:
            value = producer()
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            self._log("error", f"Error executing producer for cache key {key}", key=key, error=str(e))
            raise

        self.set(key, value, ttl_seconds)
        return value

    def generate_key(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        return _generate_key(endpoint, params)

    def get_stats(self) -> CacheStats:
        now = time.monotonic()
        size = len(self._store)
        expired = sum(1 for entry in self._store.values() if entry.is_expired(now))
        return CacheStats(
            size=size,
            max_size=self._config.max_size,
            pending_timers=len(self._timers),
            expired=expired,
            hit_ratio=ESTIMATED_HIT_RATIO if size > 0 else 0.0,
        )

    # --- Configuration ---

    def get_config(self) -> CacheConfig:
        return self._config

    def set_config(self, **changes: Any) -> None:
        """Merge option changes into the configuration.

        All values are validated before any is applied. A max_size change
        runs a sweep; a cleanup_interval_ms change restarts the periodic one.
        """
        known = {f.name for f in fields(CacheConfig)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValidationError(f"Unknown cache option(s): {', '.join(unknown)}")

        normalized: Dict[str, Any] = {}
        if "default_ttl_seconds" in changes:
            normalized["default_ttl_seconds"] = normalize_ttl(
                changes["default_ttl_seconds"], name="default_ttl_seconds"
            )
        if "max_size" in changes:
            normalized["max_size"] = normalize_max_size(changes["max_size"])
        if "cleanup_interval_ms" in changes:
            normalized["cleanup_interval_ms"] = normalize_cleanup_interval(changes["cleanup_interval_ms"])
        if "enable_logging" in changes:
            normalized["enable_logging"] = bool(changes["enable_logging"])

        previous = self._config
        self._config = replace(previous, **normalized)

        if self._config.cleanup_interval_ms != previous.cleanup_interval_ms:
            self._stop_cleanup_task()
            self._ensure_cleanup_task()

        if "max_size" in normalized:
            self._cleanup()

    def get_default_ttl(self) -> float:
        return self._config.default_ttl_seconds

    def set_default_ttl(self, ttl_seconds: float) -> None:
        self._config = replace(
            self._config,
            default_ttl_seconds=normalize_ttl(ttl_seconds, name="default_ttl_seconds"),
        )

    def get_max_size(self) -> int:
        return self._config.max_size

    def set_max_size(self, max_size: int) -> None:
        self._config = replace(self._config, max_size=normalize_max_size(max_size))
        # Enforce the new bound right away
        self._cleanup()

    def set_logger(self, logger: CacheLogger) -> None:
        self._logger = logger
        self._config = replace(self._config, enable_logging=True)

    def set_logging_enabled(self, enabled: bool) -> None:
        self._config = replace(self._config, enable_logging=bool(enabled))

    # --- Lifecycle ---

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    async def start(self) -> None:
        """Start the periodic sweep on the running loop."""
        if self._destroyed:
            return
        self._ensure_cleanup_task()
        self._log("info", "In-memory cache service ready")

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True

        self._stop_cleanup_task()
        for handle in self._timers.values():
            handle.cancel()
        self._store.clear()
        self._timers.clear()

        self._log("info", "Cache service destroyed")

    # --- Internals ---

    def _live_entry(self, key: str) -> Optional[CacheEntry[T]]:
        entry = self._store.get(key)
        if entry is None:
            return None

        now = time.monotonic()
        if entry.is_expired(now):
            self._remove(key)
            return None

        entry.last_accessed_at = now
        return entry

    def _remove(self, key: str) -> bool:
        self._cancel_timer(key)
        return self._store.pop(key, None) is not None

    def _cancel_timer(self, key: str) -> None:
        # Cancelling a handle that already fired is a no-op
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _schedule_expiry(self, key: str, ttl: float) -> None:
        loop = _running_loop()
        if loop is None:
            return
        self._timers[key] = loop.call_later(ttl, self._expire, key)

    def _expire(self, key: str) -> None:
        # Timer callback; the entry may already be gone
        self._timers.pop(key, None)
        self._store.pop(key, None)

    def _cleanup(self) -> None:
        before_size = len(self._store)
        now = time.monotonic()

        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired:
            self._remove(key)

        evicted_count = 0
        overflow = len(self._store) - self._config.max_size
        if overflow > 0:
            # Stable sort: equal created_at keeps insertion order
            oldest = sorted(self._store.items(), key=lambda kv: kv[1].created_at)[:overflow]
            for key, _ in oldest:
                self._remove(key)
            evicted_count = len(oldest)

        if expired or evicted_count:
            self._log(
                "debug",
                "Cache cleanup completed",
                before_size=before_size,
                after_size=len(self._store),
                expired_count=len(expired),
                evicted_count=evicted_count,
            )

    def _ensure_cleanup_task(self) -> None:
        if self._destroyed or self._config.cleanup_interval_ms <= 0:
            return

        loop = _running_loop()
        if loop is None:
            return

        task = self._cleanup_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return

        interval = self._config.cleanup_interval_ms / 1000.0
        self._cleanup_task = loop.create_task(self._run_cleanup_loop(interval))

    def _stop_cleanup_task(self) -> None:
        task, self._cleanup_task = self._cleanup_task, None
        if task is None or task.done():
            return
        # A task left on a closed loop can no longer be cancelled
        if not task.get_loop().is_closed():
            task.cancel()

    async def _run_cleanup_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self._cleanup()

    def _log(self, level: str, message: str, **metadata: Any) -> None:
        if not self._config.enable_logging or self._logger is None:
            return
        log_fn = getattr(self._logger, level, None)
        if callable(log_fn):
            log_fn(message, extra=metadata)
