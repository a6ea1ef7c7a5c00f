from __future__ import annotations

from numbers import Real
from typing import Optional

from core.errors import ValidationError


def normalize_ttl(ttl_seconds: object, *, name: str = "ttl_seconds") -> float:
    # Bools are ints in Python; reject them along with strings and None.
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, Real):
        raise ValidationError(f"{name} must be a number of seconds")
    ttl = float(ttl_seconds)
    # Negative TTLs mean "no expiry", same as 0.
    return ttl if ttl > 0 else 0.0


def coerce_ttl(ttl_seconds: object, default: float) -> float:
    # Lenient variant for per-call TTLs: numeric strings are parsed,
    # anything else unusable falls back to the default TTL.
    if isinstance(ttl_seconds, bool):
        return default
    if isinstance(ttl_seconds, str):
        try:
            ttl = float(ttl_seconds.strip())
        except ValueError:
            return default
    elif isinstance(ttl_seconds, Real):
        ttl = float(ttl_seconds)
    else:
        return default
    # NaN compares false, so it ends up as "no expiry" like negatives.
    return ttl if ttl > 0 else 0.0


def normalize_max_size(max_size: object) -> int:
    if isinstance(max_size, bool) or (isinstance(max_size, float) and not max_size.is_integer()):
        raise ValidationError("max_size must be a positive integer")
    try:
        n = int(max_size)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ValidationError("max_size must be a positive integer") from e
    if n <= 0:
        raise ValidationError("max_size must be positive")
    return n


def normalize_cleanup_interval(interval_ms: object) -> float:
    if isinstance(interval_ms, bool) or not isinstance(interval_ms, Real):
        raise ValidationError("cleanup_interval_ms must be a number of milliseconds")
    interval = float(interval_ms)
    if interval < 0:
        raise ValidationError("cleanup_interval_ms must be non-negative")
    return interval


def normalize_positive(value: object, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number")
    v = float(value)
    if v <= 0:
        raise ValidationError(f"{name} must be positive")
    return v


def normalize_endpoint(endpoint: Optional[str]) -> str:
    # Keep endpoints stable for key generation:
    # - Trim whitespace, unify separators
    # - Always start with a single "/"
    e = (endpoint or "").strip().replace("\\", "/")
    e = "/" + e.lstrip("/")
    if e == "/":
        raise ValidationError("endpoint must be non-empty")
    return e
