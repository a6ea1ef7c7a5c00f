"""Cache key helpers.

Builds deterministic keys for API-style requests so that logically equal
requests share one cache slot no matter how their parameters were ordered.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from core.errors import ValidationError

KEY_PREFIX = "api:"


def generate_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Return ``api:<endpoint>`` plus a compact JSON suffix of sorted params.

    Only top-level parameter names are sorted (ordinal comparison); values are
    serialized as given, with non-JSON values stringified. Parameter names
    must be strings, otherwise ``1`` and ``"1"`` would share a key.
    """
    params = params or {}
    bad_names = [name for name in params if not isinstance(name, str)]
    if bad_names:
        raise ValidationError(f"Parameter names must be strings, got {bad_names[0]!r}")

    items = sorted(params.items())
    if not items:
        return f"{KEY_PREFIX}{endpoint}"

    payload = json.dumps(
        dict(items),
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return f"{KEY_PREFIX}{endpoint}:{payload}"
