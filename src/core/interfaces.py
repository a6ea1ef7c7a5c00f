"""Core protocol and interface definitions.

Defines the CacheLogger protocol the cache reports through (a standard
``logging.Logger`` satisfies it) and the producer signature accepted by
``TTLCache.get_or_set``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, TypeVar, Union

T = TypeVar("T")


class CacheLogger(Protocol):
    """Contract for the optional logging sink injected into the cache."""
    def debug(self, msg: str, *, extra: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    def info(self, msg: str, *, extra: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    def warning(self, msg: str, *, extra: Optional[Mapping[str, Any]] = None) -> Any:
        ...

    def error(self, msg: str, *, extra: Optional[Mapping[str, Any]] = None) -> Any:
        ...


# Producers may be plain callables or coroutine functions.
ValueProducer = Callable[[], Union[T, Awaitable[T]]]
