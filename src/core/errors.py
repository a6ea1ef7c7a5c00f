from __future__ import annotations


class CacheServiceError(Exception):
    """Base error for the cache service."""


class ValidationError(CacheServiceError):
    """Raised when configuration or user input is invalid."""


class NotFoundError(CacheServiceError):
    """Raised when a requested upstream resource is not found."""


class ExternalServiceError(CacheServiceError):
    """Raised when an upstream API call fails."""


class RateLimitedError(ExternalServiceError):
    """Raised when the local request counter refuses an upstream call."""

    def __init__(self, message: str, *, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after
