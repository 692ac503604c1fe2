"""Error taxonomy and centralized FastAPI error handlers.

Network-side errors (rate limit, upstream status, transport) reach callers
only when no stale cache entry exists for the request. Storage-side errors
(``CacheUnavailableError`` and its subclasses) are raised by storage media and
always absorbed by the cache store.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketCacheError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(MarketCacheError):
    """Upstream answered 429 Too Many Requests."""

    def __init__(self, retry_after: str | None = None):
        super().__init__("Rate limit exceeded. Please wait a moment.", status_code=429)
        self.retry_after = retry_after


class UpstreamError(MarketCacheError):
    """Upstream answered with a non-2xx status or an unusable body."""

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message, status_code=502)
        self.upstream_status = upstream_status

    @classmethod
    def from_status(cls, status: int, reason: str) -> "UpstreamError":
        return cls(f"API Error: {status} {reason}".rstrip(), upstream_status=status)


class TransportFailureError(MarketCacheError):
    """The request never completed (DNS, connection, timeout)."""

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}", status_code=503)


class CacheUnavailableError(MarketCacheError):
    """Storage medium is absent or an operation on it failed."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class StorageQuotaExceededError(CacheUnavailableError):
    """Storage medium is full."""


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(RateLimitedError)
    async def handle_rate_limited(_request: Request, exc: RateLimitedError):
        headers = {"Retry-After": exc.retry_after} if exc.retry_after else None
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code, headers=headers)

    @app.exception_handler(MarketCacheError)
    async def handle_market_cache_error(_request: Request, exc: MarketCacheError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
