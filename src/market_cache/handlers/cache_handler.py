"""HTTP handlers for cache administration.

Handlers convert between entities and DTOs (API contracts) and delegate to
the service layer. Store operations never raise, so nothing here needs
error mapping.
"""

from market_cache.dto import CacheClearResponse, CacheStatsResponse, HealthCheckResponse
from market_cache.services import MarketDataService


class CacheHandler:
    """HTTP handlers for cache administration.

    Example:
        ```python
        handler = CacheHandler(market_service=MarketDataService.create())

        @app.get("/cache/stats", response_model=CacheStatsResponse)
        async def cache_stats():
            return await handler.get_stats()
        ```
    """

    def __init__(self, market_service: MarketDataService) -> None:
        """Initialize the cache handler.

        Args:
            market_service: Service owning the cache store (required).
        """
        self._service = market_service

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        stats = self._service.cache_stats()

        return CacheStatsResponse(
            total_entries=stats.total_entries,
            valid_entries=stats.valid_entries,
            expired_entries=stats.expired_entries,
            total_size_bytes=stats.total_size_bytes,
            total_size=stats.total_size,
            ttl_seconds=self._service.store.default_ttl,
            metrics=self._service.metrics.to_dict(),
        )

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /cache requests."""
        count = self._service.clear_cache()

        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message="Cache cleared successfully",
        )

    async def sweep_expired(self) -> CacheClearResponse:
        """Handle POST /cache/sweep requests."""
        count = self._service.sweep_expired()

        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message=f"Removed {count} expired entries",
        )

    async def invalidate(self, key: str) -> CacheClearResponse:
        """Handle DELETE /cache/{key} requests.

        Invalidation is idempotent, so a missing key still succeeds.
        """
        self._service.invalidate_cache_entry(key)

        return CacheClearResponse(
            success=True,
            deleted_count=0,
            message=f"Cache entry {key!r} invalidated",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        The API keeps working without a cache, so an unreachable medium is
        reported as degraded rather than failing the request.
        """
        is_healthy = self._service.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "degraded",
            cache_healthy=is_healthy,
        )
