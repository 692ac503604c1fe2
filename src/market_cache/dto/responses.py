"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(..., description="Entries stored under the cache prefix", ge=0)
    valid_entries: int = Field(..., description="Entries that are still fresh", ge=0)
    expired_entries: int = Field(..., description="Entries past their expiry", ge=0)
    total_size_bytes: int = Field(..., description="Stored size in bytes", ge=0)
    total_size: str = Field(..., description="Human-readable stored size")
    ttl_seconds: float = Field(..., description="Default time-to-live for new entries", gt=0)
    metrics: dict[str, float | int] = Field(
        default_factory=dict,
        description="Fetch counters (cache hits, network calls, stale fallbacks, errors)",
    )


class CacheClearResponse(BaseModel):
    """Response DTO for clear and sweep operations."""

    success: bool = Field(..., description="Whether the operation succeeded")
    deleted_count: int = Field(..., description="Number of entries removed", ge=0)
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache_healthy: bool = Field(..., description="Whether the storage medium is reachable")
