"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract: the upstream
payload schemas the service validates against, and the responses of the
cache administration endpoints.

Internal domain logic should use entities from the entities package.
"""

from .market import (
    CoinDetails,
    CoinMarket,
    GlobalMarketData,
    MarketChart,
    TrendingCoin,
    TrendingResponse,
)
from .responses import CacheClearResponse, CacheStatsResponse, HealthCheckResponse

__all__ = [
    "CoinMarket",
    "CoinDetails",
    "MarketChart",
    "GlobalMarketData",
    "TrendingCoin",
    "TrendingResponse",
    "CacheStatsResponse",
    "CacheClearResponse",
    "HealthCheckResponse",
]
