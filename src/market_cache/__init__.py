"""Market Cache - TTL caching with stale fallback for the CoinGecko API.

This package provides a layered architecture for cached market data:

Layers:
    - protocols: Interface contracts (CacheStore, StorageMedium)
    - repositories: Storage media and the persistent TTL cache store
    - services: Cache-aware fetch policy and resource entry points
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (upstream schemas, API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from market_cache.services import MarketDataService

    service = MarketDataService.create()
    coins = await service.get_coin_list(page=1, per_page=50)
    ```

For HTTP API:
    ```python
    from market_cache.api.app import app
    ```
"""

from market_cache.config import get_redis_client, settings
from market_cache.entities import CacheEntryEntity, CacheStatsEntity
from market_cache.errors import (
    CacheUnavailableError,
    MarketCacheError,
    RateLimitedError,
    StorageQuotaExceededError,
    TransportFailureError,
    UpstreamError,
)
from market_cache.handlers import CacheHandler, MarketHandler
from market_cache.protocols import CacheStore, StorageMedium
from market_cache.repositories import InMemoryStorageMedium, PersistentCacheStore, RedisStorageMedium
from market_cache.services import MarketDataService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "StorageMedium",
    # Services (business logic)
    "MarketDataService",
    # Handlers (HTTP)
    "CacheHandler",
    "MarketHandler",
    # Repositories (data access)
    "PersistentCacheStore",
    "RedisStorageMedium",
    "InMemoryStorageMedium",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheStatsEntity",
    # Errors
    "MarketCacheError",
    "RateLimitedError",
    "UpstreamError",
    "TransportFailureError",
    "CacheUnavailableError",
    "StorageQuotaExceededError",
]
