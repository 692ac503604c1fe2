"""Service layer for business logic.

This layer contains the cache-aware fetch policy. Services depend on
protocols (interfaces), not concrete implementations, making them testable
and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Fetch policy) -> (Cache store / storage medium)

Usage:
    ```python
    from market_cache.services import MarketDataService

    # Using factory method (recommended)
    service = MarketDataService.create()

    # Or manual creation
    service = MarketDataService(store=PersistentCacheStore(medium=InMemoryStorageMedium()))
    ```
"""

from .market_data_service import MarketDataService

__all__ = [
    "MarketDataService",
]
