"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the storage medium (Redis -> in-memory, etc.)
- Handing the fetch client a fake store in tests
- Clear separation of concerns

Usage:
    ```python
    from market_cache.protocols import CacheStore, StorageMedium

    medium: StorageMedium = RedisStorageMedium.create()
    medium: StorageMedium = InMemoryStorageMedium()
    ```
"""

from .cache_store import CacheStore
from .storage_medium import StorageMedium

__all__ = [
    "CacheStore",
    "StorageMedium",
]
