"""Repository layer for data access.

This layer hides the storage medium (Redis, in-memory) behind protocol-based
interfaces and builds the TTL cache store on top of it. This enables:
- Swapping the medium without touching the store or the services
- Unit testing with the in-memory medium
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
"""

from market_cache.protocols import CacheStore, StorageMedium

from .memory_storage import InMemoryStorageMedium
from .persistent_cache_store import PersistentCacheStore, build_storage_medium
from .redis_storage import RedisStorageMedium

__all__ = [
    "CacheStore",
    "StorageMedium",
    "InMemoryStorageMedium",
    "PersistentCacheStore",
    "RedisStorageMedium",
    "build_storage_medium",
]
