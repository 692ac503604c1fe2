"""Cache store protocol.

Defines the TTL cache interface the fetch client depends on. Every method
degrades to "no cache" instead of raising when storage is missing, full or
holds malformed data.

Implementations can include:
- PersistentCacheStore over a StorageMedium (default)
- Any test fake with the same methods
"""

from typing import Any, Protocol, runtime_checkable

from market_cache.entities import CacheStatsEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for TTL cache stores.

    Example:
        ```python
        from market_cache.protocols import CacheStore
        from market_cache.repositories import PersistentCacheStore

        store: CacheStore = PersistentCacheStore.create()
        ```
    """

    def get(self, key: str) -> Any | None:
        """Return cached data if present and unexpired, None otherwise."""
        ...

    def get_stale(self, key: str) -> Any | None:
        """Return cached data regardless of expiry, None if absent."""
        ...

    def set(self, key: str, data: Any, ttl: int | float | None = None) -> bool:
        """Store data under key for ttl seconds.

        Returns:
            True if the entry was written, False otherwise
        """
        ...

    def is_valid(self, key: str) -> bool:
        """Check whether an unexpired entry exists for key."""
        ...

    def invalidate(self, key: str) -> None:
        """Remove the entry for key, if any."""
        ...

    def clear_all(self) -> int:
        """Remove every cache entry.

        Returns:
            Number of entries removed
        """
        ...

    def sweep_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        ...

    def stats(self) -> CacheStatsEntity:
        """Scan cache entries and return a diagnostic snapshot."""
        ...

    def is_healthy(self) -> bool:
        """Check if the underlying storage can be used.

        Returns:
            True if healthy, False otherwise
        """
        ...

    @property
    def default_ttl(self) -> int | float:
        """Default time-to-live in seconds for new entries."""
        ...
