"""Persistent TTL cache store over a StorageMedium.

Each entry is one JSON record stored under ``<prefix><key>``:

    {"key": "global-data", "data": {...}, "timestamp": 1700000000000,
     "expiresAt": 1700000600000}

Timestamps are epoch milliseconds. Entries are only removed by
``invalidate``, ``clear_all`` and ``sweep_expired``; expiry alone never
deletes anything, which is what makes stale fallback possible.

Every operation degrades to "no cache" when the medium is absent, failing or
full, or when a stored record cannot be parsed.
"""

import json
import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

from market_cache.config import settings
from market_cache.entities import CacheEntryEntity, CacheStatsEntity
from market_cache.errors import CacheUnavailableError, StorageQuotaExceededError
from market_cache.protocols import StorageMedium

from .memory_storage import InMemoryStorageMedium
from .redis_storage import RedisStorageMedium

logger = logging.getLogger(__name__)

# Errors a malformed stored record can produce while decoding
_PARSE_ERRORS = (ValueError, KeyError, TypeError, OverflowError, RecursionError)


def _now_ms() -> int:
    return int(time.time() * 1000)


class PersistentCacheStore:
    """TTL key/value cache with stale reads.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        store = PersistentCacheStore(medium=InMemoryStorageMedium())
        store.set("global-data", {"data": {"markets": 900}}, ttl=60)
        store.get("global-data")        # fresh payload, or None once expired
        store.get_stale("global-data")  # payload even after expiry
        ```
    """

    def __init__(
        self,
        medium: StorageMedium | None,
        prefix: str | None = None,
        ttl: int | float | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the cache store.

        Args:
            medium: Storage medium, or None when no medium exists in this context.
            prefix: Namespace prefix for storage keys. Defaults to settings.
            ttl: Default time-to-live in seconds. Defaults to settings.
            clock: Returns the current time in epoch milliseconds.

        Raises:
            ValueError: If ttl is not positive
        """
        self._medium = medium
        self._prefix = prefix or settings.cache_prefix
        self._ttl = settings.cache_ttl if ttl is None else ttl
        if self._ttl <= 0:
            raise ValueError(f"ttl must be positive, got {self._ttl}")
        self._clock = clock or _now_ms

    @classmethod
    def create(
        cls,
        medium: StorageMedium | None = None,
        prefix: str | None = None,
        ttl: int | float | None = None,
    ) -> "PersistentCacheStore":
        """Factory method to create a store on the configured medium.

        Args:
            medium: Storage medium. If None, built from settings.storage_backend.
            prefix: Storage key prefix. If None, uses settings.
            ttl: Default TTL in seconds. If None, uses settings.

        Returns:
            Configured PersistentCacheStore
        """
        if medium is None:
            medium = build_storage_medium(settings.storage_backend)
        return cls(medium=medium, prefix=prefix, ttl=ttl)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def default_ttl(self) -> int | float:
        """Default time-to-live in seconds."""
        return self._ttl

    def storage_key(self, key: str) -> str:
        """Map a logical cache key to its namespaced storage key."""
        return f"{self._prefix}{key}"

    def _available_medium(self) -> StorageMedium | None:
        if self._medium is None or not self._medium.is_available():
            return None
        return self._medium

    @staticmethod
    def _serialize(entry: CacheEntryEntity) -> str:
        return json.dumps(
            {
                "key": entry.key,
                "data": entry.data,
                "timestamp": entry.timestamp,
                "expiresAt": entry.expires_at,
            }
        )

    @staticmethod
    def _deserialize(raw: str) -> CacheEntryEntity:
        record = json.loads(raw)
        return CacheEntryEntity(
            key=record["key"],
            data=record["data"],
            timestamp=int(record["timestamp"]),
            expires_at=int(record["expiresAt"]),
        )

    def _load(self, key: str) -> CacheEntryEntity | None:
        """Read and decode the entry for key, or None for any kind of miss."""
        medium = self._available_medium()
        if medium is None:
            return None

        try:
            raw = medium.get_item(self.storage_key(key))
        except CacheUnavailableError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        if raw is None:
            logger.debug("MISS - %s", key)
            return None

        try:
            return self._deserialize(raw)
        except _PARSE_ERRORS as e:
            logger.warning("Unreadable cache entry %s: %s", key, e)
            return None

    def _scan(self, medium: StorageMedium) -> Iterator[tuple[str, str]]:
        """Yield (storage_key, raw_value) for every namespaced entry."""
        for storage_key in medium.keys():
            if not storage_key.startswith(self._prefix):
                continue
            raw = medium.get_item(storage_key)
            if raw is not None:
                yield storage_key, raw

    def _is_stale_record(self, raw: str, now: int) -> bool:
        try:
            return self._deserialize(raw).is_expired(now)
        except _PARSE_ERRORS:
            return True

    def get(self, key: str) -> Any | None:
        """Get fresh data for key.

        Args:
            key: Logical cache key

        Returns:
            The cached data if present and unexpired, None otherwise
        """
        entry = self._load(key)
        if entry is None:
            return None

        now = self._clock()
        if entry.is_expired(now):
            logger.debug("EXPIRED - %s", key)
            return None

        logger.debug("HIT - %s (expires in %ds)", key, (entry.expires_at - now) // 1000)
        return entry.data

    def get_stale(self, key: str) -> Any | None:
        """Get data for key ignoring expiry. Only meant for fallback paths.

        Args:
            key: Logical cache key

        Returns:
            The last written data, or None if there is none
        """
        entry = self._load(key)
        if entry is None:
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: int | float | None = None) -> bool:
        """Store data under key, replacing any previous entry.

        Writes are best-effort: a full, failing or absent medium makes this
        return False instead of raising. A full medium triggers one sweep of
        expired entries so later writes have room.

        Args:
            key: Logical cache key
            data: JSON-serializable payload
            ttl: Time-to-live in seconds. Defaults to the store default.

        Returns:
            True if the entry was written, False otherwise

        Raises:
            ValueError: If ttl is not positive
        """
        ttl = self._ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        medium = self._available_medium()
        if medium is None:
            return False

        now = self._clock()
        entry = CacheEntryEntity(
            key=key,
            data=data,
            timestamp=now,
            expires_at=now + max(1, int(ttl * 1000)),
        )

        try:
            raw = self._serialize(entry)
        except (TypeError, ValueError) as e:
            logger.warning("Cannot serialize cache entry %s: %s", key, e)
            return False

        try:
            medium.set_item(self.storage_key(key), raw)
        except StorageQuotaExceededError as e:
            logger.warning("Storage full while writing %s, sweeping expired entries: %s", key, e)
            self.sweep_expired()
            return False
        except CacheUnavailableError as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False

        logger.debug("SET - %s (TTL: %ss)", key, ttl)
        return True

    def is_valid(self, key: str) -> bool:
        """Check whether key holds an unexpired entry."""
        entry = self._load(key)
        return entry is not None and not entry.is_expired(self._clock())

    def invalidate(self, key: str) -> None:
        """Remove the entry for key. No-op if it does not exist."""
        medium = self._available_medium()
        if medium is None:
            return

        try:
            medium.remove_item(self.storage_key(key))
        except CacheUnavailableError as e:
            logger.warning("Cache invalidate failed for %s: %s", key, e)
            return
        logger.debug("INVALIDATE - %s", key)

    def clear_all(self) -> int:
        """Remove every entry under the prefix, leaving other keys untouched.

        Returns:
            Number of entries removed
        """
        medium = self._available_medium()
        if medium is None:
            return 0

        removed = 0
        try:
            targets = [k for k in medium.keys() if k.startswith(self._prefix)]
            for storage_key in targets:
                medium.remove_item(storage_key)
                removed += 1
        except CacheUnavailableError as e:
            logger.warning("Cache clear interrupted after %d entries: %s", removed, e)

        logger.info("CLEAR ALL - %d entries removed", removed)
        return removed

    def sweep_expired(self) -> int:
        """Remove every entry whose expiry is at or before now.

        Records that cannot be parsed are removed as well.

        Returns:
            Number of entries removed
        """
        medium = self._available_medium()
        if medium is None:
            return 0

        now = self._clock()
        removed = 0
        try:
            targets = [k for k, raw in self._scan(medium) if self._is_stale_record(raw, now)]
            for storage_key in targets:
                medium.remove_item(storage_key)
                removed += 1
        except CacheUnavailableError as e:
            logger.warning("Expired sweep interrupted after %d entries: %s", removed, e)

        logger.info("CLEAR EXPIRED - %d entries removed", removed)
        return removed

    def stats(self) -> CacheStatsEntity:
        """Scan the namespaced entries and summarize them.

        Returns:
            CacheStatsEntity; all zeros if the medium is unavailable
        """
        medium = self._available_medium()
        if medium is None:
            return CacheStatsEntity()

        now = self._clock()
        total = valid = expired = size = 0
        try:
            for _, raw in self._scan(medium):
                total += 1
                size += len(raw) * 2
                if self._is_stale_record(raw, now):
                    expired += 1
                else:
                    valid += 1
        except CacheUnavailableError as e:
            logger.warning("Cache stats scan failed: %s", e)
            return CacheStatsEntity()

        return CacheStatsEntity(
            total_entries=total,
            valid_entries=valid,
            expired_entries=expired,
            total_size_bytes=size,
        )

    def is_healthy(self) -> bool:
        """Check if the storage medium can be used."""
        return self._available_medium() is not None


def build_storage_medium(backend: str) -> StorageMedium | None:
    """Create the storage medium named by a STORAGE_BACKEND value.

    Args:
        backend: "redis", "memory" or "none"

    Returns:
        The storage medium, or None for "none"
    """
    if backend == "redis":
        return RedisStorageMedium.create()
    if backend == "memory":
        return InMemoryStorageMedium()
    if backend == "none":
        return None
    raise ValueError(f"Unknown storage backend: {backend!r}")
