"""Redis implementation of StorageMedium.

Redis gives the cache a persistent, process-independent home. A Redis server
with ``maxmemory`` set and the ``noeviction`` policy answers writes past the
limit with an ``OOM`` error, which is reported as a full medium.
"""

import logging
from collections.abc import Iterator

import redis
from redis.exceptions import RedisError, ResponseError

from market_cache.config import get_redis_client
from market_cache.errors import CacheUnavailableError, StorageQuotaExceededError

logger = logging.getLogger(__name__)


class RedisStorageMedium:
    """Redis-backed storage medium.

    This class satisfies the StorageMedium protocol through structural
    typing - no explicit inheritance needed.

    Values are plain Redis strings. The client must be created with
    ``decode_responses=True`` so reads come back as ``str``.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize the Redis storage medium.

        Args:
            redis_client: Redis client instance. If None, creates default.
        """
        self._client = redis_client or get_redis_client()

    @classmethod
    def create(cls) -> "RedisStorageMedium":
        """Factory method to create RedisStorageMedium with the default client.

        Returns:
            Configured RedisStorageMedium
        """
        return cls()

    def is_available(self) -> bool:
        """Check if Redis is reachable.

        Returns:
            True if the server answers PING, False otherwise
        """
        try:
            return bool(self._client.ping())
        except RedisError as e:
            logger.warning("Redis unavailable: %s", e)
            return False

    def get_item(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except RedisError as e:
            raise CacheUnavailableError(f"Redis GET failed for {key!r}: {e}") from e
        if isinstance(value, bytes):
            return value.decode()
        return value  # type: ignore[return-value]

    def set_item(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except ResponseError as e:
            if str(e).startswith("OOM"):
                raise StorageQuotaExceededError(f"Redis is out of memory: {e}") from e
            raise CacheUnavailableError(f"Redis SET failed for {key!r}: {e}") from e
        except RedisError as e:
            raise CacheUnavailableError(f"Redis SET failed for {key!r}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._client.delete(key)
        except RedisError as e:
            raise CacheUnavailableError(f"Redis DEL failed for {key!r}: {e}") from e

    def keys(self) -> Iterator[str]:
        try:
            found = list(self._client.scan_iter())
        except RedisError as e:
            raise CacheUnavailableError(f"Redis SCAN failed: {e}") from e
        return iter(k.decode() if isinstance(k, bytes) else k for k in found)
