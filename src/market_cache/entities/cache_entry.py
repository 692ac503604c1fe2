"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for one cached API response.

    The store owns how this is serialized; callers only ever see ``key`` and
    ``data``.

    Attributes:
        key: Logical cache key (without the storage prefix)
        data: The cached payload (decoded JSON)
        timestamp: When the entry was written (epoch milliseconds)
        expires_at: When the entry stops being fresh (epoch milliseconds)
    """

    key: str
    data: Any
    timestamp: int
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        """Check expiry against a clock reading.

        Args:
            now_ms: Current time in epoch milliseconds

        Returns:
            True once now_ms has reached expires_at
        """
        return now_ms >= self.expires_at
