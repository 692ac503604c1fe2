"""In-memory implementation of StorageMedium.

Keeps string values in a dict and enforces a byte quota the way a browser
origin store does, counting two bytes per character of keys and values.
Used by tests and by local runs without Redis (``STORAGE_BACKEND=memory``).
"""

from collections.abc import Iterator

from market_cache.config import settings
from market_cache.errors import StorageQuotaExceededError


class InMemoryStorageMedium:
    """Dict-backed storage medium with a size quota.

    This class satisfies the StorageMedium protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        medium = InMemoryStorageMedium(quota_bytes=1024)
        medium.set_item("greeting", "hello")
        medium.get_item("greeting")  # "hello"
        ```
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        """Initialize the medium.

        Args:
            quota_bytes: Capacity in bytes. Defaults to settings.memory_storage_quota.
        """
        self._items: dict[str, str] = {}
        self._quota = settings.memory_storage_quota if quota_bytes is None else quota_bytes
        if self._quota <= 0:
            raise ValueError(f"quota_bytes must be positive, got {self._quota}")

    @staticmethod
    def _item_size(key: str, value: str) -> int:
        return (len(key) + len(value)) * 2

    @property
    def used_bytes(self) -> int:
        """Bytes currently held by all items."""
        return sum(self._item_size(k, v) for k, v in self._items.items())

    def is_available(self) -> bool:
        return True

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        previous = self._items.get(key)
        freed = self._item_size(key, previous) if previous is not None else 0
        needed = self.used_bytes - freed + self._item_size(key, value)
        if needed > self._quota:
            raise StorageQuotaExceededError(
                f"Storage quota exceeded writing {key!r} ({needed} > {self._quota} bytes)"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        # Snapshot so callers may remove while iterating
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
