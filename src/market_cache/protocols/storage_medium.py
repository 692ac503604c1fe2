"""Storage medium protocol.

A storage medium is the raw, synchronous, string-keyed and string-valued
key-value space the cache store writes into. It knows nothing about TTLs or
entry formats.

Implementations can include:
- Redis (default, persistent and shared)
- An in-process dict with a byte quota (tests, local runs)
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageMedium(Protocol):
    """Protocol for string key-value storage media.

    Failures are reported with ``CacheUnavailableError``; a full medium raises
    its subclass ``StorageQuotaExceededError`` from ``set_item``.
    """

    def is_available(self) -> bool:
        """Probe whether the medium can be used right now.

        Returns:
            True if reads and writes can be attempted
        """
        ...

    def get_item(self, key: str) -> str | None:
        """Read a raw value.

        Args:
            key: Full storage key

        Returns:
            The stored string, or None if the key does not exist
        """
        ...

    def set_item(self, key: str, value: str) -> None:
        """Write a raw value, replacing any previous one.

        Args:
            key: Full storage key
            value: String to store
        """
        ...

    def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is a no-op.

        Args:
            key: Full storage key
        """
        ...

    def keys(self) -> Iterator[str]:
        """Iterate over every key held by the medium.

        Returns:
            Iterator of storage keys, including keys not owned by the cache
        """
        ...
