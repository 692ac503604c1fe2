"""Cache statistics domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStatsEntity:
    """Diagnostic snapshot of the namespaced cache entries.

    Attributes:
        total_entries: Number of storage keys under the cache prefix
        valid_entries: Entries that are still fresh
        expired_entries: Entries past their expiry (or unreadable)
        total_size_bytes: Stored value size, two bytes per character
    """

    total_entries: int = 0
    valid_entries: int = 0
    expired_entries: int = 0
    total_size_bytes: int = 0

    @property
    def total_size(self) -> str:
        """Human-readable size, e.g. ``"512 B"`` or ``"3.25 KB"``."""
        if self.total_size_bytes > 1024:
            return f"{self.total_size_bytes / 1024:.2f} KB"
        return f"{self.total_size_bytes} B"
