"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by the store and
services. They are NOT used for API contracts - use DTOs from the dto
package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .cache_entry import CacheEntryEntity
from .cache_stats import CacheStatsEntity

__all__ = ["CacheEntryEntity", "CacheStatsEntity"]
