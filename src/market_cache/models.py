from dataclasses import dataclass


@dataclass
class FetchMetrics:
    """Track how fetch requests were served."""

    total_requests: int = 0
    cache_hits: int = 0
    network_calls: int = 0
    stale_fallbacks: int = 0
    errors: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate the fraction of requests answered from fresh cache."""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests

    def record_request(self) -> None:
        self.total_requests += 1

    def record_hit(self) -> None:
        """Record a fresh cache hit."""
        self.cache_hits += 1

    def record_network_call(self) -> None:
        self.network_calls += 1

    def record_stale_fallback(self) -> None:
        """Record a failed fetch answered with expired data."""
        self.stale_fallbacks += 1

    def record_error(self) -> None:
        """Record a failed fetch surfaced to the caller."""
        self.errors += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "network_calls": self.network_calls,
            "stale_fallbacks": self.stale_fallbacks,
            "errors": self.errors,
            "hit_rate": self.hit_rate,
        }
