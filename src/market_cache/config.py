import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

STORAGE_BACKENDS = ("redis", "memory", "none")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream API
    coingecko_base_url: str = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
    coingecko_api_key: str | None = os.getenv("COINGECKO_API_KEY")
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30.0"))

    # Cache
    cache_prefix: str = os.getenv("CACHE_PREFIX", "crypto_cache_")
    cache_ttl: int = int(os.getenv("CACHE_TTL", "600"))  # 10 minutes default

    # Storage medium
    storage_backend: str = os.getenv("STORAGE_BACKEND", "redis").lower()
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    memory_storage_quota: int = int(os.getenv("MEMORY_STORAGE_QUOTA", str(5 * 1024 * 1024)))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError(f"CACHE_TTL must be positive, got {self.cache_ttl}")

        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {list(STORAGE_BACKENDS)}, "
                f"got {self.storage_backend!r}"
            )

        if self.memory_storage_quota <= 0:
            raise ValueError("MEMORY_STORAGE_QUOTA must be a positive number of bytes")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
