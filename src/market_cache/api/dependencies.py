"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing the service instance.

Pattern:
    - Service stored in app.state during lifespan
    - Dependency functions retrieve it from request.app.state
    - Handlers are thin and built per request on top of the service
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from market_cache.config import settings
from market_cache.handlers import CacheHandler, MarketHandler
from market_cache.repositories import PersistentCacheStore
from market_cache.services import MarketDataService

logger = logging.getLogger(__name__)


def get_market_service(request: Request) -> MarketDataService:
    """Dependency injection for MarketDataService from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The MarketDataService instance from app.state

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "market_service", None)
    if service is None:
        raise RuntimeError("MarketDataService not initialized. Check lifespan setup.")
    return service


ServiceDep = Annotated[MarketDataService, Depends(get_market_service)]


def get_market_handler(service: ServiceDep) -> MarketHandler:
    return MarketHandler(market_service=service)


def get_cache_handler(service: ServiceDep) -> CacheHandler:
    return CacheHandler(market_service=service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores the service in app.state:
    1. Storage medium + cache store (data access)
    2. Market data service (fetch policy) - app.state.market_service

    Cleanup:
        Closes the HTTP client and removes the service from app.state
    """
    store = PersistentCacheStore.create()
    market_service = MarketDataService.create(store=store)
    app.state.market_service = market_service

    logger.info("Market data service initialized")
    logger.info("Storage backend: %s (healthy=%s)", settings.storage_backend, store.is_healthy())
    logger.info("Cache TTL: %ss, prefix: %s", store.default_ttl, store.prefix)

    yield

    await market_service.aclose()
    del app.state.market_service
    logger.info("Market data service shut down")


# Type aliases for cleaner dependency injection
MarketHandlerDep = Annotated[MarketHandler, Depends(get_market_handler)]
CacheHandlerDep = Annotated[CacheHandler, Depends(get_cache_handler)]
