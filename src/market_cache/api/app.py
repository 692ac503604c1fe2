"""FastAPI application exposing cached market data and cache administration."""

import logging
from typing import Annotated, Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from market_cache.api.dependencies import CacheHandlerDep, MarketHandlerDep, lifespan
from market_cache.config import settings
from market_cache.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    CoinDetails,
    CoinMarket,
    GlobalMarketData,
    HealthCheckResponse,
    MarketChart,
    TrendingResponse,
)
from market_cache.errors import register_error_handlers

logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

RefreshParam = Annotated[bool, Query(description="Bypass the fresh cache and hit the upstream API")]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Market Cache API",
        description="Cached CoinGecko market data with stale fallback",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Market Cache API",
            "version": "0.1.0",
            "description": "Caching layer over the CoinGecko API",
            "endpoints": {
                "coins": "/coins/markets",
                "global": "/global",
                "trending": "/search/trending",
                "cache": "/cache/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: CacheHandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.get("/coins/markets", response_model=list[CoinMarket])
    async def list_coins(
        handler: MarketHandlerDep,
        page: int = Query(1, ge=1),
        per_page: int = Query(50, ge=1, le=250),
        currency: str = Query("usd", min_length=1, max_length=10),
        refresh: RefreshParam = False,
    ) -> list[CoinMarket]:
        return await handler.list_coins(page, per_page, currency, refresh)

    @app.get("/coins/{coin_id}", response_model=CoinDetails)
    async def coin_details(
        coin_id: str,
        handler: MarketHandlerDep,
        refresh: RefreshParam = False,
    ) -> CoinDetails:
        return await handler.coin_details(coin_id, refresh)

    @app.get("/coins/{coin_id}/market_chart", response_model=MarketChart)
    async def market_chart(
        coin_id: str,
        handler: MarketHandlerDep,
        days: str = Query("7", description="Number of days, or 'max'"),
        currency: str = Query("usd", min_length=1, max_length=10),
        refresh: RefreshParam = False,
    ) -> MarketChart:
        return await handler.market_chart(coin_id, days, currency, refresh)

    @app.get("/global", response_model=GlobalMarketData)
    async def global_data(handler: MarketHandlerDep, refresh: RefreshParam = False) -> GlobalMarketData:
        return await handler.global_data(refresh)

    @app.get("/search/trending", response_model=TrendingResponse)
    async def trending(handler: MarketHandlerDep, refresh: RefreshParam = False) -> TrendingResponse:
        return await handler.trending(refresh)

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats(handler: CacheHandlerDep) -> CacheStatsResponse:
        return await handler.get_stats()

    @app.post("/cache/sweep", response_model=CacheClearResponse)
    async def sweep_cache(handler: CacheHandlerDep) -> CacheClearResponse:
        return await handler.sweep_expired()

    @app.delete("/cache", response_model=CacheClearResponse)
    async def clear_cache(handler: CacheHandlerDep) -> CacheClearResponse:
        return await handler.clear_cache()

    @app.delete("/cache/{key:path}", response_model=CacheClearResponse)
    async def invalidate_cache(key: str, handler: CacheHandlerDep) -> CacheClearResponse:
        return await handler.invalidate(key)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "market_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
