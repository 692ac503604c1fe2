"""HTTP handlers for market data resources.

Each handler maps query parameters onto a service entry point. The
``refresh`` flag is the consumer's force-refresh switch: true for
user-triggered refreshes, false for automatic polling.

Classified fetch errors are left to the app's registered exception
handlers, which turn them into status codes.
"""

from market_cache.dto import CoinDetails, CoinMarket, GlobalMarketData, MarketChart, TrendingResponse
from market_cache.services import MarketDataService


class MarketHandler:
    """HTTP handlers for market data resources."""

    def __init__(self, market_service: MarketDataService) -> None:
        self._service = market_service

    async def list_coins(
        self,
        page: int,
        per_page: int,
        currency: str,
        refresh: bool,
    ) -> list[CoinMarket]:
        """Handle GET /coins/markets requests."""
        return await self._service.get_coin_list(
            page=page,
            per_page=per_page,
            currency=currency,
            force_refresh=refresh,
        )

    async def coin_details(self, coin_id: str, refresh: bool) -> CoinDetails:
        """Handle GET /coins/{coin_id} requests."""
        return await self._service.get_coin_details(coin_id, force_refresh=refresh)

    async def market_chart(
        self,
        coin_id: str,
        days: str,
        currency: str,
        refresh: bool,
    ) -> MarketChart:
        """Handle GET /coins/{coin_id}/market_chart requests."""
        return await self._service.get_market_chart(
            coin_id,
            days=days,
            currency=currency,
            force_refresh=refresh,
        )

    async def global_data(self, refresh: bool) -> GlobalMarketData:
        return await self._service.get_global_data(force_refresh=refresh)

    async def trending(self, refresh: bool) -> TrendingResponse:
        return await self._service.get_trending_coins(force_refresh=refresh)
