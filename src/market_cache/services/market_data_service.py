"""Cache-aware market data service.

Serves CoinGecko resources through a three step policy:

1. fresh cache entry  -> returned without touching the network
2. network            -> fresh 2xx payloads are written back to the cache
3. stale cache entry  -> returned when the network step fails

Errors reach the caller only when step 3 has nothing to offer.
"""

import logging
from functools import lru_cache
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from market_cache.config import settings
from market_cache.dto import CoinDetails, CoinMarket, GlobalMarketData, MarketChart, TrendingResponse
from market_cache.entities import CacheStatsEntity
from market_cache.errors import (
    MarketCacheError,
    RateLimitedError,
    TransportFailureError,
    UpstreamError,
)
from market_cache.models import FetchMetrics
from market_cache.protocols import CacheStore
from market_cache.repositories import PersistentCacheStore
from market_cache.utils import (
    coin_details_key,
    coin_list_key,
    global_data_key,
    market_chart_key,
    trending_coins_key,
)

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 250


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class MarketDataService:
    """Cache-aware client for the CoinGecko API.

    This service depends on the CacheStore PROTOCOL, not a concrete store,
    so tests can hand it an in-memory store and a mocked HTTP transport.

    Example:
        ```python
        from market_cache.services import MarketDataService

        service = MarketDataService.create()
        coins = await service.get_coin_list(per_page=10)
        coins = await service.get_coin_list(per_page=10)  # served from cache
        coins = await service.get_coin_list(per_page=10, force_refresh=True)
        await service.aclose()
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the market data service.

        Args:
            store: Cache store consulted before every request (required).
            client: HTTP client. If None, one is created on first use.
            base_url: Upstream API root. Defaults to settings.
            api_key: Optional CoinGecko demo API key. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            transport: Transport for the client created on first use.
        """
        self._store = store
        self._client = client
        self._transport = transport
        self._base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self._api_key = api_key or settings.coingecko_api_key
        self._timeout = timeout or settings.http_timeout
        self.metrics = FetchMetrics()

    @classmethod
    def create(
        cls,
        store: CacheStore | None = None,
        base_url: str | None = None,
    ) -> "MarketDataService":
        """Factory method to create MarketDataService with sensible defaults.

        Args:
            store: Cache store. If None, a PersistentCacheStore on the configured medium.
            base_url: Upstream API root. If None, uses settings.

        Returns:
            Configured MarketDataService
        """
        if store is None:
            store = PersistentCacheStore.create()
        return cls(store=store, base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["x-cg-demo-api-key"] = self._api_key
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        """Close the HTTP client if this service created or was given one."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MarketDataService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @staticmethod
    def _parse(data: Any, response_type: Any) -> Any:
        if response_type is None:
            return data
        return _adapter(response_type).validate_python(data)

    async def fetch_with_cache(
        self,
        url: str,
        cache_key: str,
        force_refresh: bool = False,
        *,
        params: dict[str, Any] | None = None,
        response_type: Any = None,
    ) -> Any:
        """Fetch a resource, preferring fresh cache and falling back to stale cache.

        Args:
            url: Absolute URL of the upstream resource
            cache_key: Deterministic key for this request
            force_refresh: Skip the fresh-cache lookup and always hit the network
            params: Query parameters for the request
            response_type: Type to validate the payload against (pydantic model,
                list of models, ...). None returns the decoded JSON as-is.

        Returns:
            The payload, validated against response_type when given

        Raises:
            RateLimitedError: Upstream answered 429 and nothing is cached
            UpstreamError: Upstream failed or sent an unusable body and nothing is cached
            TransportFailureError: The request could not complete and nothing is cached
        """
        self.metrics.record_request()

        if not force_refresh:
            cached = self._store.get(cache_key)
            if cached is not None:
                try:
                    result = self._parse(cached, response_type)
                except ValidationError as e:
                    logger.warning(
                        "Cached %s does not match %s, refetching (%d errors)",
                        cache_key,
                        response_type,
                        e.error_count(),
                    )
                else:
                    self.metrics.record_hit()
                    return result

        try:
            data, result = await self._request(url, params, response_type)
        except MarketCacheError as error:
            return self._serve_stale(cache_key, response_type, error)

        self._store.set(cache_key, data)
        return result

    async def _request(
        self,
        url: str,
        params: dict[str, Any] | None,
        response_type: Any,
    ) -> tuple[Any, Any]:
        """Perform the GET and classify every way it can fail.

        Returns:
            Tuple of (raw JSON payload, parsed payload)
        """
        self.metrics.record_network_call()
        logger.debug("GET %s params=%s", url, params)

        try:
            response = await self.client.get(url, params=params)
        except httpx.RequestError as e:
            raise TransportFailureError(str(e) or type(e).__name__) from e

        if response.status_code == 429:
            raise RateLimitedError(retry_after=response.headers.get("Retry-After"))
        if not response.is_success:
            raise UpstreamError.from_status(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"API Error: invalid JSON body from {url}",
                upstream_status=response.status_code,
            ) from e

        try:
            result = self._parse(data, response_type)
        except ValidationError as e:
            raise UpstreamError(
                f"API Error: unexpected response schema from {url} ({e.error_count()} errors)",
                upstream_status=response.status_code,
            ) from e

        return data, result

    def _serve_stale(self, cache_key: str, response_type: Any, error: MarketCacheError) -> Any:
        stale = self._store.get_stale(cache_key)
        if stale is not None:
            try:
                result = self._parse(stale, response_type)
            except ValidationError:
                logger.warning("Expired cache for %s does not match schema, not serving it", cache_key)
            else:
                self.metrics.record_stale_fallback()
                logger.warning("Using expired cache for %s: %s", cache_key, error)
                return result

        self.metrics.record_error()
        logger.error("Fetch failed for %s with no cache fallback: %s", cache_key, error)
        raise error

    async def get_coin_list(
        self,
        page: int = 1,
        per_page: int = 50,
        currency: str = "usd",
        force_refresh: bool = False,
    ) -> list[CoinMarket]:
        """Fetch instruments sorted by market cap.

        Args:
            page: Page number, starting at 1
            per_page: Results per page (1-250)
            currency: Quote currency code
            force_refresh: Bypass the fresh-cache lookup

        Returns:
            List of CoinMarket rows
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if not 1 <= per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}, got {per_page}")
        currency = _normalize_currency(currency)

        return await self.fetch_with_cache(
            f"{self._base_url}/coins/markets",
            coin_list_key(page, per_page, currency),
            force_refresh,
            params={
                "vs_currency": currency,
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": "true",
                "price_change_percentage": "24h",
            },
            response_type=list[CoinMarket],
        )

    async def get_coin_details(self, coin_id: str, force_refresh: bool = False) -> CoinDetails:
        """Fetch detail for one instrument, e.g. "bitcoin"."""
        coin_id = _require_id(coin_id)
        return await self.fetch_with_cache(
            f"{self._base_url}/coins/{quote(coin_id, safe='')}",
            coin_details_key(coin_id),
            force_refresh,
            params={
                "localization": "false",
                "tickers": "false",
                "community_data": "false",
                "developer_data": "false",
            },
            response_type=CoinDetails,
        )

    async def get_market_chart(
        self,
        coin_id: str,
        days: int | str = 7,
        currency: str = "usd",
        force_refresh: bool = False,
    ) -> MarketChart:
        """Fetch the historical price, market cap and volume series.

        Args:
            coin_id: Instrument id
            days: Positive number of days, or "max"
            currency: Quote currency code
            force_refresh: Bypass the fresh-cache lookup

        Returns:
            MarketChart with parallel [timestamp, value] series
        """
        coin_id = _require_id(coin_id)
        days = _normalize_days(days)
        currency = _normalize_currency(currency)

        return await self.fetch_with_cache(
            f"{self._base_url}/coins/{quote(coin_id, safe='')}/market_chart",
            market_chart_key(coin_id, days, currency),
            force_refresh,
            params={"vs_currency": currency, "days": days},
            response_type=MarketChart,
        )

    async def get_global_data(self, force_refresh: bool = False) -> GlobalMarketData:
        """Fetch aggregate market statistics."""
        return await self.fetch_with_cache(
            f"{self._base_url}/global",
            global_data_key(),
            force_refresh,
            response_type=GlobalMarketData,
        )

    async def get_trending_coins(self, force_refresh: bool = False) -> TrendingResponse:
        """Fetch the trending search ranking."""
        return await self.fetch_with_cache(
            f"{self._base_url}/search/trending",
            trending_coins_key(),
            force_refresh,
            response_type=TrendingResponse,
        )

    def clear_cache(self) -> int:
        """Remove every cached API response.

        Returns:
            Number of entries removed
        """
        return self._store.clear_all()

    def invalidate_cache_entry(self, key: str) -> None:
        """Remove one cached API response by its cache key."""
        self._store.invalidate(key)

    def sweep_expired(self) -> int:
        return self._store.sweep_expired()

    def cache_stats(self) -> CacheStatsEntity:
        return self._store.stats()

    def is_healthy(self) -> bool:
        return self._store.is_healthy()


def _require_id(coin_id: str) -> str:
    coin_id = coin_id.strip()
    # "." and ".." would be collapsed out of the request path
    if not coin_id or "/" in coin_id or not coin_id.strip("."):
        raise ValueError(f"Invalid coin id: {coin_id!r}")
    return coin_id


def _normalize_currency(currency: str) -> str:
    currency = currency.strip().lower()
    if not currency.isalnum():
        raise ValueError(f"Invalid currency code: {currency!r}")
    return currency


def _normalize_days(days: int | str) -> int | str:
    if isinstance(days, str):
        days = days.strip().lower()
        if days == "max":
            return days
        if not days.isdigit():
            raise ValueError(f"days must be a positive integer or 'max', got {days!r}")
        days = int(days)
    if days < 1:
        raise ValueError(f"days must be a positive integer or 'max', got {days}")
    return days
