"""Shared fixtures for market cache tests."""

from collections.abc import Callable

import httpx
import pytest

from market_cache.repositories import InMemoryStorageMedium, PersistentCacheStore
from market_cache.services import MarketDataService

BASE_URL = "https://api.test/api/v3"
START_MS = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now_ms: int = START_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class RecordingTransport:
    """Scripted upstream that records every request.

    Queued responses are served in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responders: list[Callable[[httpx.Request], httpx.Response]] = []

    def respond(self, status_code: int = 200, json=None, headers=None, content=None) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            return httpx.Response(status_code, json=json, headers=headers)

        self._responders.append(responder)

    def fail(self, exc_type: type[httpx.RequestError] = httpx.ConnectError) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exc_type("connection refused", request=request)

        self._responders.append(responder)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responders:
            raise AssertionError(f"Unexpected request: {request.url}")
        responder = self._responders.pop(0) if len(self._responders) > 1 else self._responders[0]
        return responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def medium() -> InMemoryStorageMedium:
    return InMemoryStorageMedium(quota_bytes=1024 * 1024)


@pytest.fixture
def store(medium: InMemoryStorageMedium, clock: FakeClock) -> PersistentCacheStore:
    return PersistentCacheStore(medium=medium, prefix="crypto_cache_", ttl=600, clock=clock)


@pytest.fixture
def upstream() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def service(store: PersistentCacheStore, upstream: RecordingTransport) -> MarketDataService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return MarketDataService(store=store, client=client, base_url=BASE_URL)


GLOBAL_PAYLOAD = {
    "data": {
        "active_cryptocurrencies": 12000,
        "markets": 950,
        "total_market_cap": {"usd": 2.5e12},
        "total_volume": {"usd": 9.1e10},
        "market_cap_percentage": {"btc": 52.1, "eth": 16.8},
        "market_cap_change_percentage_24h_usd": 1.4,
    }
}

COIN_ROW = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": "https://assets.test/btc.png",
    "current_price": 64000.5,
    "market_cap": 1.26e12,
    "market_cap_rank": 1,
    "fully_diluted_valuation": None,
    "total_volume": 3.1e10,
    "price_change_percentage_24h": -0.8,
    "max_supply": 21000000,
    "sparkline_in_7d": {"price": [63000.0, 63500.2, 64000.5]},
}

CHART_PAYLOAD = {
    "prices": [[1700000000000, 64000.5], [1700003600000, 64100.0]],
    "market_caps": [[1700000000000, 1.26e12], [1700003600000, 1.27e12]],
    "total_volumes": [[1700000000000, 3.1e10], [1700003600000, 3.0e10]],
}

TRENDING_PAYLOAD = {
    "coins": [
        {
            "item": {
                "id": "pepe",
                "coin_id": 29850,
                "name": "Pepe",
                "symbol": "PEPE",
                "market_cap_rank": 30,
                "slug": "pepe",
                "price_btc": 1.6e-10,
                "score": 0,
                "data": {"price": 0.0000105},
            }
        }
    ]
}

DETAILS_PAYLOAD = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "description": {"en": "The first cryptocurrency."},
    "image": {"thumb": "t.png", "small": "s.png", "large": "l.png"},
    "market_data": {
        "current_price": {"usd": 64000.5},
        "market_cap": {"usd": 1.26e12},
        "price_change_percentage_24h": -0.8,
        "total_supply": None,
    },
    "links": {"homepage": ["https://bitcoin.org"], "repos_url": {"github": ["https://github.com/bitcoin/bitcoin"]}},
}
