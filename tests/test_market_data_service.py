"""
Tests for the cache-aware market data service.

The upstream API is replaced by an httpx.MockTransport that records every
request, so "no network call" is asserted by counting requests.
"""

import asyncio

import httpx
import pytest

from conftest import (
    BASE_URL,
    CHART_PAYLOAD,
    COIN_ROW,
    DETAILS_PAYLOAD,
    GLOBAL_PAYLOAD,
    TRENDING_PAYLOAD,
)
from market_cache.dto import CoinMarket, GlobalMarketData
from market_cache.errors import (
    RateLimitedError,
    TransportFailureError,
    UpstreamError,
)
from market_cache.repositories import PersistentCacheStore
from market_cache.services import MarketDataService

URL = f"{BASE_URL}/global"
KEY = "global-data"


def run(coro):
    return asyncio.run(coro)


def test_cache_miss_fetches_and_stores(service, store, upstream):
    """Empty cache + 200 -> payload returned, stored, one network call."""
    upstream.respond(200, json={"p": 1})

    result = run(service.fetch_with_cache(URL, KEY))

    assert result == {"p": 1}
    assert store.get(KEY) == {"p": 1}
    assert upstream.call_count == 1


def test_fresh_cache_hit_makes_no_network_call(service, store, upstream):
    store.set(KEY, {"p": 1})

    result = run(service.fetch_with_cache(URL, KEY))

    assert result == {"p": 1}
    assert upstream.call_count == 0


def test_force_refresh_bypasses_fresh_cache(service, store, upstream):
    store.set(KEY, {"p": 1})
    upstream.respond(200, json={"p": 2})

    result = run(service.fetch_with_cache(URL, KEY, force_refresh=True))

    assert result == {"p": 2}
    assert store.get(KEY) == {"p": 2}
    assert upstream.call_count == 1


def test_expired_cache_refetches(service, store, clock, upstream):
    store.set(KEY, {"p": 1}, ttl=60)
    clock.advance(120)
    upstream.respond(200, json={"p": 2})

    assert run(service.fetch_with_cache(URL, KEY)) == {"p": 2}
    assert upstream.call_count == 1


def test_upstream_error_serves_stale_entry(service, store, clock, upstream):
    """Expired P1 + 500 -> P1, no exception."""
    store.set(KEY, {"p": 1}, ttl=60)
    clock.advance(3600)
    upstream.respond(500)

    result = run(service.fetch_with_cache(URL, KEY))

    assert result == {"p": 1}
    assert service.metrics.stale_fallbacks == 1


def test_upstream_error_without_cache_raises(service, upstream):
    upstream.respond(500)

    with pytest.raises(UpstreamError) as exc_info:
        run(service.fetch_with_cache(URL, KEY))

    assert exc_info.value.upstream_status == 500
    assert str(exc_info.value) == "API Error: 500 Internal Server Error"
    assert service.metrics.errors == 1


def test_rate_limit_without_cache_raises_distinct_error(service, upstream):
    upstream.respond(429, headers={"Retry-After": "30"})

    with pytest.raises(RateLimitedError) as exc_info:
        run(service.fetch_with_cache(URL, KEY))

    assert not isinstance(exc_info.value, UpstreamError)
    assert exc_info.value.retry_after == "30"
    assert "Rate limit exceeded" in str(exc_info.value)


def test_rate_limit_with_cache_serves_stale(service, store, clock, upstream):
    store.set(KEY, {"p": 1}, ttl=60)
    clock.advance(61)
    upstream.respond(429)

    assert run(service.fetch_with_cache(URL, KEY)) == {"p": 1}


def test_forced_refresh_failure_falls_back_to_fresh_entry(service, store, upstream):
    """A failed forced refresh still answers with whatever is cached."""
    store.set(KEY, {"p": 1})
    upstream.respond(503)

    assert run(service.fetch_with_cache(URL, KEY, force_refresh=True)) == {"p": 1}


def test_transport_failure_without_cache_raises(service, upstream):
    upstream.fail(httpx.ConnectError)

    with pytest.raises(TransportFailureError):
        run(service.fetch_with_cache(URL, KEY))


def test_timeout_with_cache_serves_stale(service, store, clock, upstream):
    store.set(KEY, {"p": 1}, ttl=60)
    clock.advance(61)
    upstream.fail(httpx.ReadTimeout)

    assert run(service.fetch_with_cache(URL, KEY)) == {"p": 1}


def test_invalid_json_is_upstream_error(service, store, upstream):
    upstream.respond(200, content=b"<html>maintenance</html>")

    with pytest.raises(UpstreamError):
        run(service.fetch_with_cache(URL, KEY))

    assert store.get_stale(KEY) is None


def test_failed_fetch_does_not_touch_cache(service, store, clock, upstream):
    store.set(KEY, {"p": 1}, ttl=60)
    clock.advance(61)
    upstream.respond(500)

    run(service.fetch_with_cache(URL, KEY))

    # Still expired, still the old payload
    assert store.get(KEY) is None
    assert store.get_stale(KEY) == {"p": 1}


def test_no_storage_medium_still_fetches(upstream):
    store = PersistentCacheStore(medium=None, prefix="crypto_cache_", ttl=60)
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    service = MarketDataService(store=store, client=client, base_url=BASE_URL)
    upstream.respond(200, json={"p": 1})

    async def scenario():
        first = await service.fetch_with_cache(URL, KEY)
        second = await service.fetch_with_cache(URL, KEY)
        return first, second

    assert run(scenario()) == ({"p": 1}, {"p": 1})
    assert upstream.call_count == 2


def test_no_storage_medium_surfaces_errors(upstream):
    store = PersistentCacheStore(medium=None, prefix="crypto_cache_", ttl=60)
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    service = MarketDataService(store=store, client=client, base_url=BASE_URL)
    upstream.respond(500)

    with pytest.raises(UpstreamError):
        run(service.fetch_with_cache(URL, KEY))


def test_response_type_validates_payload(service, upstream):
    upstream.respond(200, json=GLOBAL_PAYLOAD)

    result = run(service.fetch_with_cache(URL, KEY, response_type=GlobalMarketData))

    assert isinstance(result, GlobalMarketData)
    assert result.data.markets == 950


def test_schema_mismatch_is_upstream_error_and_not_cached(service, store, upstream):
    upstream.respond(200, json={"unexpected": True})

    with pytest.raises(UpstreamError):
        run(service.fetch_with_cache(URL, KEY, response_type=GlobalMarketData))

    assert store.get_stale(KEY) is None


def test_cached_value_with_old_schema_is_refetched(service, store, upstream):
    store.set(KEY, {"unexpected": True})
    upstream.respond(200, json=GLOBAL_PAYLOAD)

    result = run(service.fetch_with_cache(URL, KEY, response_type=GlobalMarketData))

    assert result.data.active_cryptocurrencies == 12000
    assert upstream.call_count == 1


def test_get_coin_list_request_and_cache(service, store, upstream):
    upstream.respond(200, json=[COIN_ROW])

    async def scenario():
        first = await service.get_coin_list(page=2, per_page=10, currency="USD")
        second = await service.get_coin_list(page=2, per_page=10, currency="usd")
        return first, second

    first, second = run(scenario())

    assert upstream.call_count == 1
    assert isinstance(first[0], CoinMarket)
    assert first[0].id == "bitcoin"
    assert second == first
    assert store.get("crypto-list:2:10:usd") == [COIN_ROW]

    request = upstream.requests[0]
    assert request.url.path == "/api/v3/coins/markets"
    assert request.url.params["vs_currency"] == "usd"
    assert request.url.params["page"] == "2"
    assert request.url.params["per_page"] == "10"
    assert request.url.params["order"] == "market_cap_desc"


def test_get_coin_list_pages_are_cached_separately(service, upstream):
    upstream.respond(200, json=[COIN_ROW])

    async def scenario():
        await service.get_coin_list(page=1)
        await service.get_coin_list(page=2)

    run(scenario())

    assert upstream.call_count == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page": 0},
        {"per_page": 0},
        {"per_page": 251},
        {"currency": "us d"},
    ],
)
def test_get_coin_list_rejects_bad_parameters(service, upstream, kwargs):
    with pytest.raises(ValueError):
        run(service.get_coin_list(**kwargs))

    assert upstream.call_count == 0


def test_get_coin_details(service, store, upstream):
    upstream.respond(200, json=DETAILS_PAYLOAD)

    details = run(service.get_coin_details("bitcoin"))

    assert details.market_data.current_price["usd"] == 64000.5
    assert details.links.repos_url["github"] == ["https://github.com/bitcoin/bitcoin"]
    assert upstream.requests[0].url.path == "/api/v3/coins/bitcoin"
    assert upstream.requests[0].url.params["tickers"] == "false"
    assert store.is_valid("crypto-details:bitcoin")


def test_get_market_chart(service, store, upstream):
    upstream.respond(200, json=CHART_PAYLOAD)

    chart = run(service.get_market_chart("bitcoin", days="30", currency="EUR"))

    assert chart.prices[0] == (1700000000000, 64000.5)
    assert upstream.requests[0].url.path == "/api/v3/coins/bitcoin/market_chart"
    assert upstream.requests[0].url.params["days"] == "30"
    assert upstream.requests[0].url.params["vs_currency"] == "eur"
    assert store.is_valid("crypto-chart:bitcoin:30:eur")


def test_get_market_chart_max_range(service, store, upstream):
    upstream.respond(200, json=CHART_PAYLOAD)

    run(service.get_market_chart("bitcoin", days="MAX"))

    assert store.is_valid("crypto-chart:bitcoin:max:usd")


@pytest.mark.parametrize("days", [0, -1, "week", ""])
def test_get_market_chart_rejects_bad_days(service, days):
    with pytest.raises(ValueError):
        run(service.get_market_chart("bitcoin", days=days))


def test_get_global_data_and_trending(service, upstream):
    upstream.respond(200, json=GLOBAL_PAYLOAD)
    upstream.respond(200, json=TRENDING_PAYLOAD)

    async def scenario():
        return await service.get_global_data(), await service.get_trending_coins()

    global_data, trending = run(scenario())

    assert global_data.data.market_cap_percentage["btc"] == 52.1
    assert trending.coins[0].item.id == "pepe"
    assert [r.url.path for r in upstream.requests] == ["/api/v3/global", "/api/v3/search/trending"]


def test_entry_point_serves_stale_on_rate_limit(service, store, clock, upstream):
    store.set("trending-coins", TRENDING_PAYLOAD, ttl=60)
    clock.advance(600)
    upstream.respond(429)

    trending = run(service.get_trending_coins())

    assert trending.coins[0].item.name == "Pepe"


def test_cache_maintenance_pass_throughs(service, store):
    store.set("global-data", GLOBAL_PAYLOAD)
    store.set("trending-coins", TRENDING_PAYLOAD)

    service.invalidate_cache_entry("global-data")
    assert store.get("global-data") is None
    assert service.cache_stats().total_entries == 1

    assert service.clear_cache() == 1
    assert service.cache_stats().total_entries == 0


def test_metrics(service, store, upstream):
    store.set("global-data", GLOBAL_PAYLOAD)
    upstream.respond(200, json=TRENDING_PAYLOAD)

    async def scenario():
        await service.get_global_data()
        await service.get_trending_coins()

    run(scenario())

    metrics = service.metrics.to_dict()
    assert metrics["total_requests"] == 2
    assert metrics["cache_hits"] == 1
    assert metrics["network_calls"] == 1
    assert metrics["hit_rate"] == 0.5


def test_api_key_header_is_sent(store):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, json=GLOBAL_PAYLOAD)

    service = MarketDataService(
        store=store,
        base_url=BASE_URL,
        api_key="demo-key",
        transport=httpx.MockTransport(handler),
    )

    run(service.get_global_data())

    assert seen["x-cg-demo-api-key"] == "demo-key"


def test_coin_id_is_escaped_in_request_path(service, store, upstream):
    upstream.respond(200, json=DETAILS_PAYLOAD)

    run(service.get_coin_details("bitcoin?x=1"))

    request = upstream.requests[0]
    assert request.url.raw_path.startswith(b"/api/v3/coins/bitcoin%3Fx%3D1?")
    assert "x" not in request.url.params
    assert store.is_valid("crypto-details:bitcoin%3Fx%3D1")


@pytest.mark.parametrize("coin_id", ["", " ", ".", "..", "a/b"])
def test_coin_id_rejects_path_segments(service, upstream, coin_id):
    with pytest.raises(ValueError):
        run(service.get_coin_details(coin_id))
    with pytest.raises(ValueError):
        run(service.get_market_chart(coin_id))

    assert upstream.call_count == 0
