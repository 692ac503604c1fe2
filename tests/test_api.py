"""
Tests for the market cache API.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import COIN_ROW, GLOBAL_PAYLOAD
from market_cache.api.app import app
from market_cache.api.dependencies import get_market_service


@pytest.fixture
def client(service):
    """Create a test client."""
    app.dependency_overrides[get_market_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Market Cache API"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "cache_healthy": True}


def test_global_is_cached_between_requests(client, upstream):
    upstream.respond(200, json=GLOBAL_PAYLOAD)

    first = client.get("/global")
    second = client.get("/global")

    assert first.status_code == 200
    assert second.json() == first.json()
    assert first.json()["data"]["markets"] == 950
    assert upstream.call_count == 1


def test_refresh_flag_forces_network(client, upstream):
    upstream.respond(200, json=GLOBAL_PAYLOAD)

    client.get("/global")
    client.get("/global", params={"refresh": "true"})

    assert upstream.call_count == 2


def test_coin_markets(client, upstream):
    upstream.respond(200, json=[COIN_ROW])

    response = client.get("/coins/markets", params={"per_page": 5, "currency": "EUR"})

    assert response.status_code == 200
    assert response.json()[0]["id"] == "bitcoin"
    assert upstream.requests[0].url.params["vs_currency"] == "eur"


def test_coin_markets_validates_query(client, upstream):
    response = client.get("/coins/markets", params={"per_page": 500})

    assert response.status_code == 422
    assert upstream.call_count == 0


def test_invalid_days_is_bad_request(client):
    response = client.get("/coins/bitcoin/market_chart", params={"days": "forever"})

    assert response.status_code == 400
    assert "days" in response.json()["error"]


def test_rate_limit_maps_to_429(client, upstream):
    upstream.respond(429, headers={"Retry-After": "60"})

    response = client.get("/search/trending")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.json() == {"error": "Rate limit exceeded. Please wait a moment."}


def test_upstream_error_maps_to_502(client, upstream):
    upstream.respond(500)

    response = client.get("/coins/bitcoin")

    assert response.status_code == 502
    assert response.json() == {"error": "API Error: 500 Internal Server Error"}


def test_transport_failure_maps_to_503(client, upstream):
    upstream.fail()

    response = client.get("/global")

    assert response.status_code == 503


def test_stale_data_hides_upstream_failure(client, store, clock, upstream):
    store.set("global-data", GLOBAL_PAYLOAD, ttl=60)
    clock.advance(120)
    upstream.respond(500)

    response = client.get("/global")

    assert response.status_code == 200
    assert response.json()["data"]["active_cryptocurrencies"] == 12000


def test_cache_stats(client, store, clock):
    store.set("fresh", {"a": 1}, ttl=600)
    store.set("old", {"b": 2}, ttl=10)
    clock.advance(60)

    response = client.get("/cache/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total_entries"] == 2
    assert data["valid_entries"] == 1
    assert data["expired_entries"] == 1
    assert data["ttl_seconds"] == 600
    assert "hit_rate" in data["metrics"]


def test_sweep_endpoint(client, store, clock):
    store.set("old", {"b": 2}, ttl=10)
    clock.advance(60)

    response = client.post("/cache/sweep")

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1


def test_clear_endpoint(client, store):
    store.set("a", 1)
    store.set("b", 2)

    response = client.delete("/cache")

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 2
    assert store.get_stale("a") is None


def test_invalidate_endpoint(client, store):
    store.set("crypto-list:1:50:usd", [COIN_ROW])
    store.set("global-data", GLOBAL_PAYLOAD)

    response = client.delete("/cache/crypto-list:1:50:usd")

    assert response.status_code == 200
    assert store.get("crypto-list:1:50:usd") is None
    assert store.get("global-data") is not None
