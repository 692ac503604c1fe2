#!/usr/bin/env python3
"""
Demo script for market cache.

This script fetches live CoinGecko data through the cache and shows the
three serving paths: network, fresh cache, and stale fallback.

Uses the in-memory storage medium, so no Redis server is needed.
"""

import asyncio
import time

import httpx

from market_cache.repositories import InMemoryStorageMedium, PersistentCacheStore
from market_cache.services import MarketDataService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cache_hits(service: MarketDataService) -> None:
    """Demonstrate network fetch followed by a cache hit."""
    print_section("Fresh Cache")

    start = time.time()
    coins = await service.get_coin_list(per_page=5)
    network_ms = (time.time() - start) * 1000
    print(f"\n🌐 Network fetch: {len(coins)} coins in {network_ms:.1f}ms")
    for coin in coins:
        print(f"  {coin.market_cap_rank:>3}. {coin.name:<12} ${coin.current_price:,.2f}")

    start = time.time()
    await service.get_coin_list(per_page=5)
    cache_ms = (time.time() - start) * 1000
    print(f"\n⚡ Cache hit: {cache_ms:.2f}ms")

    await service.get_coin_list(per_page=5, force_refresh=True)
    print("🔄 Forced refresh went to the network again")


async def demo_stale_fallback(store: PersistentCacheStore) -> None:
    """Demonstrate stale data served while the upstream is failing."""
    print_section("Stale Fallback")

    def broken_upstream(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    # A second service sharing the same store, pointed at a failing upstream
    failing = MarketDataService(store=store, transport=httpx.MockTransport(broken_upstream))
    store.invalidate("global-data")
    store.set("global-data", {"data": {"markets": 0}}, ttl=0.001)
    await asyncio.sleep(0.01)

    data = await failing.get_global_data()
    print(f"\n🧊 Upstream answered 503, served expired entry: markets={data.data.markets}")
    print(f"  Metrics: {failing.metrics.to_dict()}")
    await failing.aclose()


def demo_stats(store: PersistentCacheStore) -> None:
    """Show cache statistics and maintenance."""
    print_section("Cache Statistics")

    stats = store.stats()
    print(f"\n📊 Entries: {stats.total_entries} (valid {stats.valid_entries}, expired {stats.expired_entries})")
    print(f"  Size: {stats.total_size}")
    print(f"  Swept: {store.sweep_expired()} expired entries")
    print(f"  Cleared: {store.clear_all()} entries")


async def main() -> None:
    store = PersistentCacheStore.create(medium=InMemoryStorageMedium())

    async with MarketDataService.create(store=store) as service:
        await demo_cache_hits(service)
        print(f"\n  Metrics: {service.metrics.to_dict()}")

    await demo_stale_fallback(store)
    demo_stats(store)


if __name__ == "__main__":
    asyncio.run(main())
