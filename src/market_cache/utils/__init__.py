"""Utility modules for market cache."""

from .cache_keys import (
    coin_details_key,
    coin_list_key,
    global_data_key,
    make_cache_key,
    market_chart_key,
    trending_coins_key,
)

__all__ = [
    "make_cache_key",
    "coin_list_key",
    "coin_details_key",
    "market_chart_key",
    "global_data_key",
    "trending_coins_key",
]
