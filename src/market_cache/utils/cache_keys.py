"""Deterministic cache keys for upstream requests.

A key is the resource kind followed by its parameters, each percent-encoded
and joined with ``:``. Encoding keeps ``:`` out of the parts, so two
different parameterizations can never produce the same key.
"""

from urllib.parse import quote

SEPARATOR = ":"


def make_cache_key(kind: str, *parts: object) -> str:
    """Build a cache key from a resource kind and its parameters.

    Args:
        kind: Resource kind, e.g. "crypto-list"
        *parts: Request parameters in a fixed order

    Returns:
        The cache key, e.g. "crypto-list:1:50:usd"
    """
    encoded = [quote(str(part), safe="") for part in (kind, *parts)]
    return SEPARATOR.join(encoded)


def coin_list_key(page: int, per_page: int, currency: str) -> str:
    return make_cache_key("crypto-list", page, per_page, currency.lower())


def coin_details_key(coin_id: str) -> str:
    return make_cache_key("crypto-details", coin_id)


def market_chart_key(coin_id: str, days: int | str, currency: str) -> str:
    return make_cache_key("crypto-chart", coin_id, days, currency.lower())


def global_data_key() -> str:
    return make_cache_key("global-data")


def trending_coins_key() -> str:
    return make_cache_key("trending-coins")
