"""Upstream response schemas.

Models mirror the CoinGecko v3 payloads the service consumes. Unknown
fields are kept (``extra="allow"``) so nothing the API adds is lost, and
values the API is known to null out are optional.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Sparkline(_UpstreamModel):
    price: list[float | None] = Field(default_factory=list)


class CoinMarket(_UpstreamModel):
    """One row of ``/coins/markets``."""

    id: str
    symbol: str
    name: str
    image: str | None = None
    current_price: float | None = None
    market_cap: float | None = None
    market_cap_rank: int | None = None
    fully_diluted_valuation: float | None = None
    total_volume: float | None = None
    high_24h: float | None = None
    low_24h: float | None = None
    price_change_24h: float | None = None
    price_change_percentage_24h: float | None = None
    market_cap_change_24h: float | None = None
    market_cap_change_percentage_24h: float | None = None
    circulating_supply: float | None = None
    total_supply: float | None = None
    max_supply: float | None = None
    ath: float | None = None
    ath_change_percentage: float | None = None
    ath_date: str | None = None
    atl: float | None = None
    atl_change_percentage: float | None = None
    atl_date: str | None = None
    last_updated: str | None = None
    sparkline_in_7d: Sparkline | None = None


class CoinImage(_UpstreamModel):
    thumb: str | None = None
    small: str | None = None
    large: str | None = None


class CoinMarketData(_UpstreamModel):
    current_price: dict[str, float | None] = Field(default_factory=dict)
    market_cap: dict[str, float | None] = Field(default_factory=dict)
    total_volume: dict[str, float | None] = Field(default_factory=dict)
    high_24h: dict[str, float | None] = Field(default_factory=dict)
    low_24h: dict[str, float | None] = Field(default_factory=dict)
    price_change_percentage_24h: float | None = None
    price_change_percentage_7d: float | None = None
    price_change_percentage_30d: float | None = None
    circulating_supply: float | None = None
    total_supply: float | None = None
    max_supply: float | None = None


class CoinLinks(_UpstreamModel):
    homepage: list[str] = Field(default_factory=list)
    blockchain_site: list[str] = Field(default_factory=list)
    repos_url: dict[str, list[str]] = Field(default_factory=dict)


class CoinDetails(_UpstreamModel):
    """Payload of ``/coins/{id}``."""

    id: str
    symbol: str
    name: str
    description: dict[str, str | None] = Field(default_factory=dict)
    image: CoinImage | None = None
    market_data: CoinMarketData | None = None
    links: CoinLinks | None = None


class MarketChart(_UpstreamModel):
    """Payload of ``/coins/{id}/market_chart``.

    Each series is a list of ``[timestamp_ms, value]`` pairs.
    """

    prices: list[tuple[float, float | None]] = Field(default_factory=list)
    market_caps: list[tuple[float, float | None]] = Field(default_factory=list)
    total_volumes: list[tuple[float, float | None]] = Field(default_factory=list)


class GlobalStats(_UpstreamModel):
    active_cryptocurrencies: int | None = None
    markets: int | None = None
    total_market_cap: dict[str, float] = Field(default_factory=dict)
    total_volume: dict[str, float] = Field(default_factory=dict)
    market_cap_percentage: dict[str, float] = Field(default_factory=dict)
    market_cap_change_percentage_24h_usd: float | None = None


class GlobalMarketData(_UpstreamModel):
    """Payload of ``/global``."""

    data: GlobalStats


class TrendingItem(_UpstreamModel):
    id: str
    coin_id: int | None = None
    name: str
    symbol: str
    market_cap_rank: int | None = None
    thumb: str | None = None
    small: str | None = None
    large: str | None = None
    slug: str | None = None
    price_btc: float | None = None
    score: int | None = None
    data: dict[str, Any] | None = None


class TrendingCoin(_UpstreamModel):
    item: TrendingItem


class TrendingResponse(_UpstreamModel):
    """Payload of ``/search/trending``."""

    coins: list[TrendingCoin] = Field(default_factory=list)
