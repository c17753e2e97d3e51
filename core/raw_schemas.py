"""
Provider Payload Schemas

Pydantic models mirroring what the remote providers send. They are
deliberately permissive: unknown fields are ignored, numeric fields are
optional, and dynamically keyed maps (performance, links) are kept as plain
string-keyed dicts so that resolution against the closed vocabularies can
happen later and drop what it does not recognize.

Numbers arrive as Decimal because the provider clients decode JSON with
``parse_float=Decimal``.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil import parser as dateparser
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core import normalizers
from core.normalizers import to_decimal
from core.schemas import ChartPoint, Coin, CoinPrice, CoinType, FullCoin, MarketTicker, Platform


class RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ============================================
# Coin List
# ============================================

class PlatformRaw(RawModel):
    type: Optional[str] = None
    decimals: Optional[int] = None
    address: Optional[str] = None
    symbol: Optional[str] = None

    @property
    def coin_type(self) -> Optional[CoinType]:
        return CoinType.from_platform(self.type, address=self.address, symbol=self.symbol)


def platform_entries(v: Any) -> List[PlatformRaw]:
    """Keep the platform entries that parse; skip the rest."""
    if not isinstance(v, list):
        return []
    platforms = []
    for item in v:
        if isinstance(item, PlatformRaw):
            platforms.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            platforms.append(PlatformRaw.model_validate(item))
        except ValidationError:
            continue
    return platforms


class FullCoinResponse(RawModel):
    uid: str
    name: str
    code: str
    market_cap_rank: Optional[int] = None
    coingecko_id: Optional[str] = None
    platforms: List[PlatformRaw] = Field(default_factory=list)

    @field_validator("platforms", mode="before")
    @classmethod
    def coerce_platforms(cls, v: Any) -> List[PlatformRaw]:
        return platform_entries(v)

    def full_coin(self) -> FullCoin:
        """Convert to a catalog entry, skipping platforms that cannot be typed."""
        coin = Coin(
            uid=self.uid,
            name=self.name,
            code=self.code,
            market_cap_rank=self.market_cap_rank,
            coingecko_id=self.coingecko_id,
        )
        platforms = []
        for raw in self.platforms:
            coin_type = raw.coin_type
            if coin_type is None:
                continue
            platforms.append(Platform(coin_type=coin_type, decimals=raw.decimals, coin_uid=self.uid))
        return FullCoin(coin=coin, platforms=platforms)


# ============================================
# Market Snapshots
# ============================================

class MarketInfoRaw(RawModel):
    uid: str
    price: Optional[Decimal] = None
    price_change_24h: Optional[Decimal] = None
    market_cap_rank: Optional[int] = None
    market_cap: Optional[Decimal] = None
    total_volume: Optional[Decimal] = None

    def figures(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "price_change_24h": self.price_change_24h,
            "market_cap_rank": self.market_cap_rank,
            "market_cap": self.market_cap,
            "total_volume": self.total_volume,
        }


class DefiMarketInfoRaw(RawModel):
    uid: Optional[str] = None
    name: str
    logo: Optional[str] = None
    tvl: Decimal
    tvl_rank: int
    tvl_change_1d: Optional[Decimal] = None
    tvl_change_7d: Optional[Decimal] = None
    tvl_change_30d: Optional[Decimal] = None
    chains: List[str] = Field(default_factory=list)
    chain_tvls: Dict[str, Optional[Decimal]] = Field(default_factory=dict)


class CoinPriceResponse(RawModel):
    uid: str
    price: Optional[Decimal] = None
    price_change_24h: Optional[Decimal] = None
    last_updated: Optional[int] = None

    def coin_price(self, currency_code: str) -> Optional[CoinPrice]:
        """None when the record carries no price or no update time."""
        if self.price is None or self.last_updated is None:
            return None
        return CoinPrice(
            coin_uid=self.uid,
            currency_code=currency_code,
            value=self.price,
            diff=self.price_change_24h,
            timestamp=self.last_updated,
        )


# ============================================
# Coin Overview
# ============================================

class MarketDataOverviewRaw(RawModel):
    market_cap: Optional[Decimal] = None
    market_cap_rank: Optional[int] = None
    total_supply: Optional[Decimal] = None
    circulating_supply: Optional[Decimal] = None
    total_volume: Optional[Decimal] = None
    fully_diluted_valuation: Optional[Decimal] = None
    tvl: Optional[Decimal] = None


class MarketInfoOverviewRaw(RawModel):
    """
    Coin overview as sent by the provider.

    ``performance`` is keyed by currency code, then by period code, e.g.
    ``{"usd": {"1d": 2.5, "7d": null}}``. Values that are not numbers become
    None here instead of failing the whole payload. Platform entries that
    do not parse are skipped, and a null ``market_data`` reads as empty.
    """

    market_data: MarketDataOverviewRaw = Field(default_factory=MarketDataOverviewRaw)
    performance: Dict[str, Dict[str, Optional[Decimal]]] = Field(default_factory=dict)
    genesis_date: Optional[date] = None
    category_ids: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    platforms: List[PlatformRaw] = Field(default_factory=list)
    links: Dict[str, Optional[str]] = Field(default_factory=dict)

    @field_validator("market_data", mode="before")
    @classmethod
    def coerce_market_data(cls, v: Any) -> Any:
        if isinstance(v, (dict, MarketDataOverviewRaw)):
            return v
        return {}

    @field_validator("platforms", mode="before")
    @classmethod
    def coerce_platforms(cls, v: Any) -> List[PlatformRaw]:
        return platform_entries(v)

    @field_validator("performance", mode="before")
    @classmethod
    def coerce_performance(cls, v: Any) -> Dict[str, Dict[str, Optional[Decimal]]]:
        if not isinstance(v, dict):
            return {}
        table = {}
        for currency, periods in v.items():
            if not isinstance(periods, dict):
                continue
            table[str(currency)] = {str(code): to_decimal(value) for code, value in periods.items()}
        return table

    @field_validator("links", mode="before")
    @classmethod
    def coerce_links(cls, v: Any) -> Dict[str, Optional[str]]:
        if not isinstance(v, dict):
            return {}
        return {str(code): url if isinstance(url, str) else None for code, url in v.items()}

    @field_validator("genesis_date", mode="before")
    @classmethod
    def coerce_genesis_date(cls, v: Any) -> Optional[Any]:
        if isinstance(v, str):
            try:
                return dateparser.isoparse(v).date()
            except ValueError:
                return None
        return v

    @field_validator("category_ids", mode="before")
    @classmethod
    def coerce_category_ids(cls, v: Any) -> List[str]:
        if v is None:
            return []
        return v


# ============================================
# Pro Chart Series
# ============================================

class ProChartPointDataRaw(RawModel):
    timestamp: int
    count: Optional[int] = None
    volume: Optional[Decimal] = None


class DexVolumesResponse(RawModel):
    platforms: List[str] = Field(default_factory=list)
    volumes: List[ProChartPointDataRaw] = Field(default_factory=list)

    @property
    def volume_points(self) -> List[ChartPoint]:
        return normalizers.volume_points(self.volumes)


class DexLiquiditiesResponse(RawModel):
    platforms: List[str] = Field(default_factory=list)
    liquidity: List[ProChartPointDataRaw] = Field(default_factory=list)

    @property
    def volume_points(self) -> List[ChartPoint]:
        return normalizers.volume_points(self.liquidity)


class TransactionsDataResponse(RawModel):
    platforms: List[str] = Field(default_factory=list)
    transactions: List[ProChartPointDataRaw] = Field(default_factory=list)

    @property
    def volume_points(self) -> List[ChartPoint]:
        return normalizers.volume_points(self.transactions)

    @property
    def count_points(self) -> List[ChartPoint]:
        return normalizers.count_points(self.transactions)


class ActiveAddressesDataResponse(RawModel):
    platforms: List[str] = Field(default_factory=list)
    addresses: List[ProChartPointDataRaw] = Field(default_factory=list)

    @property
    def count_points(self) -> List[ChartPoint]:
        return normalizers.count_points(self.addresses)


class TvlPointRaw(RawModel):
    timestamp: int
    tvl: Optional[Decimal] = None


# ============================================
# Analytics
# ============================================

class VolumePoint(RawModel):
    timestamp: int
    volume: Optional[Decimal] = None


class CountPoint(RawModel):
    timestamp: int
    count: Optional[str] = None

    @field_validator("count", mode="before")
    @classmethod
    def stringify_count(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class AnalyticsExVolume(RawModel):
    rank_30d: Optional[int] = None
    points: List[VolumePoint] = Field(default_factory=list)

    def chart_points(self) -> List[ChartPoint]:
        return normalizers.value_points(self.points, "volume")


class AnalyticsDexLiquidity(RawModel):
    rank: Optional[int] = None
    points: List[VolumePoint] = Field(default_factory=list)

    def chart_points(self) -> List[ChartPoint]:
        return normalizers.value_points(self.points, "volume")


class AnalyticsAddresses(RawModel):
    rank_30d: Optional[int] = None
    count_30d: Optional[int] = None
    points: List[CountPoint] = Field(default_factory=list)

    def chart_points(self) -> List[ChartPoint]:
        return normalizers.value_points(self.points, "count")


class AnalyticsTransactions(RawModel):
    rank_30d: Optional[int] = None
    volume_30d: Optional[Decimal] = None
    points: List[CountPoint] = Field(default_factory=list)

    def chart_points(self) -> List[ChartPoint]:
        return normalizers.value_points(self.points, "count")


class AnalyticsTvl(RawModel):
    rank: Optional[int] = None
    ratio: Optional[Decimal] = None
    points: List[TvlPointRaw] = Field(default_factory=list)

    def chart_points(self) -> List[ChartPoint]:
        return normalizers.value_points(self.points, "tvl")


class AnalyticsRevenue(RawModel):
    rank_30d: Optional[int] = None
    value_30d: Optional[Decimal] = None


class HolderBlockchain(RawModel):
    blockchain_uid: str
    holders_count: Optional[Decimal] = None


class Analytics(RawModel):
    """Per-coin analytics bundle; every section is optional."""

    cex_volume: Optional[AnalyticsExVolume] = None
    dex_volume: Optional[AnalyticsExVolume] = None
    dex_liquidity: Optional[AnalyticsDexLiquidity] = None
    addresses: Optional[AnalyticsAddresses] = None
    transactions: Optional[AnalyticsTransactions] = None
    revenue: Optional[AnalyticsRevenue] = None
    tvl: Optional[AnalyticsTvl] = None
    reports: Optional[int] = None
    funds_invested: Optional[Decimal] = None
    treasuries: Optional[Decimal] = None
    holders: Optional[List[HolderBlockchain]] = None
    holders_rank: Optional[int] = None


# ============================================
# Ranks
# ============================================

class RankMultiValue(RawModel):
    uid: str
    value_1d: Optional[Decimal] = None
    value_7d: Optional[Decimal] = None
    value_30d: Optional[Decimal] = None


# ============================================
# Tickers (CoinGecko)
# ============================================

class TickerMarketRaw(RawModel):
    name: str
    identifier: str


class MarketTickerRaw(RawModel):
    base: str
    target: str
    market: TickerMarketRaw
    last: Optional[Decimal] = None
    volume: Optional[Decimal] = None


class MarketTickersResponse(RawModel):
    name: Optional[str] = None
    tickers: List[MarketTickerRaw] = Field(default_factory=list)

    @property
    def exchange_ids(self) -> List[str]:
        seen: Dict[str, None] = {}
        for ticker in self.tickers:
            seen.setdefault(ticker.market.identifier, None)
        return list(seen)

    def market_tickers(self, image_urls: Dict[str, str]) -> List[MarketTicker]:
        return normalizers.market_tickers(self.tickers, image_urls)
