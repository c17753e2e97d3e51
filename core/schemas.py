"""
Catalog and View Schemas

This module defines the Pydantic models handed to API consumers, plus the
catalog records the coin storage owns.

Key Principle:
    Provider payloads (see core/raw_schemas.py) never leave the core as-is.
    They are normalized into these models, joined against the catalog by
    coin uid, and anything that cannot be resolved is omitted rather than
    null-filled.

Models:
    - Coin / CoinType / Platform / FullCoin: catalog entries
    - PlatformCoin: a single platform of a catalog entry with its coin
    - MarketInfo: market snapshot joined with its catalog entry
    - DefiMarketInfo: DeFi snapshot with an optional catalog entry
    - MarketInfoOverview: detailed coin overview
    - ChartPoint / GlobalMarketPoint: normalized chart data
    - MarketTicker: exchange ticker for a coin
    - CoinPrice: latest price of a coin
    - CoinCategory / Exchange: auxiliary lookup records

All amounts are Decimal so provider precision is preserved end to end.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.enums import CoinTypeKind, LinkType, TimePeriod


# ============================================
# Catalog Models
# ============================================

class Coin(BaseModel):
    """
    A coin as cached in the local catalog.

    Attributes:
        uid: Provider-independent identifier, the only join key (e.g. "bitcoin")
        name: Display name (e.g. "Bitcoin")
        code: Ticker code in uppercase (e.g. "BTC")
        market_cap_rank: Rank at the time of the last catalog sync
        coingecko_id: External id used for secondary-provider lookups
    """

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1, examples=["bitcoin", "ethereum"])
    name: str = Field(..., examples=["Bitcoin", "Ethereum"])
    code: str = Field(..., examples=["BTC", "ETH"])
    market_cap_rank: Optional[int] = None
    coingecko_id: Optional[str] = None

    @field_validator('code')
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Ensure code is uppercase"""
        return v.upper()


class CoinType(BaseModel):
    """
    Typed reference to where a coin lives: a native chain, or a token
    standard plus its contract address (or symbol for BEP2).
    """

    model_config = ConfigDict(frozen=True)

    kind: CoinTypeKind
    reference: Optional[str] = None

    @property
    def id(self) -> str:
        if self.reference:
            return f"{self.kind.value}|{self.reference}"
        return self.kind.value

    @classmethod
    def from_platform(
        cls,
        type_code: Optional[str],
        address: Optional[str] = None,
        symbol: Optional[str] = None,
    ) -> Optional["CoinType"]:
        """
        Convert a provider platform descriptor to a CoinType.

        Returns None when the platform type is unknown, or when a token
        standard arrives without its address/symbol.
        """
        kind = CoinTypeKind.from_code(type_code)
        if kind is None:
            return None

        if not kind.requires_reference:
            return cls(kind=kind)

        reference = symbol if kind is CoinTypeKind.BEP2 else address
        if not reference:
            return None

        return cls(kind=kind, reference=reference)


class Platform(BaseModel):
    coin_type: CoinType
    decimals: Optional[int] = None
    coin_uid: str


class FullCoin(BaseModel):
    """A catalog entry: the coin plus every platform it is issued on."""

    coin: Coin
    platforms: List[Platform] = Field(default_factory=list)

    @property
    def uid(self) -> str:
        return self.coin.uid


class PlatformCoin(BaseModel):
    """One platform of a coin, paired with the coin itself."""

    platform: Platform
    coin: Coin

    @property
    def coin_type(self) -> CoinType:
        return self.platform.coin_type

    @property
    def decimals(self) -> Optional[int]:
        return self.platform.decimals


# ============================================
# Auxiliary Lookup Records
# ============================================

class CoinCategory(BaseModel):
    uid: str
    name: str
    description: Dict[str, str] = Field(default_factory=dict)
    order: Optional[int] = None


class Exchange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    image_url: Optional[str] = Field(default=None, alias="image")


# ============================================
# Composite Market Views
# ============================================

class MarketInfo(BaseModel):
    """
    Market snapshot joined with its catalog entry.

    Only constructed when the market record and the catalog entry share the
    same uid; a mismatch is rejected at validation time.
    """

    uid: str
    full_coin: FullCoin
    price: Optional[Decimal] = None
    price_change_24h: Optional[Decimal] = None
    market_cap_rank: Optional[int] = None
    market_cap: Optional[Decimal] = None
    total_volume: Optional[Decimal] = None

    @model_validator(mode="after")
    def check_same_coin(self) -> "MarketInfo":
        if self.uid != self.full_coin.uid:
            raise ValueError(
                f"Market record '{self.uid}' joined with catalog entry '{self.full_coin.uid}'"
            )
        return self


class DefiMarketInfo(BaseModel):
    """DeFi protocol snapshot; full_coin is None for protocols without a token in the catalog."""

    uid: Optional[str] = None
    full_coin: Optional[FullCoin] = None
    name: str
    logo_url: Optional[str] = None
    tvl: Decimal
    tvl_rank: int
    tvl_change_1d: Optional[Decimal] = None
    tvl_change_1w: Optional[Decimal] = None
    tvl_change_1m: Optional[Decimal] = None
    chains: List[str] = Field(default_factory=list)
    chain_tvls: Dict[str, Decimal] = Field(default_factory=dict)


class MarketInfoOverview(BaseModel):
    """
    Detailed coin overview.

    ``performance`` and ``links`` are sparse: periods and link types that the
    provider sent but that are not part of the closed vocabularies, or that
    carried no value, are absent rather than null.
    """

    market_cap: Optional[Decimal] = None
    market_cap_rank: Optional[int] = None
    total_supply: Optional[Decimal] = None
    circulating_supply: Optional[Decimal] = None
    volume_24h: Optional[Decimal] = None
    diluted_market_cap: Optional[Decimal] = None
    tvl: Optional[Decimal] = None
    performance: Dict[str, Dict[TimePeriod, Decimal]] = Field(default_factory=dict)
    genesis_date: Optional[date] = None
    categories: List[CoinCategory] = Field(default_factory=list)
    description: str = ""
    platforms: List[CoinType] = Field(default_factory=list)
    links: Dict[LinkType, str] = Field(default_factory=dict)


class CoinPrice(BaseModel):
    """
    Latest price of a coin in one currency.

    Attributes:
        value: Price in ``currency_code``
        diff: 24h change in percent, when the provider sent one
        timestamp: Seconds since epoch of the provider's last update
    """

    coin_uid: str
    currency_code: str
    value: Decimal
    diff: Optional[Decimal] = None
    timestamp: int


class MarketTicker(BaseModel):
    base: str
    target: str
    market_name: str
    market_image_url: Optional[str] = None
    rate: Decimal
    volume: Decimal


# ============================================
# Chart Models
# ============================================

class ChartPoint(BaseModel):
    """
    Neutral chart record.

    Attributes:
        value: Primary value (volume, count, TVL, ...)
        timestamp: Seconds since epoch as sent by the provider
        volume: Secondary amount, present only for count-style series
    """

    model_config = ConfigDict(frozen=True)

    value: Decimal
    timestamp: int
    volume: Optional[Decimal] = None


class GlobalMarketPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    market_cap: Optional[Decimal] = None
    volume_24h: Optional[Decimal] = Field(default=None, alias="volume24h")
    btc_dominance: Optional[Decimal] = Field(default=None, alias="dominance_btc")
    defi_market_cap: Optional[Decimal] = Field(default=None, alias="market_cap_defi")
    tvl: Optional[Decimal] = None
