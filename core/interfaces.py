"""
Collaborator Interfaces - Abstract Contracts at the Core's Boundary

The aggregation core never talks to HTTP or to the persistence engine
directly. It works against the abstract classes below, so storage backends
and providers can be swapped without touching the joiner or the assembler.

Collaborators:
    - CoinCatalog: the locally cached coin catalog (read by uid or coin type, bulk-written on sync)
    - CategoryLookup: category records by uid (best-effort)
    - ExchangeImageLookup: exchange image URLs by exchange id
    - MarketDataProvider: the main remote provider (coins, markets, overview, charts)
    - TickerProvider: the secondary provider keyed by external id (tickers, exchanges)

Example:
    class SqlCoinCatalog(CoinCatalog):
        def full_coins_by_uids(self, uids):
            rows = session.execute(select(CoinRow).where(CoinRow.uid.in_(uids)))
            return {row.uid: row.to_full_coin() for row in rows}
        ...

    manager = CoinManager(storage=SqlCoinCatalog(), ...)
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from core.enums import CoinTypeKind, TimePeriod
from core.raw_schemas import (
    ActiveAddressesDataResponse,
    Analytics,
    DefiMarketInfoRaw,
    DexLiquiditiesResponse,
    DexVolumesResponse,
    FullCoinResponse,
    MarketInfoOverviewRaw,
    MarketInfoRaw,
    MarketTickersResponse,
    RankMultiValue,
    TransactionsDataResponse,
    TvlPointRaw,
)
from core.schemas import (
    Coin,
    CoinCategory,
    CoinPrice,
    CoinType,
    Exchange,
    FullCoin,
    GlobalMarketPoint,
    PlatformCoin,
)


# ============================================
# Local Collaborators
# ============================================

class CoinCatalog(ABC):
    """
    Locally cached coin catalog.

    Implementations must make ``save`` atomic at the batch level: a reader
    sees either the whole refreshed set or none of it.
    """

    @abstractmethod
    def full_coins_by_uids(self, uids: Iterable[str]) -> Dict[str, FullCoin]:
        """
        Look up catalog entries for a batch of uids.

        Returns:
            Mapping uid -> FullCoin containing only the uids that are cached

        Raises:
            Exception: Implementation-specific lookup failures
        """
        ...

    @abstractmethod
    def full_coins(self, filter: str = "", limit: int = 20) -> List[FullCoin]:
        """Search entries whose name or code contains ``filter`` (case-insensitive)."""
        ...

    @abstractmethod
    def coin(self, uid: str) -> Optional[Coin]:
        """Return the cached coin, or None when the uid is not in the catalog."""
        ...

    @abstractmethod
    def full_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[FullCoin]:
        """Entries that are issued on at least one of ``coin_types``."""
        ...

    @abstractmethod
    def platform_coin(self, coin_type: CoinType) -> Optional[PlatformCoin]:
        """Return the platform with this coin type and its coin, or None."""
        ...

    @abstractmethod
    def platform_coins(self, kind: CoinTypeKind, filter: str = "", limit: int = 20) -> List[PlatformCoin]:
        """Search platforms of one kind by coin name or code, best-ranked first."""
        ...

    @abstractmethod
    def platform_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[PlatformCoin]:
        ...

    @abstractmethod
    def platform_coins_by_coin_type_ids(self, coin_type_ids: Iterable[str]) -> List[PlatformCoin]:
        """Same as ``platform_coins_by_coin_types`` keyed by ``CoinType.id`` strings."""
        ...

    @abstractmethod
    def save(self, full_coins: List[FullCoin]) -> None:
        """
        Bulk-write catalog entries (insert or replace by uid).

        Raises:
            Exception: If the write could not be applied; nothing is applied then
        """
        ...


class CategoryLookup(ABC):

    @abstractmethod
    def coin_categories(self, uids: Iterable[str]) -> List[CoinCategory]:
        """Return categories for the uids that are known; unknown uids are absent."""
        ...


class ExchangeImageLookup(ABC):

    @abstractmethod
    def image_urls_map(self, exchange_ids: Iterable[str]) -> Dict[str, str]:
        """Return exchange id -> image URL for exchanges that have one."""
        ...


# ============================================
# Remote Collaborators
# ============================================

class MarketDataProvider(ABC):
    """
    Main remote provider.

    All methods are coroutines and raise ``core.exceptions.ProviderError``
    when the request fails for good.
    """

    name: str

    @abstractmethod
    async def get_full_coins(self) -> List[FullCoinResponse]:
        ...

    @abstractmethod
    async def get_categories(self) -> List[CoinCategory]:
        ...

    @abstractmethod
    async def get_market_infos(self, top: int, currency_code: str) -> List[MarketInfoRaw]:
        ...

    @abstractmethod
    async def get_market_infos_by_uids(self, coin_uids: List[str], currency_code: str) -> List[MarketInfoRaw]:
        ...

    @abstractmethod
    async def get_market_infos_by_category(self, category_uid: str, currency_code: str) -> List[MarketInfoRaw]:
        ...

    @abstractmethod
    async def get_defi_market_infos(self, currency_code: str) -> List[DefiMarketInfoRaw]:
        ...

    @abstractmethod
    async def get_coin_prices(self, coin_uids: List[str], currency_code: str) -> List[CoinPrice]:
        ...

    @abstractmethod
    async def get_market_info_overview(
        self,
        coin_uid: str,
        currency_code: str,
        language: str
    ) -> MarketInfoOverviewRaw:
        ...

    @abstractmethod
    async def get_global_market_points(
        self,
        currency_code: str,
        time_period: TimePeriod
    ) -> List[GlobalMarketPoint]:
        ...

    @abstractmethod
    async def get_dex_volumes(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> DexVolumesResponse:
        ...

    @abstractmethod
    async def get_dex_liquidity(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> DexLiquiditiesResponse:
        ...

    @abstractmethod
    async def get_transactions(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> TransactionsDataResponse:
        ...

    @abstractmethod
    async def get_active_addresses(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> ActiveAddressesDataResponse:
        ...

    @abstractmethod
    async def get_market_info_tvl(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[TvlPointRaw]:
        ...

    @abstractmethod
    async def get_analytics(self, coin_uid: str, currency_code: str) -> Analytics:
        ...

    @abstractmethod
    async def get_rank_values(self, rank_type: str, currency_code: str) -> List[RankMultiValue]:
        ...


class TickerProvider(ABC):
    """Secondary provider addressed by a coin's external id."""

    name: str

    @abstractmethod
    async def get_market_tickers(self, external_id: str) -> MarketTickersResponse:
        ...

    @abstractmethod
    async def get_exchanges(self, limit: int = 250, page: int = 1) -> List[Exchange]:
        ...
