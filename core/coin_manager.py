"""
Coin Manager - Entry Point for Coin and Market Views

CoinManager is what the API layer talks to. For each view it fetches the
raw payload from the provider, joins it against the catalog, and assembles
the result:

    provider payload -> CatalogJoiner / ViewAssembler -> view model

It also owns the catalog refresh path: ``handle_fetched`` writes a batch to
storage and, only once the write succeeded, fires the change notifier.

Error behavior:
    - ProviderError from the provider propagates to the caller.
    - A catalog failure during a market join degrades to an empty list and is
      logged; pass ``strict=True`` to get a CatalogLookupError instead.
    - Unmatched coins, unknown codes and missing external ids are omitted.

Example Usage:
    manager = CoinManager(storage, hs_client, categories, coingecko_client, exchanges, notifier)

    top = await manager.market_infos_top(100, "usd")
    overview = await manager.market_info_overview("bitcoin", "usd", "en")
    tickers = await manager.market_tickers("bitcoin")
    prices = await manager.coin_prices(["bitcoin", "ethereum"], "usd")
"""

from typing import Iterable, List, Optional

from core.catalog_joiner import CatalogJoiner, JoinResult
from core.enums import CoinTypeKind
from core.interfaces import (
    CategoryLookup,
    CoinCatalog,
    ExchangeImageLookup,
    MarketDataProvider,
    TickerProvider,
)
from core.logging import logger
from core.schemas import (
    Coin,
    CoinPrice,
    CoinType,
    DefiMarketInfo,
    FullCoin,
    MarketInfo,
    MarketInfoOverview,
    MarketTicker,
    PlatformCoin,
)
from core.view_assembler import ViewAssembler
from services.change_notifier import ChangeNotifier


class CoinManager:
    """
    Facade over catalog, providers and auxiliary lookups.

    Attributes:
        storage: Coin catalog
        provider: Main market-data provider
        notifier: Fired after each successful bulk catalog write
        joiner: CatalogJoiner over ``storage``
        assembler: ViewAssembler for overviews and tickers
    """

    def __init__(
        self,
        storage: CoinCatalog,
        provider: MarketDataProvider,
        category_lookup: CategoryLookup,
        ticker_provider: TickerProvider,
        exchange_lookup: ExchangeImageLookup,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.storage = storage
        self.provider = provider
        self.notifier = notifier or ChangeNotifier()
        self.joiner = CatalogJoiner(storage)
        self.assembler = ViewAssembler(storage, category_lookup, exchange_lookup, ticker_provider)

    # ============================================
    # Catalog Queries
    # ============================================

    def full_coins(self, filter: str = "", limit: int = 20) -> List[FullCoin]:
        return self.storage.full_coins(filter, limit)

    def full_coins_by_uids(self, coin_uids: Iterable[str]) -> List[FullCoin]:
        """Catalog entries for the given uids, in request order; unknown uids are skipped."""
        coin_uids = list(coin_uids)
        catalog = self.joiner.join(coin_uids)
        return [catalog[uid] for uid in dict.fromkeys(coin_uids) if uid in catalog]

    def coin(self, coin_uid: str) -> Optional[Coin]:
        return self.storage.coin(coin_uid)

    # ============================================
    # Lookups by Coin Type
    # ============================================

    def full_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[FullCoin]:
        return self.storage.full_coins_by_coin_types(coin_types)

    def platform_coin(self, coin_type: CoinType) -> Optional[PlatformCoin]:
        return self.storage.platform_coin(coin_type)

    def platform_coins(self, kind: CoinTypeKind, filter: str = "", limit: int = 20) -> List[PlatformCoin]:
        return self.storage.platform_coins(kind, filter, limit)

    def platform_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[PlatformCoin]:
        return self.storage.platform_coins_by_coin_types(coin_types)

    def platform_coins_by_coin_type_ids(self, coin_type_ids: Iterable[str]) -> List[PlatformCoin]:
        return self.storage.platform_coins_by_coin_type_ids(coin_type_ids)

    # ============================================
    # Market Snapshots
    # ============================================

    async def market_infos_top(self, top: int, currency_code: str, strict: bool = False) -> List[MarketInfo]:
        raw = await self.provider.get_market_infos(top, currency_code)
        return self._resolve(self.joiner.market_infos(raw), strict)

    async def market_infos_by_uids(
        self,
        coin_uids: List[str],
        currency_code: str,
        strict: bool = False
    ) -> List[MarketInfo]:
        raw = await self.provider.get_market_infos_by_uids(coin_uids, currency_code)
        return self._resolve(self.joiner.market_infos(raw), strict)

    async def market_infos_by_category(
        self,
        category_uid: str,
        currency_code: str,
        strict: bool = False
    ) -> List[MarketInfo]:
        raw = await self.provider.get_market_infos_by_category(category_uid, currency_code)
        return self._resolve(self.joiner.market_infos(raw), strict)

    async def defi_market_infos(self, currency_code: str) -> List[DefiMarketInfo]:
        raw = await self.provider.get_defi_market_infos(currency_code)
        return self.joiner.defi_market_infos(raw)

    async def coin_prices(self, coin_uids: List[str], currency_code: str) -> List[CoinPrice]:
        """Latest prices straight from the provider; no catalog join."""
        return await self.provider.get_coin_prices(coin_uids, currency_code)

    @staticmethod
    def _resolve(result: JoinResult, strict: bool) -> List[MarketInfo]:
        if strict:
            return result.unwrap()
        if not result.ok:
            logger.warning(f"Returning empty market list: {result.error}")
        return result.market_infos

    # ============================================
    # Overview & Tickers
    # ============================================

    async def market_info_overview(self, coin_uid: str, currency_code: str, language: str) -> MarketInfoOverview:
        raw = await self.provider.get_market_info_overview(coin_uid, currency_code, language)
        return self.assembler.assemble_overview(raw)

    async def market_tickers(self, coin_uid: str) -> List[MarketTicker]:
        return await self.assembler.assemble_tickers(coin_uid)

    # ============================================
    # Catalog Refresh
    # ============================================

    def handle_fetched(self, full_coins: List[FullCoin]) -> None:
        """
        Write a refreshed batch, then notify subscribers.

        Raises:
            Exception: Whatever storage raises; no signal is fired in that case
        """
        self.storage.save(full_coins)
        logger.info(f"Catalog updated with {len(full_coins)} coin(s), notifying subscribers")
        self.notifier.notify_refreshed()
