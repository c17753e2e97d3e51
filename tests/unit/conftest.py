"""
Shared fixtures for unit tests.

Provides catalog entries, an in-memory catalog, and recording doubles for
the remote providers so no test touches the network.
"""

from decimal import Decimal
from typing import List, Optional

import pytest

from core.category_manager import CoinCategoryManager
from core.coin_manager import CoinManager
from core.enums import CoinTypeKind, TimePeriod
from core.exchange_manager import ExchangeManager
from core.interfaces import MarketDataProvider, TickerProvider
from core.raw_schemas import (
    ActiveAddressesDataResponse,
    Analytics,
    DexLiquiditiesResponse,
    DexVolumesResponse,
    MarketInfoOverviewRaw,
    MarketInfoRaw,
    MarketTickersResponse,
    TransactionsDataResponse,
)
from core.schemas import Coin, CoinCategory, CoinPrice, CoinType, Exchange, FullCoin, Platform
from services.change_notifier import ChangeNotifier
from storage.coin_storage import CoinStorage


# ============================================
# Catalog Entries
# ============================================

def make_full_coin(
    uid: str,
    name: Optional[str] = None,
    code: Optional[str] = None,
    coingecko_id: Optional[str] = None,
    market_cap_rank: Optional[int] = None,
) -> FullCoin:
    coin = Coin(
        uid=uid,
        name=name or uid.capitalize(),
        code=code or uid[:3],
        market_cap_rank=market_cap_rank,
        coingecko_id=coingecko_id,
    )
    return FullCoin(coin=coin)


@pytest.fixture
def bitcoin() -> FullCoin:
    full_coin = make_full_coin("bitcoin", "Bitcoin", "BTC", coingecko_id="bitcoin", market_cap_rank=1)
    full_coin.platforms.append(
        Platform(coin_type=CoinType(kind=CoinTypeKind.BITCOIN), decimals=8, coin_uid="bitcoin")
    )
    return full_coin


@pytest.fixture
def ethereum() -> FullCoin:
    return make_full_coin("ethereum", "Ethereum", "ETH", coingecko_id="ethereum", market_cap_rank=2)


@pytest.fixture
def uncovered_coin() -> FullCoin:
    """A coin without an external (CoinGecko) id."""
    return make_full_coin("local-token", "Local Token", "LCL")


@pytest.fixture
def storage(bitcoin, ethereum, uncovered_coin) -> CoinStorage:
    return CoinStorage([bitcoin, ethereum, uncovered_coin])


class FailingCatalog(CoinStorage):
    """Catalog whose lookups always fail."""

    def full_coins_by_uids(self, uids):
        raise RuntimeError("catalog database is locked")


@pytest.fixture
def failing_storage(bitcoin) -> FailingCatalog:
    return FailingCatalog([bitcoin])


# ============================================
# Auxiliary Lookups
# ============================================

@pytest.fixture
def category_manager() -> CoinCategoryManager:
    manager = CoinCategoryManager()
    manager.handle_fetched([
        CoinCategory(uid="currencies", name="Currencies", order=1),
        CoinCategory(uid="smart_contracts", name="Smart Contracts", order=2),
        CoinCategory(uid="defi", name="DeFi", order=3),
    ])
    return manager


@pytest.fixture
def exchange_manager() -> ExchangeManager:
    return ExchangeManager([
        Exchange(id="binance", name="Binance", image="https://img.example/binance.png"),
        Exchange(id="kraken", name="Kraken", image=None),
    ])


# ============================================
# Provider Doubles
# ============================================

class FakeTickerProvider(TickerProvider):
    """Records every call; returns canned tickers."""

    name = "fake-tickers"

    def __init__(self, response: Optional[MarketTickersResponse] = None, exchanges: Optional[List[Exchange]] = None):
        self.response = response or MarketTickersResponse()
        self.exchanges = exchanges or []
        self.calls: List[str] = []

    async def get_market_tickers(self, external_id: str) -> MarketTickersResponse:
        self.calls.append(external_id)
        return self.response

    async def get_exchanges(self, limit: int = 250, page: int = 1) -> List[Exchange]:
        self.calls.append("exchanges")
        return self.exchanges


class FakeMarketProvider(MarketDataProvider):
    """
    Canned MarketDataProvider. Set the attributes a test needs; ``calls``
    records (method, args) tuples.
    """

    name = "fake-markets"

    def __init__(self):
        self.market_infos: List[MarketInfoRaw] = []
        self.overview = MarketInfoOverviewRaw()
        self.full_coins = []
        self.categories: List[CoinCategory] = []
        self.defi = []
        self.coin_prices: List[CoinPrice] = []
        self.global_points = []
        self.dex_volumes = DexVolumesResponse()
        self.dex_liquidity = DexLiquiditiesResponse()
        self.transactions = TransactionsDataResponse()
        self.addresses = ActiveAddressesDataResponse()
        self.tvl = []
        self.analytics = Analytics()
        self.ranks = []
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def get_full_coins(self):
        self._record("get_full_coins")
        return self.full_coins

    async def get_categories(self):
        self._record("get_categories")
        return self.categories

    async def get_market_infos(self, top, currency_code):
        self._record("get_market_infos", top, currency_code)
        return self.market_infos

    async def get_market_infos_by_uids(self, coin_uids, currency_code):
        self._record("get_market_infos_by_uids", tuple(coin_uids), currency_code)
        return self.market_infos

    async def get_market_infos_by_category(self, category_uid, currency_code):
        self._record("get_market_infos_by_category", category_uid, currency_code)
        return self.market_infos

    async def get_defi_market_infos(self, currency_code):
        self._record("get_defi_market_infos", currency_code)
        return self.defi

    async def get_coin_prices(self, coin_uids, currency_code):
        self._record("get_coin_prices", tuple(coin_uids), currency_code)
        return self.coin_prices

    async def get_market_info_overview(self, coin_uid, currency_code, language):
        self._record("get_market_info_overview", coin_uid, currency_code, language)
        return self.overview

    async def get_global_market_points(self, currency_code, time_period: TimePeriod):
        self._record("get_global_market_points", currency_code, time_period)
        return self.global_points

    async def get_dex_volumes(self, coin_uid, currency_code, time_period):
        self._record("get_dex_volumes", coin_uid, currency_code, time_period)
        return self.dex_volumes

    async def get_dex_liquidity(self, coin_uid, currency_code, time_period):
        self._record("get_dex_liquidity", coin_uid, currency_code, time_period)
        return self.dex_liquidity

    async def get_transactions(self, coin_uid, currency_code, time_period):
        self._record("get_transactions", coin_uid, currency_code, time_period)
        return self.transactions

    async def get_active_addresses(self, coin_uid, currency_code, time_period):
        self._record("get_active_addresses", coin_uid, currency_code, time_period)
        return self.addresses

    async def get_market_info_tvl(self, coin_uid, currency_code, time_period):
        self._record("get_market_info_tvl", coin_uid, currency_code, time_period)
        return self.tvl

    async def get_analytics(self, coin_uid, currency_code):
        self._record("get_analytics", coin_uid, currency_code)
        return self.analytics

    async def get_rank_values(self, rank_type, currency_code):
        self._record("get_rank_values", rank_type, currency_code)
        return self.ranks


@pytest.fixture
def market_provider() -> FakeMarketProvider:
    return FakeMarketProvider()


@pytest.fixture
def ticker_provider() -> FakeTickerProvider:
    return FakeTickerProvider()


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def coin_manager(storage, market_provider, category_manager, ticker_provider, exchange_manager, notifier) -> CoinManager:
    return CoinManager(
        storage=storage,
        provider=market_provider,
        category_lookup=category_manager,
        ticker_provider=ticker_provider,
        exchange_lookup=exchange_manager,
        notifier=notifier,
    )


def market_raw(uid: str, price: str = "1", **figures) -> MarketInfoRaw:
    return MarketInfoRaw(uid=uid, price=Decimal(price), **figures)


@pytest.fixture
def make_market_raw():
    return market_raw


@pytest.fixture
def make_coin():
    return make_full_coin


