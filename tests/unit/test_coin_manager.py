"""
Unit Tests for CoinManager

These tests verify the facade end to end against provider doubles:
- market snapshots are joined against the catalog
- catalog failures degrade to an empty list unless strict
- catalog writes notify subscribers only after they succeed

Run with:
    pytest tests/unit/test_coin_manager.py -v
"""

from decimal import Decimal

import pytest

from core.coin_manager import CoinManager
from core.enums import CoinTypeKind, TimePeriod
from core.exceptions import CatalogLookupError, ProviderError
from core.raw_schemas import DefiMarketInfoRaw, MarketInfoOverviewRaw
from core.schemas import CoinPrice, CoinType


@pytest.fixture
def broken_manager(failing_storage, market_provider, category_manager, ticker_provider, exchange_manager, notifier):
    return CoinManager(failing_storage, market_provider, category_manager, ticker_provider, exchange_manager, notifier)


class TestCatalogQueries:

    def test_full_coins_searches_storage(self, coin_manager):
        assert [fc.uid for fc in coin_manager.full_coins("eth")] == ["ethereum"]

    def test_full_coins_by_uids_keeps_request_order(self, coin_manager):
        full_coins = coin_manager.full_coins_by_uids(["ethereum", "ghost", "bitcoin", "ethereum"])
        assert [fc.uid for fc in full_coins] == ["ethereum", "bitcoin"]

    def test_coin(self, coin_manager):
        assert coin_manager.coin("bitcoin").code == "BTC"
        assert coin_manager.coin("ghost") is None

    def test_coin_type_lookups(self, coin_manager):
        bitcoin_type = CoinType(kind=CoinTypeKind.BITCOIN)

        assert [fc.uid for fc in coin_manager.full_coins_by_coin_types([bitcoin_type])] == ["bitcoin"]
        assert coin_manager.platform_coin(bitcoin_type).coin.uid == "bitcoin"
        assert [pc.coin.uid for pc in coin_manager.platform_coins(CoinTypeKind.BITCOIN, "bit")] == ["bitcoin"]
        assert [pc.coin.uid for pc in coin_manager.platform_coins_by_coin_types([bitcoin_type])] == ["bitcoin"]
        assert [pc.decimals for pc in coin_manager.platform_coins_by_coin_type_ids(["bitcoin"])] == [8]
        assert coin_manager.platform_coins(CoinTypeKind.ERC20) == []


class TestMarketSnapshots:

    @pytest.mark.asyncio
    async def test_top_joins_against_catalog(self, coin_manager, market_provider, make_market_raw):
        market_provider.market_infos = [
            make_market_raw("bitcoin", "50000"),
            make_market_raw("unknown-coin", "1"),
        ]

        market_infos = await coin_manager.market_infos_top(250, "usd")

        assert market_provider.calls == [("get_market_infos", 250, "usd")]
        assert [m.uid for m in market_infos] == ["bitcoin"]
        assert market_infos[0].full_coin.coin.name == "Bitcoin"

    @pytest.mark.asyncio
    async def test_by_uids_and_category_use_their_endpoints(self, coin_manager, market_provider, make_market_raw):
        market_provider.market_infos = [make_market_raw("ethereum", "3000")]

        by_uids = await coin_manager.market_infos_by_uids(["ethereum"], "eur")
        by_category = await coin_manager.market_infos_by_category("smart_contracts", "eur")

        assert market_provider.calls == [
            ("get_market_infos_by_uids", ("ethereum",), "eur"),
            ("get_market_infos_by_category", "smart_contracts", "eur"),
        ]
        assert by_uids == by_category
        assert by_uids[0].price == Decimal("3000")

    @pytest.mark.asyncio
    async def test_catalog_failure_degrades_to_empty(self, broken_manager, market_provider, make_market_raw):
        market_provider.market_infos = [make_market_raw("bitcoin")]

        assert await broken_manager.market_infos_top(10, "usd") == []

    @pytest.mark.asyncio
    async def test_catalog_failure_raises_when_strict(self, broken_manager, market_provider, make_market_raw):
        market_provider.market_infos = [make_market_raw("bitcoin")]

        with pytest.raises(CatalogLookupError):
            await broken_manager.market_infos_top(10, "usd", strict=True)

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, coin_manager, market_provider):
        market_provider.error = ProviderError("boom", provider="hs", path="/v1/coins", status_code=500)

        with pytest.raises(ProviderError):
            await coin_manager.market_infos_top(10, "usd")

    @pytest.mark.asyncio
    async def test_coin_prices(self, coin_manager, market_provider):
        market_provider.coin_prices = [
            CoinPrice(coin_uid="bitcoin", currency_code="usd", value=Decimal("50000"), diff=Decimal("1.5"), timestamp=1633046400),
        ]

        prices = await coin_manager.coin_prices(["bitcoin", "ethereum"], "usd")

        assert market_provider.calls == [("get_coin_prices", ("bitcoin", "ethereum"), "usd")]
        assert prices == market_provider.coin_prices

    @pytest.mark.asyncio
    async def test_defi_market_infos(self, coin_manager, market_provider, ethereum):
        market_provider.defi = [
            DefiMarketInfoRaw(uid="ethereum", name="Lido", tvl=Decimal("100"), tvl_rank=1),
            DefiMarketInfoRaw(name="Curve", tvl=Decimal("50"), tvl_rank=2),
        ]

        infos = await coin_manager.defi_market_infos("usd")

        assert infos[0].full_coin == ethereum
        assert infos[1].full_coin is None


class TestViews:

    @pytest.mark.asyncio
    async def test_overview(self, coin_manager, market_provider):
        market_provider.overview = MarketInfoOverviewRaw.model_validate({
            "performance": {"usd": {"1d": "1.5", "bogus_period": "3"}},
            "category_ids": ["defi"],
        })

        overview = await coin_manager.market_info_overview("uniswap", "usd", "en")

        assert market_provider.calls == [("get_market_info_overview", "uniswap", "usd", "en")]
        assert overview.performance == {"usd": {TimePeriod.DAY_1: Decimal("1.5")}}
        assert [c.uid for c in overview.categories] == ["defi"]

    @pytest.mark.asyncio
    async def test_tickers_without_external_id(self, coin_manager, ticker_provider):
        assert await coin_manager.market_tickers("local-token") == []
        assert ticker_provider.calls == []


class TestHandleFetched:

    def test_saves_then_notifies(self, coin_manager, notifier, make_coin):
        seen = []
        notifier.subscribe(lambda: seen.append(coin_manager.coin("solana")))

        coin_manager.handle_fetched([make_coin("solana", "Solana", "SOL")])

        assert len(seen) == 1
        assert seen[0] is not None
        assert seen[0].code == "SOL"

    def test_failed_save_does_not_notify(self, coin_manager, notifier, make_coin, monkeypatch):
        calls = []
        notifier.subscribe(lambda: calls.append(1))

        def broken_save(full_coins):
            raise RuntimeError("disk full")

        monkeypatch.setattr(coin_manager.storage, "save", broken_save)

        with pytest.raises(RuntimeError):
            coin_manager.handle_fetched([make_coin("solana")])

        assert calls == []

    def test_default_notifier(self, storage, market_provider, category_manager, ticker_provider, exchange_manager):
        manager = CoinManager(storage, market_provider, category_manager, ticker_provider, exchange_manager)
        assert manager.notifier.subscriber_count == 0
