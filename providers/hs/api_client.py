"""
Market-Data Provider REST Client

Async client for the main market-data API: coin catalog, market snapshots,
categories, coin prices, coin overviews, DeFi protocols, pro analytics and
global market points. Responses are parsed into the raw schemas of core/raw_schemas.py;
joining and view assembly happen in the core, not here.

Usage:
    async with HsAPIClient() as client:
        coins = await client.get_full_coins()
        markets = await client.get_market_infos(top=250, currency_code="usd")
"""

from typing import Any, Dict, List, Optional

from core.config import settings
from core.enums import TimePeriod
from core.interfaces import MarketDataProvider
from core.raw_schemas import (
    ActiveAddressesDataResponse,
    Analytics,
    CoinPriceResponse,
    DefiMarketInfoRaw,
    DexLiquiditiesResponse,
    DexVolumesResponse,
    FullCoinResponse,
    MarketInfoOverviewRaw,
    MarketInfoRaw,
    RankMultiValue,
    TransactionsDataResponse,
    TvlPointRaw,
)
from core.schemas import CoinCategory, CoinPrice, GlobalMarketPoint
from providers.base import BaseAPIClient


class HsAPIClient(BaseAPIClient, MarketDataProvider):
    """
    Async HTTP client for the market-data API.

    Field selectors are fixed per endpoint so the provider only sends what
    the raw schemas read. Global market points still live on the legacy
    service at ``old_base_url``.

    Example:
        >>> async with HsAPIClient() as client:
        ...     overview = await client.get_market_info_overview("bitcoin", "usd", "en")
        ...     print(overview.performance["usd"])
    """

    name = "hs"

    MARKET_INFO_FIELDS = "price,price_change_24h,market_cap_rank,market_cap,total_volume"
    COIN_PRICE_FIELDS = "price,price_change_24h,last_updated"
    FULL_COIN_FIELDS = "name,code,market_cap_rank,coingecko_id,platforms"

    def __init__(
        self,
        base_url: Optional[str] = None,
        old_base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        super().__init__(base_url or settings.hs_base_url, timeout=timeout, max_retries=max_retries)
        self.old_base_url = (old_base_url or settings.hs_old_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.hs_api_key

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    # ============================================
    # Coin Catalog & Categories
    # ============================================

    async def get_full_coins(self) -> List[FullCoinResponse]:
        """
        Fetch the whole coin list with platforms.

        Endpoint:
            GET /v1/coins?fields=name,code,market_cap_rank,coingecko_id,platforms
        """
        self.logger.info("Fetching full coin list")
        data = await self._get("/v1/coins", {"fields": self.FULL_COIN_FIELDS})
        coins = [FullCoinResponse.model_validate(item) for item in data]
        self.logger.info(f"Fetched {len(coins)} coins")
        return coins

    async def get_categories(self) -> List[CoinCategory]:
        """
        Endpoint:
            GET /v1/categories

        Response Format:
            [{"uid": "defi", "name": "DeFi", "description": {"en": "..."}, "order": 1}]
        """
        data = await self._get("/v1/categories")
        return [CoinCategory.model_validate(item) for item in data]

    # ============================================
    # Market Snapshots
    # ============================================

    async def get_market_infos(self, top: int, currency_code: str) -> List[MarketInfoRaw]:
        """
        Top-N coins by market cap.

        Endpoint:
            GET /v1/coins?fields=...&limit={top}&currency={currency}

        Response Format:
            [{"uid": "bitcoin", "price": "50000.12", "price_change_24h": "1.5",
              "market_cap_rank": 1, "market_cap": "950000000000", "total_volume": "31000000000"}]
        """
        params = {
            "fields": self.MARKET_INFO_FIELDS,
            "limit": top,
            "currency": currency_code.lower(),
        }
        self.logger.info(f"Fetching top {top} market infos ({currency_code})")
        return self._market_infos(await self._get("/v1/coins", params))

    async def get_market_infos_by_uids(self, coin_uids: List[str], currency_code: str) -> List[MarketInfoRaw]:
        """
        Endpoint:
            GET /v1/coins?fields=...&uids=bitcoin,ethereum&currency={currency}
        """
        if not coin_uids:
            return []

        params = {
            "fields": self.MARKET_INFO_FIELDS,
            "uids": ",".join(coin_uids),
            "currency": currency_code.lower(),
        }
        self.logger.info(f"Fetching market infos for {len(coin_uids)} coin(s) ({currency_code})")
        return self._market_infos(await self._get("/v1/coins", params))

    async def get_market_infos_by_category(self, category_uid: str, currency_code: str) -> List[MarketInfoRaw]:
        """
        Endpoint:
            GET /v1/categories/{categoryUid}/coins?fields=...&currency={currency}
        """
        params = {"fields": self.MARKET_INFO_FIELDS, "currency": currency_code.lower()}
        self.logger.info(f"Fetching market infos for category '{category_uid}' ({currency_code})")
        return self._market_infos(await self._get(f"/v1/categories/{category_uid}/coins", params))

    async def get_defi_market_infos(self, currency_code: str) -> List[DefiMarketInfoRaw]:
        """
        Endpoint:
            GET /v1/defi-protocols?currency={currency}
        """
        data = await self._get("/v1/defi-protocols", {"currency": currency_code.lower()})
        return [DefiMarketInfoRaw.model_validate(item) for item in data]

    async def get_coin_prices(self, coin_uids: List[str], currency_code: str) -> List[CoinPrice]:
        """
        Latest prices for a list of coins.

        Endpoint:
            GET /v1/coins?fields=price,price_change_24h,last_updated&uids=...&currency={currency}

        Response Format:
            [{"uid": "bitcoin", "price": "50000.12", "price_change_24h": "1.5", "last_updated": 1633046400}]

        Records without a price are skipped.
        """
        if not coin_uids:
            return []

        params = {
            "fields": self.COIN_PRICE_FIELDS,
            "uids": ",".join(coin_uids),
            "currency": currency_code.lower(),
        }
        data = await self._get("/v1/coins", params)
        prices = []
        for item in data:
            coin_price = CoinPriceResponse.model_validate(item).coin_price(currency_code)
            if coin_price is not None:
                prices.append(coin_price)
        return prices

    @staticmethod
    def _market_infos(data: Any) -> List[MarketInfoRaw]:
        return [MarketInfoRaw.model_validate(item) for item in data]

    # ============================================
    # Coin Overview
    # ============================================

    async def get_market_info_overview(
        self,
        coin_uid: str,
        currency_code: str,
        language: str
    ) -> MarketInfoOverviewRaw:
        """
        Endpoint:
            GET /v1/coins/{coinUid}?currency={currency}&language={language}

        Response Format:
            {
              "market_data": {"market_cap": "...", "market_cap_rank": 1, ...},
              "performance": {"usd": {"7d": "2.5", "30d": null}, "btc": {...}},
              "genesis_date": "2009-01-03",
              "category_ids": ["currencies"],
              "description": "...",
              "platforms": [{"type": "bitcoin", "decimals": 8}],
              "links": {"website": "https://bitcoin.org", "github": "..."}
            }
        """
        params = {"currency": currency_code.lower(), "language": language}
        self.logger.info(f"Fetching overview for '{coin_uid}' ({currency_code}, {language})")
        data = await self._get(f"/v1/coins/{coin_uid}", params)
        return MarketInfoOverviewRaw.model_validate(data)

    # ============================================
    # Charts & Analytics
    # ============================================

    async def get_global_market_points(
        self,
        currency_code: str,
        time_period: TimePeriod
    ) -> List[GlobalMarketPoint]:
        """
        Endpoint (legacy service):
            GET {old_base_url}/api/v1/markets/global/{period}?currency_code={currency}

        Response Format:
            [{"timestamp": 1633046400, "market_cap": "2100000000000", "volume24h": "98000000000",
              "dominance_btc": "43.1", "market_cap_defi": "150000000000", "tvl": "180000000000"}]
        """
        data = await self._get(
            f"/api/v1/markets/global/{time_period.value}",
            {"currency_code": currency_code},
            base_url=self.old_base_url
        )
        return [GlobalMarketPoint.model_validate(item) for item in data]

    async def get_dex_volumes(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> DexVolumesResponse:
        data = await self._get(
            f"/v1/analytics/{coin_uid}/dex-volumes",
            self._chart_params(currency_code, time_period)
        )
        return DexVolumesResponse.model_validate(data)

    async def get_dex_liquidity(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> DexLiquiditiesResponse:
        data = await self._get(
            f"/v1/analytics/{coin_uid}/dex-liquidity",
            self._chart_params(currency_code, time_period)
        )
        return DexLiquiditiesResponse.model_validate(data)

    async def get_transactions(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> TransactionsDataResponse:
        data = await self._get(
            f"/v1/analytics/{coin_uid}/transactions",
            self._chart_params(currency_code, time_period)
        )
        return TransactionsDataResponse.model_validate(data)

    async def get_active_addresses(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> ActiveAddressesDataResponse:
        data = await self._get(
            f"/v1/analytics/{coin_uid}/addresses",
            self._chart_params(currency_code, time_period)
        )
        return ActiveAddressesDataResponse.model_validate(data)

    async def get_market_info_tvl(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[TvlPointRaw]:
        data = await self._get(
            f"/v1/defi-protocols/{coin_uid}/tvls",
            self._chart_params(currency_code, time_period)
        )
        return [TvlPointRaw.model_validate(item) for item in data]

    async def get_analytics(self, coin_uid: str, currency_code: str) -> Analytics:
        data = await self._get(f"/v1/analytics/{coin_uid}", {"currency": currency_code.lower()})
        return Analytics.model_validate(data)

    async def get_rank_values(self, rank_type: str, currency_code: str) -> List[RankMultiValue]:
        """
        Endpoint:
            GET /v1/analytics/ranks?type={rankType}&currency={currency}

        Response Format:
            [{"uid": "ethereum", "value_1d": "1200000", "value_7d": null, "value_30d": "52000000"}]
        """
        data = await self._get(
            "/v1/analytics/ranks",
            {"type": rank_type, "currency": currency_code.lower()}
        )
        return [RankMultiValue.model_validate(item) for item in data]

    @staticmethod
    def _chart_params(currency_code: str, time_period: TimePeriod) -> Dict[str, str]:
        return {"currency": currency_code.lower(), "interval": time_period.value}

    async def health_check(self) -> bool:
        try:
            await self._get("/v1/status/updates")
            return True
        except Exception as e:
            self.logger.error(f"Health check failed for {self.name}: {e}")
            return False
