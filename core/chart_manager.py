"""
Chart Manager

Fetches chart-style analytics through the market-data provider and hands
back normalized ChartPoint lists. The provider owns the series; this class
only reshapes them, dropping points with no primary value.
"""

from decimal import Decimal
from typing import Dict, List

from core import normalizers
from core.enums import TimePeriod
from core.interfaces import MarketDataProvider
from core.logging import get_logger
from core.raw_schemas import Analytics
from core.schemas import ChartPoint, GlobalMarketPoint


class ChartManager:
    """
    Example:
        >>> charts = ChartManager(hs_client)
        >>> points = await charts.dex_volume_points("uniswap", "usd", TimePeriod.MONTH_1)
    """

    def __init__(self, provider: MarketDataProvider):
        self.provider = provider
        self.logger = get_logger(__name__)

    async def dex_volume_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        response = await self.provider.get_dex_volumes(coin_uid, currency_code, time_period)
        return response.volume_points

    async def dex_liquidity_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        response = await self.provider.get_dex_liquidity(coin_uid, currency_code, time_period)
        return response.volume_points

    async def transaction_volume_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        response = await self.provider.get_transactions(coin_uid, currency_code, time_period)
        return response.volume_points

    async def transaction_count_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        """Transaction counts with the transferred volume as secondary value."""
        response = await self.provider.get_transactions(coin_uid, currency_code, time_period)
        return response.count_points

    async def active_address_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        response = await self.provider.get_active_addresses(coin_uid, currency_code, time_period)
        return response.count_points

    async def tvl_points(self, coin_uid: str, currency_code: str, time_period: TimePeriod) -> List[ChartPoint]:
        raw_points = await self.provider.get_market_info_tvl(coin_uid, currency_code, time_period)
        return normalizers.value_points(raw_points, "tvl")

    async def global_market_points(self, currency_code: str, time_period: TimePeriod) -> List[GlobalMarketPoint]:
        return await self.provider.get_global_market_points(currency_code, time_period)

    async def analytics(self, coin_uid: str, currency_code: str) -> Analytics:
        return await self.provider.get_analytics(coin_uid, currency_code)

    async def analytics_points(self, coin_uid: str, currency_code: str) -> Dict[str, List[ChartPoint]]:
        """
        Every chart series present in the coin's analytics bundle.

        Returns:
            Mapping section name -> points, for sections the provider sent
            (e.g. {"cex_volume": [...], "tvl": [...]})
        """
        analytics = await self.analytics(coin_uid, currency_code)
        sections = {
            "cex_volume": analytics.cex_volume,
            "dex_volume": analytics.dex_volume,
            "dex_liquidity": analytics.dex_liquidity,
            "addresses": analytics.addresses,
            "transactions": analytics.transactions,
            "tvl": analytics.tvl,
        }
        return {name: section.chart_points() for name, section in sections.items() if section is not None}

    async def rank_values(self, rank_type: str, currency_code: str, time_period: TimePeriod) -> Dict[str, Decimal]:
        """
        Per-coin values of a rank list for one window.

        Raises:
            ValueError: If the window is not one of 1d, 7d, 30d
        """
        if time_period not in normalizers.RANK_PERIODS:
            raise ValueError(f"No rank values for period '{time_period.value}'")

        raw_ranks = await self.provider.get_rank_values(rank_type, currency_code)
        values = normalizers.rank_values(raw_ranks, time_period)
        self.logger.debug(f"Rank '{rank_type}' ({time_period.value}): {len(values)} of {len(raw_ranks)} coins with values")
        return values
