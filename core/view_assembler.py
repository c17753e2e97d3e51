"""
View Assembler

Builds the overview and ticker views from provider payloads plus the
auxiliary lookups (categories, exchange images, catalog).

Every dynamically keyed part of a payload is resolved against a closed
vocabulary and unresolvable entries are omitted:
    - category ids the category lookup does not know
    - performance periods outside TimePeriod, or with no value
    - link types outside LinkType, or with no URL
    - platform descriptors that cannot be typed
"""

from decimal import Decimal
from typing import Dict, List, Optional

from core.enums import LinkType, TimePeriod
from core.interfaces import CategoryLookup, CoinCatalog, ExchangeImageLookup, TickerProvider
from core.logging import get_logger
from core.raw_schemas import MarketInfoOverviewRaw, PlatformRaw
from core.schemas import CoinCategory, CoinType, MarketInfoOverview, MarketTicker


def resolve_performance(
    raw_performance: Dict[str, Dict[str, Optional[Decimal]]]
) -> Dict[str, Dict[TimePeriod, Decimal]]:
    """
    Resolve a currency -> period code -> value table.

    Example:
        >>> resolve_performance({"usd": {"1d": Decimal("2.5"), "bogus_period": Decimal("9.9")}})
        {'usd': {<TimePeriod.DAY_1: '1d'>: Decimal('2.5')}}
    """
    table: Dict[str, Dict[TimePeriod, Decimal]] = {}
    for currency, periods in raw_performance.items():
        resolved: Dict[TimePeriod, Decimal] = {}
        for code, value in periods.items():
            if value is None:
                continue
            period = TimePeriod.from_code(code)
            if period is None:
                continue
            resolved[period] = value
        table[currency] = resolved
    return table


def resolve_links(raw_links: Dict[str, Optional[str]]) -> Dict[LinkType, str]:
    links: Dict[LinkType, str] = {}
    for code, url in raw_links.items():
        if not url:
            continue
        link_type = LinkType.from_code(code)
        if link_type is not None:
            links[link_type] = url
    return links


def resolve_platforms(raw_platforms: List[PlatformRaw]) -> List[CoinType]:
    return [coin_type for coin_type in (raw.coin_type for raw in raw_platforms) if coin_type is not None]


class ViewAssembler:
    """
    Composes overview and ticker views.

    Attributes:
        storage: Coin catalog, used to find a coin's external id
        category_lookup: Category collaborator
        exchange_lookup: Exchange image collaborator
        ticker_provider: Secondary provider serving tickers by external id
    """

    def __init__(
        self,
        storage: CoinCatalog,
        category_lookup: CategoryLookup,
        exchange_lookup: ExchangeImageLookup,
        ticker_provider: TickerProvider,
    ):
        self.storage = storage
        self.category_lookup = category_lookup
        self.exchange_lookup = exchange_lookup
        self.ticker_provider = ticker_provider
        self.logger = get_logger(__name__)

    def resolve_categories(self, category_ids: List[str]) -> List[CoinCategory]:
        """Categories in payload order; ids the lookup did not return are dropped."""
        if not category_ids:
            return []

        categories_map = {
            category.uid: category
            for category in self.category_lookup.coin_categories(set(category_ids))
        }
        return [categories_map[uid] for uid in category_ids if uid in categories_map]

    def assemble_overview(self, raw: MarketInfoOverviewRaw) -> MarketInfoOverview:
        market_data = raw.market_data

        return MarketInfoOverview(
            market_cap=market_data.market_cap,
            market_cap_rank=market_data.market_cap_rank,
            total_supply=market_data.total_supply,
            circulating_supply=market_data.circulating_supply,
            volume_24h=market_data.total_volume,
            diluted_market_cap=market_data.fully_diluted_valuation,
            tvl=market_data.tvl,
            performance=resolve_performance(raw.performance),
            genesis_date=raw.genesis_date,
            categories=self.resolve_categories(raw.category_ids),
            description=raw.description or "",
            platforms=resolve_platforms(raw.platforms),
            links=resolve_links(raw.links),
        )

    async def assemble_tickers(self, coin_uid: str) -> List[MarketTicker]:
        """
        Tickers for a coin from the secondary provider.

        Coins without an external id (or unknown to the catalog) get an empty
        list and no request is made.

        Raises:
            ProviderError: If the ticker request fails
        """
        coin = self.storage.coin(coin_uid)
        external_id = coin.coingecko_id if coin else None
        if not external_id:
            self.logger.debug(f"No external id for '{coin_uid}', skipping ticker fetch")
            return []

        response = await self.ticker_provider.get_market_tickers(external_id)
        image_urls = self.exchange_lookup.image_urls_map(response.exchange_ids)
        return response.market_tickers(image_urls)
