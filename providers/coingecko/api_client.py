"""
CoinGecko REST Client

Secondary provider used for exchange tickers and exchange metadata. Coins are
addressed by their CoinGecko id, which the catalog stores as ``coingecko_id``.

Usage:
    async with CoinGeckoAPIClient() as client:
        response = await client.get_market_tickers("bitcoin")
        print(response.exchange_ids)
"""

from typing import List, Optional

from core.config import settings
from core.interfaces import TickerProvider
from core.raw_schemas import MarketTickersResponse
from core.schemas import Exchange
from providers.base import BaseAPIClient


class CoinGeckoAPIClient(BaseAPIClient, TickerProvider):

    name = "coingecko"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        super().__init__(base_url or settings.coingecko_base_url, timeout=timeout, max_retries=max_retries)

    async def get_market_tickers(self, external_id: str) -> MarketTickersResponse:
        """
        Fetch exchange tickers for a coin.

        Endpoint:
            GET /coins/{id}/tickers

        Response Format:
            {
              "name": "Bitcoin",
              "tickers": [
                {"base": "BTC", "target": "USDT",
                 "market": {"name": "Binance", "identifier": "binance"},
                 "last": 50010.5, "volume": 12345.67}
              ]
            }
        """
        self.logger.info(f"Fetching tickers for '{external_id}'")
        data = await self._get(f"/coins/{external_id}/tickers")
        response = MarketTickersResponse.model_validate(data)
        self.logger.info(f"Fetched {len(response.tickers)} tickers for '{external_id}'")
        return response

    async def get_exchanges(self, limit: int = 250, page: int = 1) -> List[Exchange]:
        """
        Endpoint:
            GET /exchanges?per_page={limit}&page={page}

        Response Format:
            [{"id": "binance", "name": "Binance", "image": "https://..."}]
        """
        params = {"per_page": min(limit, 250), "page": page}
        data = await self._get("/exchanges", params)
        return [Exchange.model_validate(item) for item in data]

    async def health_check(self) -> bool:
        try:
            await self._get("/ping")
            return True
        except Exception as e:
            self.logger.error(f"Health check failed for {self.name}: {e}")
            return False
