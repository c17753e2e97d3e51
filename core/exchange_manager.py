"""
Exchange Manager - Registry of Exchange Metadata

Keeps exchange records (id, name, image) fetched from the ticker provider so
ticker views can show each market's logo without a request per ticker.

Example Usage:
    manager = ExchangeManager()
    manager.handle_fetched(await coingecko.get_exchanges())

    image_urls = manager.image_urls_map(["binance", "kraken"])
    # {"binance": "https://.../binance.png", "kraken": "https://.../kraken.png"}
"""

from typing import Dict, Iterable, List, Optional

from core.interfaces import ExchangeImageLookup
from core.logging import logger
from core.schemas import Exchange


class ExchangeManager(ExchangeImageLookup):
    """
    In-memory exchange registry.

    Attributes:
        exchanges: Dictionary mapping exchange ids to Exchange records
    """

    def __init__(self, exchanges: Optional[Iterable[Exchange]] = None):
        self.exchanges: Dict[str, Exchange] = {}
        if exchanges:
            self.handle_fetched(list(exchanges))

    def image_urls_map(self, exchange_ids: Iterable[str]) -> Dict[str, str]:
        """
        Get image URLs for a set of exchanges.

        Exchanges that are unknown or have no image are left out.
        """
        image_urls = {}
        for exchange_id in exchange_ids:
            exchange = self.exchanges.get(exchange_id)
            if exchange and exchange.image_url:
                image_urls[exchange_id] = exchange.image_url
        return image_urls

    def get_exchange(self, exchange_id: str) -> Optional[Exchange]:
        return self.exchanges.get(exchange_id)

    def handle_fetched(self, exchanges: List[Exchange]) -> None:
        """Merge freshly fetched exchanges into the registry."""
        merged = dict(self.exchanges)
        for exchange in exchanges:
            merged[exchange.id] = exchange
        self.exchanges = merged
        logger.info(f"Exchange registry refreshed: {len(self.exchanges)} exchange(s)")

    def __repr__(self) -> str:
        return f"<ExchangeManager(exchanges={len(self.exchanges)})>"

    def __len__(self) -> int:
        return len(self.exchanges)
