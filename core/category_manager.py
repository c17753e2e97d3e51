"""
Coin Category Manager

Keeps the provider's category list in memory and answers lookups by uid.
Refreshed by the coin syncer; lookups of unknown or retired uids simply
return fewer records.
"""

from typing import Dict, Iterable, List

from core.interfaces import CategoryLookup
from core.logging import logger
from core.schemas import CoinCategory


class CoinCategoryManager(CategoryLookup):

    def __init__(self):
        self._categories: Dict[str, CoinCategory] = {}

    def coin_categories(self, uids: Iterable[str]) -> List[CoinCategory]:
        categories = self._categories
        return [categories[uid] for uid in uids if uid in categories]

    def all_categories(self) -> List[CoinCategory]:
        """All known categories, ordered by their ``order`` then name."""
        return sorted(
            self._categories.values(),
            key=lambda c: (c.order is None, c.order or 0, c.name)
        )

    def handle_fetched(self, categories: List[CoinCategory]) -> None:
        """Replace the whole category set."""
        self._categories = {category.uid: category for category in categories}
        logger.info(f"Category list refreshed: {len(self._categories)} categories")

    def __len__(self) -> int:
        return len(self._categories)
