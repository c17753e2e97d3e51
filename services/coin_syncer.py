"""
Coin Catalog Syncer

Background service that refreshes the local catalog and auxiliary lookups
from the providers:

- coins: full coin list -> CoinManager.handle_fetched (storage write + notify)
- categories: category list -> CoinCategoryManager
- exchanges: exchange list -> ExchangeManager

Each step is independent: a failing provider call is logged and the other
steps still run.
"""

import asyncio
import contextlib
from typing import Dict, Optional

from core.category_manager import CoinCategoryManager
from core.coin_manager import CoinManager
from core.config import settings
from core.exchange_manager import ExchangeManager
from core.interfaces import MarketDataProvider, TickerProvider
from core.logging import get_logger


class CoinSyncer:

    def __init__(
        self,
        coin_manager: CoinManager,
        category_manager: CoinCategoryManager,
        exchange_manager: ExchangeManager,
        provider: MarketDataProvider,
        ticker_provider: TickerProvider,
        interval_seconds: Optional[int] = None,
    ) -> None:
        self.coin_manager = coin_manager
        self.category_manager = category_manager
        self.exchange_manager = exchange_manager
        self.provider = provider
        self.ticker_provider = ticker_provider
        self._interval = interval_seconds or settings.sync_interval_seconds
        self._logger = get_logger(__name__)
        self._running = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # ============================================
    # Sync Steps
    # ============================================

    async def sync_coins(self) -> int:
        responses = await self.provider.get_full_coins()
        full_coins = [response.full_coin() for response in responses]
        self.coin_manager.handle_fetched(full_coins)
        return len(full_coins)

    async def sync_categories(self) -> int:
        categories = await self.provider.get_categories()
        self.category_manager.handle_fetched(categories)
        return len(categories)

    async def sync_exchanges(self) -> int:
        exchanges = await self.ticker_provider.get_exchanges()
        self.exchange_manager.handle_fetched(exchanges)
        return len(exchanges)

    async def sync_all(self) -> Dict[str, bool]:
        """
        Run every step.

        Returns:
            Step name -> True if it succeeded
        """
        results = {}
        for name, step in (
            ("categories", self.sync_categories),
            ("exchanges", self.sync_exchanges),
            ("coins", self.sync_coins),
        ):
            try:
                count = await step()
                self._logger.info(f"✓ Synced {count} {name}")
                results[name] = True
            except Exception as e:
                self._logger.error(f"✗ Failed to sync {name}: {e}")
                results[name] = False
        return results

    # ============================================
    # Background Loop
    # ============================================

    @property
    def running(self) -> bool:
        return self._running.is_set()

    async def start(self) -> None:
        if self._running.is_set():
            return
        self._running.set()
        self._logger.info(f"Starting coin syncer (every {self._interval}s)...")
        self._task = asyncio.create_task(self._run(), name="coin_syncer")

    async def stop(self) -> None:
        if not self._running.is_set():
            return
        self._logger.info("Stopping coin syncer...")
        self._running.clear()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while self._running.is_set():
            started = asyncio.get_running_loop().time()
            await self.sync_all()
            elapsed = asyncio.get_running_loop().time() - started
            self._logger.info(f"Coin sync cycle finished in {elapsed:.1f}s; sleeping {self._interval}s")
            await asyncio.sleep(self._interval)
