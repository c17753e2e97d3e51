"""
In-Memory Coin Storage

Default CoinCatalog implementation. Entries are indexed by uid in a dict that
is never mutated in place: ``save`` builds a new index and swaps it in under a
lock, so readers always work on a complete snapshot and a batch becomes
visible all at once. Lookups by coin type scan the snapshot.
"""

import threading
from typing import Dict, Iterable, List, Optional

from core.enums import CoinTypeKind
from core.interfaces import CoinCatalog
from core.logging import get_logger
from core.schemas import Coin, CoinType, FullCoin, PlatformCoin


class CoinStorage(CoinCatalog):
    """
    Thread-safe in-memory coin catalog.

    Example:
        >>> storage = CoinStorage()
        >>> storage.save([bitcoin_full_coin])
        >>> storage.full_coins_by_uids(["bitcoin", "unknown"])
        {'bitcoin': FullCoin(...)}
    """

    def __init__(self, full_coins: Optional[Iterable[FullCoin]] = None):
        self._index: Dict[str, FullCoin] = {}
        self._lock = threading.Lock()
        self.logger = get_logger(__name__)
        if full_coins:
            self.save(list(full_coins))

    def __len__(self) -> int:
        return len(self._index)

    # ============================================
    # Reads
    # ============================================

    def full_coins_by_uids(self, uids: Iterable[str]) -> Dict[str, FullCoin]:
        index = self._index
        return {uid: index[uid] for uid in uids if uid in index}

    def full_coins(self, filter: str = "", limit: int = 20) -> List[FullCoin]:
        """
        Search by name or code, best-ranked first.

        Coins without a market cap rank sort after ranked ones.
        """
        needle = filter.strip().lower()
        matches = [
            full_coin
            for full_coin in self._index.values()
            if not needle
            or needle in full_coin.coin.name.lower()
            or needle in full_coin.coin.code.lower()
        ]
        matches.sort(key=lambda fc: (fc.coin.market_cap_rank is None, fc.coin.market_cap_rank or 0, fc.coin.name))
        return matches[:max(limit, 0)]

    def coin(self, uid: str) -> Optional[Coin]:
        full_coin = self._index.get(uid)
        return full_coin.coin if full_coin else None

    # ============================================
    # Lookups by Coin Type
    # ============================================

    def _platform_coins(self) -> List[PlatformCoin]:
        return [
            PlatformCoin(platform=platform, coin=full_coin.coin)
            for full_coin in self._index.values()
            for platform in full_coin.platforms
        ]

    def full_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[FullCoin]:
        wanted = set(coin_types)
        return [
            full_coin
            for full_coin in self._index.values()
            if any(platform.coin_type in wanted for platform in full_coin.platforms)
        ]

    def platform_coin(self, coin_type: CoinType) -> Optional[PlatformCoin]:
        for platform_coin in self._platform_coins():
            if platform_coin.coin_type == coin_type:
                return platform_coin
        return None

    def platform_coins(self, kind: CoinTypeKind, filter: str = "", limit: int = 20) -> List[PlatformCoin]:
        """Same ranking as ``full_coins``, restricted to platforms of ``kind``."""
        needle = filter.strip().lower()
        matches = [
            platform_coin
            for platform_coin in self._platform_coins()
            if platform_coin.coin_type.kind is kind
            and (not needle or needle in platform_coin.coin.name.lower() or needle in platform_coin.coin.code.lower())
        ]
        matches.sort(key=lambda pc: (pc.coin.market_cap_rank is None, pc.coin.market_cap_rank or 0, pc.coin.name))
        return matches[:max(limit, 0)]

    def platform_coins_by_coin_types(self, coin_types: Iterable[CoinType]) -> List[PlatformCoin]:
        wanted = set(coin_types)
        return [pc for pc in self._platform_coins() if pc.coin_type in wanted]

    def platform_coins_by_coin_type_ids(self, coin_type_ids: Iterable[str]) -> List[PlatformCoin]:
        wanted = set(coin_type_ids)
        return [pc for pc in self._platform_coins() if pc.coin_type.id in wanted]

    # ============================================
    # Writes
    # ============================================

    def save(self, full_coins: List[FullCoin]) -> None:
        with self._lock:
            index = dict(self._index)
            for full_coin in full_coins:
                index[full_coin.uid] = full_coin
            self._index = index
        self.logger.info(f"Saved {len(full_coins)} coin(s); catalog size={len(self._index)}")
