"""
Catalog Joiner

Joins provider market records against the local coin catalog by uid.

The join is best-effort: the provider may reference coins the catalog has
not synced yet, and those records are left out of the result. The catalog is
queried once per batch, so every record in a batch is matched against the
same snapshot and the join stays linear in the number of distinct uids.

A failing catalog lookup does not raise from here. It is reported through
``JoinResult.error`` so callers can tell "no overlap" from "catalog down".
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from core.exceptions import CatalogLookupError
from core.interfaces import CoinCatalog
from core.logging import get_logger
from core.raw_schemas import DefiMarketInfoRaw, MarketInfoRaw
from core.schemas import DefiMarketInfo, FullCoin, MarketInfo


@dataclass
class JoinResult:
    """
    Outcome of a join.

    Attributes:
        market_infos: Composites for matched records, in provider order
        error: Set when the catalog lookup failed; market_infos is empty then
    """

    market_infos: List[MarketInfo] = field(default_factory=list)
    error: Optional[CatalogLookupError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[MarketInfo]:
        """Return the composites, raising the lookup error if there was one."""
        if self.error is not None:
            raise self.error
        return self.market_infos


class CatalogJoiner:
    """
    Resolves market records against a CoinCatalog.

    Example:
        >>> joiner = CatalogJoiner(storage)
        >>> result = joiner.market_infos(raw_records)
        >>> if result.ok:
        ...     print(f"{len(result.market_infos)} of {len(raw_records)} matched")
    """

    def __init__(self, storage: CoinCatalog):
        self.storage = storage
        self.logger = get_logger(__name__)

    def join(self, uids: Iterable[str]) -> Dict[str, FullCoin]:
        """
        Fetch catalog entries for a batch of uids in one lookup.

        Raises:
            Exception: Whatever the catalog raises
        """
        unique_uids = list(dict.fromkeys(uids))
        if not unique_uids:
            return {}
        return self.storage.full_coins_by_uids(unique_uids)

    @staticmethod
    def compose(raw_records: Sequence[MarketInfoRaw], catalog: Dict[str, FullCoin]) -> List[MarketInfo]:
        """Build composites for records whose uid is in ``catalog``; others are skipped."""
        market_infos = []
        for raw in raw_records:
            full_coin = catalog.get(raw.uid)
            if full_coin is None:
                continue
            market_infos.append(MarketInfo(uid=raw.uid, full_coin=full_coin, **raw.figures()))
        return market_infos

    def market_infos(self, raw_records: Sequence[MarketInfoRaw]) -> JoinResult:
        """
        Join and compose a batch.

        Returns:
            JoinResult with the composites, or with ``error`` set if the
            catalog could not be queried
        """
        try:
            catalog = self.join(raw.uid for raw in raw_records)
        except Exception as e:
            self.logger.warning(f"Catalog lookup failed for {len(raw_records)} market records: {e}")
            return JoinResult(error=CatalogLookupError("Catalog lookup failed", original_error=e))

        market_infos = self.compose(raw_records, catalog)
        skipped = len(raw_records) - len(market_infos)
        if skipped:
            self.logger.debug(f"Skipped {skipped} market record(s) with no catalog entry")
        return JoinResult(market_infos=market_infos)

    def defi_market_infos(self, raw_records: Sequence[DefiMarketInfoRaw]) -> List[DefiMarketInfo]:
        """
        Left join for DeFi protocols: every record is kept, ``full_coin`` is
        None for protocols that have no token in the catalog.

        Raises:
            Exception: Whatever the catalog raises
        """
        catalog = self.join(raw.uid for raw in raw_records if raw.uid)

        return [
            DefiMarketInfo(
                uid=raw.uid,
                full_coin=catalog.get(raw.uid) if raw.uid else None,
                name=raw.name,
                logo_url=raw.logo,
                tvl=raw.tvl,
                tvl_rank=raw.tvl_rank,
                tvl_change_1d=raw.tvl_change_1d,
                tvl_change_1w=raw.tvl_change_7d,
                tvl_change_1m=raw.tvl_change_30d,
                chains=raw.chains,
                chain_tvls={chain: tvl for chain, tvl in raw.chain_tvls.items() if tvl is not None},
            )
            for raw in raw_records
        ]
