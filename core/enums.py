"""
Closed Vocabularies

Providers key several structures with free-form strings (performance periods,
link types, platform types). Each vocabulary below is a closed enumeration
whose member value is its single canonical code.

Resolution is asymmetric:
    - enum -> code is total: ``TimePeriod.DAY_1.value == "1d"``
    - code -> enum is partial: ``TimePeriod.from_code("bogus") is None``

Callers drop entries whose code does not resolve, so a provider adding a new
period or link type never breaks a response.
"""

from enum import Enum
from typing import Optional


class CodedEnum(str, Enum):
    """String enum resolvable from provider codes."""

    @classmethod
    def from_code(cls, code: Optional[str]):
        """
        Resolve a provider code to a member.

        Args:
            code: Raw code from a provider payload (case-insensitive)

        Returns:
            The matching member, or None if the code is unknown or missing
        """
        if not isinstance(code, str):
            return None

        normalized = code.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None

    @property
    def code(self) -> str:
        return self.value


class TimePeriod(CodedEnum):
    """Windows used by price performance tables and chart requests."""

    HOUR_1 = "1h"
    DAY_1 = "1d"
    WEEK_1 = "7d"
    WEEK_2 = "14d"
    MONTH_1 = "30d"
    MONTH_3 = "90d"
    MONTH_6 = "200d"
    YEAR_1 = "1y"


class LinkType(CodedEnum):
    """Kinds of external links attached to a coin overview."""

    GUIDE = "guide"
    WEBSITE = "website"
    WHITEPAPER = "whitepaper"
    TWITTER = "twitter"
    TELEGRAM = "telegram"
    REDDIT = "reddit"
    GITHUB = "github"


class CoinTypeKind(CodedEnum):
    """Blockchains and token standards a coin can live on."""

    BITCOIN = "bitcoin"
    BITCOIN_CASH = "bitcoin-cash"
    LITECOIN = "litecoin"
    DASH = "dash"
    ZCASH = "zcash"
    ETHEREUM = "ethereum"
    BINANCE_SMART_CHAIN = "binance-smart-chain"
    ERC20 = "erc20"
    BEP2 = "bep2"
    BEP20 = "bep20"
    MRC20 = "mrc20"
    ARBITRUM_ONE = "arbitrum-one"
    OPTIMISTIC_ETHEREUM = "optimistic-ethereum"
    AVALANCHE = "avalanche"
    FANTOM = "fantom"
    SOLANA = "solana"

    @property
    def requires_reference(self) -> bool:
        """Token kinds are only meaningful with a contract address or symbol."""
        return self not in _NATIVE_KINDS


_NATIVE_KINDS = frozenset({
    CoinTypeKind.BITCOIN,
    CoinTypeKind.BITCOIN_CASH,
    CoinTypeKind.LITECOIN,
    CoinTypeKind.DASH,
    CoinTypeKind.ZCASH,
    CoinTypeKind.ETHEREUM,
    CoinTypeKind.BINANCE_SMART_CHAIN,
})
