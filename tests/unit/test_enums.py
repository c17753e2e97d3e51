"""
Unit Tests for the closed vocabularies and coin type resolution.

Run with:
    pytest tests/unit/test_enums.py -v
"""

import pytest

from core.enums import CoinTypeKind, LinkType, TimePeriod
from core.schemas import CoinType


class TestFromCode:

    @pytest.mark.parametrize("code,expected", [
        ("1d", TimePeriod.DAY_1),
        ("7d", TimePeriod.WEEK_1),
        ("200d", TimePeriod.MONTH_6),
        (" 1Y ", TimePeriod.YEAR_1),
    ])
    def test_known_period_codes_resolve(self, code, expected):
        assert TimePeriod.from_code(code) is expected

    @pytest.mark.parametrize("code", ["bogus_period", "", "2d", None, 7])
    def test_unknown_codes_resolve_to_none(self, code):
        assert TimePeriod.from_code(code) is None

    def test_code_is_total_and_round_trips(self):
        for period in TimePeriod:
            assert TimePeriod.from_code(period.code) is period

    def test_link_types(self):
        assert LinkType.from_code("github") is LinkType.GITHUB
        assert LinkType.from_code("discord") is None


class TestCoinTypeKind:

    def test_native_chains_need_no_reference(self):
        assert CoinTypeKind.BITCOIN.requires_reference is False
        assert CoinTypeKind.ETHEREUM.requires_reference is False

    def test_token_standards_need_reference(self):
        assert CoinTypeKind.ERC20.requires_reference is True
        assert CoinTypeKind.BEP2.requires_reference is True


class TestCoinTypeFromPlatform:

    def test_native_chain(self):
        coin_type = CoinType.from_platform("bitcoin")
        assert coin_type == CoinType(kind=CoinTypeKind.BITCOIN)
        assert coin_type.id == "bitcoin"

    def test_erc20_uses_address(self):
        coin_type = CoinType.from_platform("erc20", address="0xdac17f958d2ee523a2206206994597c13d831ec7")
        assert coin_type.kind is CoinTypeKind.ERC20
        assert coin_type.id == "erc20|0xdac17f958d2ee523a2206206994597c13d831ec7"

    def test_bep2_uses_symbol(self):
        coin_type = CoinType.from_platform("bep2", address="ignored", symbol="BNB")
        assert coin_type.reference == "BNB"

    def test_token_without_reference_is_dropped(self):
        assert CoinType.from_platform("erc20") is None

    def test_unknown_platform_is_dropped(self):
        assert CoinType.from_platform("tron", address="T123") is None
