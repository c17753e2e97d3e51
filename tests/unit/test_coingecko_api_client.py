"""
Unit Tests for CoinGeckoAPIClient and the shared retry loop

Run with:
    pytest tests/unit/test_coingecko_api_client.py -v
"""

import asyncio
import json
from decimal import Decimal

import pytest
import pytest_asyncio

from core.exceptions import ProviderError
from providers.coingecko import CoinGeckoAPIClient


@pytest_asyncio.fixture
async def api_client():
    async with CoinGeckoAPIClient(base_url="https://cg.example.test") as client:
        yield client


# ============================================
# Fake aiohttp session
# ============================================

class FakeResponse:

    def __init__(self, status, body):
        self.status = status
        self.body = body

    async def json(self, loads=json.loads, content_type=None):
        return loads(self.body)

    async def text(self):
        return self.body


class FakeRequest:

    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        return self.response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Serves queued responses in order and records requested URLs."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.urls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.urls.append((url, params))
        return FakeRequest(self.responses.pop(0))


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


# ============================================
# Tests for Ticker Endpoints
# ============================================

class TestGetMarketTickers:

    @pytest.mark.asyncio
    async def test_parses_tickers(self, api_client, monkeypatch):
        called = {}

        async def mock_get(path, params=None):
            called["path"] = path
            return {
                "name": "Bitcoin",
                "tickers": [
                    {"base": "BTC", "target": "USDT", "market": {"name": "Binance", "identifier": "binance"},
                     "last": Decimal("50010.5"), "volume": Decimal("12.5")},
                    {"base": "BTC", "target": "USD", "market": {"name": "Binance", "identifier": "binance"},
                     "last": Decimal("50000"), "volume": Decimal("1")},
                    {"base": "BTC", "target": "EUR", "market": {"name": "Kraken", "identifier": "kraken"},
                     "last": Decimal("46000"), "volume": Decimal("3")},
                ],
            }

        monkeypatch.setattr(api_client, "_get", mock_get)

        response = await api_client.get_market_tickers("bitcoin")

        assert called["path"] == "/coins/bitcoin/tickers"
        assert len(response.tickers) == 3
        assert response.exchange_ids == ["binance", "kraken"]

    @pytest.mark.asyncio
    async def test_get_exchanges_caps_page_size(self, api_client, monkeypatch):
        called = {}

        async def mock_get(path, params=None):
            called["path"], called["params"] = path, params
            return [{"id": "binance", "name": "Binance", "image": "https://img.example/binance.png"}]

        monkeypatch.setattr(api_client, "_get", mock_get)

        exchanges = await api_client.get_exchanges(limit=1000, page=2)

        assert called == {"path": "/exchanges", "params": {"per_page": 250, "page": 2}}
        assert exchanges[0].image_url == "https://img.example/binance.png"


# ============================================
# Tests for the retry loop
# ============================================

class TestRetryLogic:

    @pytest.mark.asyncio
    async def test_get_without_session_raises(self):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test")

        with pytest.raises(RuntimeError):
            await client._get("/ping")

    @pytest.mark.asyncio
    async def test_retries_rate_limit_then_succeeds(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test", max_retries=3)
        client.session = FakeSession([
            FakeResponse(429, "slow down"),
            FakeResponse(200, '{"price": 50000.123456789012345678}'),
        ])

        data = await client._get("/simple/price", {"ids": "bitcoin"})

        assert data == {"price": Decimal("50000.123456789012345678")}
        assert no_sleep == [1.5]
        assert client.session.urls[0] == ("https://cg.example.test/simple/price", {"ids": "bitcoin"})

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_provider_error(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test", max_retries=2)
        client.session = FakeSession([FakeResponse(503, ""), FakeResponse(503, "")])

        with pytest.raises(ProviderError) as exc_info:
            await client._get("/ping")

        assert exc_info.value.status_code == 503
        assert exc_info.value.provider == "coingecko"
        assert no_sleep == [1.5]

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test", max_retries=3)
        client.session = FakeSession([FakeResponse(404, "coin not found")])

        with pytest.raises(ProviderError) as exc_info:
            await client._get("/coins/ghost/tickers")

        assert exc_info.value.status_code == 404
        assert exc_info.value.path == "/coins/ghost/tickers"
        assert no_sleep == []

    @pytest.mark.asyncio
    async def test_rate_limited_flag(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test", max_retries=1)
        client.session = FakeSession([FakeResponse(429, "")])

        with pytest.raises(ProviderError) as exc_info:
            await client._get("/ping")

        assert exc_info.value.is_rate_limited()
        assert no_sleep == []

    @pytest.mark.asyncio
    async def test_undecodable_body_waits_only_between_attempts(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test", max_retries=2)
        client.session = FakeSession([FakeResponse(200, "<html>"), FakeResponse(200, "<html>")])

        with pytest.raises(ProviderError) as exc_info:
            await client._get("/ping")

        assert isinstance(exc_info.value.original_error, ValueError)
        assert no_sleep == [1.0]

    @pytest.mark.asyncio
    async def test_base_url_override(self, no_sleep):
        client = CoinGeckoAPIClient(base_url="https://cg.example.test")
        client.session = FakeSession([FakeResponse(200, "[]")])

        await client._get("/api/v1/ping", base_url="https://legacy.example.test/")

        assert client.session.urls == [("https://legacy.example.test/api/v1/ping", None)]
