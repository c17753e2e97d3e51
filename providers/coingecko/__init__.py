"""
CoinGecko connector (tickers and exchanges).
"""

from providers.coingecko.api_client import CoinGeckoAPIClient

__all__ = ["CoinGeckoAPIClient"]
