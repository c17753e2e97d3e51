"""
Main market-data provider connector.
"""

from providers.hs.api_client import HsAPIClient

__all__ = ["HsAPIClient"]
