"""
Provider Connectors Package

Transport collaborators for the remote market-data sources.
Each provider has its own subfolder with an api_client.py implementing one of
the interfaces in core/interfaces.py:

- hs: coin catalog, market snapshots, overviews, analytics (MarketDataProvider)
- coingecko: exchange tickers and exchange metadata (TickerProvider)

Shared HTTP handling (sessions, retries, Decimal JSON decoding) lives in base.py.
"""
