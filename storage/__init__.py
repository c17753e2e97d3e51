"""
Storage Package

Handles the local coin catalog.

Current implementation:
- In-memory catalog with batch-atomic writes (coin_storage.CoinStorage)

Other backends implement core.interfaces.CoinCatalog and can be passed to
CoinManager in its place.
"""
