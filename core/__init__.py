"""
Core Package

Contains the provider-agnostic aggregation logic:
- Interfaces: abstract collaborators (catalog, category/exchange lookups, providers)
- Normalizers and enums: turn loosely shaped provider payloads into typed records
- CatalogJoiner / ViewAssembler: join provider data with the coin catalog and build views
- CoinManager / ChartManager: entry points used by the API layer
- Schemas: Pydantic models for catalog entries and views

This layer never performs HTTP or persistence itself.
"""
