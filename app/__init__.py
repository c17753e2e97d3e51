"""
FastAPI Application Package

This package contains the main FastAPI application and routing logic.
It exposes the assembled coin market views (markets, overviews, tickers,
charts) as REST endpoints.
"""
