"""
FastAPI Application - Coin Market Views API

Serves the assembled coin views over HTTP.

Features:
    - Coin catalog search (by name or code, and by platform)
    - Market snapshots (top-N, by coin list, by category, DeFi) and latest prices
    - Coin overview (performance table, links, categories, platforms)
    - Exchange tickers
    - Chart analytics and global market points

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Dict, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.category_manager import CoinCategoryManager
from core.chart_manager import ChartManager
from core.coin_manager import CoinManager
from core.config import settings, validate_configuration
from core.enums import CoinTypeKind, TimePeriod
from core.exceptions import CatalogLookupError, ProviderError
from core.exchange_manager import ExchangeManager
from core.logging import logger
from core.normalizers import RANK_PERIODS
from core.schemas import (
    ChartPoint,
    CoinCategory,
    CoinPrice,
    DefiMarketInfo,
    FullCoin,
    GlobalMarketPoint,
    MarketInfo,
    MarketInfoOverview,
    MarketTicker,
    PlatformCoin,
)
from providers.coingecko import CoinGeckoAPIClient
from providers.hs import HsAPIClient
from services.change_notifier import ChangeNotifier
from services.coin_syncer import CoinSyncer
from storage.coin_storage import CoinStorage


# ============================================
# Components
# ============================================

storage = CoinStorage()
notifier = ChangeNotifier()
hs_client = HsAPIClient()
coingecko_client = CoinGeckoAPIClient()
category_manager = CoinCategoryManager()
exchange_manager = ExchangeManager()

coin_manager = CoinManager(
    storage=storage,
    provider=hs_client,
    category_lookup=category_manager,
    ticker_provider=coingecko_client,
    exchange_lookup=exchange_manager,
    notifier=notifier,
)
chart_manager = ChartManager(hs_client)
coin_syncer = CoinSyncer(coin_manager, category_manager, exchange_manager, hs_client, coingecko_client)


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await hs_client.initialize()
        await coingecko_client.initialize()
        await coin_syncer.start()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await coin_syncer.stop()
        await hs_client.shutdown()
        await coingecko_client.shutdown()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="MarketView Coin Market API",
    description=(
        "Coin market views assembled from remote providers and the local coin catalog.\n\n"
        "## REST Endpoints\n"
        "- `GET /coins` - Search the coin catalog\n"
        "- `GET /markets` - Top coins by market cap\n"
        "- `GET /markets/coins` - Market data for a list of coins\n"
        "- `GET /markets/categories/{category_uid}` - Market data for a category\n"
        "- `GET /markets/defi` - DeFi protocols by TVL\n"
        "- `GET /prices` - Latest prices for a list of coins\n"
        "- `GET /coins/{coin_uid}/overview` - Coin overview\n"
        "- `GET /coins/{coin_uid}/tickers` - Exchange tickers\n"
        "- `GET /coins/{coin_uid}/charts/{chart}` - Analytics charts\n"
        "- `GET /global-markets/{period}` - Global market points\n"
        "- `GET /categories` - Coin categories\n"
        "- `GET /platforms/{kind}/coins` - Search coins issued on a platform\n"
        "- `GET /health` - Health check"
    ),
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


def _time_period(code: str) -> TimePeriod:
    period = TimePeriod.from_code(code)
    if period is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown period '{code}'. Must be one of: {', '.join(p.value for p in TimePeriod)}"
        )
    return period


# ============================================
# System Endpoints
# ============================================

@app.get("/", tags=["System"])
async def root():
    """API information."""
    return {
        "name": "MarketView Coin Market API",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment,
        "docs": "/docs",
        "catalog_size": len(storage),
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Health check - tests connectivity to the providers."""
    providers = {
        hs_client.name: await hs_client.health_check(),
        coingecko_client.name: await coingecko_client.health_check(),
    }
    return {
        "status": "healthy" if all(providers.values()) else "degraded",
        "providers": providers,
        "catalog_size": len(storage),
    }


# ============================================
# Catalog Endpoints
# ============================================

@app.get("/coins", response_model=List[FullCoin], tags=["Catalog"])
async def search_coins(
    filter: str = Query(default="", description="Name or code fragment"),
    limit: int = Query(default=20, ge=1, le=500)
):
    return coin_manager.full_coins(filter, limit)


@app.get("/categories", response_model=List[CoinCategory], tags=["Catalog"])
async def list_categories():
    return category_manager.all_categories()


@app.get("/platforms/{kind}/coins", response_model=List[PlatformCoin], tags=["Catalog"])
async def search_platform_coins(
    kind: str,
    filter: str = Query(default="", description="Name or code fragment"),
    limit: int = Query(default=20, ge=1, le=500)
):
    """
    Example:
        GET /platforms/erc20/coins?filter=usd
    """
    coin_type_kind = CoinTypeKind.from_code(kind)
    if coin_type_kind is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown platform '{kind}'. Must be one of: {', '.join(k.value for k in CoinTypeKind)}"
        )
    return coin_manager.platform_coins(coin_type_kind, filter, limit)


# ============================================
# Market Endpoints
# ============================================

@app.get("/markets", response_model=List[MarketInfo], tags=["Markets"])
async def get_top_markets(
    top: int = Query(default=250, ge=1, le=1000),
    currency: str = Query(default=settings.default_currency),
    strict: bool = Query(default=False, description="Fail instead of returning an empty list when the catalog is unavailable")
):
    """
    Example:
        GET /markets?top=100&currency=usd
    """
    return await coin_manager.market_infos_top(top, currency, strict=strict)


@app.get("/markets/coins", response_model=List[MarketInfo], tags=["Markets"])
async def get_markets_by_uids(
    uids: str = Query(..., description="Comma-separated coin uids"),
    currency: str = Query(default=settings.default_currency),
    strict: bool = Query(default=False)
):
    """
    Example:
        GET /markets/coins?uids=bitcoin,ethereum&currency=eur
    """
    coin_uids = [uid.strip() for uid in uids.split(",") if uid.strip()]
    return await coin_manager.market_infos_by_uids(coin_uids, currency, strict=strict)


@app.get("/markets/categories/{category_uid}", response_model=List[MarketInfo], tags=["Markets"])
async def get_markets_by_category(
    category_uid: str,
    currency: str = Query(default=settings.default_currency),
    strict: bool = Query(default=False)
):
    return await coin_manager.market_infos_by_category(category_uid, currency, strict=strict)


@app.get("/markets/defi", response_model=List[DefiMarketInfo], tags=["Markets"])
async def get_defi_markets(currency: str = Query(default=settings.default_currency)):
    return await coin_manager.defi_market_infos(currency)


@app.get("/prices", response_model=List[CoinPrice], tags=["Markets"])
async def get_coin_prices(
    uids: str = Query(..., description="Comma-separated coin uids"),
    currency: str = Query(default=settings.default_currency)
):
    """
    Example:
        GET /prices?uids=bitcoin,ethereum&currency=usd
    """
    coin_uids = [uid.strip() for uid in uids.split(",") if uid.strip()]
    return await coin_manager.coin_prices(coin_uids, currency)


# ============================================
# Coin Endpoints
# ============================================

@app.get("/coins/{coin_uid}/overview", response_model=MarketInfoOverview, tags=["Coins"])
async def get_coin_overview(
    coin_uid: str,
    currency: str = Query(default=settings.default_currency),
    language: str = Query(default=settings.default_language)
):
    """
    Example:
        GET /coins/bitcoin/overview?currency=usd&language=en
    """
    return await coin_manager.market_info_overview(coin_uid, currency, language)


@app.get("/coins/{coin_uid}/tickers", response_model=List[MarketTicker], tags=["Coins"])
async def get_coin_tickers(coin_uid: str):
    """Empty list for coins without CoinGecko coverage."""
    return await coin_manager.market_tickers(coin_uid)


CHARTS = {
    "dex-volume": chart_manager.dex_volume_points,
    "dex-liquidity": chart_manager.dex_liquidity_points,
    "transactions": chart_manager.transaction_volume_points,
    "transaction-count": chart_manager.transaction_count_points,
    "addresses": chart_manager.active_address_points,
    "tvl": chart_manager.tvl_points,
}


@app.get("/coins/{coin_uid}/charts/{chart}", response_model=List[ChartPoint], tags=["Charts"])
async def get_coin_chart(
    coin_uid: str,
    chart: str,
    currency: str = Query(default=settings.default_currency),
    period: str = Query(default=TimePeriod.MONTH_1.value)
):
    """
    Example:
        GET /coins/uniswap/charts/dex-volume?period=30d
    """
    fetch = CHARTS.get(chart)
    if fetch is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown chart '{chart}'. Available: {', '.join(CHARTS)}"
        )
    return await fetch(coin_uid, currency, _time_period(period))


@app.get("/coins/{coin_uid}/analytics", response_model=Dict[str, List[ChartPoint]], tags=["Charts"])
async def get_coin_analytics(coin_uid: str, currency: str = Query(default=settings.default_currency)):
    return await chart_manager.analytics_points(coin_uid, currency)


@app.get("/ranks/{rank_type}", response_model=Dict[str, Decimal], tags=["Charts"])
async def get_rank_values(
    rank_type: str,
    currency: str = Query(default=settings.default_currency),
    period: str = Query(default=TimePeriod.DAY_1.value)
):
    """
    Example:
        GET /ranks/dex_volume?period=7d
    """
    time_period = _time_period(period)
    if time_period not in RANK_PERIODS:
        raise HTTPException(
            status_code=400,
            detail=f"No rank values for period '{period}'. Must be one of: {', '.join(p.value for p in RANK_PERIODS)}"
        )
    return await chart_manager.rank_values(rank_type, currency, time_period)


@app.get("/global-markets/{period}", response_model=List[GlobalMarketPoint], tags=["Charts"])
async def get_global_markets(period: str, currency: str = Query(default=settings.default_currency)):
    return await chart_manager.global_market_points(currency, _time_period(period))


# ============================================
# Error Handlers
# ============================================

@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    """Upstream failures: 404 passes through, everything else is a 502."""
    logger.error(f"Provider error on {request.url.path}: {exc}")
    status_code = 404 if exc.status_code == 404 else 502
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "provider": exc.provider})


@app.exception_handler(CatalogLookupError)
async def catalog_error_handler(request: Request, exc: CatalogLookupError):
    logger.error(f"Catalog unavailable on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})
