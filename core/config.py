"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates all required settings
- Provides type-safe access to configuration values
- Converts comma-separated strings to lists (CORS origins)

Usage:
    from core.config import settings

    print(settings.hs_base_url)
    print(settings.default_currency)
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        hs_base_url: Base URL of the market-data provider (coins, markets, analytics)
        hs_old_base_url: Base URL of the legacy market-data service (global market points)
        hs_api_key: API key sent to the market-data provider (optional)
        coingecko_base_url: Base URL of CoinGecko (tickers, exchanges)
        default_currency: Currency code used when a request does not name one
        default_language: Language code for coin descriptions
        request_timeout: Timeout for HTTP requests in seconds
        max_retries: Attempts per provider request before giving up
        sync_interval_seconds: Period of the background catalog sync
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        debug: Return tracebacks from unhandled API errors
        log_level: Logging level name
        cors_origins: Comma-separated list of allowed CORS origins
    """

    # ============================================
    # Provider Configuration
    # ============================================

    hs_base_url: str = Field(
        default="https://api.blocksdecoded.com",
        description="Market-data provider base URL"
    )

    hs_old_base_url: str = Field(
        default="https://markets.horizontalsystems.xyz",
        description="Legacy market-data service base URL"
    )

    hs_api_key: str = Field(
        default="",
        description="Market-data provider API key (optional)"
    )

    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL"
    )

    default_currency: str = Field(
        default="usd",
        description="Default quote currency code"
    )

    default_language: str = Field(
        default="en",
        description="Default language for coin descriptions"
    )

    # ============================================
    # Transport & Sync
    # ============================================

    request_timeout: int = Field(
        default=10,
        description="HTTP request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        description="Maximum attempts per provider request"
    )

    sync_interval_seconds: int = Field(
        default=3600,
        description="Interval between background catalog syncs (seconds)"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    debug: bool = Field(
        default=False,
        description="Enable FastAPI debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Derived Values
    # ============================================

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000', 'http://localhost:5173']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration() -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # logging.py imports config.py, so the logger is imported lazily
    from core.logging import logger

    for name in ("hs_base_url", "hs_old_base_url", "coingecko_base_url"):
        url = getattr(settings, name)
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"{name.upper()} must be an http(s) URL, got '{url}'")

    if not settings.default_currency:
        raise ValueError("DEFAULT_CURRENCY must not be empty")

    if settings.request_timeout <= 0:
        raise ValueError(f"Invalid REQUEST_TIMEOUT: {settings.request_timeout}. Must be positive")

    if settings.max_retries < 1:
        raise ValueError(f"Invalid MAX_RETRIES: {settings.max_retries}. Must be at least 1")

    if settings.sync_interval_seconds <= 0:
        raise ValueError(
            f"Invalid SYNC_INTERVAL_SECONDS: {settings.sync_interval_seconds}. Must be positive"
        )

    if not (1 <= settings.app_port <= 65535):
        raise ValueError(f"Invalid port number: {settings.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if settings.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{settings.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Environment: {settings.environment} (debug={settings.debug})")
    logger.info(f"Market-data provider: {settings.hs_base_url}")
    logger.info(f"Legacy market-data service: {settings.hs_old_base_url}")
    logger.info(f"CoinGecko: {settings.coingecko_base_url}")
    logger.info(f"Default currency: {settings.default_currency}")
    logger.info(f"Server: {settings.app_host}:{settings.app_port}")
    logger.info(f"Log level: {settings.log_level.upper()}")
