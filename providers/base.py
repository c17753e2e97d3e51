"""
Base REST Client

Shared aiohttp plumbing for provider clients:
- session lifecycle through ``async with``
- GET with retry on rate-limit/unavailable responses (429, 418, 503)
- JSON decoded with ``parse_float=Decimal`` so prices keep their precision
- failures surfaced as ``ProviderError`` once all attempts are spent
"""

import asyncio
import json
import time
from decimal import Decimal
from functools import partial
from typing import Any, Dict, Optional

import aiohttp

from core.config import settings
from core.exceptions import ProviderError
from core.logging import get_logger, log_api_request, log_api_response


decimal_loads = partial(json.loads, parse_float=Decimal)

RETRYABLE_STATUSES = (429, 418, 503)


class BaseAPIClient:
    """
    Async HTTP client base.

    Subclasses set ``name`` and ``base_url`` and call ``_get``.

    Example:
        >>> async with HsAPIClient() as client:
        ...     coins = await client.get_full_coins()
    """

    name: str = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.max_retries = max_retries or settings.max_retries
        self.logger = get_logger(self.__class__.__module__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def initialize(self) -> None:
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self.logger.debug(f"{self.__class__.__name__} session created")

    async def shutdown(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug(f"{self.__class__.__name__} session closed")

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    # ============================================
    # HTTP Request Handler with Retry Logic
    # ============================================

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """
        Make GET request with retry logic.

        Args:
            path: Endpoint path relative to base_url (e.g., "/v1/coins")
            params: Optional query parameters
            base_url: Overrides the client base URL for services hosted elsewhere

        Returns:
            Decoded JSON response

        Raises:
            ProviderError: If the request fails after all retries, or the
                provider answers with a non-retryable error status

        Retry delay: 1.5s * (attempt + 1) on rate limits, 1.0s * (attempt + 1)
        on timeouts and connection errors. The last attempt raises without waiting.
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        root = base_url.rstrip("/") if base_url else self.base_url
        url = f"{root}{path}"
        log_api_request(self.name, path, params)
        last_status: Optional[int] = None
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            started = time.monotonic()
            try:
                async with self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    last_status = resp.status
                    log_api_response(self.name, path, resp.status, time.monotonic() - started)

                    if resp.status == 200:
                        data = await resp.json(loads=decimal_loads, content_type=None)
                        self.logger.debug(f"GET {path} - Success (attempt {attempt + 1})")
                        return data

                    elif resp.status in RETRYABLE_STATUSES:
                        if last_attempt:
                            self.logger.warning(
                                f"Rate limited (HTTP {resp.status}) on {path}. "
                                f"Giving up (attempt {attempt + 1}/{self.max_retries})"
                            )
                            continue
                        delay = 1.5 * (attempt + 1)
                        self.logger.warning(
                            f"Rate limited (HTTP {resp.status}) on {path}. "
                            f"Retrying in {delay:.1f}s... (attempt {attempt + 1}/{self.max_retries})"
                        )
                        await asyncio.sleep(delay)
                        continue

                    else:
                        text = await resp.text()
                        self.logger.error(f"HTTP {resp.status} on {path}: {text}")
                        raise ProviderError(
                            f"{self.name} returned HTTP {resp.status} for {path}",
                            provider=self.name,
                            path=path,
                            status_code=resp.status,
                        )

            except asyncio.TimeoutError as e:
                last_error = e
                self.logger.error(f"Timeout on {path} (attempt {attempt + 1}/{self.max_retries})")
                if not last_attempt:
                    await asyncio.sleep(1.0 * (attempt + 1))

            except (aiohttp.ClientError, ValueError) as e:
                last_error = e
                self.logger.error(f"Request failed on {path}: {e} (attempt {attempt + 1}/{self.max_retries})")
                if not last_attempt:
                    await asyncio.sleep(1.0 * (attempt + 1))

        raise ProviderError(
            f"Failed to fetch {url} after {self.max_retries} attempts",
            provider=self.name,
            path=path,
            status_code=last_status,
            original_error=last_error,
        )

    async def health_check(self) -> bool:
        """Subclasses override with a cheap endpoint; default is session presence."""
        return self.session is not None
