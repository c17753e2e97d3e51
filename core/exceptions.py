"""
Exception hierarchy for market-data aggregation.

Only transport failures are meant to reach API callers. Join misses,
unknown enum codes and missing external ids are modeled as omissions
and never raise.
"""

from typing import Any, Dict, Optional


class MarketViewError(Exception):
    """Base exception for all errors raised by this package."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (caused by: {self.original_error})"
        return self.message


class ProviderError(MarketViewError):
    """A remote provider request failed after all attempts."""

    def __init__(
        self,
        message: str,
        provider: str,
        path: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, original_error)
        self.provider = provider
        self.path = path
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "provider": self.provider,
            "path": self.path,
            "status_code": self.status_code,
        })
        return data

    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class CatalogLookupError(MarketViewError):
    """The coin catalog could not be queried while joining market records."""
