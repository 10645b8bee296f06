"""Exceptions raised by the ingestion commands."""
import re
from typing import Any, Dict, Optional

from api.shared.exceptions import AppException


class IngestionError(AppException):
    """Raised when a single article cannot be fetched or indexed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "INGESTION_ERROR", details)
        self.status_code = status_code


class RateLimitedError(IngestionError):
    """Raised when an upstream service answers 429 Too Many Requests."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 429, details)
        self.error_code = "RATE_LIMITED"


_RATE_LIMIT_TEXT = re.compile(r"\b429\b|too many", re.IGNORECASE)


def is_rate_limited(error: BaseException) -> bool:
    """True for HTTP 429 errors, whatever client raised them."""
    if isinstance(error, IngestionError):
        return error.status_code == 429
    for attr in ("status_code", "status"):
        if getattr(error, attr, None) == 429:
            return True
    return bool(_RATE_LIMIT_TEXT.search(str(error)))
