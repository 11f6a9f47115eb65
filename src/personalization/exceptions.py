"""Custom exceptions for the ShopSense engine.

Defines specific exception types for better error handling and reporting.
"""

from typing import Any, Dict, Optional


class ShopSenseException(Exception):
    """Base exception for ShopSense errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidProductError(ShopSenseException):
    """Raised when a catalog product has out-of-range fields."""

    def __init__(self, product_id: str, reason: str):
        message = f"Invalid product '{product_id}': {reason}"
        super().__init__(
            message=message,
            status_code=422,
            details={"product_id": product_id, "reason": reason},
        )


class CatalogLoadError(ShopSenseException):
    """Raised when a catalog file cannot be turned into products."""

    def __init__(self, path: str, reason: str):
        message = f"Failed to load catalog from '{path}': {reason}"
        super().__init__(
            message=message,
            status_code=500,
            details={"path": path, "reason": reason},
        )


class InvalidMessageError(ShopSenseException):
    """Raised when an inbound chat message is empty or whitespace only."""

    def __init__(self, text: str):
        super().__init__(
            message="Message text must not be empty.",
            status_code=422,
            details={"text": text},
        )


class UnsupportedEventError(ShopSenseException):
    """Raised when a tracking event has no registered handler."""

    def __init__(self, event: Any):
        message = f"Unsupported tracking event: {type(event).__name__}"
        super().__init__(
            message=message,
            status_code=422,
            details={"event_type": type(event).__name__},
        )


class PersistenceError(ShopSenseException):
    """Raised when the key-value store cannot be read or written."""

    def __init__(
        self,
        key: str,
        error: Exception,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = f"Failed to persist '{key}': {str(error)}"
        merged = {
            "key": key,
            "error": str(error),
            "error_type": type(error).__name__,
        }
        merged.update(details or {})
        super().__init__(
            message=message,
            status_code=503,
            details=merged,
        )
