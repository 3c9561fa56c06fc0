"""Exception hierarchy shared by the watchlist core and the web API."""

from typing import Any, Dict, Optional


class SupportTrackerError(Exception):
    """Base exception for Support Tracker."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ValidationException(SupportTrackerError):
    """Missing or malformed symbol / support level input."""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            details={"field_errors": field_errors or {}},
        )


class ConflictError(SupportTrackerError):
    """Symbol is already tracked."""

    def __init__(self, symbol: str):
        super().__init__(
            message=f"Symbol '{symbol}' is already tracked",
            status_code=409,
            details={"symbol": symbol},
        )
        self.symbol = symbol


class NotFoundError(SupportTrackerError):
    """Exception for resource not found errors."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} with identifier '{identifier}' not found",
            status_code=404,
            details={"resource": resource, "identifier": identifier},
        )
        self.resource = resource
        self.identifier = identifier


class QuoteSourceError(SupportTrackerError):
    """The quote provider failed for the whole batch."""

    def __init__(self, message: str, rate_limited: bool = False):
        super().__init__(
            message=f"Quote source error: {message}",
            status_code=503,
            details={"rate_limited": rate_limited},
        )
        self.rate_limited = rate_limited


class StoreError(SupportTrackerError):
    """Persistence failure in a watchlist store backend."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            message=f"Store {operation} failed: {message}",
            status_code=500,
            details={"operation": operation},
        )
        self.operation = operation
