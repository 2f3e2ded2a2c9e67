# backend/app/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer (global handlers in main.py) is responsible for mapping these
to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFoundError
    │   ├── StockNotFoundError
    │   └── PriceHistoryNotFoundError
    ├── DuplicatePriceDataError
    └── AnalyticsError
        └── InsufficientDataError

Numeric degeneracies inside the analytics engine (zero variance, zero mean,
zero total value, degenerate trend slope) are NOT exceptions. They are
reported as tagged Fallback values, see app.services.analytics.types.
"""

from datetime import date

from app.services.constants import MIN_PRICE_POINTS


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (inverted date range,
    non-positive quantity, duplicate symbols), NOT for request shape
    validation which is handled by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Stock", "PriceHistory")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class StockNotFoundError(NotFoundError):
    """
    Raised when a symbol is not registered in the stock table.

    Attributes:
        symbol: The unknown symbol
    """

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(
            f"Stock '{symbol}' not found",
            resource_type="Stock",
            resource_id=symbol,
        )


class PriceHistoryNotFoundError(NotFoundError):
    """
    Raised when a symbol has no price history at all.

    Used by the trend forecaster (nothing to extrapolate from) and when a
    holding has to be priced from the latest close but none exists.

    Attributes:
        symbol: The symbol without price history
    """

    def __init__(self, symbol: str, message: str | None = None) -> None:
        self.symbol = symbol
        super().__init__(
            message or f"No historical data found for stock '{symbol}'",
            resource_type="PriceHistory",
            resource_id=symbol,
        )


# =============================================================================
# STOCK DATA ERRORS
# =============================================================================


class DuplicatePriceDataError(ServiceError):
    """
    Raised when a price row already exists for a symbol and date.

    Attributes:
        symbol: Stock symbol
        price_date: The date that already has data
    """

    def __init__(self, symbol: str, price_date: date) -> None:
        self.symbol = symbol
        self.price_date = price_date
        super().__init__(
            f"Data for {symbol} on {price_date.isoformat()} already exists"
        )


# =============================================================================
# ANALYTICS ERRORS
# =============================================================================


class AnalyticsError(ServiceError):
    """
    Base exception for analytics calculation errors.
    """
    pass


class InsufficientDataError(AnalyticsError):
    """
    Raised when a symbol has fewer than 2 price points in the requested range.

    This is a client-correctable condition: widen the date range or pick
    different instruments. It is never retried.

    Attributes:
        data_points: Price point count per symbol for the requested range
                     (every symbol of the request, not only the failing ones)
        start_date: Start of the requested range (optional)
        end_date: End of the requested range (optional)
    """

    def __init__(
            self,
            data_points: dict[str, int],
            start_date: date | None = None,
            end_date: date | None = None,
    ) -> None:
        self.data_points = dict(data_points)
        self.start_date = start_date
        self.end_date = end_date
        counts = ", ".join(f"{symbol}: {count}" for symbol, count in self.data_points.items())
        super().__init__(
            "Insufficient data points. Need at least 2 data points for each stock. "
            f"Current data points: {counts}"
        )

    @property
    def insufficient_symbols(self) -> list[str]:
        """Symbols that caused the failure."""
        return [symbol for symbol, count in self.data_points.items() if count < MIN_PRICE_POINTS]


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    # Not Found
    "NotFoundError",
    "StockNotFoundError",
    "PriceHistoryNotFoundError",
    # Stock data
    "DuplicatePriceDataError",
    # Analytics
    "AnalyticsError",
    "InsufficientDataError",
]
