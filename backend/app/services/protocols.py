# backend/app/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test fakes work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from app.services.analytics.types import PricePoint


class PriceHistoryStoreProtocol(Protocol):
    """Interface required by StatisticsService and TrendForecaster."""

    def get_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
    ) -> list[PricePoint]:
        """Closing prices in [start_date, end_date], ascending by date."""
        ...

    def get_recent_prices(
        self,
        symbol: str,
        limit: int,
    ) -> list[PricePoint]:
        """The `limit` most recent closing prices, descending by date."""
        ...

    def get_latest_price(
        self,
        symbol: str,
    ) -> float | None:
        """Most recent closing price, or None if the symbol has no data."""
        ...
