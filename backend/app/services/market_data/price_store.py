# backend/app/services/market_data/price_store.py
"""
SQLAlchemy implementation of the price history store.

Reads closing prices from the stock_data table and hands them to the
analytics engine as PricePoint values. Numeric(18, 8) columns come back as
Decimal; they are converted to float here, at the edge, so the engine works
in floats throughout.

The store is bound to one Session and therefore lives for one request.

Usage:
    store = SqlPriceHistoryStore(db)
    prices = store.get_prices("AAPL", date(2024, 1, 1), date(2024, 6, 30))
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import StockData
from app.services.analytics.types import PricePoint

logger = logging.getLogger(__name__)


class SqlPriceHistoryStore:
    """Price history backed by the stock_data table (satisfies PriceHistoryStoreProtocol)."""

    def __init__(self, db: Session):
        self._db = db

    def get_prices(
            self,
            symbol: str,
            start_date: date,
            end_date: date,
    ) -> list[PricePoint]:
        """Closing prices in [start_date, end_date], ascending by date."""
        stmt = (
            select(StockData.date, StockData.close_price)
            .where(
                StockData.symbol == symbol,
                StockData.date >= start_date,
                StockData.date <= end_date,
            )
            .order_by(StockData.date.asc())
        )
        rows = self._db.execute(stmt).all()
        return [PricePoint(date=row.date, close_price=float(row.close_price)) for row in rows]

    def get_recent_prices(self, symbol: str, limit: int) -> list[PricePoint]:
        """The `limit` most recent closing prices, descending by date."""
        stmt = (
            select(StockData.date, StockData.close_price)
            .where(StockData.symbol == symbol)
            .order_by(StockData.date.desc())
            .limit(limit)
        )
        rows = self._db.execute(stmt).all()
        return [PricePoint(date=row.date, close_price=float(row.close_price)) for row in rows]

    def get_latest_price(self, symbol: str) -> float | None:
        """Most recent closing price, or None if the symbol has no data."""
        stmt = (
            select(StockData.close_price)
            .where(StockData.symbol == symbol)
            .order_by(StockData.date.desc())
            .limit(1)
        )
        close_price = self._db.execute(stmt).scalar_one_or_none()
        return float(close_price) if close_price is not None else None
