# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Test environment variables (set before any app module is imported)
- Database session fixtures (in-memory SQLite)
- In-memory price history store for engine tests
- Sample data factories
- FastAPI test client bound to the test session
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.main import app
from app.models import Base, Stock, StockData
from app.services.analytics.types import PricePoint


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """Test client whose requests use the test session."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# IN-MEMORY PRICE HISTORY STORE
# =============================================================================

class InMemoryPriceHistoryStore:
    """
    Price history held in a dict (satisfies PriceHistoryStoreProtocol).

    Records every get_prices() call so tests can check fetch behavior.
    """

    def __init__(self):
        self._prices: dict[str, list[PricePoint]] = {}
        self.calls: list[tuple[str, date, date]] = []

    def add_prices(
            self,
            symbol: str,
            closes: Sequence[float],
            start: date = date(2024, 1, 1),
    ) -> None:
        """Store one close per consecutive calendar day starting at `start`."""
        points = [
            PricePoint(date=start + timedelta(days=i), close_price=close)
            for i, close in enumerate(closes)
        ]
        merged = {point.date: point for point in self._prices.get(symbol, [])}
        merged.update({point.date: point for point in points})
        self._prices[symbol] = sorted(merged.values(), key=lambda p: p.date)

    def get_prices(self, symbol: str, start_date: date, end_date: date) -> list[PricePoint]:
        self.calls.append((symbol, start_date, end_date))
        return [
            point for point in self._prices.get(symbol, [])
            if start_date <= point.date <= end_date
        ]

    def get_recent_prices(self, symbol: str, limit: int) -> list[PricePoint]:
        return list(reversed(self._prices.get(symbol, [])))[:limit]

    def get_latest_price(self, symbol: str) -> float | None:
        prices = self._prices.get(symbol)
        return prices[-1].close_price if prices else None


@pytest.fixture
def price_store() -> InMemoryPriceHistoryStore:
    """Empty in-memory price history store."""
    return InMemoryPriceHistoryStore()


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def create_stock(
        db: Session,
        symbol: str = "AAPL",
        company_name: str = "Apple Inc.",
) -> Stock:
    """Factory function to create a test stock."""
    stock = Stock(symbol=symbol, company_name=company_name)
    db.add(stock)
    db.commit()
    db.refresh(stock)
    return stock


def create_price_rows(
        db: Session,
        symbol: str,
        closes: Sequence[float | str],
        start: date = date(2024, 1, 1),
        volume: int | None = 1_000,
) -> list[StockData]:
    """
    Factory function to create one price row per consecutive day.

    Open/high/low are derived from the close so the rows look like real data.
    """
    rows = []
    for i, close in enumerate(closes):
        close_price = Decimal(str(close))
        row = StockData(
            symbol=symbol,
            date=start + timedelta(days=i),
            open_price=close_price,
            high_price=close_price + 1,
            low_price=close_price - 1 if close_price > 1 else close_price,
            close_price=close_price,
            volume=volume,
        )
        db.add(row)
        rows.append(row)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@pytest.fixture
def sample_stock(db: Session) -> Stock:
    """Create a sample stock for testing."""
    return create_stock(db)


@pytest.fixture
def sample_stock_with_prices(db: Session, sample_stock: Stock) -> Stock:
    """AAPL with five rising closes from 2024-01-01 to 2024-01-05."""
    create_price_rows(db, sample_stock.symbol, [100, 101, 102, 103, 104])
    return sample_stock
