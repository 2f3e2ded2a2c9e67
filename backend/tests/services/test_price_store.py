# backend/tests/services/test_price_store.py
"""
Tests for SqlPriceHistoryStore against an in-memory SQLite database.
"""

from datetime import date

from app.services.analytics.types import PricePoint
from app.services.market_data import SqlPriceHistoryStore
from tests.conftest import create_price_rows, create_stock


class TestGetPrices:
    """Tests for the date-range query."""

    def test_ascending_within_range(self, db):
        create_stock(db, "AAPL")
        create_price_rows(db, "AAPL", [100, 101, 102, 103, 104], start=date(2024, 1, 1))

        prices = SqlPriceHistoryStore(db).get_prices("AAPL", date(2024, 1, 2), date(2024, 1, 4))

        assert prices == [
            PricePoint(date(2024, 1, 2), 101.0),
            PricePoint(date(2024, 1, 3), 102.0),
            PricePoint(date(2024, 1, 4), 103.0),
        ]

    def test_returns_floats(self, db):
        """Numeric columns arrive as Decimal and are converted."""
        create_stock(db, "AAPL")
        create_price_rows(db, "AAPL", ["185.64"])

        prices = SqlPriceHistoryStore(db).get_prices("AAPL", date(2024, 1, 1), date(2024, 1, 1))

        assert isinstance(prices[0].close_price, float)
        assert prices[0].close_price == 185.64

    def test_other_symbols_excluded(self, db):
        create_stock(db, "AAPL")
        create_stock(db, "MSFT", "Microsoft Corporation")
        create_price_rows(db, "AAPL", [100, 101])
        create_price_rows(db, "MSFT", [400, 401, 402])

        prices = SqlPriceHistoryStore(db).get_prices("MSFT", date(2024, 1, 1), date(2024, 12, 31))

        assert [p.close_price for p in prices] == [400.0, 401.0, 402.0]

    def test_unknown_symbol_is_empty(self, db):
        assert SqlPriceHistoryStore(db).get_prices("NOPE", date(2024, 1, 1), date(2024, 12, 31)) == []


class TestGetRecentPrices:
    """Tests for the most-recent-first query."""

    def test_descending_and_limited(self, db):
        create_stock(db, "AAPL")
        create_price_rows(db, "AAPL", [100, 101, 102, 103, 104])

        prices = SqlPriceHistoryStore(db).get_recent_prices("AAPL", 3)

        assert [p.close_price for p in prices] == [104.0, 103.0, 102.0]
        assert prices[0].date == date(2024, 1, 5)

    def test_limit_larger_than_history(self, db):
        create_stock(db, "AAPL")
        create_price_rows(db, "AAPL", [100, 101])

        assert len(SqlPriceHistoryStore(db).get_recent_prices("AAPL", 30)) == 2


class TestGetLatestPrice:
    """Tests for the latest close lookup."""

    def test_latest_close(self, db):
        create_stock(db, "AAPL")
        create_price_rows(db, "AAPL", [100, 101, "102.5"])

        assert SqlPriceHistoryStore(db).get_latest_price("AAPL") == 102.5

    def test_no_data(self, db):
        create_stock(db, "AAPL")

        assert SqlPriceHistoryStore(db).get_latest_price("AAPL") is None
