# backend/app/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- SQL-backed price history store for the analytics engine (price_store.py)
- Stock lookups, manual entry and bulk import (stock_data_service.py)
- CSV price file parser (csv_import.py)

Usage:
    from app.services.market_data import SqlPriceHistoryStore
    from app.services.market_data import StockDataService, StockDataCsvParser

Architecture:
    PriceHistoryStoreProtocol
    └── SqlPriceHistoryStore (stock_data table)

    StockDataService
    └── Registers stocks, stores OHLCV rows
    └── Upserts rows parsed by StockDataCsvParser
"""

from app.services.market_data.csv_import import (
    StockDataCsvParser,
    ParsedPriceRow,
    ParseError,
    ParseResult,
)
from app.services.market_data.price_store import SqlPriceHistoryStore
from app.services.market_data.stock_data_service import (
    StockDataService,
    StockInfo,
    ImportResult,
)

__all__ = [
    # Price store
    "SqlPriceHistoryStore",
    # Stock data
    "StockDataService",
    "StockInfo",
    "ImportResult",
    # CSV import
    "StockDataCsvParser",
    "ParsedPriceRow",
    "ParseError",
    "ParseResult",
]
