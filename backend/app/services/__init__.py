# backend/app/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions (or a session-bound store) as parameters
- Are easily testable via dependency injection

Usage:
    from app.services import StatisticsService, TrendForecaster
    from app.services import SqlPriceHistoryStore, StockDataService
    from app.services import InsufficientDataError, StockNotFoundError

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and limits
    ├── protocols.py                 # Service interfaces (Protocol classes)
    ├── analytics/                   # Analytics engine
    │   ├── service.py               # StatisticsService orchestrator
    │   ├── forecast.py              # TrendForecaster
    │   ├── types.py                 # Analytics data types
    │   ├── returns.py               # Daily returns, mean, stdev
    │   ├── covariance.py            # Covariance, correlation, alignment
    │   └── benchmark.py             # Market synthesis, Beta
    └── market_data/                 # Price storage
        ├── price_store.py           # SQL price history store
        ├── stock_data_service.py    # Lookups, manual entry, bulk import
        └── csv_import.py            # CSV price file parser
"""

from app.services.analytics import StatisticsService, TrendForecaster
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    StockNotFoundError,
    PriceHistoryNotFoundError,
    DuplicatePriceDataError,
    AnalyticsError,
    InsufficientDataError,
)
from app.services.market_data import SqlPriceHistoryStore, StockDataService
from app.services.protocols import PriceHistoryStoreProtocol

__all__ = [
    # ==========================================================================
    # Services
    # ==========================================================================
    "StatisticsService",
    "TrendForecaster",
    "SqlPriceHistoryStore",
    "StockDataService",
    "PriceHistoryStoreProtocol",

    # ==========================================================================
    # Exceptions
    # ==========================================================================
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "StockNotFoundError",
    "PriceHistoryNotFoundError",
    "DuplicatePriceDataError",
    "AnalyticsError",
    "InsufficientDataError",
]
