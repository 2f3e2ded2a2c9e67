# backend/app/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Organized by domain:
- errors: Error response formats
- statistics: Holdings statistics and trend forecast
- stock_data: Stock info and daily price rows

Usage:
    from app.schemas import StatisticsRequest, StatisticsResponse
    from app.schemas import StockDataCreate, StockDataResponse
"""

from app.schemas.errors import ErrorDetail, ValidationErrorDetail
from app.schemas.statistics import (
    HoldingInput,
    StatisticsRequest,
    StockStatisticsResponse,
    CorrelationEntryResponse,
    PortfolioStatisticsResponse,
    DateRange,
    DataSummaryResponse,
    StatisticsResponse,
    PredictionPointResponse,
    PredictionResponse,
)
from app.schemas.stock_data import (
    StockDataCreate,
    StockDataResponse,
    StockResponse,
    StockInfoResponse,
)

__all__ = [
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Statistics
    "HoldingInput",
    "StatisticsRequest",
    "StockStatisticsResponse",
    "CorrelationEntryResponse",
    "PortfolioStatisticsResponse",
    "DateRange",
    "DataSummaryResponse",
    "StatisticsResponse",
    # Prediction
    "PredictionPointResponse",
    "PredictionResponse",
    # Stock data
    "StockDataCreate",
    "StockDataResponse",
    "StockResponse",
    "StockInfoResponse",
]
