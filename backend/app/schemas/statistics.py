# backend/app/schemas/statistics.py
"""
Pydantic schemas for the Statistics and Prediction APIs.

Design decisions:
- Numeric values are JSON numbers (floats), not strings; the engine works in floats
- Ratios are decimals (0.08 = 8%), frontend formats for display
- NaN / inf (e.g. weights of a zero-value holdings set) are serialized as null
- Correlation pairs use the keys stock1 / stock2 expected by existing clients
- Fallback reasons are exposed per metric so clients can tell a real 0 from a substitute
"""

import math
from datetime import date
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from app.services.constants import MAX_HOLDINGS


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


# Float that serializes NaN / inf as null
ReportedFloat = Annotated[float | None, PlainSerializer(_finite_or_none, return_type=float | None)]


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class HoldingInput(BaseModel):
    """One instrument in a statistics request."""

    symbol: str = Field(..., min_length=1, max_length=10, description="Stock symbol (e.g., 'AAPL')")
    quantity: float = Field(..., gt=0, description="Number of shares held")
    current_price: float | None = Field(
        default=None,
        ge=0,
        description="Price used for the value weight (default: latest close)",
    )

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()


class StatisticsRequest(BaseModel):
    """Holdings and date range for a statistics computation."""

    holdings: list[HoldingInput] = Field(..., min_length=1, max_length=MAX_HOLDINGS)
    start_date: date = Field(..., description="First day of the price window (inclusive)")
    end_date: date = Field(..., description="Last day of the price window (inclusive)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "holdings": [
                    {"symbol": "AAPL", "quantity": 10, "current_price": 190.5},
                    {"symbol": "MSFT", "quantity": 5},
                ],
                "start_date": "2024-01-01",
                "end_date": "2024-06-30",
            }
        }
    )


# =============================================================================
# STATISTICS RESPONSE SCHEMAS
# =============================================================================

class StockStatisticsResponse(BaseModel):
    """Per-instrument risk/return metrics."""

    symbol: str
    weight: ReportedFloat = Field(..., description="Value weight (0 if total value is 0)")
    beta: ReportedFloat = Field(..., description="Beta against the holdings-weighted market")
    expected_return: ReportedFloat = Field(..., description="Mean daily return x 252")
    standard_deviation: ReportedFloat = Field(..., description="Daily stdev x sqrt(252)")
    coefficient_of_variation: ReportedFloat = Field(..., description="Daily stdev / |mean daily return|")
    data_points: int = Field(..., description="Closing prices in range")
    fallbacks: dict[str, str] = Field(
        default_factory=dict,
        description="Metric name -> reason, for metrics that carry a substitute value",
    )


class CorrelationEntryResponse(BaseModel):
    """Pairwise co-movement of two instruments."""

    stock1: str
    stock2: str
    correlation: ReportedFloat
    covariance: ReportedFloat
    data_points: int = Field(..., description="min(data points of stock1, stock2)")


class PortfolioStatisticsResponse(BaseModel):
    """Holdings-level rollup."""

    beta: ReportedFloat
    expected_return: ReportedFloat
    standard_deviation: ReportedFloat
    total_value: ReportedFloat


class DateRange(BaseModel):
    start: date
    end: date


class DataSummaryResponse(BaseModel):
    date_range: DateRange
    data_points: dict[str, int]


class StatisticsResponse(BaseModel):
    """Full statistics response."""

    stocks: list[StockStatisticsResponse]
    correlation_matrix: list[CorrelationEntryResponse]
    portfolio: PortfolioStatisticsResponse
    data_summary: DataSummaryResponse


# =============================================================================
# PREDICTION RESPONSE SCHEMAS
# =============================================================================

class PredictionPointResponse(BaseModel):
    date: date
    price: ReportedFloat


class PredictionResponse(BaseModel):
    """Linear trend forecast for one symbol."""

    symbol: str
    predictions: list[PredictionPointResponse] = Field(
        ...,
        description="Last historical close, then forecast days 3..days",
    )
    last_price: ReportedFloat
    trend: str = Field(..., description="'up' or 'down'")
