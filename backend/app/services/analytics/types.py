# backend/app/services/analytics/types.py
"""
Data types for the Analytics Service.

This module defines the data structures used throughout the statistics and
forecast calculations. Everything here is transient: built fresh per request
from externally supplied prices and holdings, never persisted.

Numbers are plain floats. Daily returns are ratios of close prices and the
engine relies on IEEE semantics (NaN/inf from a zero previous close),
which Decimal does not provide.

Architecture:
    - PricePoint: One closing price for one symbol on one day
    - Holding: Instrument + quantity + live price (caller snapshot)
    - Computed / Fallback: Tagged metric values (which branch produced them)
    - CorrelationEntry: Pairwise correlation/covariance
    - InstrumentStatistics: Per-symbol risk/return metrics
    - AggregateStatistics: Portfolio/list-level rollup
    - StatisticsResult: Combined result of a statistics request
    - PredictionPoint / PredictionResult: Trend forecast output
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class PricePoint:
    """
    A single day's closing price for one symbol.

    Attributes:
        date: Trading day
        close_price: Closing price on that day
    """
    date: date
    close_price: float


@dataclass(frozen=True)
class Holding:
    """
    One instrument in a portfolio or stock list, with its live valuation.

    Frozen so that a holdings snapshot cannot change while a multi-symbol
    computation is running.

    Attributes:
        symbol: Stock symbol (e.g., "AAPL")
        quantity: Number of shares held (must be > 0)
        current_price: Latest price used for the value weight
    """
    symbol: str
    quantity: float
    current_price: float

    @property
    def value(self) -> float:
        """Market value of the holding (quantity * current_price)."""
        return self.quantity * self.current_price


# =============================================================================
# TAGGED METRIC VALUES
# =============================================================================

class FallbackReason(str, Enum):
    """
    Why a documented substitute value was used instead of the formula.

    Attributes:
        INSUFFICIENT_OVERLAP: Fewer than 2 overlapping returns
        ZERO_VARIANCE: A variance in a denominator was zero
        ZERO_MEAN: Mean daily return was zero (CV divisor replaced by 1.0)
        ZERO_TOTAL_VALUE: Holdings are worth nothing (weights are 0)
        ZERO_DENOMINATOR: Trend regression had no spread in x
        NON_FINITE_SLOPE: Trend regression produced NaN/inf
        FLAT_TREND: Every fitted price was the same
    """
    INSUFFICIENT_OVERLAP = "insufficient_overlap"
    ZERO_VARIANCE = "zero_variance"
    ZERO_MEAN = "zero_mean"
    ZERO_TOTAL_VALUE = "zero_total_value"
    ZERO_DENOMINATOR = "zero_denominator"
    NON_FINITE_SLOPE = "non_finite_slope"
    FLAT_TREND = "flat_trend"


@dataclass(frozen=True)
class Computed:
    """A metric produced by its formula."""
    value: float

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback:
    """
    A metric replaced by a documented substitute.

    Attributes:
        reason: Which degenerate case was hit
        value: The substitute value that is reported instead
    """
    reason: FallbackReason
    value: float

    @property
    def is_fallback(self) -> bool:
        return True


MetricValue = Computed | Fallback


# =============================================================================
# STATISTICS RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class CovarianceResult:
    """
    Sample covariance and Pearson correlation of two return series.

    Attributes:
        covariance: Sample covariance (n - 1 denominator), 0 if n < 2
        correlation: Tagged correlation (Fallback to 0 on degenerate input)
        data_points: Number of aligned returns used (n)
    """
    covariance: float
    correlation: MetricValue
    data_points: int


@dataclass
class CorrelationEntry:
    """
    Pairwise statistics for one unordered pair of instruments.

    Attributes:
        symbol_a: First symbol (earlier in the holdings order)
        symbol_b: Second symbol
        correlation: Pearson correlation, rounded to 6 dp
        covariance: Daily sample covariance, rounded to 6 dp
        data_points: min(price points of a, price points of b)
        correlation_metric: Which branch produced the correlation
    """
    symbol_a: str
    symbol_b: str
    correlation: float
    covariance: float
    data_points: int
    correlation_metric: MetricValue | None = None


@dataclass
class InstrumentStatistics:
    """
    Risk/return metrics for one instrument.

    All percentages are expressed as decimals (0.08 = 8%).

    Attributes:
        symbol: Stock symbol
        weight: Value weight in the holdings set (0 if total value is 0)
        beta: Beta against the synthesized market series
        expected_return: Mean daily return * 252
        standard_deviation: Daily sample stddev * sqrt(252)
        coefficient_of_variation: Daily stddev / |mean daily return|
        data_points: Number of price points in range
        beta_metric: Which branch produced beta
        coefficient_of_variation_metric: Which branch produced the CV
        weight_metric: Which branch produced the weight
    """
    symbol: str
    weight: float
    beta: float
    expected_return: float
    standard_deviation: float
    coefficient_of_variation: float
    data_points: int
    beta_metric: MetricValue | None = None
    coefficient_of_variation_metric: MetricValue | None = None
    weight_metric: MetricValue | None = None


@dataclass
class AggregateStatistics:
    """
    Portfolio / stock list level rollup.

    Attributes:
        beta: Weighted sum of instrument betas
        expected_return: Weighted sum of instrument expected returns
        standard_deviation: sqrt(w' * Cov * w * 252) on daily covariance
        total_value: Sum of holding values
        variance: Daily portfolio variance (w' * Cov * w), before annualizing
    """
    beta: float
    expected_return: float
    standard_deviation: float
    total_value: float
    variance: float = 0.0


@dataclass
class DataSummary:
    """
    Requested range and price point count per symbol.
    """
    start_date: date
    end_date: date
    data_points: dict[str, int] = field(default_factory=dict)


@dataclass
class StatisticsResult:
    """
    Combined result from a statistics request.

    This is the main response type returned by StatisticsService.
    """
    stocks: list[InstrumentStatistics]
    correlation_matrix: list[CorrelationEntry]
    portfolio: AggregateStatistics
    data_summary: DataSummary


# =============================================================================
# FORECAST TYPES
# =============================================================================

class Trend(str, Enum):
    """Direction of the fitted price trend."""
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class PredictionPoint:
    """A forecast (or anchoring historical) price on a calendar day."""
    date: date
    price: float


@dataclass
class PredictionResult:
    """
    Linear trend forecast for one symbol.

    Attributes:
        symbol: Stock symbol
        predictions: Anchor point (last historical close) followed by the
                     forecast points for days 3..horizon
        last_price: Most recent historical close
        trend: UP if the slope is positive, DOWN otherwise
        slope: Price change per day used for the projection
        slope_metric: Which branch produced the slope
    """
    symbol: str
    predictions: list[PredictionPoint]
    last_price: float
    trend: Trend
    slope: float = 0.0
    slope_metric: MetricValue | None = None
