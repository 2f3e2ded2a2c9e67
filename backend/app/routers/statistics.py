# backend/app/routers/statistics.py
"""
Holdings statistics endpoint.

- POST /statistics - Per-stock metrics, correlation matrix and rollup

The caller sends the holdings (a portfolio's positions or a stock list's
items) with a date range. Holdings without a current_price are valued at
their latest close.
"""

from datetime import date

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_statistics_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from app.schemas.statistics import (
    CorrelationEntryResponse,
    DataSummaryResponse,
    DateRange,
    PortfolioStatisticsResponse,
    StatisticsRequest,
    StatisticsResponse,
    StockStatisticsResponse,
)
from app.services.analytics import (
    CorrelationEntry,
    InstrumentStatistics,
    StatisticsResult,
    StatisticsService,
)
from app.services.constants import MAX_HISTORY_DAYS
from app.services.exceptions import ValidationError

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/statistics",
    tags=["Statistics"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _validate_date_range(start_date: date, end_date: date) -> None:
    """Reject ranges longer than MAX_HISTORY_DAYS. Ordering is checked by the service."""
    date_range_days = (end_date - start_date).days
    if date_range_days > MAX_HISTORY_DAYS:
        max_years = MAX_HISTORY_DAYS // 365
        raise ValidationError(
            f"Date range of {date_range_days} days exceeds maximum of {MAX_HISTORY_DAYS} days ({max_years} years)",
            field="end_date",
        )


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_stock(stock: InstrumentStatistics) -> StockStatisticsResponse:
    metrics = {
        "weight": stock.weight_metric,
        "beta": stock.beta_metric,
        "coefficient_of_variation": stock.coefficient_of_variation_metric,
    }
    return StockStatisticsResponse(
        symbol=stock.symbol,
        weight=stock.weight,
        beta=stock.beta,
        expected_return=stock.expected_return,
        standard_deviation=stock.standard_deviation,
        coefficient_of_variation=stock.coefficient_of_variation,
        data_points=stock.data_points,
        fallbacks={
            name: metric.reason.value
            for name, metric in metrics.items()
            if metric is not None and metric.is_fallback
        },
    )


def _map_correlation(entry: CorrelationEntry) -> CorrelationEntryResponse:
    return CorrelationEntryResponse(
        stock1=entry.symbol_a,
        stock2=entry.symbol_b,
        correlation=entry.correlation,
        covariance=entry.covariance,
        data_points=entry.data_points,
    )


def _map_result(result: StatisticsResult) -> StatisticsResponse:
    return StatisticsResponse(
        stocks=[_map_stock(stock) for stock in result.stocks],
        correlation_matrix=[_map_correlation(entry) for entry in result.correlation_matrix],
        portfolio=PortfolioStatisticsResponse(
            beta=result.portfolio.beta,
            expected_return=result.portfolio.expected_return,
            standard_deviation=result.portfolio.standard_deviation,
            total_value=result.portfolio.total_value,
        ),
        data_summary=DataSummaryResponse(
            date_range=DateRange(
                start=result.data_summary.start_date,
                end=result.data_summary.end_date,
            ),
            data_points=result.data_summary.data_points,
        ),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=StatisticsResponse,
    summary="Compute holdings statistics",
    response_description="Per-stock metrics, pairwise correlations and the holdings rollup",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def compute_statistics(
        request: Request,  # Required for rate limiting
        body: StatisticsRequest,
        service: StatisticsService = Depends(get_statistics_service),
) -> StatisticsResponse:
    """
    Compute risk/return statistics for a set of holdings over a date range.

    Returns:
    - **stocks**: weight, beta, expected return, volatility, CV per stock
    - **correlation_matrix**: correlation and covariance per stock pair
    - **portfolio**: weighted beta and expected return, covariance-based volatility
    - **data_summary**: date range and price points per stock

    Raises **400** if any stock has fewer than 2 prices in the range, and
    **404** if a holding has no current_price and no stored price.
    """
    _validate_date_range(body.start_date, body.end_date)

    holdings = [
        service.price_holding(item.symbol, item.quantity, item.current_price)
        for item in body.holdings
    ]

    result = service.compute_statistics(
        holdings=holdings,
        start_date=body.start_date,
        end_date=body.end_date,
    )

    return _map_result(result)
