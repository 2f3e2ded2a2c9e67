# backend/app/services/analytics/returns.py
"""
Return calculation functions for the Analytics Service.

This module contains pure functions that turn a closing-price series into
daily returns and summarize them:
- Simple daily returns: (P_t - P_{t-1}) / P_{t-1}
- Mean daily return
- Sample standard deviation (n - 1 denominator)

All functions are stateless. No external dependencies (scipy, numpy) - pure Python only.

Formulas:
    r_i = (close[i+1] - close[i]) / close[i]          (len = len(prices) - 1)

    mean = Σ r_i / n

    stdev = sqrt(Σ (r_i - mean)² / (n - 1))
"""

import logging
import math
from collections.abc import Sequence

from app.services.analytics.types import PricePoint
from app.services.constants import MIN_PRICE_POINTS
from app.services.exceptions import InsufficientDataError

logger = logging.getLogger(__name__)


# =============================================================================
# SIMPLE DAILY RETURNS
# =============================================================================

def _simple_return(previous: float, current: float) -> float:
    """
    One simple return with IEEE semantics for a zero previous close.

    A zero close cannot come from a real market, but stored data is not
    validated. Instead of raising ZeroDivisionError the result is inf/NaN,
    which then propagates through the statistics like any other bad input.
    """
    change = current - previous
    if previous == 0:
        if change == 0:
            return math.nan
        return math.copysign(math.inf, change)
    return change / previous


def calculate_simple_returns(
        prices: Sequence[PricePoint],
        symbol: str | None = None,
) -> list[float]:
    """
    Convert an ascending closing-price series into simple daily returns.

    Formula: r_i = (close[i+1] - close[i]) / close[i]

    The output keeps the input ordering and has exactly len(prices) - 1
    elements. Trading-day gaps are not filled: a return spans whatever two
    consecutive rows were stored.

    Args:
        prices: PricePoints sorted by date ascending (minimum 2)
        symbol: Symbol the prices belong to (used for the error details)

    Returns:
        List of daily returns as decimals (0.01 = 1%)

    Raises:
        InsufficientDataError: If fewer than 2 prices are supplied

    Example:
        >>> prices = [PricePoint(d1, 100.0), PricePoint(d2, 110.0), PricePoint(d3, 99.0)]
        >>> calculate_simple_returns(prices)
        [0.1, -0.1]
    """
    if len(prices) < MIN_PRICE_POINTS:
        raise InsufficientDataError({symbol or "series": len(prices)})

    return [
        _simple_return(prices[i].close_price, prices[i + 1].close_price)
        for i in range(len(prices) - 1)
    ]


# =============================================================================
# SUMMARY STATISTICS
# =============================================================================

def mean_return(returns: Sequence[float]) -> float:
    """
    Arithmetic mean of daily returns.

    Returns:
        Mean, or 0.0 for an empty series
    """
    if not returns:
        return 0.0
    return sum(returns) / len(returns)


def sample_std(returns: Sequence[float]) -> float:
    """
    Sample standard deviation (Bessel-corrected, n - 1 denominator).

    A single return has no spread that can be estimated, so 0.0 is
    returned for n < 2, matching variance() in the covariance module.

    Args:
        returns: Daily returns

    Returns:
        Standard deviation, 0.0 if fewer than 2 returns
    """
    n = len(returns)
    if n < 2:
        return 0.0

    mean_val = mean_return(returns)
    squared_diffs = sum((r - mean_val) ** 2 for r in returns)
    return math.sqrt(squared_diffs / (n - 1))


def annualize_mean(mean_daily: float, periods: int) -> float:
    """Scale a mean daily return to an annual figure (mean * periods)."""
    return mean_daily * periods


def annualize_std(std_daily: float, periods: int) -> float:
    """Scale a daily standard deviation to an annual figure (std * √periods)."""
    return std_daily * math.sqrt(periods)
