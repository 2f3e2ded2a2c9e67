# backend/app/services/analytics/benchmark.py
"""
Benchmark comparison functions for the Analytics Service.

There is no external index here: the "market" is synthesized from the
holdings themselves, as a value-weighted average of their daily returns.
Each instrument's beta is then measured against that synthetic market.

- Market returns: value-weighted average return per day
- Beta: Systematic risk relative to the synthesized market

No external dependencies (scipy, numpy) - pure Python only.

Formulas:
    market_i = Σ_s w_s * r_s,i / Σ_s w_s        for i < min_s len(r_s)

    Beta = Cov(R_s, R_m) / Var(R_m)
"""

import logging
from collections.abc import Mapping, Sequence

from app.services.analytics.covariance import (
    POSITIONAL_ALIGNER,
    SeriesAligner,
    covariance_and_correlation,
    variance,
)
from app.services.analytics.types import (
    Computed,
    Fallback,
    FallbackReason,
    MetricValue,
)
from app.services.constants import MIN_OVERLAPPING_RETURNS

logger = logging.getLogger(__name__)


# =============================================================================
# MARKET RETURNS
# =============================================================================

def synthesize_market_returns(
        returns_by_symbol: Mapping[str, Sequence[float]],
        weights: Mapping[str, float],
) -> list[float]:
    """
    Build a value-weighted "market" daily return series from the holdings.

    For each day index i below the shortest series length:
        market[i] = Σ weight[s] * returns[s][i] / Σ weight[s]

    The division renormalizes the weights over the symbols present, so a
    symbol without a weight entry contributes 0 and does not distort the
    average. A day whose total weight is 0 gets a market return of 0.0.

    Args:
        returns_by_symbol: Daily return series per symbol
        weights: Value weight per symbol (missing symbol = weight 0)

    Returns:
        Synthesized market return series, or [] if there are no symbols or
        the shortest series has fewer than 2 returns
    """
    if not returns_by_symbol:
        return []

    n = min(len(returns) for returns in returns_by_symbol.values())
    if n < MIN_OVERLAPPING_RETURNS:
        return []

    market_returns = []
    for i in range(n):
        weighted_return = 0.0
        total_weight = 0.0

        for symbol, returns in returns_by_symbol.items():
            weight = weights.get(symbol, 0.0)
            weighted_return += returns[i] * weight
            total_weight += weight

        # Zero or NaN total weight gives a 0 market day
        market_returns.append(weighted_return / total_weight if total_weight > 0 else 0.0)

    return market_returns


# =============================================================================
# BETA
# =============================================================================

def calculate_beta(
        instrument_returns: Sequence[float],
        market_returns: Sequence[float],
        aligner: SeriesAligner = POSITIONAL_ALIGNER,
) -> MetricValue:
    """
    Calculate Beta (systematic risk) against the synthesized market.

    Beta measures how much the instrument moves relative to the market.

    Formula: β = Cov(R_s, R_m) / Var(R_m)

    Both series are aligned the same way as for covariance (truncate to the
    shorter length, pair by index).

    Interpretation:
        β > 1: More volatile than market
        β < 1: Less volatile than market
        β = 1: Moves exactly with market
        β < 0: Moves opposite to market (rare)

    Args:
        instrument_returns: Daily returns of one instrument
        market_returns: Synthesized market daily returns

    Returns:
        Computed(beta), or Fallback(..., 0.0) when fewer than 2 returns
        overlap or the market has zero variance
    """
    aligned_instrument, aligned_market = aligner.align(instrument_returns, market_returns)

    if len(aligned_instrument) < MIN_OVERLAPPING_RETURNS:
        return Fallback(FallbackReason.INSUFFICIENT_OVERLAP, 0.0)

    market_variance = variance(aligned_market)
    if market_variance == 0:
        logger.debug("Market variance is zero, beta defaults to 0")
        return Fallback(FallbackReason.ZERO_VARIANCE, 0.0)

    covariance = covariance_and_correlation(
        aligned_instrument,
        aligned_market,
        aligner=aligner,
    ).covariance

    return Computed(covariance / market_variance)
