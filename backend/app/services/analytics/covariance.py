# backend/app/services/analytics/covariance.py
"""
Covariance and correlation functions for the Analytics Service.

This module pairs two daily-return series and computes:
- Sample covariance (n - 1 denominator)
- Pearson correlation
- Sample variance of a single series

No external dependencies (scipy, numpy) - pure Python only.

Alignment:
    Two return series are paired by POSITION, not by calendar date: both are
    truncated to the shorter length and element i of one is matched with
    element i of the other. Instruments with different listing dates or data
    gaps therefore compare mismatched days. Existing callers depend on these
    numbers, so the behavior is kept, but it lives behind the SeriesAligner
    protocol so a date-indexed aligner can be passed in instead.

Formulas:
    Cov(a, b) = Σ (a_i - mean_a)(b_i - mean_b) / (n - 1)

    Var(a) = Σ (a_i - mean_a)² / (n - 1)

    Corr(a, b) = Cov(a, b) / sqrt(Var(a) * Var(b))

Degenerate input is not an error:
    n < 2            -> covariance 0, correlation Fallback(INSUFFICIENT_OVERLAP, 0)
    Var(a) or Var(b) == 0 -> correlation Fallback(ZERO_VARIANCE, 0)
"""

import logging
import math
from collections.abc import Sequence
from typing import Protocol

from app.services.analytics.types import (
    Computed,
    CovarianceResult,
    Fallback,
    FallbackReason,
)
from app.services.constants import MIN_OVERLAPPING_RETURNS

logger = logging.getLogger(__name__)


# =============================================================================
# SERIES ALIGNMENT
# =============================================================================

class SeriesAligner(Protocol):
    """Pairs two return series element by element before any statistic is taken."""

    def align(
            self,
            returns_a: Sequence[float],
            returns_b: Sequence[float],
    ) -> tuple[list[float], list[float]]:
        ...


class PositionalAligner:
    """
    Truncate both series to the shorter length and pair by index.

    Example:
        >>> PositionalAligner().align([0.1, 0.2, 0.3], [0.5, 0.6])
        ([0.1, 0.2], [0.5, 0.6])
    """

    def align(
            self,
            returns_a: Sequence[float],
            returns_b: Sequence[float],
    ) -> tuple[list[float], list[float]]:
        n = min(len(returns_a), len(returns_b))
        return list(returns_a[:n]), list(returns_b[:n])


POSITIONAL_ALIGNER = PositionalAligner()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _sample_covariance(x: Sequence[float], y: Sequence[float]) -> float:
    """Covariance of two already aligned series of equal length n >= 2."""
    mean_x = _mean(x)
    mean_y = _mean(y)

    cov = sum((x[i] - mean_x) * (y[i] - mean_y) for i in range(len(x)))
    return cov / (len(x) - 1)


# =============================================================================
# VARIANCE
# =============================================================================

def variance(returns: Sequence[float]) -> float:
    """
    Sample variance of a return series (n - 1 denominator).

    Args:
        returns: Daily returns

    Returns:
        Variance, or 0.0 when fewer than 2 values exist (empty input included)

    Example:
        >>> round(variance([0.01, -0.02, 0.03]), 6)
        0.000633
    """
    if len(returns) < MIN_OVERLAPPING_RETURNS:
        return 0.0

    return _sample_covariance(returns, returns)


# =============================================================================
# COVARIANCE & CORRELATION
# =============================================================================

def covariance_and_correlation(
        returns_a: Sequence[float],
        returns_b: Sequence[float],
        aligner: SeriesAligner = POSITIONAL_ALIGNER,
) -> CovarianceResult:
    """
    Calculate sample covariance and Pearson correlation of two return series.

    The series are aligned first (positionally by default), then:
        covariance = Σ(a_i - mean_a)(b_i - mean_b) / (n - 1)
        correlation = covariance / sqrt(var_a * var_b)

    Values are returned unrounded; rounding happens at the API boundary.

    Args:
        returns_a: First return series
        returns_b: Second return series
        aligner: Pairing strategy (default: truncate to shorter, pair by index)

    Returns:
        CovarianceResult with the covariance, the tagged correlation and the
        number of aligned returns used
    """
    aligned_a, aligned_b = aligner.align(returns_a, returns_b)
    n = len(aligned_a)

    if n < MIN_OVERLAPPING_RETURNS:
        return CovarianceResult(
            covariance=0.0,
            correlation=Fallback(FallbackReason.INSUFFICIENT_OVERLAP, 0.0),
            data_points=n,
        )

    covariance = _sample_covariance(aligned_a, aligned_b)
    var_a = _sample_covariance(aligned_a, aligned_a)
    var_b = _sample_covariance(aligned_b, aligned_b)

    if var_a == 0 or var_b == 0:
        logger.debug("Zero variance in correlation input, correlation defaults to 0")
        return CovarianceResult(
            covariance=covariance,
            correlation=Fallback(FallbackReason.ZERO_VARIANCE, 0.0),
            data_points=n,
        )

    correlation = covariance / math.sqrt(var_a * var_b)

    return CovarianceResult(
        covariance=covariance,
        correlation=Computed(correlation),
        data_points=n,
    )
