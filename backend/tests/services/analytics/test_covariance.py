# backend/tests/services/analytics/test_covariance.py
"""
Unit tests for covariance, correlation and series alignment.

All tests use small series whose statistics can be verified by hand.
"""

import pytest

from app.services.analytics.covariance import (
    PositionalAligner,
    covariance_and_correlation,
    variance,
)
from app.services.analytics.types import Computed, Fallback, FallbackReason


class ReversingAligner:
    """Pairs a[i] with b[n - 1 - i]; used to check the aligner is honored."""

    def align(self, returns_a, returns_b):
        n = min(len(returns_a), len(returns_b))
        return list(returns_a[:n]), list(reversed(returns_b[:n]))


# =============================================================================
# ALIGNMENT
# =============================================================================

class TestPositionalAligner:
    """Tests for the default pairing strategy."""

    def test_truncates_to_shorter(self):
        a, b = PositionalAligner().align([0.1, 0.2, 0.3], [0.5, 0.6])

        assert a == [0.1, 0.2]
        assert b == [0.5, 0.6]

    def test_equal_lengths_unchanged(self):
        a, b = PositionalAligner().align([1.0, 2.0], [3.0, 4.0])

        assert (a, b) == ([1.0, 2.0], [3.0, 4.0])

    def test_empty_side(self):
        assert PositionalAligner().align([], [1.0]) == ([], [])


# =============================================================================
# VARIANCE
# =============================================================================

class TestVariance:
    """Tests for sample variance."""

    def test_known_value(self):
        """mean 0.00667; squared deviations sum to 0.0012667, / 2."""
        assert variance([0.01, -0.02, 0.03]) == pytest.approx(0.000633, abs=1e-6)

    def test_constant_series(self):
        assert variance([0.25, 0.25, 0.25]) == 0.0

    def test_fewer_than_two_values(self):
        assert variance([0.5]) == 0.0
        assert variance([]) == 0.0


# =============================================================================
# COVARIANCE AND CORRELATION
# =============================================================================

class TestCovarianceAndCorrelation:
    """Tests for covariance_and_correlation."""

    def test_perfectly_correlated(self):
        """b = 2a: covariance 2, correlation 1."""
        result = covariance_and_correlation([1.0, 2.0, 3.0], [2.0, 4.0, 6.0])

        assert result.covariance == pytest.approx(2.0)
        assert isinstance(result.correlation, Computed)
        assert result.correlation.value == pytest.approx(1.0)
        assert result.data_points == 3

    def test_perfectly_anticorrelated(self):
        result = covariance_and_correlation([1.0, 2.0, 3.0], [3.0, 2.0, 1.0])

        assert result.covariance == pytest.approx(-1.0)
        assert result.correlation.value == pytest.approx(-1.0)
        assert not result.correlation.is_fallback

    def test_symmetric(self):
        a = [0.01, -0.02, 0.015, 0.0]
        b = [0.02, -0.01, 0.005, 0.01]

        ab = covariance_and_correlation(a, b)
        ba = covariance_and_correlation(b, a)

        assert ab.covariance == pytest.approx(ba.covariance)
        assert ab.correlation.value == pytest.approx(ba.correlation.value)

    def test_self_covariance_is_variance(self):
        a = [0.01, -0.02, 0.03]

        assert covariance_and_correlation(a, a).covariance == pytest.approx(variance(a))

    def test_longer_series_truncated_by_position(self):
        """The trailing 100.0 is dropped; the first three pair up exactly."""
        result = covariance_and_correlation([1.0, 2.0, 3.0, 100.0], [2.0, 4.0, 6.0])

        assert result.data_points == 3
        assert result.correlation.value == pytest.approx(1.0)

    def test_fewer_than_two_overlapping_returns(self):
        result = covariance_and_correlation([0.1], [0.2, 0.3])

        assert result.covariance == 0.0
        assert result.correlation == Fallback(FallbackReason.INSUFFICIENT_OVERLAP, 0.0)
        assert result.data_points == 1

    def test_zero_variance_side(self):
        """A constant series has no correlation; it defaults to 0."""
        result = covariance_and_correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])

        assert result.covariance == 0.0
        assert result.correlation == Fallback(FallbackReason.ZERO_VARIANCE, 0.0)

    def test_custom_aligner_is_used(self):
        """Reversing one side turns a perfect positive relation negative."""
        result = covariance_and_correlation(
            [1.0, 2.0, 3.0],
            [1.0, 2.0, 3.0],
            aligner=ReversingAligner(),
        )

        assert result.correlation.value == pytest.approx(-1.0)
