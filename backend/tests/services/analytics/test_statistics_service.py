# backend/tests/services/analytics/test_statistics_service.py
"""
Tests for StatisticsService against an in-memory price history store.

Prices are chosen so every metric can be worked out by hand:
- 100 -> 110 -> 99 gives returns [+0.1, -0.1] (mean exactly 0)
- 100 -> 90 -> 99 gives returns [-0.1, +0.1] (the mirror image)
"""

import math
from datetime import date

import pytest

from app.services.analytics import (
    Computed,
    Fallback,
    FallbackReason,
    Holding,
    StatisticsService,
    calculate_coefficient_of_variation,
    calculate_weights,
)
from app.services.exceptions import (
    InsufficientDataError,
    PriceHistoryNotFoundError,
    ValidationError,
)

START = date(2024, 1, 1)
END = date(2024, 1, 31)

# sqrt(0.02) * sqrt(252)
UP_DOWN_ANNUAL_STD = math.sqrt(0.02 * 252)


@pytest.fixture
def service(price_store) -> StatisticsService:
    return StatisticsService(price_store)


# =============================================================================
# HELPER FUNCTION TESTS
# =============================================================================

class TestCalculateWeights:
    """Tests for value weights."""

    def test_weights_sum_to_one(self):
        total, weights = calculate_weights([
            Holding("A", 10, 30.0),
            Holding("B", 10, 70.0),
        ])

        assert total == 1000.0
        assert isinstance(weights["A"], Computed)
        assert weights["A"].value == pytest.approx(0.3)
        assert weights["B"].value == pytest.approx(0.7)

    def test_zero_total_value(self):
        """Weights default to 0, tagged as a fallback."""
        total, weights = calculate_weights([
            Holding("A", 10, 0.0),
            Holding("B", 5, 0.0),
        ])

        assert total == 0.0
        for metric in weights.values():
            assert isinstance(metric, Fallback)
            assert metric.reason == FallbackReason.ZERO_TOTAL_VALUE
            assert metric.value == 0.0


class TestCoefficientOfVariation:
    """Tests for the CV helper."""

    def test_regular(self):
        assert calculate_coefficient_of_variation(0.01, 0.02).value == pytest.approx(2.0)

    def test_negative_mean_uses_absolute_value(self):
        assert calculate_coefficient_of_variation(-0.01, 0.02).value == pytest.approx(2.0)

    def test_zero_mean_divides_by_one(self):
        """CV of a zero-mean series equals its standard deviation."""
        cv = calculate_coefficient_of_variation(0.0, 0.05)

        assert cv == Fallback(FallbackReason.ZERO_MEAN, 0.05)


# =============================================================================
# PRICE HOLDING TESTS
# =============================================================================

class TestPriceHolding:
    """Tests for StatisticsService.price_holding."""

    def test_explicit_price_is_kept(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 105.0])

        holding = service.price_holding("AAPL", 10, current_price=200.0)

        assert holding == Holding("AAPL", 10, 200.0)

    def test_missing_price_uses_latest_close(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 105.0])

        holding = service.price_holding("AAPL", 10)

        assert holding.current_price == 105.0
        assert holding.value == 1050.0

    def test_no_price_anywhere(self, service):
        with pytest.raises(PriceHistoryNotFoundError):
            service.price_holding("NOPE", 10)


# =============================================================================
# COMPUTE STATISTICS TESTS
# =============================================================================

class TestComputeStatisticsSingleStock:
    """A single holding is its own market."""

    def test_metrics(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 110.0, 99.0])

        result = service.compute_statistics([Holding("AAPL", 10, 99.0)], START, END)

        stock = result.stocks[0]
        assert stock.symbol == "AAPL"
        assert stock.weight == 1.0
        assert stock.beta == pytest.approx(1.0)
        assert stock.expected_return == 0.0
        assert stock.standard_deviation == pytest.approx(UP_DOWN_ANNUAL_STD, abs=1e-6)
        assert stock.data_points == 3

    def test_zero_mean_cv_is_daily_std(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 110.0, 99.0])

        result = service.compute_statistics([Holding("AAPL", 10, 99.0)], START, END)

        stock = result.stocks[0]
        assert stock.coefficient_of_variation == pytest.approx(math.sqrt(0.02), abs=1e-6)
        assert stock.coefficient_of_variation_metric.reason == FallbackReason.ZERO_MEAN

    def test_portfolio_equals_stock(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 110.0, 99.0])

        result = service.compute_statistics([Holding("AAPL", 10, 99.0)], START, END)

        assert result.portfolio.beta == pytest.approx(1.0)
        assert result.portfolio.expected_return == 0.0
        assert result.portfolio.standard_deviation == pytest.approx(UP_DOWN_ANNUAL_STD, abs=1e-6)
        assert result.portfolio.total_value == 990.0
        assert result.correlation_matrix == []

    def test_results_are_rounded(self, service, price_store):
        price_store.add_prices("AAPL", [100.0, 101.3, 99.7, 102.9])

        result = service.compute_statistics([Holding("AAPL", 3, 33.333)], START, END)

        stock = result.stocks[0]
        for value in (stock.beta, stock.expected_return, stock.standard_deviation,
                      stock.coefficient_of_variation):
            assert value == round(value, 6)
        assert result.portfolio.total_value == 100.0


class TestComputeStatisticsTwoStocks:
    """Two holdings: weights, correlations and the covariance rollup."""

    def test_weights_and_total_value(self, service, price_store):
        price_store.add_prices("A", [100.0, 110.0, 99.0])
        price_store.add_prices("B", [100.0, 90.0, 99.0])

        result = service.compute_statistics(
            [Holding("A", 10, 30.0), Holding("B", 10, 70.0)],
            START,
            END,
        )

        assert [s.symbol for s in result.stocks] == ["A", "B"]
        assert result.stocks[0].weight == pytest.approx(0.3)
        assert result.stocks[1].weight == pytest.approx(0.7)
        assert result.portfolio.total_value == 1000.0

    def test_mirror_images_are_anticorrelated(self, service, price_store):
        price_store.add_prices("A", [100.0, 110.0, 99.0])
        price_store.add_prices("B", [100.0, 90.0, 99.0])

        result = service.compute_statistics(
            [Holding("A", 10, 50.0), Holding("B", 10, 50.0)],
            START,
            END,
        )

        assert len(result.correlation_matrix) == 1
        entry = result.correlation_matrix[0]
        assert (entry.symbol_a, entry.symbol_b) == ("A", "B")
        assert entry.correlation == pytest.approx(-1.0)
        assert entry.covariance == pytest.approx(-0.02)
        assert entry.data_points == 3

    def test_perfect_hedge(self, service, price_store):
        """Equal weights on mirror images: flat market, zero portfolio risk."""
        price_store.add_prices("A", [100.0, 110.0, 99.0])
        price_store.add_prices("B", [100.0, 90.0, 99.0])

        result = service.compute_statistics(
            [Holding("A", 10, 50.0), Holding("B", 10, 50.0)],
            START,
            END,
        )

        for stock in result.stocks:
            assert stock.beta == 0.0
            assert stock.beta_metric == Fallback(FallbackReason.ZERO_VARIANCE, 0.0)
        assert result.portfolio.beta == 0.0
        assert result.portfolio.standard_deviation == pytest.approx(0.0, abs=1e-9)

    def test_portfolio_is_weighted_sum(self, service, price_store):
        price_store.add_prices("A", [100.0, 102.0, 101.0, 105.0, 104.0])
        price_store.add_prices("B", [50.0, 50.5, 51.5, 51.0, 52.5])

        result = service.compute_statistics(
            [Holding("A", 1, 25.0), Holding("B", 3, 25.0)],
            START,
            END,
        )

        a, b = result.stocks
        assert result.portfolio.beta == pytest.approx(
            0.25 * a.beta + 0.75 * b.beta, abs=1e-5
        )
        assert result.portfolio.expected_return == pytest.approx(
            0.25 * a.expected_return + 0.75 * b.expected_return, abs=1e-5
        )

    def test_different_lengths_data_points(self, service, price_store):
        price_store.add_prices("A", [100.0, 101.0, 102.0, 103.0])
        price_store.add_prices("B", [10.0, 11.0, 10.5])

        result = service.compute_statistics(
            [Holding("A", 1, 100.0), Holding("B", 1, 10.0)],
            START,
            END,
        )

        assert result.data_summary.data_points == {"A": 4, "B": 3}
        assert result.correlation_matrix[0].data_points == 3


    def test_identical_movers(self, service, price_store):
        """Daily returns [0.01, 0.02, -0.01] for both, weighted 0.6 / 0.4."""
        closes = [100.0, 101.0, 103.02, 101.9898]
        price_store.add_prices("A", closes)
        price_store.add_prices("B", closes)

        result = service.compute_statistics(
            [Holding("A", 6, 1.0), Holding("B", 4, 1.0)],
            START,
            END,
        )

        a, b = result.stocks
        assert a.weight == pytest.approx(0.6)
        assert b.weight == pytest.approx(0.4)
        assert result.correlation_matrix[0].correlation == pytest.approx(1.0)
        assert a.beta == pytest.approx(1.0)
        assert b.beta == pytest.approx(1.0)
        assert result.portfolio.beta == pytest.approx(1.0)
        assert a.standard_deviation == pytest.approx(
            math.sqrt(((0.01 - 1 / 150) ** 2 + (0.02 - 1 / 150) ** 2 + (-0.01 - 1 / 150) ** 2) / 2)
            * math.sqrt(252),
            abs=1e-6,
        )
        assert result.portfolio.standard_deviation == pytest.approx(a.standard_deviation, abs=1e-6)

    def test_exactly_two_prices_each(self, service, price_store):
        price_store.add_prices("A", [100.0, 110.0])
        price_store.add_prices("B", [50.0, 45.0])

        result = service.compute_statistics(
            [Holding("A", 1, 1.0), Holding("B", 1, 1.0)],
            START,
            END,
        )

        assert result.data_summary.data_points == {"A": 2, "B": 2}
        a, b = result.stocks
        assert a.data_points == 2
        assert a.expected_return == pytest.approx(0.1 * 252)
        assert b.expected_return == pytest.approx(-0.1 * 252)
        # One return each: no spread to measure
        assert a.standard_deviation == 0.0
        assert result.correlation_matrix[0].data_points == 2


class TestComputeStatisticsMatrix:
    """Correlation matrix layout."""

    def test_one_entry_per_pair_in_holdings_order(self, service, price_store):
        price_store.add_prices("C", [10.0, 11.0, 12.5])
        price_store.add_prices("A", [20.0, 19.0, 21.0])
        price_store.add_prices("B", [30.0, 30.5, 29.0])

        result = service.compute_statistics(
            [Holding("C", 1, 1.0), Holding("A", 1, 1.0), Holding("B", 1, 1.0)],
            START,
            END,
        )

        pairs = [(e.symbol_a, e.symbol_b) for e in result.correlation_matrix]
        assert pairs == [("C", "A"), ("C", "B"), ("A", "B")]

    def test_correlations_are_bounded(self, service, price_store):
        price_store.add_prices("A", [100.0, 102.0, 101.0, 105.0, 104.0])
        price_store.add_prices("B", [50.0, 50.5, 51.5, 51.0, 52.5])
        price_store.add_prices("C", [10.0, 9.0, 9.5, 9.2, 9.9])

        result = service.compute_statistics(
            [Holding("A", 1, 1.0), Holding("B", 1, 1.0), Holding("C", 1, 1.0)],
            START,
            END,
        )

        assert len(result.correlation_matrix) == 3
        for entry in result.correlation_matrix:
            assert -1.0 <= entry.correlation <= 1.0


class TestComputeStatisticsDegenerate:
    """Degenerate input is reported, not raised."""

    def test_zero_total_value_rolls_up_to_zero(self, service, price_store):
        price_store.add_prices("A", [100.0, 110.0, 99.0])
        price_store.add_prices("B", [100.0, 101.0, 103.0])

        result = service.compute_statistics(
            [Holding("A", 10, 0.0), Holding("B", 5, 0.0)],
            START,
            END,
        )

        for stock in result.stocks:
            assert stock.weight == 0.0
            assert stock.weight_metric.reason == FallbackReason.ZERO_TOTAL_VALUE
            # The synthesized market is all zeros
            assert stock.beta_metric.reason == FallbackReason.ZERO_VARIANCE
            assert stock.beta == 0.0
            assert math.isfinite(stock.expected_return)
            assert math.isfinite(stock.standard_deviation)
        assert result.portfolio.beta == 0.0
        assert result.portfolio.expected_return == 0.0
        assert result.portfolio.standard_deviation == 0.0
        assert result.portfolio.total_value == 0.0

    def test_constant_prices(self, service, price_store):
        price_store.add_prices("A", [100.0, 100.0, 100.0])

        result = service.compute_statistics([Holding("A", 1, 100.0)], START, END)

        stock = result.stocks[0]
        assert stock.standard_deviation == 0.0
        assert stock.coefficient_of_variation == 0.0
        assert stock.beta == 0.0


class TestComputeStatisticsDateRange:
    """Only prices inside [start, end] are used."""

    def test_prices_outside_range_are_ignored(self, service, price_store):
        price_store.add_prices("A", [1.0, 2.0, 100.0, 110.0, 99.0, 500.0], start=date(2024, 1, 1))

        result = service.compute_statistics(
            [Holding("A", 1, 1.0)],
            date(2024, 1, 3),
            date(2024, 1, 5),
        )

        assert result.stocks[0].data_points == 3
        assert result.stocks[0].expected_return == 0.0
        assert result.data_summary.start_date == date(2024, 1, 3)
        assert result.data_summary.end_date == date(2024, 1, 5)

    def test_single_day_range(self, service, price_store):
        """start == end is valid but yields at most one price."""
        price_store.add_prices("A", [100.0, 101.0])

        with pytest.raises(InsufficientDataError):
            service.compute_statistics([Holding("A", 1, 1.0)], START, START)


class TestComputeStatisticsErrors:
    """Preconditions and insufficient data."""

    def test_insufficient_data_reports_every_symbol(self, service, price_store):
        price_store.add_prices("A", [100.0, 101.0, 102.0])
        price_store.add_prices("B", [50.0])

        with pytest.raises(InsufficientDataError) as exc_info:
            service.compute_statistics(
                [Holding("A", 1, 1.0), Holding("B", 1, 1.0), Holding("C", 1, 1.0)],
                START,
                END,
            )

        error = exc_info.value
        assert error.data_points == {"A": 3, "B": 1, "C": 0}
        assert error.insufficient_symbols == ["B", "C"]
        assert error.start_date == START
        assert error.end_date == END

    def test_all_symbols_fetched_before_failing(self, service, price_store):
        price_store.add_prices("B", [50.0, 51.0])

        with pytest.raises(InsufficientDataError):
            service.compute_statistics([Holding("A", 1, 1.0), Holding("B", 1, 1.0)], START, END)

        assert [call[0] for call in price_store.calls] == ["A", "B"]

    def test_inverted_date_range(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.compute_statistics([Holding("A", 1, 1.0)], END, START)

        assert exc_info.value.field == "start_date"

    def test_no_holdings(self, service):
        with pytest.raises(ValidationError):
            service.compute_statistics([], START, END)

    def test_non_positive_quantity(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.compute_statistics([Holding("A", 0, 1.0)], START, END)

        assert exc_info.value.field == "quantity"

    def test_duplicate_symbol(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.compute_statistics(
                [Holding("A", 1, 1.0), Holding("A", 2, 1.0)],
                START,
                END,
            )

        assert exc_info.value.field == "symbol"

    def test_validation_runs_before_any_fetch(self, service, price_store):
        with pytest.raises(ValidationError):
            service.compute_statistics([Holding("A", -1, 1.0)], START, END)

        assert price_store.calls == []
