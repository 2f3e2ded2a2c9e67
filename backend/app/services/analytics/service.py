# backend/app/services/analytics/service.py
"""
Statistics Service orchestrator.

This is the main entry point for holdings statistics. It:
1. Fetches closing prices per symbol from the price history store
2. Rejects the request if any symbol has fewer than 2 prices in range
3. Converts prices to daily returns
4. Derives value weights and a synthesized market return series
5. Delegates to the calculators for per-instrument metrics
6. Aggregates weights, betas and the covariance matrix into a rollup

Architecture:
    StatisticsService
        ├── uses → PriceHistoryStoreProtocol (get_prices, get_latest_price)
        ├── uses → returns.py (daily returns, mean, stdev)
        ├── uses → covariance.py (covariance / correlation)
        └── uses → benchmark.py (market synthesis, beta)

Permissive numerics:
    InsufficientDataError is the only failure raised once the inputs are
    valid. Zero variance, zero mean and zero total value are covered by
    documented substitutes (tagged Fallback values) so existing callers
    always get a full result.

Usage:
    from app.services.analytics import StatisticsService

    service = StatisticsService(price_store)

    result = service.compute_statistics(
        holdings=[Holding("AAPL", 10, 190.0), Holding("MSFT", 5, 410.0)],
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
    )

    print(f"Portfolio beta: {result.portfolio.beta}")
"""

import logging
import math
from collections.abc import Sequence
from datetime import date

from app.services.analytics.benchmark import calculate_beta, synthesize_market_returns
from app.services.analytics.covariance import (
    POSITIONAL_ALIGNER,
    SeriesAligner,
    covariance_and_correlation,
)
from app.services.analytics.returns import (
    annualize_mean,
    annualize_std,
    calculate_simple_returns,
    mean_return,
    sample_std,
)
from app.services.analytics.types import (
    AggregateStatistics,
    Computed,
    CorrelationEntry,
    DataSummary,
    Fallback,
    FallbackReason,
    Holding,
    InstrumentStatistics,
    MetricValue,
    PricePoint,
    StatisticsResult,
)
from app.services.constants import (
    MIN_PRICE_POINTS,
    STATISTICS_DECIMAL_PLACES,
    TRADING_DAYS_PER_YEAR,
    VALUE_DECIMAL_PLACES,
    ZERO_MEAN_CV_DIVISOR,
)
from app.services.exceptions import (
    InsufficientDataError,
    PriceHistoryNotFoundError,
    ValidationError,
)
from app.services.protocols import PriceHistoryStoreProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _round(value: float, places: int = STATISTICS_DECIMAL_PLACES) -> float:
    """Round for the API boundary; NaN and inf pass through unchanged."""
    if not math.isfinite(value):
        return value
    return round(value, places)


def _sqrt_or_nan(value: float) -> float:
    """Square root that yields NaN for negative input instead of raising."""
    if math.isnan(value) or value < 0:
        return math.nan
    return math.sqrt(value)


def calculate_weights(holdings: Sequence[Holding]) -> tuple[float, dict[str, MetricValue]]:
    """
    Calculate total value and the value weight of each holding.

    Formula: weight = quantity * current_price / Σ(quantity * current_price)

    Args:
        holdings: Holdings snapshot

    Returns:
        Tuple of (total_value, {symbol: weight}). When the total value is 0
        every weight is Fallback(ZERO_TOTAL_VALUE, 0.0), so the market series,
        betas and the rollup all collapse to 0 instead of going undefined.
    """
    total_value = sum(holding.value for holding in holdings)

    if total_value == 0:
        logger.warning("Holdings have zero total value, weights default to 0")
        return total_value, {
            holding.symbol: Fallback(FallbackReason.ZERO_TOTAL_VALUE, 0.0)
            for holding in holdings
        }

    return total_value, {
        holding.symbol: Computed(holding.value / total_value)
        for holding in holdings
    }


def calculate_coefficient_of_variation(mean_daily: float, std_daily: float) -> MetricValue:
    """
    Coefficient of variation: daily volatility per unit of mean daily return.

    Formula: CV = σ / |μ|

    A zero mean is replaced by 1.0 (not a small epsilon), so the CV of a
    zero-mean series equals its standard deviation.
    """
    if mean_daily == 0:
        return Fallback(FallbackReason.ZERO_MEAN, std_daily / ZERO_MEAN_CV_DIVISOR)
    return Computed(std_daily / abs(mean_daily))


def calculate_portfolio_variance(
        symbols: Sequence[str],
        returns_by_symbol: dict[str, list[float]],
        weights: dict[str, float],
        aligner: SeriesAligner = POSITIONAL_ALIGNER,
) -> float:
    """
    Daily portfolio variance from the full covariance matrix.

    Formula: σ²_p = Σ_i Σ_j w_i * w_j * Cov(r_i, r_j)

    Uses raw daily covariances (not rounded, not annualized).
    """
    portfolio_variance = 0.0
    for symbol_i in symbols:
        for symbol_j in symbols:
            covariance = covariance_and_correlation(
                returns_by_symbol[symbol_i],
                returns_by_symbol[symbol_j],
                aligner=aligner,
            ).covariance
            portfolio_variance += weights[symbol_i] * weights[symbol_j] * covariance

    return portfolio_variance


# =============================================================================
# STATISTICS SERVICE
# =============================================================================

class StatisticsService:
    """
    Orchestrator for per-instrument and aggregate risk/return statistics.

    The service holds no per-request state: every call builds its own
    returns, weights and market series from a fresh holdings snapshot.

    Attributes:
        _price_store: Source of closing prices
        _aligner: Pairing strategy for two return series
    """

    def __init__(
            self,
            price_store: PriceHistoryStoreProtocol,
            aligner: SeriesAligner = POSITIONAL_ALIGNER,
    ):
        """
        Initialize the Statistics Service.

        Args:
            price_store: Price history store used for all fetches
            aligner: Series alignment strategy (default: positional)
        """
        self._price_store = price_store
        self._aligner = aligner

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def price_holding(
            self,
            symbol: str,
            quantity: float,
            current_price: float | None = None,
    ) -> Holding:
        """
        Build a Holding, pricing it from the latest close when no price is given.

        Raises:
            PriceHistoryNotFoundError: If a price is needed and the symbol has none
        """
        if current_price is None:
            current_price = self._price_store.get_latest_price(symbol)
            if current_price is None:
                raise PriceHistoryNotFoundError(
                    symbol,
                    f"No price available to value holding '{symbol}'",
                )
            logger.debug(f"Priced {symbol} from latest close: {current_price}")

        return Holding(symbol=symbol, quantity=quantity, current_price=current_price)

    def compute_statistics(
            self,
            holdings: Sequence[Holding],
            start_date: date,
            end_date: date,
    ) -> StatisticsResult:
        """
        Compute per-instrument statistics, the correlation matrix and the rollup.

        Args:
            holdings: Instruments with quantity and current price
            start_date: First day of the price window (inclusive)
            end_date: Last day of the price window (inclusive)

        Returns:
            StatisticsResult (ratios rounded to 6 dp, total value to 2 dp)

        Raises:
            ValidationError: Inverted date range, no holdings, quantity <= 0
                             or the same symbol listed twice
            InsufficientDataError: Any symbol has fewer than 2 prices in range
        """
        snapshot = tuple(holdings)
        self._validate(snapshot, start_date, end_date)

        symbols = [holding.symbol for holding in snapshot]
        logger.info(
            f"Calculating statistics for {len(symbols)} holdings "
            f"from {start_date} to {end_date}"
        )

        # Step 1: price history per symbol
        prices_by_symbol = self._fetch_prices(symbols, start_date, end_date)
        data_points = {symbol: len(prices) for symbol, prices in prices_by_symbol.items()}

        if any(count < MIN_PRICE_POINTS for count in data_points.values()):
            logger.warning(f"Insufficient data points for statistics: {data_points}")
            raise InsufficientDataError(data_points, start_date, end_date)

        # Step 2: daily returns
        returns_by_symbol = {
            symbol: calculate_simple_returns(prices, symbol=symbol)
            for symbol, prices in prices_by_symbol.items()
        }

        # Step 3: value weights
        total_value, weight_metrics = calculate_weights(snapshot)
        weights = {symbol: metric.value for symbol, metric in weight_metrics.items()}

        # Step 4: synthesized market
        market_returns = synthesize_market_returns(returns_by_symbol, weights)

        # Step 5: per-instrument metrics
        stocks = [
            self._instrument_statistics(
                symbol=symbol,
                returns=returns_by_symbol[symbol],
                market_returns=market_returns,
                weight_metric=weight_metrics[symbol],
                data_points=data_points[symbol],
            )
            for symbol in symbols
        ]

        # Step 6: rollup (on unrounded betas and expected returns)
        portfolio = self._aggregate(
            symbols=symbols,
            stocks=stocks,
            returns_by_symbol=returns_by_symbol,
            weights=weights,
            total_value=total_value,
        )

        # Step 7: pairwise correlations
        correlation_matrix = self._correlation_matrix(symbols, returns_by_symbol, data_points)

        # Boundary rounding happens last so the rollup used full precision
        for stock in stocks:
            stock.beta = _round(stock.beta)
            stock.expected_return = _round(stock.expected_return)
            stock.standard_deviation = _round(stock.standard_deviation)
            stock.coefficient_of_variation = _round(stock.coefficient_of_variation)

        return StatisticsResult(
            stocks=stocks,
            correlation_matrix=correlation_matrix,
            portfolio=portfolio,
            data_summary=DataSummary(
                start_date=start_date,
                end_date=end_date,
                data_points=data_points,
            ),
        )

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _validate(holdings: tuple[Holding, ...], start_date: date, end_date: date) -> None:
        """Check the preconditions of compute_statistics."""
        if start_date > end_date:
            raise ValidationError(
                "start_date must be before or equal to end_date",
                field="start_date",
            )

        if not holdings:
            raise ValidationError("At least one holding is required", field="holdings")

        seen: set[str] = set()
        for holding in holdings:
            if not holding.quantity > 0:
                raise ValidationError(
                    f"Quantity for {holding.symbol} must be greater than 0",
                    field="quantity",
                )
            if holding.symbol in seen:
                raise ValidationError(
                    f"Symbol {holding.symbol} is listed more than once",
                    field="symbol",
                )
            seen.add(holding.symbol)

    def _fetch_prices(
            self,
            symbols: list[str],
            start_date: date,
            end_date: date,
    ) -> dict[str, list[PricePoint]]:
        """Fetch every symbol's prices before checking any counts."""
        prices_by_symbol: dict[str, list[PricePoint]] = {}
        for symbol in symbols:
            prices = self._price_store.get_prices(symbol, start_date, end_date)
            logger.debug(f"Fetched {len(prices)} prices for {symbol}")
            prices_by_symbol[symbol] = prices
        return prices_by_symbol

    def _instrument_statistics(
            self,
            symbol: str,
            returns: list[float],
            market_returns: list[float],
            weight_metric: MetricValue,
            data_points: int,
    ) -> InstrumentStatistics:
        """Mean, volatility, CV and beta of one instrument (unrounded)."""
        mean_daily = mean_return(returns)
        std_daily = sample_std(returns)

        cv_metric = calculate_coefficient_of_variation(mean_daily, std_daily)
        beta_metric = calculate_beta(returns, market_returns, aligner=self._aligner)

        if cv_metric.is_fallback:
            logger.debug(f"{symbol}: zero mean return, CV uses divisor 1.0")
        if beta_metric.is_fallback:
            logger.debug(f"{symbol}: beta fallback ({beta_metric.reason.value})")

        return InstrumentStatistics(
            symbol=symbol,
            weight=weight_metric.value,
            beta=beta_metric.value,
            expected_return=annualize_mean(mean_daily, TRADING_DAYS_PER_YEAR),
            standard_deviation=annualize_std(std_daily, TRADING_DAYS_PER_YEAR),
            coefficient_of_variation=cv_metric.value,
            data_points=data_points,
            beta_metric=beta_metric,
            coefficient_of_variation_metric=cv_metric,
            weight_metric=weight_metric,
        )

    def _aggregate(
            self,
            symbols: list[str],
            stocks: list[InstrumentStatistics],
            returns_by_symbol: dict[str, list[float]],
            weights: dict[str, float],
            total_value: float,
    ) -> AggregateStatistics:
        """Weight-combine instrument metrics and compute portfolio volatility."""
        portfolio_beta = sum(stock.weight * stock.beta for stock in stocks)
        portfolio_expected_return = sum(stock.weight * stock.expected_return for stock in stocks)

        portfolio_variance = calculate_portfolio_variance(
            symbols,
            returns_by_symbol,
            weights,
            aligner=self._aligner,
        )
        portfolio_std = _sqrt_or_nan(portfolio_variance * TRADING_DAYS_PER_YEAR)

        return AggregateStatistics(
            beta=_round(portfolio_beta),
            expected_return=_round(portfolio_expected_return),
            standard_deviation=_round(portfolio_std),
            total_value=_round(total_value, VALUE_DECIMAL_PLACES),
            variance=portfolio_variance,
        )

    def _correlation_matrix(
            self,
            symbols: list[str],
            returns_by_symbol: dict[str, list[float]],
            data_points: dict[str, int],
    ) -> list[CorrelationEntry]:
        """One entry per unordered pair i < j, in holdings order."""
        entries = []
        for i, symbol_a in enumerate(symbols):
            for symbol_b in symbols[i + 1:]:
                result = covariance_and_correlation(
                    returns_by_symbol[symbol_a],
                    returns_by_symbol[symbol_b],
                    aligner=self._aligner,
                )
                entries.append(CorrelationEntry(
                    symbol_a=symbol_a,
                    symbol_b=symbol_b,
                    correlation=_round(result.correlation.value),
                    covariance=_round(result.covariance),
                    data_points=min(data_points[symbol_a], data_points[symbol_b]),
                    correlation_metric=result.correlation,
                ))
        return entries
