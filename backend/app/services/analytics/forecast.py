# backend/app/services/analytics/forecast.py
"""
Linear trend forecast for a single instrument.

The forecaster fits an ordinary-least-squares line through the oldest
closes of a short recent window and extends it from the last close.
It is a heuristic, not a statistical model: there is no intercept, no
confidence band and no seasonality.

Algorithm:
    1. Fetch the most recent PREDICTION_HISTORY_LIMIT closes (descending)
       and reverse them into chronological order
    2. n = min(horizon_days, len(prices))
    3. slope = Σ (i - x̄)(p_i - ȳ) / Σ (i - x̄)²   over the first n prices
       x̄ = (n - 1) / 2, ȳ = mean(p_0..p_{n-1})
    4. Degenerate slope (zero denominator, NaN/inf, all n prices equal) is
       replaced by small random noise: (U(0,1) - 0.5) * 0.1
    5. Anchor: the most recent close at its real date
    6. For i in 3..horizon_days: max(0, last_price + slope * i) at last_date + i days
    7. Trend is UP if slope > 0, DOWN otherwise

Known quirks kept for API compatibility:
    - The slope is fitted over the OLDEST n prices of the window, not the newest
    - Offsets 1 and 2 are never emitted, so horizon_days < 3 yields only the anchor
"""

import logging
import math
import random
from datetime import timedelta

from app.services.analytics.types import (
    Computed,
    Fallback,
    FallbackReason,
    MetricValue,
    PredictionPoint,
    PredictionResult,
    PricePoint,
    Trend,
)
from app.services.constants import (
    DEFAULT_PREDICTION_DAYS,
    PREDICTION_FIRST_OFFSET,
    PREDICTION_HISTORY_LIMIT,
    SLOPE_NOISE_SCALE,
)
from app.services.exceptions import PriceHistoryNotFoundError, ValidationError
from app.services.protocols import PriceHistoryStoreProtocol

logger = logging.getLogger(__name__)


def fit_trend_slope(
        prices: list[float],
        n: int,
        rng: random.Random,
) -> MetricValue:
    """
    OLS slope of the first n prices against their index.

    Args:
        prices: Chronological closing prices (len >= n >= 1)
        n: Number of leading prices to fit
        rng: Random source for the degenerate-slope noise

    Returns:
        Computed(slope), or Fallback with a noise slope in [-0.05, 0.05)
    """
    x_mean = (n - 1) / 2
    y_mean = sum(prices[:n]) / n

    numerator = 0.0
    denominator = 0.0
    for i in range(n):
        numerator += (i - x_mean) * (prices[i] - y_mean)
        denominator += (i - x_mean) ** 2

    reason = None
    if denominator == 0:
        reason = FallbackReason.ZERO_DENOMINATOR
    else:
        slope = numerator / denominator
        if not math.isfinite(slope):
            reason = FallbackReason.NON_FINITE_SLOPE
        elif slope == 0 and len(set(prices[:n])) == 1:
            reason = FallbackReason.FLAT_TREND

    if reason is not None:
        noise = (rng.random() - 0.5) * SLOPE_NOISE_SCALE
        logger.debug(f"Degenerate trend slope ({reason.value}), using noise {noise:.6f}")
        return Fallback(reason, noise)

    return Computed(slope)


class TrendForecaster:
    """
    Projects a symbol's recent closing prices along a straight line.

    Attributes:
        _price_store: Source of recent closing prices
        _history_limit: How many recent closes to fetch
        _rng: Random source for the degenerate-slope noise
    """

    def __init__(
            self,
            price_store: PriceHistoryStoreProtocol,
            history_limit: int = PREDICTION_HISTORY_LIMIT,
            rng: random.Random | None = None,
    ):
        self._price_store = price_store
        self._history_limit = history_limit
        self._rng = rng or random.Random()

    def predict(self, symbol: str, horizon_days: int = DEFAULT_PREDICTION_DAYS) -> PredictionResult:
        """
        Forecast `symbol` for the next `horizon_days` calendar days.

        Args:
            symbol: Stock symbol
            horizon_days: Forecast horizon in days (>= 1)

        Returns:
            PredictionResult whose first point is the last historical close

        Raises:
            ValidationError: If horizon_days < 1
            PriceHistoryNotFoundError: If the symbol has no price history
        """
        if horizon_days < 1:
            raise ValidationError("horizon_days must be at least 1", field="days")

        recent = self._price_store.get_recent_prices(symbol, self._history_limit)
        if not recent:
            raise PriceHistoryNotFoundError(symbol)

        history: list[PricePoint] = list(reversed(recent))
        prices = [point.close_price for point in history]

        n = min(horizon_days, len(prices))
        slope_metric = fit_trend_slope(prices, n, self._rng)
        slope = slope_metric.value

        latest = history[-1]
        last_price = latest.close_price

        predictions = [PredictionPoint(date=latest.date, price=last_price)]
        for offset in range(PREDICTION_FIRST_OFFSET, horizon_days + 1):
            predictions.append(PredictionPoint(
                date=latest.date + timedelta(days=offset),
                price=max(0.0, last_price + slope * offset),
            ))

        trend = Trend.UP if slope > 0 else Trend.DOWN
        logger.info(
            f"Forecast for {symbol}: {len(history)} closes, "
            f"slope={slope:.6f}, trend={trend.value}"
        )

        return PredictionResult(
            symbol=symbol,
            predictions=predictions,
            last_price=last_price,
            trend=trend,
            slope=slope,
            slope_metric=slope_metric,
        )
