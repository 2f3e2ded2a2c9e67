# backend/app/services/analytics/__init__.py
"""
Analytics Service Package.

This package provides holdings analytics capabilities:
- Return statistics (daily returns, mean, volatility, CV)
- Co-movement (covariance, correlation)
- Benchmark comparison against a synthesized market (Beta)
- Short-horizon linear trend forecast

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Data classes for inputs and results
    ├── returns.py               # Daily returns, mean, sample stdev
    ├── covariance.py            # Covariance, correlation, variance, alignment
    ├── benchmark.py             # Market synthesis and Beta
    ├── service.py               # StatisticsService (orchestrator)
    └── forecast.py              # TrendForecaster

Usage:
    from app.services.analytics import StatisticsService, TrendForecaster

    service = StatisticsService(price_store)
    result = service.compute_statistics(holdings, date(2024, 1, 1), date(2024, 6, 30))

    print(f"Beta: {result.portfolio.beta}")
    print(f"Volatility: {result.portfolio.standard_deviation}")

    forecaster = TrendForecaster(price_store)
    prediction = forecaster.predict("AAPL", horizon_days=7)

Data Flow:
    PriceHistoryStore.get_prices()
        ↓
    PricePoint series (per symbol)
        ↓
    ┌─────────────────────────────────────────┐
    │           StatisticsService             │
    │  ┌─────────────┐  ┌─────────────────┐   │
    │  │ Returns     │  │ Covariance      │   │
    │  │ • Daily r   │  │ • Cov / Corr    │   │
    │  │ • Mean      │  │ • Variance      │   │
    │  │ • Stdev     │  │ • Alignment     │   │
    │  └─────────────┘  └─────────────────┘   │
    │                                         │
    │  ┌───────────────────────────────────┐  │
    │  │ Benchmark                         │  │
    │  │ • Synthesized market  • Beta      │  │
    │  └───────────────────────────────────┘  │
    └─────────────────────────────────────────┘
        ↓
    StatisticsResult
"""

# Calculators (for testing / direct usage)
from app.services.analytics.benchmark import (
    calculate_beta,
    synthesize_market_returns,
)
from app.services.analytics.covariance import (
    POSITIONAL_ALIGNER,
    PositionalAligner,
    SeriesAligner,
    covariance_and_correlation,
    variance,
)
# Forecast
from app.services.analytics.forecast import (
    TrendForecaster,
    fit_trend_slope,
)
from app.services.analytics.returns import (
    annualize_mean,
    annualize_std,
    calculate_simple_returns,
    mean_return,
    sample_std,
)
# Main service
from app.services.analytics.service import (
    StatisticsService,
    calculate_coefficient_of_variation,
    calculate_portfolio_variance,
    calculate_weights,
)
# Types
from app.services.analytics.types import (
    # Input types
    PricePoint,
    Holding,
    # Tagged values
    Computed,
    Fallback,
    FallbackReason,
    MetricValue,
    # Result types
    CovarianceResult,
    CorrelationEntry,
    InstrumentStatistics,
    AggregateStatistics,
    DataSummary,
    StatisticsResult,
    Trend,
    PredictionPoint,
    PredictionResult,
)

__all__ = [
    # Main services
    "StatisticsService",
    "TrendForecaster",

    # Input types
    "PricePoint",
    "Holding",

    # Tagged values
    "Computed",
    "Fallback",
    "FallbackReason",
    "MetricValue",

    # Result types
    "CovarianceResult",
    "CorrelationEntry",
    "InstrumentStatistics",
    "AggregateStatistics",
    "DataSummary",
    "StatisticsResult",
    "Trend",
    "PredictionPoint",
    "PredictionResult",

    # Alignment
    "SeriesAligner",
    "PositionalAligner",
    "POSITIONAL_ALIGNER",

    # Individual functions (for testing)
    "calculate_simple_returns",
    "mean_return",
    "sample_std",
    "annualize_mean",
    "annualize_std",
    "covariance_and_correlation",
    "variance",
    "synthesize_market_returns",
    "calculate_beta",
    "calculate_weights",
    "calculate_coefficient_of_variation",
    "calculate_portfolio_variance",
    "fit_trend_slope",
]
