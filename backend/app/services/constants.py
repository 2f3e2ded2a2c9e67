# backend/app/services/constants.py
"""
Centralized constants for the Stock Portfolio Analytics services.

This module provides a single source of truth for all business constants
used across the application. Keeping them here:

1. Prevents inconsistencies from duplicate definitions
2. Makes it easy to tune parameters in one place
3. Documents the meaning and units of each constant

Usage:
    from app.services.constants import (
        TRADING_DAYS_PER_YEAR,
        MIN_PRICE_POINTS,
        PREDICTION_HISTORY_LIMIT,
    )
"""


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Standard number of trading days in a year (excludes weekends and holidays)
# Used for annualizing mean daily return and daily volatility
TRADING_DAYS_PER_YEAR: int = 252


# =============================================================================
# STATISTICS SETTINGS
# =============================================================================

# Minimum number of closing prices per symbol inside the requested range.
# Two prices give one daily return.
MIN_PRICE_POINTS: int = 2

# Minimum number of overlapping returns for covariance, correlation and beta.
# Below this the sample (n - 1) denominator is zero.
MIN_OVERLAPPING_RETURNS: int = 2

# Substitute divisor for the coefficient of variation when the mean daily
# return is exactly zero
ZERO_MEAN_CV_DIVISOR: float = 1.0

# Decimal places applied to ratios at the API boundary
# (beta, correlation, covariance, expected return, standard deviation, CV)
STATISTICS_DECIMAL_PLACES: int = 6

# Decimal places applied to monetary totals at the API boundary
VALUE_DECIMAL_PLACES: int = 2


# =============================================================================
# TREND FORECAST SETTINGS
# =============================================================================

# Number of most recent closing prices loaded for a trend forecast
PREDICTION_HISTORY_LIMIT: int = 30

# Forecast horizon when the caller does not specify one (days)
DEFAULT_PREDICTION_DAYS: int = 7

# Upper bound for the forecast horizon accepted by the API (days)
MAX_PREDICTION_DAYS: int = 365

# First forward day offset emitted after the anchor point.
# Days 1 and 2 are never emitted; downstream charts rely on this cadence.
PREDICTION_FIRST_OFFSET: int = 3

# Width of the uniform noise used when the fitted slope is degenerate:
# slope = (U(0, 1) - 0.5) * SLOPE_NOISE_SCALE, i.e. within [-0.05, 0.05]
SLOPE_NOISE_SCALE: float = 0.1


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Limits are expressed as "X per Y" where Y is the time window
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Default rate limit for read endpoints (GET requests)
RATE_LIMIT_DEFAULT: str = "100/minute"

# Rate limit for write endpoints (stock data entry)
RATE_LIMIT_WRITE: str = "30/minute"

# Rate limit for health check endpoints
# Higher limit for monitoring tools that poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"

# Rate limit for statistics and prediction endpoints
# Covariance matrices are quadratic in the number of holdings
RATE_LIMIT_ANALYTICS: str = "30/minute"


# =============================================================================
# RESOURCE LIMIT CONSTANTS
# =============================================================================

# Maximum number of holdings in a single statistics request
# The covariance matrix is n x n, so this bounds the work per request
MAX_HOLDINGS: int = 100

# Maximum date range for statistics requests (days)
# 20 years of daily data = ~5,040 trading days per symbol
MAX_HISTORY_DAYS: int = 365 * 20 + 5  # 20 years with leap year buffer

# Number of price rows included in the stock info response
STOCK_INFO_HISTORY_LIMIT: int = 30

# Rows per INSERT statement during bulk CSV import
# Keeps multi-row VALUES under the 999 bound parameter limit of older SQLite builds
IMPORT_BATCH_SIZE: int = 100
