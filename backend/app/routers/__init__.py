# backend/app/routers/__init__.py
"""
API routers for the Stock Portfolio Analytics service.

Each router handles a specific domain:
- statistics: Holdings statistics (beta, volatility, correlations)
- stocks: Stock info and trend forecast
- stock_data: Daily price rows (manual entry, listing)
"""

from app.routers.statistics import router as statistics_router
from app.routers.stock_data import router as stock_data_router
from app.routers.stocks import router as stocks_router

__all__ = [
    "statistics_router",
    "stocks_router",
    "stock_data_router",
]
