# backend/app/dependencies.py
"""
Dependency injection module for FastAPI services.

Stateless services are lazily created singletons shared across requests.
Anything that reads prices is bound to the request's database session, so
the price store and the services built on it are created per request.

Usage in routers:
    from app.dependencies import get_statistics_service, get_trend_forecaster

    @router.post("/statistics")
    def compute(service: StatisticsService = Depends(get_statistics_service)):
        ...
"""

import logging
import random
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.analytics import StatisticsService, TrendForecaster
from app.services.market_data import SqlPriceHistoryStore, StockDataService
from app.services.protocols import PriceHistoryStoreProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================

@lru_cache(maxsize=1)
def get_stock_data_service() -> StockDataService:
    """Singleton StockDataService (sessions are passed per call)."""
    logger.debug("Creating StockDataService singleton")
    return StockDataService()


@lru_cache(maxsize=1)
def get_forecast_rng() -> random.Random:
    """Shared random source for degenerate-slope noise."""
    return random.Random()


# =============================================================================
# REQUEST-SCOPED DEPENDENCIES
# =============================================================================

def get_price_store(db: Session = Depends(get_db)) -> PriceHistoryStoreProtocol:
    """Price history store bound to this request's session."""
    return SqlPriceHistoryStore(db)


def get_statistics_service(
        store: PriceHistoryStoreProtocol = Depends(get_price_store),
) -> StatisticsService:
    return StatisticsService(store)


def get_trend_forecaster(
        store: PriceHistoryStoreProtocol = Depends(get_price_store),
) -> TrendForecaster:
    return TrendForecaster(
        store,
        history_limit=settings.prediction_history_limit,
        rng=get_forecast_rng(),
    )
