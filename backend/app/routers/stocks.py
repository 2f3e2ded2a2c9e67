# backend/app/routers/stocks.py
"""
Stock lookup and forecast endpoints.

- GET /stocks/{symbol} - Company, latest price row and last 30 rows
- GET /stocks/{symbol}/predict - Linear trend forecast
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_stock_data_service, get_trend_forecaster
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS, RATE_LIMIT_DEFAULT
from app.schemas.statistics import PredictionPointResponse, PredictionResponse
from app.schemas.stock_data import StockDataResponse, StockInfoResponse, StockResponse
from app.services.analytics import TrendForecaster
from app.services.constants import MAX_PREDICTION_DAYS
from app.services.market_data import StockDataService

router = APIRouter(
    prefix="/stocks",
    tags=["Stocks"],
)


@router.get(
    "/{symbol}",
    response_model=StockInfoResponse,
    summary="Get stock info",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_stock_info(
        request: Request,
        symbol: str,
        db: Session = Depends(get_db),
        service: StockDataService = Depends(get_stock_data_service),
) -> StockInfoResponse:
    """
    Get a stock with its latest price row and its most recent rows.

    Raises **404** if the symbol is not registered.
    """
    info = service.get_stock_info(db, symbol.upper())

    return StockInfoResponse(
        stock=StockResponse.model_validate(info.stock),
        latest=StockDataResponse.model_validate(info.latest) if info.latest else None,
        history=[StockDataResponse.model_validate(row) for row in info.history],
    )


@router.get(
    "/{symbol}/predict",
    response_model=PredictionResponse,
    summary="Forecast a stock's price trend",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def predict_stock(
        request: Request,
        symbol: str,
        days: int | None = Query(
            default=None,
            ge=1,
            le=MAX_PREDICTION_DAYS,
            description="Forecast horizon in days (default: 7)",
        ),
        forecaster: TrendForecaster = Depends(get_trend_forecaster),
) -> PredictionResponse:
    """
    Project the stock's recent closes along a straight line.

    The first point is the last historical close; forecast points follow
    for days 3 through `days`. Days 1 and 2 are not emitted.

    Raises **404** if the stock has no price history.
    """
    horizon = days if days is not None else settings.default_prediction_days
    result = forecaster.predict(symbol.upper(), horizon_days=horizon)

    return PredictionResponse(
        symbol=result.symbol,
        predictions=[
            PredictionPointResponse(date=point.date, price=point.price)
            for point in result.predictions
        ],
        last_price=result.last_price,
        trend=result.trend.value,
    )
