# backend/app/routers/stock_data.py
"""
Daily price row endpoints.

- POST /stockdata - Add one OHLCV row for a registered stock
- GET /stockdata - All rows, newest first
- GET /stockdata/{symbol} - Rows of one stock, newest first
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_stock_data_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from app.schemas.stock_data import StockDataCreate, StockDataResponse
from app.services.market_data import StockDataService

router = APIRouter(
    prefix="/stockdata",
    tags=["Stock Data"],
)

# Upper bound on rows returned by the list endpoints
MAX_LIST_LIMIT = 10_000


@router.post(
    "",
    response_model=StockDataResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a daily price row",
)
@limiter.limit(RATE_LIMIT_WRITE)
def add_stock_data(
        request: Request,
        body: StockDataCreate,
        db: Session = Depends(get_db),
        service: StockDataService = Depends(get_stock_data_service),
) -> StockDataResponse:
    """
    Store one day of OHLCV data.

    Raises **404** if the stock is not registered and **409** if a row for
    that stock and date already exists.
    """
    row = service.add_price(
        db,
        symbol=body.symbol,
        price_date=body.date,
        open_price=body.open_price,
        high_price=body.high_price,
        low_price=body.low_price,
        close_price=body.close_price,
        volume=body.volume,
    )
    return StockDataResponse.model_validate(row)


@router.get(
    "",
    response_model=list[StockDataResponse],
    summary="List all price rows",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_stock_data(
        request: Request,
        limit: int | None = Query(default=None, ge=1, le=MAX_LIST_LIMIT),
        db: Session = Depends(get_db),
        service: StockDataService = Depends(get_stock_data_service),
) -> list[StockDataResponse]:
    rows = service.list_prices(db, limit=limit)
    return [StockDataResponse.model_validate(row) for row in rows]


@router.get(
    "/{symbol}",
    response_model=list[StockDataResponse],
    summary="List price rows of one stock",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_stock_data_for_symbol(
        request: Request,
        symbol: str,
        limit: int | None = Query(default=None, ge=1, le=MAX_LIST_LIMIT),
        db: Session = Depends(get_db),
        service: StockDataService = Depends(get_stock_data_service),
) -> list[StockDataResponse]:
    """Rows of one stock, newest first. An unknown symbol yields an empty list."""
    rows = service.list_prices(db, symbol=symbol.upper(), limit=limit)
    return [StockDataResponse.model_validate(row) for row in rows]
