# backend/app/services/market_data/stock_data_service.py
"""
Stock Data Service for stock lookups and price history maintenance.

This service handles:
- Stock info lookup (company, latest price row, recent rows)
- Manual entry of one daily OHLCV row
- Listing stored rows, newest first
- Bulk upsert of parsed CSV rows (insert-or-update by symbol and date)

Design Principles:
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Sessions are passed per call, the service holds no state
- Idempotent import: re-importing a file overwrites the same rows

Usage:
    from app.services.market_data import StockDataService

    service = StockDataService()

    info = service.get_stock_info(db, "AAPL")
    row = service.add_price(db, "AAPL", date(2024, 1, 2), close_price=Decimal("185.64"))

    result = service.import_rows(db, parse_result.rows)
    print(f"Upserted {result.rows_upserted} rows")
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Stock, StockData
from app.services.constants import IMPORT_BATCH_SIZE, STOCK_INFO_HISTORY_LIMIT
from app.services.exceptions import DuplicatePriceDataError, StockNotFoundError
from app.services.market_data.csv_import import ParsedPriceRow

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class StockInfo:
    """Stock with its latest price row and recent history (newest first)."""

    stock: Stock
    latest: StockData | None
    history: list[StockData] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of a bulk import."""

    stocks_created: list[str] = field(default_factory=list)
    rows_upserted: int = 0
    symbols: list[str] = field(default_factory=list)


def _insert_for(db: Session):
    """Dialect-specific INSERT construct that supports ON CONFLICT."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


# =============================================================================
# STOCK DATA SERVICE
# =============================================================================

class StockDataService:
    """Stock lookups, manual price entry, listing and bulk import."""

    def get_stock(self, db: Session, symbol: str) -> Stock:
        """
        Fetch a stock by symbol.

        Raises:
            StockNotFoundError: If the symbol is not registered
        """
        stock = db.get(Stock, symbol)
        if stock is None:
            raise StockNotFoundError(symbol)
        return stock

    def get_stock_info(
            self,
            db: Session,
            symbol: str,
            history_limit: int = STOCK_INFO_HISTORY_LIMIT,
    ) -> StockInfo:
        """
        Stock with its latest price row and the last `history_limit` rows.

        Raises:
            StockNotFoundError: If the symbol is not registered
        """
        stock = self.get_stock(db, symbol)

        history = list(db.scalars(
            select(StockData)
            .where(StockData.symbol == symbol)
            .order_by(StockData.date.desc())
            .limit(history_limit)
        ))

        return StockInfo(
            stock=stock,
            latest=history[0] if history else None,
            history=history,
        )

    def add_price(
            self,
            db: Session,
            symbol: str,
            price_date: date,
            close_price: Decimal,
            open_price: Decimal | None = None,
            high_price: Decimal | None = None,
            low_price: Decimal | None = None,
            volume: int | None = None,
    ) -> StockData:
        """
        Add one daily OHLCV row for a registered stock.

        Raises:
            StockNotFoundError: If the symbol is not registered
            DuplicatePriceDataError: If a row for (symbol, price_date) exists
        """
        self.get_stock(db, symbol)

        existing = db.scalar(
            select(StockData.id).where(
                StockData.symbol == symbol,
                StockData.date == price_date,
            )
        )
        if existing is not None:
            raise DuplicatePriceDataError(symbol, price_date)

        row = StockData(
            symbol=symbol,
            date=price_date,
            open_price=open_price,
            high_price=high_price,
            low_price=low_price,
            close_price=close_price,
            volume=volume,
        )
        db.add(row)

        try:
            db.commit()
        except IntegrityError:
            # Concurrent insert won the unique constraint
            db.rollback()
            raise DuplicatePriceDataError(symbol, price_date)

        db.refresh(row)
        logger.info(f"Added price row for {symbol} on {price_date}")
        return row

    def list_prices(
            self,
            db: Session,
            symbol: str | None = None,
            limit: int | None = None,
    ) -> list[StockData]:
        """Stored rows newest first, optionally for one symbol only."""
        stmt = select(StockData).order_by(StockData.date.desc(), StockData.symbol)
        if symbol is not None:
            stmt = stmt.where(StockData.symbol == symbol)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(db.scalars(stmt))

    def import_rows(self, db: Session, rows: Sequence[ParsedPriceRow]) -> ImportResult:
        """
        Upsert parsed rows in a single transaction.

        Unknown symbols are registered first with a placeholder company name
        ("Company <SYMBOL>"). Rows that already exist for (symbol, date) are
        overwritten with the new OHLCV values. Any failure rolls back the
        whole import.

        Args:
            db: Database session
            rows: Parsed CSV rows

        Returns:
            ImportResult with created symbols and upserted row count
        """
        result = ImportResult()
        if not rows:
            return result

        # Last row wins for repeated (symbol, date) within one file
        records_by_key: dict[tuple[str, date], dict] = {}
        for row in rows:
            records_by_key[(row.symbol, row.date)] = {
                "symbol": row.symbol,
                "date": row.date,
                "open_price": row.open_price,
                "high_price": row.high_price,
                "low_price": row.low_price,
                "close_price": row.close_price,
                "volume": row.volume,
            }
        records = list(records_by_key.values())
        result.symbols = list(dict.fromkeys(row.symbol for row in rows))

        insert = _insert_for(db)

        try:
            existing = set(db.scalars(select(Stock.symbol).where(Stock.symbol.in_(result.symbols))))
            new_symbols = [symbol for symbol in result.symbols if symbol not in existing]

            for start in range(0, len(new_symbols), IMPORT_BATCH_SIZE):
                stock_stmt = insert(Stock).values([
                    {"symbol": symbol, "company_name": f"Company {symbol}"}
                    for symbol in new_symbols[start:start + IMPORT_BATCH_SIZE]
                ])
                db.execute(stock_stmt.on_conflict_do_nothing(index_elements=["symbol"]))

            for start in range(0, len(records), IMPORT_BATCH_SIZE):
                stmt = insert(StockData).values(records[start:start + IMPORT_BATCH_SIZE])
                upsert_stmt = stmt.on_conflict_do_update(
                    index_elements=["symbol", "date"],
                    set_={
                        "open_price": stmt.excluded.open_price,
                        "high_price": stmt.excluded.high_price,
                        "low_price": stmt.excluded.low_price,
                        "close_price": stmt.excluded.close_price,
                        "volume": stmt.excluded.volume,
                    },
                )
                db.execute(upsert_stmt)
            db.commit()

        except Exception as e:
            logger.error(f"Error importing price rows: {e}")
            db.rollback()
            raise

        result.stocks_created = new_symbols
        result.rows_upserted = len(records)
        logger.info(
            f"Imported {result.rows_upserted} price rows for {len(result.symbols)} stocks "
            f"({len(new_symbols)} new)"
        )
        return result
