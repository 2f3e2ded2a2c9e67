# backend/app/models.py
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, ForeignKey, Numeric, UniqueConstraint, BigInteger, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class Stock(Base):
    """
    Global table of listed stocks.

    A stock is identified by its ticker symbol alone (e.g. "AAPL").
    """
    __tablename__ = "stocks"

    symbol: Mapped[str] = mapped_column(String(10), primary_key=True)
    company_name: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationship: One Stock has Many daily price rows
    prices: Mapped[list["StockData"]] = relationship(back_populates="stock", cascade="all, delete-orphan")


class StockData(Base):
    """
    Daily price history (OHLCV format).

    Each record represents one trading day for one stock. Only close_price
    feeds the analytics; the other columns are kept for display and import
    round trips.

    OHLCV = Open, High, Low, Close, Volume (standard financial data format)
    """
    __tablename__ = "stock_data"
    __table_args__ = (
        UniqueConstraint('symbol', 'date', name='uq_symbol_date'),
        # "Get prices for stock X in date range" / "latest N prices for stock X"
        Index('ix_stock_data_symbol_date', 'symbol', 'date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    symbol: Mapped[str] = mapped_column(ForeignKey("stocks.symbol", ondelete="CASCADE"))
    date: Mapped[date] = mapped_column(Date)  # Daily data - no time component

    # =========================================================================
    # OHLCV DATA (Open, High, Low, Close, Volume)
    # =========================================================================
    # All prices use Decimal for financial precision (18 digits, 8 decimals)

    open_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)
    high_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)
    low_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)
    close_price: Mapped[Decimal] = mapped_column(Numeric(18, 8))  # Required - the only analytics input
    volume: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    stock: Mapped["Stock"] = relationship(back_populates="prices")
