# backend/app/schemas/stock_data.py
"""
Pydantic schemas for stock info and daily price rows.

Prices are Numeric(18, 8) in the database; they are returned as Decimal
and serialized by pydantic as strings to keep their precision.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StockDataCreate(BaseModel):
    """Manual entry of one daily OHLCV row. All fields are required."""

    symbol: str = Field(..., min_length=1, max_length=10)
    date: date
    open_price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    high_price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    low_price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    close_price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    volume: int = Field(..., ge=0)

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_price_range(self) -> "StockDataCreate":
        if self.low_price > self.high_price:
            raise ValueError("low_price must not exceed high_price")
        return self


class StockDataResponse(BaseModel):
    """One stored daily OHLCV row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    symbol: str
    date: date
    open_price: Decimal | None
    high_price: Decimal | None
    low_price: Decimal | None
    close_price: Decimal
    volume: int | None


class StockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    company_name: str


class StockInfoResponse(BaseModel):
    """Company, latest price row and recent history (newest first)."""

    stock: StockResponse
    latest: StockDataResponse | None
    history: list[StockDataResponse]
