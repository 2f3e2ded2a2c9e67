# backend/app/services/market_data/csv_import.py
"""
CSV price file parser.

Parses daily OHLCV exports into rows ready for StockDataService.import_rows().

Expected CSV Format:
    Code,Timestamp,Open,High,Low,Close,Volume
    AAPL,2013-02-08,67.7142,68.4014,66.8928,67.8542,158168416

Column Mapping:
    CSV Column  -> Internal Field
    -----------------------------
    Code        -> symbol
    Timestamp   -> date (ISO date or ISO datetime; time part dropped)
    Open        -> open_price
    High        -> high_price
    Low         -> low_price
    Close       -> close_price
    Volume      -> volume

Header matching is case-insensitive and ignores surrounding whitespace.
A malformed row is reported as a ParseError and does not stop the parse.
"""

import csv
import io
import logging
import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TextIO

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ParsedPriceRow:
    """One validated OHLCV row."""

    symbol: str
    date: date
    open_price: Decimal | None
    high_price: Decimal | None
    low_price: Decimal | None
    close_price: Decimal
    volume: int | None


@dataclass
class ParseError:
    """
    Represents a parsing error for a specific row.

    Attributes:
        row_number: 1-based row number where error occurred (0 = whole file)
        error_type: Category of error (e.g., "missing_field", "invalid_format")
        message: Human-readable error description
        field: Specific field that caused the error (if applicable)
        raw_data: Original row data for context
    """

    row_number: int
    error_type: str
    message: str
    field: str | None = None
    raw_data: dict[str, Any] = dataclasses.field(default_factory=dict)


@dataclass
class ParseResult:
    """Parsed rows plus any errors, for partial success reporting."""

    rows: list[ParsedPriceRow] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    total_rows: int = 0

    @property
    def success_count(self) -> int:
        return len(self.rows)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def symbols(self) -> list[str]:
        """Distinct symbols in first-seen order."""
        return list(dict.fromkeys(row.symbol for row in self.rows))


class _RowError(ValueError):
    def __init__(self, error_type: str, message: str, field_name: str | None = None):
        self.error_type = error_type
        self.field_name = field_name
        super().__init__(message)


# =============================================================================
# PARSER
# =============================================================================

class StockDataCsvParser:
    """
    Parser for OHLCV price CSV files.

    Example:
        parser = StockDataCsvParser()

        with open("prices.csv", encoding="utf-8") as f:
            result = parser.parse(f, "prices.csv")

        print(f"Parsed {result.success_count} rows")
    """

    # Internal field -> CSV header (lower-cased)
    COLUMN_MAPPING: dict[str, str] = {
        "symbol": "code",
        "date": "timestamp",
        "open_price": "open",
        "high_price": "high",
        "low_price": "low",
        "close_price": "close",
        "volume": "volume",
    }

    REQUIRED_FIELDS: set[str] = {"symbol", "date", "close_price"}

    def parse(self, file: TextIO, filename: str = "<stream>") -> ParseResult:
        """
        Parse a CSV text stream into price rows.

        Args:
            file: Text file object containing CSV data
            filename: Name used in log messages

        Returns:
            ParseResult with parsed rows and errors
        """
        logger.info(f"Parsing price CSV file: {filename}")
        result = ParseResult()

        try:
            reader = csv.DictReader(file)

            if not reader.fieldnames:
                result.errors.append(ParseError(
                    row_number=0,
                    error_type="missing_headers",
                    message="CSV file has no headers",
                ))
                return result

            column_map = self._build_column_map(reader.fieldnames)
            missing = sorted(
                self.COLUMN_MAPPING[name]
                for name in self.REQUIRED_FIELDS
                if name not in column_map
            )
            if missing:
                result.errors.append(ParseError(
                    row_number=0,
                    error_type="missing_columns",
                    message=f"Missing required columns: {', '.join(missing)}",
                ))
                return result

            for row_num, row in enumerate(reader, start=2):  # header is row 1
                if not any((value or "").strip() for value in row.values()):
                    continue
                result.total_rows += 1

                try:
                    result.rows.append(self._parse_row(row, column_map))
                except _RowError as e:
                    result.errors.append(ParseError(
                        row_number=row_num,
                        error_type=e.error_type,
                        message=str(e),
                        field=e.field_name,
                        raw_data=dict(row),
                    ))

        except csv.Error as e:
            logger.error(f"CSV parsing error in {filename}: {e}")
            result.errors.append(ParseError(
                row_number=0,
                error_type="csv_format_error",
                message=f"Invalid CSV format: {e}",
            ))

        logger.info(
            f"Parsed {filename}: {result.success_count} rows OK, "
            f"{result.error_count} errors"
        )
        return result

    def parse_text(self, content: str, filename: str = "<string>") -> ParseResult:
        """Parse CSV content held in a string."""
        return self.parse(io.StringIO(content), filename)

    # =========================================================================
    # ROW PARSING
    # =========================================================================

    def _build_column_map(self, fieldnames: list[str]) -> dict[str, str]:
        """Map internal field name -> actual header in this file."""
        normalized = {name.strip().lower(): name for name in fieldnames if name}
        return {
            internal: normalized[header]
            for internal, header in self.COLUMN_MAPPING.items()
            if header in normalized
        }

    def _parse_row(self, row: dict[str, str], column_map: dict[str, str]) -> ParsedPriceRow:
        def value_of(name: str) -> str:
            header = column_map.get(name)
            return (row.get(header) or "").strip() if header else ""

        for name in self.REQUIRED_FIELDS:
            if not value_of(name):
                raise _RowError("missing_field", f"Missing value for '{name}'", name)

        return ParsedPriceRow(
            symbol=value_of("symbol").upper(),
            date=self._parse_date(value_of("date")),
            open_price=self._parse_decimal(value_of("open_price"), "open_price"),
            high_price=self._parse_decimal(value_of("high_price"), "high_price"),
            low_price=self._parse_decimal(value_of("low_price"), "low_price"),
            close_price=self._parse_decimal(value_of("close_price"), "close_price"),
            volume=self._parse_volume(value_of("volume")),
        )

    @staticmethod
    def _parse_date(value: str) -> date:
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            raise _RowError("invalid_date", f"Invalid date: '{value}'", "date")

    @staticmethod
    def _parse_decimal(value: str, name: str) -> Decimal | None:
        if not value:
            return None
        try:
            number = Decimal(value)
        except InvalidOperation:
            raise _RowError("invalid_number", f"Invalid number for '{name}': '{value}'", name)
        if not number.is_finite():
            raise _RowError("invalid_number", f"Invalid number for '{name}': '{value}'", name)
        return number

    @staticmethod
    def _parse_volume(value: str) -> int | None:
        if not value:
            return None
        try:
            return int(Decimal(value))
        except (InvalidOperation, ValueError, OverflowError):
            raise _RowError("invalid_number", f"Invalid volume: '{value}'", "volume")
