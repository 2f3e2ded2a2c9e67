#!/usr/bin/env python3
# backend/scripts/import_stock_data.py
"""
Bulk import of daily OHLCV prices from a CSV file.

Expected header: Code,Timestamp,Open,High,Low,Close,Volume

Unknown stock codes are registered as "Company <CODE>". Existing rows for
the same (symbol, date) are overwritten. The import is all-or-nothing: if
any row fails to parse, nothing is written unless --skip-invalid is given.

Usage:
    python backend/scripts/import_stock_data.py prices.csv
    python backend/scripts/import_stock_data.py prices.csv --skip-invalid
"""
import argparse
import logging
import sys
from pathlib import Path

# Setup path to import app modules
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from app.database import init_db, session_scope
from app.services.market_data import StockDataCsvParser, StockDataService
from app.utils import setup_logging

logger = logging.getLogger(__name__)

# Parse errors printed before the summary line
MAX_REPORTED_ERRORS = 20


def import_file(path: Path, skip_invalid: bool = False) -> int:
    """
    Import one CSV file.

    Returns:
        Process exit code (0 on success)
    """
    with path.open(encoding="utf-8-sig", newline="") as f:
        parse_result = StockDataCsvParser().parse(f, path.name)

    for error in parse_result.errors[:MAX_REPORTED_ERRORS]:
        logger.warning(f"Row {error.row_number}: {error.message}")
    if parse_result.error_count > MAX_REPORTED_ERRORS:
        logger.warning(f"... {parse_result.error_count - MAX_REPORTED_ERRORS} more errors")

    if parse_result.errors and (not skip_invalid or not parse_result.rows):
        logger.error(f"Import aborted: {parse_result.error_count} invalid rows in {path.name}")
        return 1

    init_db()
    with session_scope() as db:
        result = StockDataService().import_rows(db, parse_result.rows)

    logger.info(
        f"Import completed: {result.rows_upserted} rows, "
        f"{len(result.symbols)} stocks ({len(result.stocks_created)} new)"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import daily stock prices from CSV")
    parser.add_argument("csv_file", type=Path, help="Path to the CSV file")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Import valid rows even if some rows fail to parse",
    )
    args = parser.parse_args(argv)

    setup_logging()

    if not args.csv_file.is_file():
        logger.error(f"File not found: {args.csv_file}")
        return 1

    try:
        return import_file(args.csv_file, skip_invalid=args.skip_invalid)
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
