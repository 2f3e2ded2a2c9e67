# backend/tests/scripts/test_import_stock_data.py
"""
Tests for the CSV import command (scripts/import_stock_data.py).

The script's session_scope / init_db are swapped for the test session so
the import runs against the in-memory test database.
"""

import importlib.util
from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy import func, select

from app.models import Stock, StockData

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "import_stock_data.py"

HEADER = "Code,Timestamp,Open,High,Low,Close,Volume\n"


@pytest.fixture
def script(db, monkeypatch):
    spec = importlib.util.spec_from_file_location("import_stock_data", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    @contextmanager
    def test_session_scope():
        yield db

    monkeypatch.setattr(module, "session_scope", test_session_scope)
    monkeypatch.setattr(module, "init_db", lambda: None)
    return module


def _write_csv(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "prices.csv"
    path.write_text(HEADER + body, encoding="utf-8")
    return path


class TestImportCommand:
    """Tests for main() / import_file()."""

    def test_imports_valid_file(self, script, db, tmp_path):
        path = _write_csv(
            tmp_path,
            "AAPL,2013-02-08,67.7142,68.4014,66.8928,67.8542,158168416\n"
            "AAPL,2013-02-11,68.0714,69.2771,67.6071,68.5614,129029425\n"
            "MSFT,2013-02-08,27.35,27.71,27.31,27.55,33318306\n",
        )

        assert script.main([str(path)]) == 0

        assert db.scalar(select(func.count()).select_from(StockData)) == 3
        assert db.get(Stock, "MSFT").company_name == "Company MSFT"

    def test_reimport_is_idempotent(self, script, db, tmp_path):
        path = _write_csv(tmp_path, "AAPL,2013-02-08,1,2,1,1.5,100\n")

        assert script.main([str(path)]) == 0
        assert script.main([str(path)]) == 0

        assert db.scalar(select(func.count()).select_from(StockData)) == 1

    def test_invalid_row_aborts_import(self, script, db, tmp_path):
        path = _write_csv(
            tmp_path,
            "AAPL,2013-02-08,1,2,1,1.5,100\n"
            "AAPL,not-a-date,1,2,1,1.5,100\n",
        )

        assert script.main([str(path)]) == 1

        assert db.scalar(select(func.count()).select_from(StockData)) == 0

    def test_skip_invalid_imports_the_rest(self, script, db, tmp_path):
        path = _write_csv(
            tmp_path,
            "AAPL,2013-02-08,1,2,1,1.5,100\n"
            "AAPL,not-a-date,1,2,1,1.5,100\n",
        )

        assert script.main([str(path), "--skip-invalid"]) == 0

        assert db.scalar(select(func.count()).select_from(StockData)) == 1

    def test_missing_file(self, script, tmp_path):
        assert script.main([str(tmp_path / "missing.csv")]) == 1
