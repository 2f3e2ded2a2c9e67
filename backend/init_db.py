#!/usr/bin/env python3
# backend/init_db.py
"""
Database initialization script.

Creates the stocks and stock_data tables if they do not exist.

This script can be run from any directory:
    python backend/init_db.py
    cd backend && python init_db.py
"""
import logging
import sys
from pathlib import Path

# Add the backend directory to Python path so 'app' package is importable
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from app.database import init_db
from app.utils import setup_logging

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    setup_logging()
    logger.info("Creating database tables...")
    init_db()
    logger.info("Tables created successfully!")
