#!/usr/bin/env python3
# backend/init_db.py
"""
Create the database tables for the configured DATABASE_URL.

Run from any directory:
    python backend/init_db.py
    python backend/init_db.py --drop    # drop and recreate every table
"""
import argparse
import logging
import sys
from pathlib import Path

# Make 'portfolio_tracker' importable without installing the package
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from portfolio_tracker.database import engine
from portfolio_tracker.models import Base
from portfolio_tracker.utils import setup_logging

logger = logging.getLogger("init_db")


def init_db(drop: bool = False) -> None:
    """Create all tables defined in models, optionally dropping them first."""
    if drop:
        logger.warning("Dropping all tables")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    setup_logging()
    init_db(drop=args.drop)
