#!/usr/bin/env python3
"""
Initialize the SQLite key-value store used for group config and cached results.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from feed_aggregator.config import get_config
from feed_aggregator.storage.database import DatabaseManager


def main() -> None:
    """Initialize the database."""
    import argparse

    parser = argparse.ArgumentParser(description="Initialize the feed-aggregator key-value database")
    parser.add_argument("--path", default=None, help="Database file (defaults to STORAGE_PATH)")
    parser.add_argument(
        "--drop", action="store_true", help="Drop existing tables before creating new ones"
    )
    args = parser.parse_args()

    db_path = args.path or get_config().storage.path

    print(f"Initializing database at {db_path}...")
    with DatabaseManager(db_path) as db_manager:
        db_manager.init_db(drop_all=args.drop)
    print("Database initialized successfully!")


if __name__ == "__main__":
    main()
