#!/usr/bin/env python3
"""
Run one prewarm pass: aggregate every configured group into the cache.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from feed_aggregator.config import get_config
from feed_aggregator.core.scheduler import create_scheduler
from feed_aggregator.core.services import create_group_service
from feed_aggregator.logger import setup_logger
from feed_aggregator.storage.kv import create_store


def main() -> None:
    """Refresh every group once and print a summary."""
    import argparse

    parser = argparse.ArgumentParser(description="Prewarm cached group results")
    parser.add_argument("--limit", type=int, default=None, help="Item limit per group")
    args = parser.parse_args()

    config = get_config()
    setup_logger(log_config=config.logging)

    if args.limit is not None:
        config.scheduler.prewarm_limit = args.limit

    service = create_group_service(create_store(config.storage), config)
    report = create_scheduler(service, config.scheduler).run_once()

    for group in report.refreshed:
        print(f"Refreshed: {group}")
    for group, error in report.failed.items():
        print(f"Failed: {group} ({error})")

    print(f"\n{len(report.refreshed)}/{report.total_groups} groups refreshed")


if __name__ == "__main__":
    main()
