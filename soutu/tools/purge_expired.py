#!/usr/bin/env python3
"""Delete expired rows from the shared key-value, rate counter and edge cache tables.

Reads already ignore expired rows, so this only reclaims space. Safe to run
from cron while the bot and API are serving.

Usage:
    python -m soutu.tools.purge_expired [--dry-run]

Options:
    --dry-run   Report how many rows are expired without deleting them
"""

import argparse
import logging
import sys
import time

from soutu.tools._common import initialize_tool_database
from soutu.utils.models import EdgeResponseModel, KeyValueModel, RateCounterModel
from soutu.utils.services import edge_cache_service, kv_service, rate_limit_service
from soutu.utils.session import get_session

logger = logging.getLogger(__name__)


def count_expired(now: int) -> dict:
    """Count expired rows per table without touching them."""
    with get_session() as session:
        return {
            "kv_store": session.query(KeyValueModel)
            .filter(KeyValueModel.expires_at.is_not(None), KeyValueModel.expires_at <= now)
            .count(),
            "rate_counters": session.query(RateCounterModel)
            .filter(RateCounterModel.expires_at <= now)
            .count(),
            "edge_responses": session.query(EdgeResponseModel)
            .filter(EdgeResponseModel.expires_at <= now)
            .count(),
        }


def purge_expired(dry_run: bool = False, now: int = None) -> dict:
    """
    Delete expired rows from every table with an expiry column.

    Args:
        dry_run: If True, only count what would be deleted
        now: Unix time to compare against (defaults to the current time)

    Returns:
        Dictionary with counts of deleted (or deletable) rows per table
    """
    current = int(time.time()) if now is None else int(now)
    if dry_run:
        return count_expired(current)

    return {
        "kv_store": kv_service.purge_expired(now=current),
        "rate_counters": rate_limit_service.purge_expired(now=current),
        "edge_responses": edge_cache_service.purge_expired(now=current),
    }


def main():
    parser = argparse.ArgumentParser(
        description="Delete expired tokens, file paths, rate counters and cached responses."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    args = parser.parse_args()

    if args.dry_run:
        logger.info("Running in DRY RUN mode - no changes will be made")

    initialize_tool_database()
    counts = purge_expired(dry_run=args.dry_run)

    action = "Would delete" if args.dry_run else "Deleted"
    logger.info(f"{action} {sum(counts.values())} expired rows")
    for table, count in counts.items():
        if count > 0:
            logger.info(f"  - {table}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
