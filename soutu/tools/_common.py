"""Shared setup for maintenance scripts."""

from soutu import config
from soutu.utils import database


def initialize_tool_database() -> None:
    """Point the session layer at the configured database and bring it up to date."""
    database.initialize_database(
        config.DB_POOL_SIZE,
        config.DB_TIMEOUT_SECONDS,
        config.DB_BUSY_TIMEOUT_MS,
        config.DATABASE_URL,
    )
    database.run_migrations()
