"""Database startup: connection settings and Alembic migrations.

Business logic lives in ``soutu.utils.services``; this module only prepares the
database the services run against.
"""

import logging
import os
from typing import Optional

from alembic import command
from alembic.config import Config

from soutu.utils.session import get_database_url, initialize_session

logger = logging.getLogger(__name__)

PACKAGE_ROOT = os.path.dirname(os.path.dirname(__file__))
ALEMBIC_INI_PATH = os.path.join(PACKAGE_ROOT, "alembic.ini")
ALEMBIC_SCRIPT_LOCATION = os.path.join(PACKAGE_ROOT, "alembic")


def initialize_database(
    pool_size: int = 6,
    timeout_seconds: int = 30,
    busy_timeout_ms: int = 5000,
    database_url: Optional[str] = None,
) -> None:
    """
    Point the session layer at the configured database.

    Args:
        pool_size: Connection pool size (PostgreSQL)
        timeout_seconds: Connection / pool checkout timeout in seconds
        busy_timeout_ms: SQLite busy timeout in milliseconds
        database_url: SQLAlchemy URL; the SQLite file at DB_PATH when empty
    """
    initialize_session(pool_size, timeout_seconds, busy_timeout_ms, database_url)


def _get_alembic_config() -> Config:
    config = Config(ALEMBIC_INI_PATH)
    config.set_main_option("script_location", ALEMBIC_SCRIPT_LOCATION)
    # ConfigParser interpolation treats "%" specially (URL-encoded passwords)
    config.set_main_option("sqlalchemy.url", get_database_url().replace("%", "%%"))
    return config


def run_migrations() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    try:
        command.upgrade(_get_alembic_config(), "head")
    except Exception:
        logger.exception("Failed to apply database migrations")
        raise
    logger.info("Database schema is up to date")
