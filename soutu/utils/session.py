"""SQLAlchemy engine and session handling shared by the bot and the API.

Tokens, rate counters and cached responses must be visible to every worker of
both processes, so all of them live in one database reached through here.
SQLite (the default, a file at ``DB_PATH``) and PostgreSQL are supported.
"""

from __future__ import annotations

import atexit
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from soutu.settings.constants import DB_PATH
from soutu.utils.models import Base

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 6
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_BUSY_TIMEOUT_MS = 5000


def _positive(value: int, default: int, name: str) -> int:
    if value <= 0:
        logger.warning("%s must be positive; falling back to %d", name, default)
        return default
    return value


@dataclass(frozen=True)
class SessionConfig:
    """Connection settings; non-positive numbers fall back to the defaults."""

    pool_size: int = DEFAULT_POOL_SIZE
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    database_url: Optional[str] = None

    @classmethod
    def build(
        cls,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        database_url: Optional[str] = None,
    ) -> "SessionConfig":
        return cls(
            pool_size=_positive(pool_size, DEFAULT_POOL_SIZE, "pool_size"),
            timeout_seconds=_positive(timeout_seconds, DEFAULT_TIMEOUT_SECONDS, "timeout_seconds"),
            busy_timeout_ms=_positive(busy_timeout_ms, DEFAULT_BUSY_TIMEOUT_MS, "busy_timeout_ms"),
            database_url=(database_url or "").strip() or None,
        )


_config: Optional[SessionConfig] = None
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _get_config() -> SessionConfig:
    global _config
    if _config is None:
        _config = SessionConfig()
        logger.warning("Session not explicitly initialized; using default configuration")
    return _config


def get_database_url() -> str:
    """Configured database URL, or the SQLite file at DB_PATH."""
    url = _get_config().database_url
    if url:
        return url
    directory = os.path.dirname(DB_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return f"sqlite:///{DB_PATH}"


def _engine_options(url: str, config: SessionConfig) -> Dict[str, Any]:
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if make_url(url).get_backend_name() == "sqlite":
        # A connection may be used from the asyncio.to_thread worker pool
        options["connect_args"] = {"check_same_thread": False, "timeout": config.timeout_seconds}
        return options
    options["pool_size"] = config.pool_size
    options["pool_timeout"] = config.timeout_seconds
    return options


def _apply_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute(f"PRAGMA busy_timeout={_get_config().busy_timeout_ms}")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def get_engine() -> Engine:
    """Get or lazily create the process-wide engine."""
    global _engine
    if _engine is None:
        config = _get_config()
        url = get_database_url()
        _engine = create_engine(url, **_engine_options(url, config))
        if _engine.dialect.name == "sqlite":
            event.listen(_engine, "connect", _apply_sqlite_pragmas)
        logger.info("SQLAlchemy engine created for %s", _engine.dialect.name)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def initialize_session(
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
    database_url: Optional[str] = None,
) -> None:
    """
    Set the connection settings, discarding any engine built with older ones.

    Call once at startup, before the first database operation.
    """
    global _config, _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None

    _config = SessionConfig.build(pool_size, timeout_seconds, busy_timeout_ms, database_url)
    logger.info(
        "Session initialized (pool_size=%d, timeout_seconds=%d, busy_timeout_ms=%d)",
        _config.pool_size,
        _config.timeout_seconds,
        _config.busy_timeout_ms,
    )


@contextmanager
def get_session(commit: bool = False) -> Generator[Session, None, None]:
    """
    Context manager that provides a transactional session.

    Args:
        commit: If True, commits on successful exit; otherwise only flushes.

    Example:
        with get_session(commit=True) as session:
            session.add(KeyValueModel(key="k", value="v"))
    """
    session = get_session_factory()()
    try:
        yield session
        if commit:
            session.commit()
        else:
            session.flush()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def upsert(session: Session, model):
    """INSERT for *model* supporting ``on_conflict_do_update`` on SQLite and PostgreSQL."""
    if session.get_bind().dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)


def create_all_tables() -> None:
    """Create every table from the models, bypassing Alembic. Used by tests."""
    Base.metadata.create_all(get_engine())


def _dispose_engine() -> None:
    if _engine is not None:
        _engine.dispose()


atexit.register(_dispose_engine)
