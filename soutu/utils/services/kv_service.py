"""Key-value service with per-entry expiry.

Rows carry an ``expires_at`` timestamp; reads treat expired rows as absent and
delete them on the spot. All processes share the same table, so values written
by the bot are visible to every API worker.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from soutu.utils.models import KeyValueModel
from soutu.utils.session import get_session, upsert

logger = logging.getLogger(__name__)


def _now(now: Optional[int]) -> int:
    return int(time.time()) if now is None else int(now)


def kv_get(key: str, now: Optional[int] = None) -> Optional[str]:
    """Return the value stored under *key*, or None if absent or expired."""
    current = _now(now)
    with get_session(commit=True) as session:
        row = session.get(KeyValueModel, key)
        if row is None:
            return None
        if row.is_expired(current):
            session.delete(row)
            logger.debug("Purged expired kv entry %s", key)
            return None
        return row.value


def kv_put(key: str, value: str, ttl_seconds: Optional[int] = None, now: Optional[int] = None) -> None:
    """Insert or replace *key* with *value*.

    A *ttl_seconds* of None stores the value without expiry. A TTL of zero or
    less stores nothing and removes any previous value, so a disabled cache
    never keeps serving old entries.
    """
    if ttl_seconds is not None and int(ttl_seconds) <= 0:
        kv_delete(key)
        return
    expires_at = None if ttl_seconds is None else _now(now) + int(ttl_seconds)
    with get_session(commit=True) as session:
        stmt = upsert(session, KeyValueModel).values(key=key, value=str(value), expires_at=expires_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[KeyValueModel.key],
            set_={"value": stmt.excluded.value, "expires_at": stmt.excluded.expires_at},
        )
        session.execute(stmt)


def kv_delete(key: str) -> bool:
    """Delete *key*. Returns True if a row was removed."""
    with get_session(commit=True) as session:
        deleted = session.query(KeyValueModel).filter(KeyValueModel.key == key).delete()
        return deleted > 0


def purge_expired(now: Optional[int] = None) -> int:
    """Delete every expired row. Returns the number of rows removed."""
    current = _now(now)
    with get_session(commit=True) as session:
        deleted = (
            session.query(KeyValueModel)
            .filter(KeyValueModel.expires_at.is_not(None), KeyValueModel.expires_at <= current)
            .delete(synchronize_session=False)
        )
    if deleted:
        logger.info("Purged %d expired kv entries", deleted)
    return deleted
