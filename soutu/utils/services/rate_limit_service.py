"""Fixed-window rate limiting backed by the shared database.

Windows are aligned to the wall clock (``bucket = now // window``), so every
worker agrees on the current window without coordination. The check and the
increment happen in one conditional upsert; a counter that already reached
the limit is left untouched and the request is rejected.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from soutu.utils.models import RateCounterModel
from soutu.utils.session import get_session, upsert

logger = logging.getLogger(__name__)

ANONYMOUS_SUBJECT = "anon"


def window_bucket(now: int, window_seconds: int) -> int:
    return int(now) // int(window_seconds)


def counter_key(kind: str, value: str, bucket: int) -> str:
    return f"rate:{kind}:{value or ANONYMOUS_SUBJECT}:{bucket}"


def allow(
    kind: str,
    value: str,
    limit: int,
    window_seconds: int,
    now: Optional[int] = None,
) -> bool:
    """Count one request for ``(kind, value)`` in the current window.

    Args:
        kind: Subject family, e.g. ``"uid"`` or ``"ip"``.
        value: Subject value; empty values share the anonymous counter.
        limit: Maximum accepted requests per window.
        window_seconds: Window length in seconds.
        now: Current Unix time (defaults to the wall clock).

    Returns:
        True if the request fits in the window budget and was counted.
    """
    if limit <= 0:
        return False
    if window_seconds <= 0:
        raise ValueError("window_seconds must be positive")

    current = int(time.time()) if now is None else int(now)
    key = counter_key(kind, value, window_bucket(current, window_seconds))

    with get_session(commit=True) as session:
        stmt = upsert(session, RateCounterModel).values(
            key=key, count=1, expires_at=current + window_seconds
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RateCounterModel.key],
            set_={"count": RateCounterModel.count + 1},
            where=RateCounterModel.count < limit,
        )
        result = session.execute(stmt)
        allowed = result.rowcount > 0

    if not allowed:
        logger.info("Rate limit reached for %s:%s (limit=%d/%ds)", kind, value, limit, window_seconds)
    return allowed


def get_count(kind: str, value: str, window_seconds: int, now: Optional[int] = None) -> int:
    """Return how many requests were counted for the subject in the current window."""
    current = int(time.time()) if now is None else int(now)
    key = counter_key(kind, value, window_bucket(current, window_seconds))
    with get_session() as session:
        row = session.get(RateCounterModel, key)
        return row.count if row else 0


def purge_expired(now: Optional[int] = None) -> int:
    """Delete counters of past windows. Returns the number of rows removed."""
    current = int(time.time()) if now is None else int(now)
    with get_session(commit=True) as session:
        deleted = (
            session.query(RateCounterModel)
            .filter(RateCounterModel.expires_at <= current)
            .delete(synchronize_session=False)
        )
    if deleted:
        logger.info("Purged %d expired rate counters", deleted)
    return deleted
