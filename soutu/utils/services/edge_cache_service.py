"""Edge cache service for proxied media responses.

Entries are keyed by the resource identifier alone. Tokens, expiry and
signatures of the request that populated an entry play no part in the key,
so one successful fetch serves every later valid request for that resource
until the entry expires.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Dict, Optional

from soutu.utils.models import EdgeResponseModel
from soutu.utils.schemas import CachedResponse
from soutu.utils.session import get_session, upsert

logger = logging.getLogger(__name__)


def get_cached_response(resource_id: str, now: Optional[int] = None) -> Optional[CachedResponse]:
    """Return the cached response for *resource_id*, or None if absent or expired."""
    current = int(time.time()) if now is None else int(now)
    with get_session(commit=True) as session:
        row = session.get(EdgeResponseModel, resource_id)
        if row is None:
            return None
        if row.expires_at <= current:
            session.delete(row)
            return None
        return CachedResponse.from_orm(row)


def store_response(
    resource_id: str,
    body: bytes,
    headers: Dict[str, str],
    ttl_seconds: int,
    now: Optional[int] = None,
) -> None:
    """Store a response under *resource_id*, replacing any previous entry."""
    if ttl_seconds <= 0:
        return
    current = int(time.time()) if now is None else int(now)
    values = {
        "resource_id": resource_id,
        "body": body,
        "headers": json.dumps(headers),
        "stored_at": current,
        "expires_at": current + ttl_seconds,
    }
    with get_session(commit=True) as session:
        stmt = upsert(session, EdgeResponseModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[EdgeResponseModel.resource_id],
            set_={name: getattr(stmt.excluded, name) for name in values if name != "resource_id"},
        )
        session.execute(stmt)
    logger.debug("Cached %d bytes for %s (ttl=%ds)", len(body), resource_id, ttl_seconds)


def evict(resource_id: str) -> bool:
    """Drop the cached response for *resource_id*. Returns True if one existed."""
    with get_session(commit=True) as session:
        deleted = (
            session.query(EdgeResponseModel)
            .filter(EdgeResponseModel.resource_id == resource_id)
            .delete()
        )
        return deleted > 0


def purge_expired(now: Optional[int] = None) -> int:
    """Delete expired cache entries. Returns the number of rows removed."""
    current = int(time.time()) if now is None else int(now)
    with get_session(commit=True) as session:
        deleted = (
            session.query(EdgeResponseModel)
            .filter(EdgeResponseModel.expires_at <= current)
            .delete(synchronize_session=False)
        )
    if deleted:
        logger.info("Purged %d expired edge cache entries", deleted)
    return deleted
