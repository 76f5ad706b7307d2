"""Token service for opaque proxy access tokens.

Each token maps to the ``(file_id, user_id)`` pair it was issued for and
expires together with the signed link that carries it.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from soutu.utils.schemas import ProxyToken
from soutu.utils.services import kv_service

logger = logging.getLogger(__name__)

TOKEN_KEY_PREFIX = "image_token:"
TOKEN_BYTES = 16


def generate_token() -> str:
    """Return a fresh URL-safe token with 128 bits of entropy."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def _token_key(token: str) -> str:
    return f"{TOKEN_KEY_PREFIX}{token}"


def put_token(
    token: str, file_id: str, user_id: str, ttl_seconds: int, now: Optional[int] = None
) -> None:
    """Bind *token* to ``(file_id, user_id)`` for *ttl_seconds*.

    Storage errors propagate; issuing a link without its token is never acceptable.
    """
    payload = ProxyToken(file_id=file_id, user_id=str(user_id or ""))
    kv_service.kv_put(_token_key(token), payload.to_json(), ttl_seconds, now=now)


def get_token(token: str, now: Optional[int] = None) -> Optional[ProxyToken]:
    """Return the binding for *token*, or None if unknown, expired or malformed."""
    if not token:
        return None
    raw = kv_service.kv_get(_token_key(token), now=now)
    if not raw:
        return None
    data = ProxyToken.from_json(raw)
    if data is None:
        logger.warning("Discarding malformed proxy token payload for %s...", token[:6])
    return data


def revoke_token(token: str) -> bool:
    """Revoke *token* immediately. Returns True if it existed."""
    if not token:
        return False
    removed = kv_service.kv_delete(_token_key(token))
    if removed:
        logger.info("Revoked proxy token %s...", token[:6])
    return removed
