"""Service layer for soutu bot business logic.

Services use SQLAlchemy ORM directly and return Pydantic DTOs from
soutu.utils.schemas. All of them are synchronous; async callers wrap them in
``asyncio.to_thread``.

Available services:
- kv_service: Key-value rows with per-entry expiry
- token_service: Opaque proxy access tokens (put, get, revoke)
- file_path_service: Cached Telegram file path resolution
- rate_limit_service: Fixed-window request counters
- edge_cache_service: Cached proxy responses keyed by resource id
- search_log_service: Audit rows for bot search replies
"""

from soutu.utils.services import (
    edge_cache_service,
    file_path_service,
    kv_service,
    rate_limit_service,
    search_log_service,
    token_service,
)

__all__ = [
    "edge_cache_service",
    "file_path_service",
    "kv_service",
    "rate_limit_service",
    "search_log_service",
    "token_service",
]
