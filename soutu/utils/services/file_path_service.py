"""File path service: caches the upstream download path of Telegram files.

Paths are looked up by ``file_id`` first and by ``file_unique_id`` second.
On a full miss the resolver is asked once; the result is written back under
both keys. Resolution is idempotent, so concurrent misses simply race and the
last write wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from soutu.settings.constants import FILE_PATH_CACHE_TTL
from soutu.utils.errors import FileReferenceNotFound
from soutu.utils.services import kv_service

logger = logging.getLogger(__name__)

FILE_KEY_PREFIX = "tg:file:"
UNIQUE_KEY_PREFIX = "tg:unique:"


class FilePathResolver(Protocol):
    async def resolve(self, file_id: str) -> str:
        """Return the upstream path for *file_id* or raise FileReferenceNotFound."""
        ...


def get_cached_file_path(file_id: str, file_unique_id: str = "") -> Optional[str]:
    """Return a cached path by primary key, then by the alternate key."""
    path = kv_service.kv_get(f"{FILE_KEY_PREFIX}{file_id}")
    if not path and file_unique_id:
        path = kv_service.kv_get(f"{UNIQUE_KEY_PREFIX}{file_unique_id}")
    return path or None


def cache_file_path(
    file_id: str, file_path: str, file_unique_id: str = "", ttl_seconds: int = FILE_PATH_CACHE_TTL
) -> None:
    kv_service.kv_put(f"{FILE_KEY_PREFIX}{file_id}", file_path, ttl_seconds)
    if file_unique_id:
        kv_service.kv_put(f"{UNIQUE_KEY_PREFIX}{file_unique_id}", file_path, ttl_seconds)


async def resolve_file_path(
    file_id: str,
    resolver: FilePathResolver,
    file_unique_id: str = "",
    ttl_seconds: int = FILE_PATH_CACHE_TTL,
) -> str:
    """Resolve the upstream path for *file_id*, consulting the cache first.

    Args:
        file_id: Telegram file identifier.
        resolver: Collaborator that asks the upstream provider on a cache miss.
        file_unique_id: Optional stable identifier used as a secondary cache key.
        ttl_seconds: Lifetime of the cache entries written on success.

    Raises:
        FileReferenceNotFound: If the upstream reports no path for the file.
    """
    file_path = await asyncio.to_thread(get_cached_file_path, file_id, file_unique_id)
    if not file_path:
        logger.debug("File path cache miss for %s", file_id)
        file_path = await resolver.resolve(file_id)
        if not file_path:
            raise FileReferenceNotFound(f"No file path for {file_id}")

    await asyncio.to_thread(cache_file_path, file_id, file_path, file_unique_id, ttl_seconds)
    return file_path


def forget_file_path(file_id: str) -> bool:
    """Drop the cached path for *file_id*. Returns True if one existed."""
    removed = kv_service.kv_delete(f"{FILE_KEY_PREFIX}{file_id}")
    if removed:
        logger.info("Forgot cached file path for %s", file_id)
    return removed
