"""Pydantic schemas (DTOs) for data transfer between services and callers.

These schemas are decoupled from the ORM models and provide a clean
interface for serialization and validation.
"""

from __future__ import annotations

import json
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError


class ProxyToken(BaseModel):
    """Server-side binding of an opaque access token."""

    file_id: str
    user_id: str = ""

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> Optional["ProxyToken"]:
        """Parse a stored token payload, returning None for malformed data."""
        try:
            return cls.model_validate_json(raw)
        except ValidationError:
            return None


class CachedResponse(BaseModel):
    """A response held in the edge cache."""

    resource_id: str
    body: bytes
    headers: Dict[str, str] = Field(default_factory=dict)
    stored_at: int
    expires_at: int

    @classmethod
    def from_orm(cls, row) -> "CachedResponse":
        """Convert an EdgeResponseModel ORM object to a CachedResponse schema."""
        try:
            headers = json.loads(row.headers or "{}")
        except json.JSONDecodeError:
            headers = {}
        return cls(
            resource_id=row.resource_id,
            body=row.body,
            headers={str(k): str(v) for k, v in headers.items()},
            stored_at=row.stored_at,
            expires_at=row.expires_at,
        )


class ImageInfo(BaseModel):
    """Telegram file reference of an image attached to a message."""

    file_id: str
    file_unique_id: str = ""


class SearchLinks(BaseModel):
    """Reverse image search links for a public image URL."""

    image_url: str
    google: str
    yandex: str

    def for_engine(self, engine: str) -> Optional[str]:
        return {"google": self.google, "yandex": self.yandex}.get(engine)
