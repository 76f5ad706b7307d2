"""SQLAlchemy ORM models for the soutu bot database.

This module defines all database tables using SQLAlchemy declarative ORM.
Every table that backs short-lived state carries an ``expires_at`` column
(Unix seconds); rows past that point are treated as absent by the services.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Boolean, Index, Integer, LargeBinary, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class KeyValueModel(Base):
    """Generic key-value row with an optional expiry timestamp."""

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expires_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (Index("idx_kv_store_expires_at", "expires_at"),)

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class RateCounterModel(Base):
    """Request counter for one subject within one fixed rate-limit window."""

    __tablename__ = "rate_counters"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_rate_counters_expires_at", "expires_at"),)


class EdgeResponseModel(Base):
    """Cached proxy response, keyed by the resource identifier only."""

    __tablename__ = "edge_responses"

    resource_id: Mapped[str] = mapped_column(Text, primary_key=True)
    body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    headers: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    stored_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_edge_responses_expires_at", "expires_at"),)


class SearchLogModel(Base):
    """One image search reply sent by the bot."""

    __tablename__ = "search_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    chat_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_search_logs_user_id", "user_id"),
        Index("idx_search_logs_timestamp", "timestamp"),
    )
