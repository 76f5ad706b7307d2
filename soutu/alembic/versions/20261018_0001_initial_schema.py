"""Initial schema

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

Creates the shared state tables used by the media proxy (key-value rows,
rate counters, edge responses) and the bot's search log.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "kv_store",
        sa.Column("key", sa.Text(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("expires_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("idx_kv_store_expires_at", "kv_store", ["expires_at"])

    op.create_table(
        "rate_counters",
        sa.Column("key", sa.Text(), primary_key=True),
        sa.Column("count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("idx_rate_counters_expires_at", "rate_counters", ["expires_at"])

    op.create_table(
        "edge_responses",
        sa.Column("resource_id", sa.Text(), primary_key=True),
        sa.Column("body", sa.LargeBinary(), nullable=False),
        sa.Column("headers", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("stored_at", sa.BigInteger(), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("idx_edge_responses_expires_at", "edge_responses", ["expires_at"])

    op.create_table(
        "search_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("chat_type", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("idx_search_logs_user_id", "search_logs", ["user_id"])
    op.create_index("idx_search_logs_timestamp", "search_logs", ["timestamp"])


def downgrade() -> None:
    op.drop_index("idx_search_logs_timestamp", table_name="search_logs")
    op.drop_index("idx_search_logs_user_id", table_name="search_logs")
    op.drop_table("search_logs")
    op.drop_index("idx_edge_responses_expires_at", table_name="edge_responses")
    op.drop_table("edge_responses")
    op.drop_index("idx_rate_counters_expires_at", table_name="rate_counters")
    op.drop_table("rate_counters")
    op.drop_index("idx_kv_store_expires_at", table_name="kv_store")
    op.drop_table("kv_store")
