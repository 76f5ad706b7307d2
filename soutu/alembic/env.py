"""Alembic environment configuration.

The application passes its database URL in through
``soutu.utils.database._get_alembic_config``; ``DATABASE_URL`` in the
environment overrides it when migrations are run from the command line.
"""

import os

from sqlalchemy import engine_from_config, pool

from alembic import context

from soutu.utils.models import Base

config = context.config

target_metadata = Base.metadata


def _maybe_override_alembic_url_from_env() -> None:
    """Override alembic.ini sqlalchemy.url from env when configured."""
    raw = os.environ.get("DATABASE_URL")
    if raw:
        config.set_main_option("sqlalchemy.url", raw.strip())


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    _maybe_override_alembic_url_from_env()
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    _maybe_override_alembic_url_from_env()
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
