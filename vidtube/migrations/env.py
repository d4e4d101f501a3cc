"""
vidtube/migrations/env.py: Alembic environment for the VidTube schema.

The target database comes from DATABASE_URL, or TEST_DATABASE_URL when
TEST_RUN is set. Both may live in the project-root .env file.
"""

from __future__ import annotations

import os
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

# Every model module must be imported so db.metadata knows all tables.
from vidtube.app.extensions import db  # noqa: E402
from vidtube.app.models import (  # noqa: E402,F401
    comment,
    like,
    playlist,
    subscription,
    tweet,
    user,
    video,
    watch_history,
)


def _database_url() -> str:
    key = "TEST_DATABASE_URL" if os.getenv("TEST_RUN") else "DATABASE_URL"
    url = os.environ[key]
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


def _configure(**kwargs) -> None:
    context.configure(target_metadata=db.metadata, compare_type=True, **kwargs)


config = context.config
config.set_main_option("sqlalchemy.url", _database_url())
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline() -> None:
    """Emits SQL to stdout instead of connecting."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        # SQLite cannot ALTER constraints in place.
        _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
