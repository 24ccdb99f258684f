"""
Alembic Environment Configuration

Runs migrations against the database named by DATABASE_URL. The service
talks to the database through async drivers; migrations use the matching
sync driver instead.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection, make_url
from sqlmodel import SQLModel

from tinylink.core.setting import settings
from tinylink.db import models  # noqa: F401  (registers tables on SQLModel.metadata)

# async driver -> sync driver used for migrations
SYNC_DRIVERS = {
    "sqlite+aiosqlite": "sqlite",
    "postgresql+asyncpg": "postgresql+psycopg2",
}

config = context.config


def get_sync_url(database_url: str) -> str:
    url = make_url(database_url)
    sync_driver = SYNC_DRIVERS.get(url.drivername, url.drivername)
    return url.set(drivername=sync_driver).render_as_string(hide_password=False)


database_url = get_sync_url(settings.DATABASE_URL)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a connection."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        do_run_migrations(connection)

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
