"""
Database Session Management with Connection Pooling

This module owns the process-wide persistence handle: one async engine and
one session factory, shared by every request. The link store opens a session
per operation from this factory.

The database adapter pattern allows us to:
- Use SQLite by default
- Switch to PostgreSQL by changing DATABASE_URL (no code changes needed)
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from tinylink.core.setting import settings
from tinylink.db.factory import get_database_adapter
from tinylink.db import models  # noqa: F401  (registers tables on SQLModel.metadata)

db_adapter = get_database_adapter(settings.DATABASE_URL, use_ssl=settings.DATABASE_SSL)

# The adapter handles all database-specific configuration
engine = db_adapter.create_engine(settings.DATABASE_URL)


def make_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    """
    Create an async session factory bound to an engine.

    expire_on_commit=False keeps returned Link objects readable after their
    session has closed.
    """
    return async_sessionmaker(
        bind,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_session_maker = make_session_maker(engine)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create any missing tables from the SQLModel metadata."""
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
