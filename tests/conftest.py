"""
Shared fixtures.

Every test gets its own file-backed SQLite database: NullPool hands each
session a separate connection, so concurrent transactions really compete
for the database the way separate requests do.
"""

import httpx
import pytest_asyncio

from tinylink.api.dependencies import get_link_store
from tinylink.db.session import create_tables, make_session_maker
from tinylink.db.sqlite_adapter import SQLiteAdapter
from tinylink.main import app
from tinylink.services.link_store import LinkStore


@pytest_asyncio.fixture
async def engine(tmp_path):
    adapter = SQLiteAdapter()
    engine = adapter.create_engine(f"sqlite+aiosqlite:///{tmp_path / 'links.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine):
    return LinkStore(make_session_maker(engine), SQLiteAdapter())


@pytest_asyncio.fixture
async def client(store):
    app.dependency_overrides[get_link_store] = lambda: store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
