"""
Tests for the link store, including its behavior under concurrent
resolutions and deletions.
"""

import asyncio
import logging

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from tinylink.core.exceptions import CodeConflictError, LinkNotFoundError, StoreFailureError
from tinylink.db.session import make_session_maker
from tinylink.db.sqlite_adapter import SQLiteAdapter
from tinylink.services.link_store import LinkStore


class TestInsertAndLookup:
    """Tests for conditional insert and lookup."""

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        """A fresh link reads back with its URL and untouched counters."""
        created = await store.insert_if_absent("abc123", "https://example.com/a")
        assert created.clicks == 0
        assert created.last_clicked is None

        found = await store.lookup("abc123")
        assert found is not None
        assert found.code == "abc123"
        assert found.url == "https://example.com/a"
        assert found.clicks == 0
        assert found.last_clicked is None
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_lookup_missing(self, store):
        assert await store.lookup("nope00") is None

    @pytest.mark.asyncio
    async def test_insert_existing_code_conflicts(self, store):
        await store.insert_if_absent("abc123", "https://example.com/a")

        with pytest.raises(CodeConflictError):
            await store.insert_if_absent("abc123", "https://example.com/b")

        found = await store.lookup("abc123")
        assert found.url == "https://example.com/a"

    @pytest.mark.asyncio
    async def test_concurrent_inserts_of_same_code(self, store):
        """Exactly one of several racing inserts wins."""
        results = await asyncio.gather(
            *(store.insert_if_absent("race01", f"https://example.com/{i}") for i in range(10)),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, CodeConflictError)]
        assert len(winners) == 1
        assert len(conflicts) == 9
        assert (await store.lookup("race01")).url == winners[0].url


class TestResolveAndIncrement:
    """Tests for the atomic resolve-and-count transaction."""

    @pytest.mark.asyncio
    async def test_resolve_counts_click(self, store):
        await store.insert_if_absent("abc123", "https://example.com/a")

        url = await store.resolve_and_increment("abc123")

        assert url == "https://example.com/a"
        link = await store.lookup("abc123")
        assert link.clicks == 1
        assert link.last_clicked is not None

    @pytest.mark.asyncio
    async def test_last_clicked_moves_forward(self, store):
        await store.insert_if_absent("abc123", "https://example.com/a")

        await store.resolve_and_increment("abc123")
        first = (await store.lookup("abc123")).last_clicked
        await store.resolve_and_increment("abc123")
        second = (await store.lookup("abc123")).last_clicked

        assert second >= first

    @pytest.mark.asyncio
    async def test_resolve_missing(self, store):
        with pytest.raises(LinkNotFoundError):
            await store.resolve_and_increment("nope00")

    @pytest.mark.asyncio
    async def test_concurrent_resolutions_lose_no_clicks(self, store):
        """50 simultaneous resolutions all succeed and all are counted."""
        await store.insert_if_absent("hot001", "https://example.com/hot")

        urls = await asyncio.gather(
            *(store.resolve_and_increment("hot001") for _ in range(50))
        )

        assert urls == ["https://example.com/hot"] * 50
        assert (await store.lookup("hot001")).clicks == 50

    @pytest.mark.asyncio
    async def test_concurrent_resolutions_add_to_existing_count(self, store):
        await store.insert_if_absent("hot002", "https://example.com/hot")
        for _ in range(3):
            await store.resolve_and_increment("hot002")

        await asyncio.gather(*(store.resolve_and_increment("hot002") for _ in range(20)))

        assert (await store.lookup("hot002")).clicks == 23

    @pytest.mark.asyncio
    async def test_resolutions_racing_delete(self, store):
        """Each in-flight resolution either completes or reports not found."""
        await store.insert_if_absent("gone01", "https://example.com/gone")

        resolutions = [store.resolve_and_increment("gone01") for _ in range(20)]
        results = await asyncio.gather(
            *resolutions[:10],
            store.delete("gone01"),
            *resolutions[10:],
            return_exceptions=True,
        )

        deleted = results[10]
        outcomes = results[:10] + results[11:]
        assert deleted is True
        for outcome in outcomes:
            assert outcome == "https://example.com/gone" or isinstance(outcome, LinkNotFoundError)

        assert await store.lookup("gone01") is None
        with pytest.raises(LinkNotFoundError):
            await store.resolve_and_increment("gone01")

    @pytest.mark.asyncio
    async def test_database_failure_is_store_failure(self, tmp_path):
        """Without a links table every operation fails as StoreFailureError."""
        adapter = SQLiteAdapter()
        engine = adapter.create_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        broken = LinkStore(make_session_maker(engine), adapter)
        try:
            with pytest.raises(StoreFailureError):
                await broken.resolve_and_increment("abc123")
            with pytest.raises(StoreFailureError):
                await broken.insert_if_absent("abc123", "https://example.com")
            with pytest.raises(StoreFailureError):
                await broken.lookup("abc123")
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_failed_commit_leaves_count_unchanged(self, engine, store, caplog):
        await store.insert_if_absent("abc123", "https://example.com/a")

        def fail_commit(conn):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        event.listen(engine.sync_engine, "commit", fail_commit)
        try:
            with caplog.at_level(logging.ERROR, logger="tinylink.services.link_store"):
                with pytest.raises(StoreFailureError):
                    await store.resolve_and_increment("abc123")
        finally:
            event.remove(engine.sync_engine, "commit", fail_commit)

        assert "on sqlite" in caplog.text
        link = await store.lookup("abc123")
        assert link.clicks == 0
        assert link.last_clicked is None

        assert await store.resolve_and_increment("abc123") == "https://example.com/a"
        assert (await store.lookup("abc123")).clicks == 1


class TestDeleteAndList:
    """Tests for deleting and listing links."""

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.insert_if_absent("abc123", "https://example.com/a")

        assert await store.delete("abc123") is True
        assert await store.delete("abc123") is False
        assert await store.lookup("abc123") is None

    @pytest.mark.asyncio
    async def test_deleted_code_can_be_inserted_again(self, store):
        await store.insert_if_absent("abc123", "https://example.com/a")
        await store.delete("abc123")

        link = await store.insert_if_absent("abc123", "https://example.com/b")

        assert link.url == "https://example.com/b"
        assert link.clicks == 0

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store):
        for code in ["first1", "second", "third3"]:
            await store.insert_if_absent(code, f"https://example.com/{code}")

        links = await store.list_links()

        assert [link.code for link in links] == ["third3", "second", "first1"]

    @pytest.mark.asyncio
    async def test_list_empty(self, store):
        assert list(await store.list_links()) == []
