"""
Link Store

Persistence collaborator for the allocator and the resolver. Every operation
runs in its own session and transaction drawn from the shared session
factory; the store keeps no in-process state, so any number of service
instances can share one database.

Operations:
- lookup: point read
- insert_if_absent: insert relying on the primary key for atomicity
- resolve_and_increment: read URL, bump clicks and last_clicked in one unit
- delete / list_links: plain row operations

Every SQLAlchemy error is rolled back and re-raised as StoreFailureError,
except a uniqueness violation on insert, which becomes CodeConflictError.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import DateTime, case, delete, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from tinylink.core.exceptions import CodeConflictError, LinkNotFoundError, StoreFailureError
from tinylink.db.interface import DatabaseAdapter
from tinylink.db.models import Link

logger = logging.getLogger(__name__)


class LinkStore:
    """
    Table of links keyed by code.

    The store is safe to share between concurrent requests: it only holds
    the session factory and the dialect adapter.
    """

    def __init__(self, session_maker: async_sessionmaker, adapter: DatabaseAdapter):
        """
        Args:
            session_maker: Shared async session factory (the persistence handle)
            adapter: Dialect adapter supplying the row-lock clause
        """
        self.session_maker = session_maker
        self.adapter = adapter

    async def lookup(self, code: str) -> Optional[Link]:
        """
        Fetch a link by code.

        Returns:
            Link if found, None otherwise

        Raises:
            StoreFailureError: If the query fails
        """
        try:
            async with self.session_maker() as session:
                result = await session.execute(select(Link).where(Link.code == code))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Lookup failed for {code}: {e}", exc_info=True)
            raise StoreFailureError(f"lookup of '{code}' failed", original_error=e)

    async def insert_if_absent(self, code: str, url: str) -> Link:
        """
        Insert a new link unless the code is already taken.

        The primary key makes this atomic: of two concurrent inserts of the
        same code exactly one commits.

        Returns:
            The stored Link (clicks=0, last_clicked=None)

        Raises:
            CodeConflictError: If the code already exists
            StoreFailureError: If the insert fails for any other reason
        """
        link = Link(
            code=code,
            url=url,
            clicks=0,
            last_clicked=None,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    session.add(link)
        except IntegrityError:
            raise CodeConflictError(code)
        except SQLAlchemyError as e:
            logger.error(f"Insert failed for {code}: {e}", exc_info=True)
            raise StoreFailureError(f"insert of '{code}' failed", original_error=e)

        return link

    async def resolve_and_increment(self, code: str) -> str:
        """
        Read the URL of a code and count one click, atomically.

        Runs a single transaction: lock the row (where the backend supports
        row locks), read the URL, increment clicks and stamp last_clicked.
        The increment is relative (clicks = clicks + 1) so concurrent
        resolutions never lose an update. If the UPDATE matches no row, the
        link was deleted after it was read; the transaction is rolled back
        and the code reported as not found, never half-applied.

        last_clicked only moves forward: a transaction committing with an
        older timestamp than the stored one keeps the stored value.

        Returns:
            The URL read inside the transaction

        Raises:
            LinkNotFoundError: If the code is absent or was deleted concurrently
            StoreFailureError: If the database fails; nothing is committed
        """
        now = literal(datetime.now(timezone.utc), DateTime(timezone=True))
        read_url = self.adapter.lock_for_update(select(Link.url).where(Link.code == code))
        increment = (
            update(Link)
            .where(Link.code == code)
            .values(
                clicks=Link.clicks + 1,
                last_clicked=case(
                    (Link.last_clicked.is_(None), now),
                    (Link.last_clicked < now, now),
                    else_=Link.last_clicked,
                ),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            async with self.session_maker() as session:
                async with session.begin():
                    url = (await session.execute(read_url)).scalar_one_or_none()
                    if url is None:
                        raise LinkNotFoundError(code)

                    result = await session.execute(increment)
                    if result.rowcount != 1:
                        logger.info(
                            f"{code} deleted between read and update "
                            f"on {self.adapter.get_dialect_name()}, rolled back"
                        )
                        raise LinkNotFoundError(code)
        except SQLAlchemyError as e:
            logger.error(
                f"Resolution failed for {code} on {self.adapter.get_dialect_name()}, "
                f"rolled back: {e}",
                exc_info=True,
            )
            raise StoreFailureError(f"resolution of '{code}' failed", original_error=e)

        return url

    async def delete(self, code: str) -> bool:
        """
        Delete a link.

        On backends with row locks this waits for any in-flight resolution
        of the same code to commit first.

        Returns:
            True if a row was removed, False if the code did not exist

        Raises:
            StoreFailureError: If the delete fails
        """
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(Link)
                        .where(Link.code == code)
                        .execution_options(synchronize_session=False)
                    )
                    return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Delete failed for {code}: {e}", exc_info=True)
            raise StoreFailureError(f"delete of '{code}' failed", original_error=e)

    async def list_links(self) -> Sequence[Link]:
        """
        Return every link, newest first.

        Raises:
            StoreFailureError: If the query fails
        """
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(Link).order_by(Link.created_at.desc(), Link.code)
                )
                return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Listing links failed: {e}", exc_info=True)
            raise StoreFailureError("listing links failed", original_error=e)
