"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking), no row-level locks
"""

from typing import Any

from sqlalchemy import Select
from sqlalchemy.pool import NullPool

from tinylink.db.interface import DatabaseAdapter

# Seconds a writer waits for the database file lock before failing
BUSY_TIMEOUT = 30


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    SQLite serializes writers on the whole file, so concurrent increments
    queue on the file lock instead of on a row lock.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        NullPool gives every session its own connection, so concurrent
        transactions never interleave on a shared connection.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        Returns:
            Dictionary with SQLite connection arguments
        """
        return {
            "check_same_thread": False,
            "timeout": BUSY_TIMEOUT,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def lock_for_update(self, statement: Select) -> Select:
        # No row locks; the store re-checks the UPDATE rowcount instead.
        return statement

    def get_dialect_name(self) -> str:
        return "sqlite"
