"""
Database Adapter Factory

Picks the adapter matching the dialect of a connection string.
"""

from sqlalchemy.engine import make_url

from tinylink.db.interface import DatabaseAdapter
from tinylink.db.postgres_adapter import PostgreSQLAdapter
from tinylink.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(database_url: str, use_ssl: bool = False) -> DatabaseAdapter:
    """
    Factory function to get the database adapter.

    Args:
        database_url: SQLAlchemy connection string
        use_ssl: Require TLS (PostgreSQL only)

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the dialect has no adapter
    """
    backend = make_url(database_url).get_backend_name()

    if backend == "sqlite":
        return SQLiteAdapter()
    if backend == "postgresql":
        return PostgreSQLAdapter(use_ssl=use_ssl)

    raise ValueError(f"Unsupported database backend: {backend}")
