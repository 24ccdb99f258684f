"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: backend-specific implementations
- Session management: the shared engine and session factory
"""

from tinylink.db.interface import DatabaseAdapter
from tinylink.db.session import async_session_maker, create_tables, db_adapter, engine

__all__ = [
    "DatabaseAdapter",
    "async_session_maker",
    "create_tables",
    "db_adapter",
    "engine",
]
