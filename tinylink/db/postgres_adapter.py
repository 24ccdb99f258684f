"""
PostgreSQL Database Adapter

Production backend. Unlike SQLite, PostgreSQL locks individual rows, so
``SELECT ... FOR UPDATE`` serializes resolutions and deletions of the same
code while leaving other codes untouched.
"""

import ssl
from typing import Any

from sqlalchemy import Select

from tinylink.db.interface import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL (asyncpg) adapter implementation.

    Uses SQLAlchemy's default queue pool, shared by every request of the
    process.
    """

    def __init__(self, use_ssl: bool = False):
        """
        Args:
            use_ssl: Require TLS (hosted databases such as Neon)
        """
        self.use_ssl = use_ssl

    def get_pool_class(self) -> None:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        if not self.use_ssl:
            return {}
        # Hosted providers terminate TLS with certificates we don't pin
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return {"ssl": context}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        }

    def lock_for_update(self, statement: Select) -> Select:
        return statement.with_for_update()

    def get_dialect_name(self) -> str:
        return "postgresql"
