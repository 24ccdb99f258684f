"""
Redirect Service

Resolves a code to its destination URL and counts the click.

Design Decisions:
- Malformed codes are reported as not found without touching the database,
  so malformed, missing and deleted codes all look the same to a visitor
- The read and the increment are one transaction owned by the link store;
  this service adds no locking or caching of its own
"""

import logging

from tinylink.core.exceptions import LinkNotFoundError
from tinylink.core.validators import is_valid_code
from tinylink.services.link_store import LinkStore

logger = logging.getLogger(__name__)


class RedirectService:
    """Service for handling URL redirections."""

    def __init__(self, store: LinkStore):
        self.store = store

    async def resolve(self, code: str) -> str:
        """
        Get the URL to redirect to and record one click.

        Args:
            code: The short code from the request path

        Returns:
            The stored URL

        Raises:
            LinkNotFoundError: If the code is malformed, absent or deleted
            StoreFailureError: If the database fails (no click is recorded)
        """
        if not is_valid_code(code):
            raise LinkNotFoundError(code)

        try:
            return await self.store.resolve_and_increment(code)
        except LinkNotFoundError:
            logger.info(f"Redirect failed: code={code} not found")
            raise
