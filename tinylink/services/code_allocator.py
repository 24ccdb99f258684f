"""
Code Allocation Service

Creates links, either under a caller-supplied code or under a freshly
generated random one.

Design Decisions:
- Validation (URL, supplied code format) happens before any database access
- Random codes use the base62 alphabet [A-Za-z0-9]
- The existence pre-check is only an optimization: the insert itself is
  conditioned on absence, and losing that race counts as a collision
- Repeated collisions at the base length escalate to a longer code, bounded
  by a hard cap on total attempts
- Caller-supplied codes get exactly one insert attempt and are never escalated
"""

import logging
import random
import string
from dataclasses import dataclass
from typing import Callable, Optional

from tinylink.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeFormatError,
    InvalidURLError,
)
from tinylink.core.setting import settings
from tinylink.core.validators import is_valid_code, is_valid_url
from tinylink.db.models import Link
from tinylink.services.link_store import LinkStore

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_letters + string.digits


def generate_code(length: int) -> str:
    """
    Generate a random alphanumeric code.

    Args:
        length: Number of characters

    Returns:
        Code drawn uniformly from [A-Za-z0-9]
    """
    return "".join(random.choices(ALPHABET, k=length))


@dataclass(frozen=True)
class AllocationPolicy:
    """Bounded retry policy for generated codes."""
    base_length: int = 6
    max_base_attempts: int = 5
    escalated_length: int = 7
    max_total_attempts: int = 25

    def __post_init__(self):
        if not 6 <= self.base_length < self.escalated_length <= 8:
            raise ValueError(
                f"code lengths must satisfy 6 <= base ({self.base_length}) "
                f"< escalated ({self.escalated_length}) <= 8"
            )
        if self.max_base_attempts < 1:
            raise ValueError("max_base_attempts must be at least 1")
        if self.max_total_attempts <= self.max_base_attempts:
            raise ValueError(
                f"max_total_attempts ({self.max_total_attempts}) must exceed "
                f"max_base_attempts ({self.max_base_attempts})"
            )

    @classmethod
    def from_settings(cls) -> "AllocationPolicy":
        return cls(
            base_length=settings.CODE_BASE_LENGTH,
            max_base_attempts=settings.CODE_MAX_BASE_ATTEMPTS,
            escalated_length=settings.CODE_ESCALATED_LENGTH,
            max_total_attempts=settings.CODE_MAX_TOTAL_ATTEMPTS,
        )

    def length_for_attempt(self, attempt: int) -> int:
        """Code length for the zero-based attempt number."""
        if attempt < self.max_base_attempts:
            return self.base_length
        return self.escalated_length


class CodeAllocator:
    """
    Allocates codes and stores new links.

    Holds no mutable state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        store: LinkStore,
        policy: Optional[AllocationPolicy] = None,
        code_generator: Callable[[int], str] = generate_code,
    ):
        """
        Args:
            store: Link store to insert into
            policy: Retry policy (defaults to the configured one)
            code_generator: Function returning a random code of the given length
        """
        self.store = store
        self.policy = policy or AllocationPolicy.from_settings()
        self.code_generator = code_generator

    async def create_link(self, url: str, code: Optional[str] = None) -> Link:
        """
        Store a new link.

        Args:
            url: Absolute http(s) destination
            code: Optional caller-supplied code; empty means "generate one"

        Returns:
            The stored Link (clicks=0, last_clicked=None)

        Raises:
            InvalidURLError: If the URL is not absolute http(s)
            InvalidCodeFormatError: If the supplied code is malformed
            CodeConflictError: If the supplied code is already stored
            AllocationExhaustedError: If no free code was found within the cap
            StoreFailureError: If the database fails
        """
        if not is_valid_url(url):
            raise InvalidURLError(url)

        if code:
            if not is_valid_code(code):
                raise InvalidCodeFormatError(code)
            # A conflict here, even one lost to a concurrent insert, is final.
            link = await self.store.insert_if_absent(code, url)
            logger.info(f"Created link {link.code} -> {url}")
            return link

        link = await self._insert_generated(url)
        logger.info(f"Created link {link.code} -> {url}")
        return link

    async def _insert_generated(self, url: str) -> Link:
        policy = self.policy

        for attempt in range(policy.max_total_attempts):
            length = policy.length_for_attempt(attempt)
            if attempt == policy.max_base_attempts:
                logger.warning(
                    f"{attempt} collisions at length {policy.base_length}, "
                    f"escalating to length {length}"
                )

            candidate = self.code_generator(length)
            if await self.store.lookup(candidate) is not None:
                logger.debug(f"Generated code {candidate} already taken")
                continue

            try:
                return await self.store.insert_if_absent(candidate, url)
            except CodeConflictError:
                logger.debug(f"Generated code {candidate} taken by a concurrent insert")

        logger.error(f"Code allocation exhausted after {policy.max_total_attempts} attempts")
        raise AllocationExhaustedError(policy.max_total_attempts)
