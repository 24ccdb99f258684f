"""
Services module for business logic separation.

This module contains service classes that encapsulate business logic,
keeping it separate from API endpoints and database models.
"""

from tinylink.services.code_allocator import AllocationPolicy, CodeAllocator
from tinylink.services.link_store import LinkStore
from tinylink.services.redirect_service import RedirectService

__all__ = ["AllocationPolicy", "CodeAllocator", "LinkStore", "RedirectService"]
