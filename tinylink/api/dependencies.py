"""
FastAPI dependencies.

A single LinkStore wraps the process-wide session factory; the allocator and
the redirect service are built per request around it. Tests override
get_link_store to point the whole API at another database.
"""

from fastapi import Depends

from tinylink.db.session import async_session_maker, db_adapter
from tinylink.services.code_allocator import CodeAllocator
from tinylink.services.link_store import LinkStore
from tinylink.services.redirect_service import RedirectService

_link_store = LinkStore(async_session_maker, db_adapter)


def get_link_store() -> LinkStore:
    return _link_store


def get_code_allocator(store: LinkStore = Depends(get_link_store)) -> CodeAllocator:
    return CodeAllocator(store)


def get_redirect_service(store: LinkStore = Depends(get_link_store)) -> RedirectService:
    return RedirectService(store)
