"""
FastAPI Endpoints for the Link Service

This module defines all HTTP endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Mapping service exceptions to HTTP status codes
- Delegating to the service layer

Status codes:
- 201 created, 204 deleted, 302 redirect
- 400 invalid URL or code format, 409 code conflict
- 404 unknown, deleted or malformed code
- 500 database failure or exhausted code allocation
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import FileResponse, RedirectResponse

from tinylink.api.dependencies import get_code_allocator, get_link_store, get_redirect_service
from tinylink.api.schemas import CreateLinkRequest, LinkResponse
from tinylink.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeFormatError,
    InvalidURLError,
    LinkNotFoundError,
    StoreFailureError,
)
from tinylink.core.setting import settings
from tinylink.core.validators import is_valid_code
from tinylink.services.code_allocator import CodeAllocator
from tinylink.services.link_store import LinkStore
from tinylink.services.redirect_service import RedirectService

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = "Not found"


@router.post(
    "/api/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short link",
    description="Stores a URL under a custom code or a generated one"
)
async def create_link(
    body: CreateLinkRequest,
    allocator: CodeAllocator = Depends(get_code_allocator)
) -> LinkResponse:
    try:
        link = await allocator.create_link(body.url, body.code)
    except (InvalidURLError, InvalidCodeFormatError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except CodeConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Code already exists"
        )
    except (AllocationExhaustedError, StoreFailureError) as e:
        logger.error(f"POST /api/links failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return LinkResponse.model_validate(link)


@router.get(
    "/api/links",
    response_model=list[LinkResponse],
    summary="List all links",
    description="Returns every link, newest first"
)
async def list_links(store: LinkStore = Depends(get_link_store)) -> list[LinkResponse]:
    try:
        links = await store.list_links()
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return [LinkResponse.model_validate(link) for link in links]


@router.get(
    "/api/links/{code}",
    response_model=LinkResponse,
    summary="Get link statistics",
    description="Returns a link with its click count and last access time"
)
async def get_link(code: str, store: LinkStore = Depends(get_link_store)) -> LinkResponse:
    if not is_valid_code(code):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)

    try:
        link = await store.lookup(code)
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)

    return LinkResponse.model_validate(link)


@router.delete(
    "/api/links/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a link",
    description="Deletes a link; later redirects for its code return 404"
)
async def delete_link(code: str, store: LinkStore = Depends(get_link_store)) -> Response:
    if not is_valid_code(code):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)

    try:
        deleted = await store.delete(code)
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)

    logger.info(f"Deleted link {code}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/", include_in_schema=False)
async def dashboard_page() -> FileResponse:
    return FileResponse(settings.STATIC_DIR / "index.html")


@router.get("/code/{code}", include_in_schema=False)
async def stats_page(code: str) -> FileResponse:
    # The page fetches /api/links/{code} itself
    return FileResponse(settings.STATIC_DIR / "code.html")


@router.get(
    "/{code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Redirects to the stored URL and counts the click"
)
async def redirect_to_url(
    code: str,
    redirect_service: RedirectService = Depends(get_redirect_service)
) -> RedirectResponse:
    """
    Redirect to the URL stored under a code.

    Raises:
        HTTPException 404: If the code is malformed, unknown or deleted
        HTTPException 500: If the click could not be recorded
    """
    try:
        url = await redirect_service.resolve(code)
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    except StoreFailureError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
