"""API routes implementation."""

from typing import List, Optional

from fastapi import APIRouter, Request, HTTPException, status
from datetime import datetime, timezone

from .schemas import (
    CreateLinkRequest,
    CreateLinkResponse,
    LinkResponse,
    InspectLinkResponse,
    ClaimLinksRequest,
    ClaimLinksResponse,
    DeleteLinkResponse,
    HealthResponse,
    ErrorResponse,
)
from ..errors import to_http_exception
from tinylink.errors import LinkError
from tinylink.common.url_builder import build_short_url
from tinylink.common.headers import build_base_url, get_forwarded_path_prefix

router = APIRouter()


def _owner_id(request: Request) -> Optional[str]:
    return getattr(request.state, "owner_id", None)


def _require_owner(request: Request) -> str:
    owner_id = _owner_id(request)
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return owner_id


@router.post(
    "/links",
    response_model=CreateLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid target URL or code"},
        409: {"model": ErrorResponse, "description": "Code already exists"},
        503: {"model": ErrorResponse, "description": "No free code or store unavailable"},
    },
    summary="Create short link",
    description="Create a short link. Anonymous links expire after 30 days; authenticated links are permanent.",
)
async def create_link(request: Request, body: CreateLinkRequest):
    """Create a short link for the caller."""
    service = request.app.state.service
    config = request.app.state.config

    try:
        link = await service.create_link(
            target_url=body.target_url,
            code=body.code,
            owner_id=_owner_id(request),
        )
    except LinkError as e:
        raise to_http_exception(e)

    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    path_prefix = get_forwarded_path_prefix(dict(request.headers)) or config.path_prefix
    short_url = build_short_url(
        code=link.code,
        base_url=base_url,
        path_prefix=path_prefix,
    )

    return CreateLinkResponse.from_link(link, short_url=short_url)


@router.get(
    "/links",
    response_model=List[LinkResponse],
    summary="List links",
    description="List the caller's links, newest first. Anonymous callers get an empty list.",
)
async def list_links(request: Request):
    """List links owned by the caller."""
    service = request.app.state.service

    try:
        links = await service.list_links(_owner_id(request))
    except LinkError as e:
        raise to_http_exception(e)

    return [LinkResponse.from_link(link) for link in links]


@router.post(
    "/links/claim",
    response_model=ClaimLinksResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No codes provided"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
    summary="Claim anonymous links",
    description="Move links created while anonymous into the caller's account.",
)
async def claim_links(request: Request, body: ClaimLinksRequest):
    """Claim anonymous links for the authenticated caller."""
    service = request.app.state.service
    owner_id = _require_owner(request)

    try:
        transferred = await service.claim_links(body.codes, owner_id)
    except LinkError as e:
        raise to_http_exception(e)

    return ClaimLinksResponse(transferred_count=transferred)


@router.get(
    "/links/{code}",
    response_model=InspectLinkResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Code not found"},
    },
    summary="Inspect link",
    description="Read a link without counting a click.",
)
async def inspect_link(request: Request, code: str):
    """Get information about a link."""
    service = request.app.state.service

    try:
        link = await service.inspect(code)
    except LinkError as e:
        raise to_http_exception(e)

    return InspectLinkResponse.from_link(link, is_expired=link.is_expired(service.clock()))


@router.delete(
    "/links/{code}",
    response_model=DeleteLinkResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the link owner"},
        404: {"model": ErrorResponse, "description": "Code not found"},
    },
    summary="Delete link",
)
async def delete_link(request: Request, code: str):
    """Delete a link owned by the caller."""
    service = request.app.state.service
    owner_id = _require_owner(request)

    try:
        await service.delete_link(code, owner_id)
    except LinkError as e:
        raise to_http_exception(e)

    return DeleteLinkResponse(success=True)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        store="healthy" if health["store"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
