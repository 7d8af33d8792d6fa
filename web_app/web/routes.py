"""Public routes: redirects and the link-unavailable page."""

import os
from typing import Optional

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from tinylink.errors import InvalidStoredUrl, LinkError, NotFound, StoreUnavailable
from tinylink.resolver import ResolveStatus
from tinylink.common.headers import get_forwarded_path_prefix
from tinylink.common.url_builder import build_unavailable_path
from ..errors import to_http_exception

router = APIRouter()

template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=template_dir)

UNAVAILABLE_STATUS = {
    "expired": status.HTTP_410_GONE,
    "not_found": status.HTTP_404_NOT_FOUND,
}


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service unhealthy",
    )


@router.get("/link-not-found", response_class=HTMLResponse, include_in_schema=False)
async def link_not_found(request: Request, code: Optional[str] = None, reason: Optional[str] = None):
    """Friendly page for codes that are missing or expired."""
    reason = reason if reason in UNAVAILABLE_STATUS else "not_found"
    return templates.TemplateResponse(
        request,
        "link_not_found.html",
        {"code": code, "is_expired": reason == "expired"},
        status_code=UNAVAILABLE_STATUS[reason],
    )


@router.get("/{code}", include_in_schema=False)
async def redirect_to_target(request: Request, code: str, debug: Optional[str] = None):
    """Redirect to the link target, counting a click."""
    service = request.app.state.service

    if debug == "1":
        return await _debug_lookup(service, code)

    try:
        outcome = await service.resolve(code)
    except InvalidStoredUrl:
        return PlainTextResponse("Invalid target URL stored", status_code=status.HTTP_400_BAD_REQUEST)
    except StoreUnavailable as e:
        raise to_http_exception(e)

    if outcome.status is ResolveStatus.FOUND:
        # Never 301: every visit must reach the resolver
        return RedirectResponse(url=outcome.target_url, status_code=status.HTTP_302_FOUND)

    location = build_unavailable_path(
        code,
        outcome.status.value,
        path_prefix=get_forwarded_path_prefix(dict(request.headers)),
    )
    return RedirectResponse(url=location, status_code=status.HTTP_302_FOUND)


async def _debug_lookup(service, code: str) -> JSONResponse:
    """Report what the redirect handler sees for a code, without counting a click."""
    try:
        link = await service.inspect(code)
    except NotFound:
        return JSONResponse(
            {"message": "Code not found in store", "code": code},
            status_code=status.HTTP_404_NOT_FOUND,
        )
    except LinkError as e:
        raise to_http_exception(e)

    return JSONResponse({
        "message": "Reached redirect handler",
        "code": code,
        "target_url": link.target_url,
        "is_expired": link.is_expired(service.clock()),
    })
