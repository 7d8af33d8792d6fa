"""Proxy and identity header middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from tinylink.common.headers import extract_forwarded_headers, extract_identity


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Expose X-Forwarded-* values and the caller identity on ``request.state``.

    ``request.state.owner_id`` is None for anonymous callers.
    """

    def __init__(self, app, identity_header: str = "X-User-Id"):
        super().__init__(app)
        self.identity_header = identity_header

    async def dispatch(self, request: Request, call_next: Callable):
        headers = dict(request.headers)
        for name, value in extract_forwarded_headers(headers).items():
            setattr(request.state, name, value)
        request.state.owner_id = extract_identity(headers, self.identity_header)

        return await call_next(request)
