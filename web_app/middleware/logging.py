"""Request logging middleware."""

import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status, caller kind and duration.

    Server errors are logged as warnings; redirects and client errors are
    ordinary traffic for a link service.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("tinylink.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        caller = "user" if getattr(request.state, "owner_id", None) else "anonymous"
        client_ip = request.client.host if request.client else "unknown"
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f}ms, {caller}, {client_ip})",
        )
        return response
