"""Builds the TinyLink FastAPI application."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tinylink.service import LinkService
from .api import api_router
from .web import web_router
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware


def _install_middleware(app: FastAPI, identity_header: str) -> None:
    # Starlette runs the last-added middleware first
    app.add_middleware(ForwardedHeadersMiddleware, identity_header=identity_header)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(service_instance: Optional[LinkService], config) -> FastAPI:
    """Create the web app around a link service.

    ``service_instance`` may be None when a lifespan handler builds the
    service at startup; routes read it from ``app.state.service``.
    """
    app = FastAPI(
        title="TinyLink",
        description="Short link allocation, resolution and ownership service",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.service = service_instance
    app.state.config = config

    _install_middleware(app, config.identity_header)

    app.include_router(api_router, prefix="/api", tags=["API"])
    # /{code} matches any single segment, so the web router goes last
    app.include_router(web_router, tags=["Web"])

    return app
