#!/usr/bin/env python3
"""
TinyLink server.

One process serves many concurrent requests through async I/O. With
WORKERS > 1 uvicorn supervises that many processes, each building the app
through ``create_server_app`` with its own store pool and cache client.

Usage:
    python app.py

Settings come from the environment or a .env file (see config.py), e.g.
STORE_BACKEND, DATABASE_URL, DATABASE_CREATE_TABLES, REDIS_URL, BASE_URL,
IDENTITY_HEADER, PORT, WORKERS, LOG_LEVEL.
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from tinylink.service import build_service
from tinylink.common.logging_config import setup_logging
from web_app import create_app

APP_FACTORY = "app:create_server_app"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the store and cache clients for the lifetime of the process."""
    config: Config = app.state.config
    logger: logging.Logger = app.state.logger

    logger.info(f"Starting TinyLink with the {config.store_backend} store")
    app.state.service = await build_service(config, logger=logger)
    logger.info("TinyLink ready")

    try:
        yield
    finally:
        logger.info("Closing store connections")
        await app.state.service.close()
        app.state.service = None
        logger.info("TinyLink stopped")


def build_app(config: Config, logger: logging.Logger) -> FastAPI:
    """Web app whose service is created by the lifespan handler."""
    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
    app.router.lifespan_context = lifespan
    return app


def _configure_logging(config: Config) -> logging.Logger:
    return setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )


def create_server_app() -> FastAPI:
    """App factory run inside each uvicorn worker process."""
    config = load_config()
    return build_app(config, _configure_logging(config))


def main():
    config = load_config()
    logger = _configure_logging(config)
    # Credentials live in the connection URLs
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    if config.workers > 1:
        # uvicorn only spawns workers for an import string, and installs its own signal handling
        logger.info(f"Listening on {config.host}:{config.port} with {config.workers} workers")
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host=config.host,
            port=config.port,
            workers=config.workers,
            log_level=config.log_level.lower(),
            access_log=False,
        )
        return

    server = uvicorn.Server(uvicorn.Config(
        build_app(config, logger),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    ))

    def request_shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        server.should_exit = True

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, request_shutdown)

    logger.info(f"Listening on {config.host}:{config.port}")
    try:
        server.run()
    except OSError as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
