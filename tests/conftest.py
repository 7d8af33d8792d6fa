"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Iterable, List

from httpx import ASGITransport, AsyncClient

from config import Config
from tinylink.service import LinkService
from tinylink.shortcode import ShortCodeGenerator
from tinylink.store.memory import InMemoryLinkStore
from tinylink.store.policy import StoreCallPolicy
from tinylink.common.logging_config import setup_logging
from web_app import create_app


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SequenceGenerator(ShortCodeGenerator):
    """Generator that hands out a fixed sequence of codes, repeating the last one."""

    def __init__(self, codes: Iterable[str]):
        super().__init__(default_length=6)
        self.codes: List[str] = list(codes)
        self.drawn: List[str] = []

    def generate_random(self, length=None) -> str:
        code = self.codes.pop(0) if len(self.codes) > 1 else self.codes[0]
        self.drawn.append(code)
        return code


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    """Clock pinned to a fixed instant."""
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def policy(logger):
    """Store call policy without backoff delays."""
    return StoreCallPolicy(
        timeout_seconds=1.0,
        retry_attempts=3,
        retry_backoff_seconds=0,
        logger=logger,
    )


@pytest.fixture
async def store(logger) -> AsyncGenerator[InMemoryLinkStore, None]:
    """Create in-memory link store."""
    store = InMemoryLinkStore(logger=logger)

    yield store

    await store.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def service(store, short_code_generator, policy, clock, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        store=store,
        cache=None,  # No cache for tests
        short_code_generator=short_code_generator,
        logger=logger,
        policy=policy,
        clock=clock,
    )


@pytest.fixture
def config():
    """Configuration for the in-memory test app."""
    return Config(
        _env_file=None,
        store_backend="memory",
        base_url="http://testserver",
    )


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]


@pytest.fixture
def sequence_generator():
    """Factory for generators that yield a fixed sequence of codes."""
    return SequenceGenerator


@pytest.fixture
def make_service(store, policy, clock, logger):
    """Factory for services with custom collaborators."""

    def _make(**kwargs) -> LinkService:
        options = {
            "store": store,
            "cache": None,
            "logger": logger,
            "policy": policy,
            "clock": clock,
        }
        options.update(kwargs)
        return LinkService(**options)

    return _make
