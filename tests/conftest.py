"""Pytest configuration and fixtures."""

import pytest
from typing import Iterable, List
from httpx import AsyncClient, ASGITransport

from config import Config
from shortlink.database.memory import InMemoryLinkRepository
from shortlink.service import LinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


BASE_URL = "http://testserver"


class ScriptedGenerator(ShortCodeGenerator):
    """Generator that hands out a fixed sequence of codes."""

    def __init__(self, codes: Iterable[str], length: int = 6):
        super().__init__(length=length)
        self._codes = iter(codes)
        self.generated: List[str] = []

    def generate(self) -> str:
        code = next(self._codes)
        self.generated.append(code)
        return code


class StaleCheckRepository(InMemoryLinkRepository):
    """Repository whose pre-check never sees existing codes.

    Reproduces a concurrent writer that stored the code between our
    ``exists`` check and our ``insert``.
    """

    async def exists(self, short_code: str) -> bool:
        return False


class AlwaysTakenRepository(InMemoryLinkRepository):
    """Repository that reports every candidate as already in use."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.exists_calls = 0

    async def exists(self, short_code: str) -> bool:
        self.exists_calls += 1
        return True


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def repository(logger):
    """Create in-memory link repository."""
    return InMemoryLinkRepository(logger=logger)


@pytest.fixture
def short_code_generator():
    """Create short code generator with the reference configuration."""
    return ShortCodeGenerator(length=6)


@pytest.fixture
def service(repository, short_code_generator, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        repository=repository,
        base_url=BASE_URL,
        path_prefix="/go",
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def config():
    """Test-mode configuration."""
    return Config(mode="test", base_url=BASE_URL, path_prefix="/go")


@pytest.fixture
def app(service, config, logger):
    """Create test FastAPI app."""
    return create_app(config=config, service_instance=service, logger=logger)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
