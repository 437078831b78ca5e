"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- HTTP clients
- Mock settings/configuration
- Sample documents and HTML
- A controllable clock for debounce tests
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
import structlog
from httpx import ASGITransport, AsyncClient

from blockdoc.api.app import app
from blockdoc.config import Settings
from blockdoc.history.manager import HistoryManager
from tests.fixtures.documents import (
    EMAIL_TEMPLATE_HTML,
    MIXED_CONTENT_HTML,
    build_sample_sections,
)


@pytest.fixture(autouse=True)
def _restore_structlog_config() -> Generator[None, None, None]:
    """Restore structlog's global config so a test's capture stream doesn't leak."""
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_settings() -> Settings:
    """
    Create mock settings for testing with safe defaults.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        history_max_entries=50,
        history_debounce_ms=400,
        export_size_warning_kb=200,
        log_level="INFO",
        log_json=False,  # Easier to read in tests
    )


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def history(clock) -> HistoryManager:
    """History manager with bound 50, 400 ms debounce and a fake clock."""
    return HistoryManager(max_entries=50, debounce_ms=400, clock=clock)


@pytest.fixture
def sample_sections() -> list:
    """
    Get a document holding every block type.

    Returns:
        List of Section (fresh per test)
    """
    return build_sample_sections()


@pytest.fixture
def email_template_html() -> str:
    return EMAIL_TEMPLATE_HTML


@pytest.fixture
def mixed_content_html() -> str:
    return MIXED_CONTENT_HTML


@pytest.fixture
def tmp_html_file(tmp_path) -> Generator[str, None, None]:
    """
    Create temporary .html file for file-based tests.

    Args:
        tmp_path: pytest's temporary directory fixture

    Yields:
        Path to temporary .html file
    """
    html_path = tmp_path / "template.html"
    html_path.write_text(EMAIL_TEMPLATE_HTML, encoding="utf-8")
    yield str(html_path)
