"""
Health check endpoint for monitoring.
"""

import time

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.builder import ParserRejectedMarkup
from fastapi import APIRouter

from ...models.api_models import HealthResponse
from ...version import API_VERSION

router = APIRouter()

_start_time = time.time()


def check_parser() -> str:
    """Parse a one-element document with the lxml tree builder."""
    try:
        soup = BeautifulSoup("<p>ok</p>", "lxml")
    except (FeatureNotFound, ParserRejectedMarkup) as e:
        return f"error: {e}"
    return "ok" if soup.p is not None else "error: empty tree"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Report liveness and whether HTML import can build a document tree.

    Status is "degraded" when the parser check fails; export and block
    defaults keep working in that state.
    """
    checks = {"html_parser": check_parser()}
    return HealthResponse(
        status="healthy" if all(v == "ok" for v in checks.values()) else "degraded",
        service="blockdoc",
        version=API_VERSION,
        uptime_seconds=time.time() - _start_time,
        checks=checks,
    )
