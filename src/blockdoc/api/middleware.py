"""
Request logging middleware and exception handlers for the document API.
"""

import time
import uuid
from typing import Callable, Dict, Type

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..errors import (
    BlockDocError,
    BlockLockedError,
    BlockNotFoundError,
    MalformedInputError,
    SectionNotFoundError,
    UnsupportedBlockError,
)

logger = structlog.get_logger(__name__)

# Most specific first; BlockDocError itself falls through to 400
ERROR_STATUS: Dict[Type[BlockDocError], int] = {
    MalformedInputError: 422,
    BlockNotFoundError: 404,
    SectionNotFoundError: 404,
    BlockLockedError: 409,
    UnsupportedBlockError: 400,
}


def status_for(error: BlockDocError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Log one event per request and tag it with a request id.

    The id (taken from X-Request-ID or generated) is bound into structlog's
    context, so parser and serializer events logged while the request is
    handled carry it too. It is echoed back in the response headers.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            structlog.contextvars.unbind_contextvars("request_id")

        logger.info(
            "request_handled",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            elapsed_ms=elapsed_ms,
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Translate errors that escape a route into `{success, error}` bodies.

    Document errors map to a client status via ERROR_STATUS; anything else
    is logged with its traceback and answered with a 500.
    """

    @app.exception_handler(BlockDocError)
    async def handle_document_error(request: Request, exc: BlockDocError) -> JSONResponse:
        status = status_for(exc)
        logger.warning(
            "document_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
            status_code=status,
        )
        return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "detail": str(exc) if app.debug else "An unexpected error occurred",
            },
        )
