"""
FastAPI application for the block document conversion service.

Exposes HTML import, HTML/text export and block defaults over HTTP. The
editing session and its history are in-process objects and are not served.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from ..version import API_VERSION, get_component_versions
from ..config import settings
from ..logging_config import setup_logging
from .routes import documents, health, version
from .middleware import setup_exception_handlers, setup_logging_middleware

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "api_starting",
        version=API_VERSION,
        components=get_component_versions(),
        layout_table_min_width_px=settings.layout_table_min_width_px,
        export_size_warning_kb=settings.export_size_warning_kb,
        max_upload_size_mb=settings.max_upload_size_mb,
    )
    yield
    logger.info("api_stopped")


def create_app() -> FastAPI:
    """
    Build the FastAPI app: CORS, request logging, error handlers and routers.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="blockdoc",
        description="Block document model with lossless HTML import/export",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    setup_logging_middleware(app)
    setup_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(documents.router, prefix="/api/v1/documents", tags=["Documents"])

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn (development entry point)."""
    import uvicorn

    uvicorn.run(
        "blockdoc.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
