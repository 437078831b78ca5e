"""
Document conversion endpoints - HTML import, HTML export and block defaults.
"""

from time import time

import structlog
from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import ValidationError

from ...blocks.factory import create_default
from ...config import settings
from ...errors import MalformedInputError
from ...export.html_serializer import export_document
from ...export.text_converter import to_plain_text
from ...models.api_models import (
    DefaultBlockRequest,
    DefaultBlockResponse,
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
)
from ...models.document import ParseResult
from ...parsing.encoding import decode_html_bytes
from ...parsing.html_parser import parse_html

logger = structlog.get_logger(__name__)
router = APIRouter()

HTML_EXTENSIONS = (".html", ".htm", ".xhtml")


def _import_response(result: ParseResult) -> ImportResponse:
    return ImportResponse(
        success=True,
        sections=result.sections,
        warnings=result.warnings,
        is_native_format=result.is_native_format,
        summary=result.summary(),
    )


@router.post("/import", response_model=ImportResponse)
async def import_html(request: ImportRequest) -> ImportResponse:
    """
    Import an HTML document into sections.

    Unrecognized markup is preserved as raw-html blocks and reported in
    `warnings`. Input that yields no HTML tree at all raises
    MalformedInputError, answered with 422 by the API error handler.
    """
    start_time = time()
    try:
        result = parse_html(request.html)
    except MalformedInputError:
        raise
    except Exception as e:
        logger.error("html_import_failed", error=str(e), exc_info=True)
        return ImportResponse(success=False, error=f"Import failed: {str(e)}")

    logger.info(
        "html_import_completed",
        size_bytes=len(request.html.encode("utf-8")),
        processing_time_ms=round((time() - start_time) * 1000, 2),
        **result.summary(),
    )
    return _import_response(result)


@router.post("/import/file", response_model=ImportResponse)
async def import_html_file(
    file: UploadFile = File(..., description="HTML file to import"),
) -> ImportResponse:
    """
    Import an uploaded HTML file.

    The charset comes from the upload's content type, then the document's
    <meta charset>, then detection.
    """
    try:
        if not file.filename or not file.filename.lower().endswith(HTML_EXTENSIONS):
            raise HTTPException(status_code=400, detail="File must be .html or .htm")

        data = await file.read()
        size_mb = len(data) / (1024 * 1024)
        if size_mb > settings.max_upload_size_mb:
            raise HTTPException(
                status_code=413,
                detail=f"File size ({size_mb:.1f}MB) exceeds maximum ({settings.max_upload_size_mb}MB)",
            )

        declared = None
        content_type = file.content_type or ""
        if "charset=" in content_type:
            declared = content_type.split("charset=", 1)[1].split(";")[0].strip()

        logger.info("html_file_import_started", filename=file.filename, size_bytes=len(data))
        result = parse_html(decode_html_bytes(data, declared_charset=declared))
        return _import_response(result)

    except (HTTPException, MalformedInputError):
        raise

    except Exception as e:
        logger.error(
            "html_file_import_failed",
            error=str(e),
            filename=file.filename if file else None,
            exc_info=True,
        )
        return ImportResponse(success=False, error=f"Import failed: {str(e)}")


@router.post("/export", response_model=ExportResponse)
async def export_html(request: ExportRequest) -> ExportResponse:
    """
    Export sections to HTML (full page or body fragment).

    Exports above the size guideline succeed with a warning.
    """
    try:
        result = export_document(request.sections, body_only=request.body_only)
        text = to_plain_text(request.sections) if request.as_text else None
    except Exception as e:
        logger.error("html_export_failed", error=str(e), exc_info=True)
        return ExportResponse(success=False, error=f"Export failed: {str(e)}")

    return ExportResponse(
        success=True,
        html=result.html,
        text=text,
        size_bytes=result.size_bytes,
        warnings=result.warnings,
    )


@router.post("/blocks/default", response_model=DefaultBlockResponse)
async def default_block(request: DefaultBlockRequest) -> DefaultBlockResponse:
    """Create a fully populated block of the requested type."""
    try:
        block = create_default(request.type, **request.overrides)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return DefaultBlockResponse(success=True, block=block)
