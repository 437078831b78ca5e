"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .blocks import Block, BlockType
from .document import ParseWarning, Section


class ImportRequest(BaseModel):
    """Request model for HTML import."""

    html: str = Field(description="HTML document or fragment to import")


class ImportResponse(BaseModel):
    """Response model for HTML import endpoints."""

    success: bool = Field(description="Whether the import succeeded")
    sections: List[Section] = Field(default_factory=list, description="Imported document")
    warnings: List[ParseWarning] = Field(default_factory=list, description="Recovered problems")
    is_native_format: bool = Field(False, description="Restored from round-trip metadata")
    summary: Dict[str, Any] = Field(default_factory=dict, description="Counts of sections, blocks, raw html")
    error: Optional[str] = Field(None, description="Error message if failed")


class ExportRequest(BaseModel):
    """Request model for HTML export."""

    sections: List[Section] = Field(description="Document to export")
    body_only: bool = Field(False, description="Export the body fragment instead of a full page")
    as_text: bool = Field(False, description="Also return a plain text rendition")


class ExportResponse(BaseModel):
    """Response model for HTML export."""

    success: bool = Field(description="Whether the export succeeded")
    html: Optional[str] = Field(None, description="Exported HTML")
    text: Optional[str] = Field(None, description="Plain text rendition (when requested)")
    size_bytes: int = Field(0, description="Size of the HTML in bytes")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal export notes")
    error: Optional[str] = Field(None, description="Error message if failed")


class DefaultBlockRequest(BaseModel):
    """Request model for default block creation."""

    type: BlockType = Field(description="Block type to create")
    overrides: Dict[str, Any] = Field(default_factory=dict, description="Field values replacing defaults")


class DefaultBlockResponse(BaseModel):
    success: bool = Field(description="Whether the block was created")
    block: Optional[Block] = Field(None, description="Created block")
    error: Optional[str] = Field(None, description="Error message if failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    service: str = Field(description="Service name", examples=["blockdoc"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")
    checks: Dict[str, str] = Field(default_factory=dict, description="Component check results")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    components: Dict[str, str] = Field(description="Parser, serializer, history and metadata versions")
    block_types: List[str] = Field(description="Supported block types")
