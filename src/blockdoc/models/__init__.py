# Data models for the block document

from .blocks import (
    BLOCK_CLASSES,
    BaseBlock,
    Block,
    BlockCategory,
    BlockType,
    block_adapter,
)
from .marks import Mark, MarkType, TextSegment
from .document import (
    ExportResult,
    ParseResult,
    ParseWarning,
    Section,
    WarningCode,
    find_block,
    iter_blocks,
)
from .api_models import (
    DefaultBlockRequest,
    ExportRequest,
    ExportResponse,
    HealthResponse,
    ImportRequest,
    ImportResponse,
    VersionResponse,
)

__all__ = [
    "BaseBlock",
    "Block",
    "BlockType",
    "BlockCategory",
    "BLOCK_CLASSES",
    "block_adapter",
    "Mark",
    "MarkType",
    "TextSegment",
    "Section",
    "ParseResult",
    "ParseWarning",
    "WarningCode",
    "ExportResult",
    "iter_blocks",
    "find_block",
    "ImportRequest",
    "ImportResponse",
    "ExportRequest",
    "ExportResponse",
    "DefaultBlockRequest",
    "HealthResponse",
    "VersionResponse",
]
