"""
Document model - sections of columns of blocks, plus parse/export results.

A Document is a plain ordered list of Section. Nothing here parses or renders
HTML; the helpers only locate and copy blocks.
"""

import uuid
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional

from pydantic import BaseModel, Field, model_validator

from .blocks import BaseBlock, Block, BlockType

MIN_COLUMNS = 1
MAX_COLUMNS = 3


def new_section_id() -> str:
    return f"section-{uuid.uuid4().hex[:12]}"


class Section(BaseModel):
    """Horizontal layout region split into 1-3 columns of blocks."""

    id: str = Field(default_factory=new_section_id, min_length=1, description="Section id")
    column_count: int = Field(1, ge=MIN_COLUMNS, le=MAX_COLUMNS, description="Number of columns")
    columns: List[List[Block]] = Field(
        default_factory=list, description="Blocks per column, in order"
    )

    @model_validator(mode="before")
    @classmethod
    def _default_columns(cls, data):
        if isinstance(data, dict) and not data.get("columns"):
            count = data.get("column_count", 1)
            if isinstance(count, int) and MIN_COLUMNS <= count <= MAX_COLUMNS:
                data = {**data, "columns": [[] for _ in range(count)]}
        return data

    @model_validator(mode="after")
    def _check_columns(self) -> "Section":
        if len(self.columns) != self.column_count:
            raise ValueError(
                f"Section '{self.id}' declares {self.column_count} columns "
                f"but holds {len(self.columns)}"
            )
        return self

    def blocks(self) -> Iterator[BaseBlock]:
        for column in self.columns:
            yield from column


# ============================================================================
# PARSE / EXPORT RESULTS
# ============================================================================

class WarningCode(str, Enum):
    """Recoverable import conditions reported next to the parsed document."""

    UNRECOGNIZED_ELEMENT = "unrecognized_element"
    SCHEMA_MISMATCH = "schema_mismatch"
    INVALID_METADATA = "invalid_metadata"


class ParseWarning(BaseModel):
    """Non-fatal note about content that was preserved or repaired."""

    code: WarningCode = Field(description="Warning kind")
    message: str = Field(description="Human readable description")
    element: Optional[str] = Field(None, description="Tag name of the offending element")
    block_id: Optional[str] = Field(None, description="Block that carries the preserved content")


class ParseResult(BaseModel):
    """Outcome of an HTML import."""

    sections: List[Section] = Field(default_factory=list)
    warnings: List[ParseWarning] = Field(default_factory=list)
    is_native_format: bool = Field(
        False, description="True when rebuilt from embedded round-trip metadata"
    )

    def raw_html_block_count(self) -> int:
        return sum(
            1 for _, block in iter_blocks(self.sections) if block.type == BlockType.RAW_HTML.value
        )

    def summary(self) -> dict:
        """
        Fidelity summary for operators.

        Returns:
            Dict with section/block counts, raw-html count and warning count
        """
        return {
            "sections": len(self.sections),
            "blocks": sum(1 for _ in iter_blocks(self.sections)),
            "raw_html_blocks": self.raw_html_block_count(),
            "warnings": len(self.warnings),
            "native_format": self.is_native_format,
        }


class ExportResult(BaseModel):
    """Serialized HTML plus non-fatal export notes."""

    html: str
    size_bytes: int
    warnings: List[str] = Field(default_factory=list)


# ============================================================================
# HELPERS
# ============================================================================

class BlockLocation(NamedTuple):
    section_index: int
    column_index: int
    block_index: int


def iter_blocks(sections: List[Section]) -> Iterator[tuple]:
    """Yield (BlockLocation, block) for every block in document order."""
    for s_idx, section in enumerate(sections):
        for c_idx, column in enumerate(section.columns):
            for b_idx, block in enumerate(column):
                yield BlockLocation(s_idx, c_idx, b_idx), block


def find_block(sections: List[Section], block_id: str) -> Optional[BlockLocation]:
    for location, block in iter_blocks(sections):
        if block.id == block_id:
            return location
    return None


def copy_sections(sections: List[Section]) -> List[Section]:
    """Deep copy a document so the copy shares no mutable state with the source."""
    return [section.model_copy(deep=True) for section in sections]
