"""
Block model - the closed set of content and form-field units a column holds.

Every block shares base geometry (width percent, margins, padding, locked flag)
and adds variant-specific content and style. `Block` is a discriminated union
on the `type` field; consumers dispatch on BlockType and must cover every
member of the enum.
"""

import uuid
from enum import Enum
from typing import Annotated, Dict, List, Literal, Type, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .marks import TextSegment, segments_text, split_placeholders


class BlockType(str, Enum):
    """Block variants (the tag of the Block union)."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"
    IMAGE = "image"
    TEXT_INPUT = "text-input"
    TEXTAREA = "textarea"
    DROPDOWN = "dropdown"
    RADIO_GROUP = "radio-group"
    CHECKBOX_GROUP = "checkbox-group"
    SINGLE_CHECKBOX = "single-checkbox"
    DATE_PICKER = "date-picker"
    FILE_UPLOAD = "file-upload"
    SIGNATURE = "signature"
    TABLE = "table"
    LIST = "list"
    BUTTON = "button"
    RAW_HTML = "raw-html"


class BlockCategory(str, Enum):
    CONTENT = "content"
    FORM = "form"


FORM_BLOCK_TYPES = frozenset(
    {
        BlockType.TEXT_INPUT,
        BlockType.TEXTAREA,
        BlockType.DROPDOWN,
        BlockType.RADIO_GROUP,
        BlockType.CHECKBOX_GROUP,
        BlockType.SINGLE_CHECKBOX,
        BlockType.DATE_PICKER,
        BlockType.FILE_UPLOAD,
        BlockType.SIGNATURE,
        BlockType.BUTTON,
    }
)

TextAlign = Literal["left", "center", "right", "justify"]
HeadingLevel = Literal["h1", "h2", "h3", "h4"]
ChoiceLayout = Literal["vertical", "horizontal"]


def new_block_id() -> str:
    """Generate a globally unique block id."""
    return str(uuid.uuid4())


# ============================================================================
# BASE
# ============================================================================

class BaseBlock(BaseModel):
    """Geometry shared by every block variant."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_block_id, min_length=1, description="Unique id")
    width: int = Field(100, ge=1, le=100, description="Width in percent of the column")
    margin_top: int = Field(0, description="Top margin (px)")
    margin_bottom: int = Field(8, description="Bottom margin (px)")
    margin_left: int = Field(0, description="Left margin (px)")
    margin_right: int = Field(0, description="Right margin (px)")
    padding_x: int = Field(0, ge=0, description="Horizontal padding (px)")
    padding_y: int = Field(0, ge=0, description="Vertical padding (px)")
    locked: bool = Field(False, description="Locked blocks cannot be edited or moved")

    @property
    def category(self) -> BlockCategory:
        return BlockCategory.FORM if self.type in FORM_BLOCK_TYPES else BlockCategory.CONTENT


class _TextBlock(BaseBlock):
    """
    Shared fields of heading and paragraph.

    `segments` is the rich form of the text and `content` its plain-text
    projection. When only `content` is given, segments are derived from it with
    placeholder tokens marked.
    """

    content: str = Field("", description="Plain text")
    segments: List[TextSegment] = Field(default_factory=list, description="Styled runs")
    font_size: int = Field(14, ge=1)
    font_weight: int = Field(400, ge=100, le=900)
    text_align: TextAlign = "left"
    line_height: float = Field(1.6, gt=0)
    color: str = ""

    @model_validator(mode="after")
    def _sync_content(self):
        if self.segments:
            self.content = segments_text(self.segments)
        elif self.content:
            self.segments = split_placeholders(self.content)
        return self


class _FormFieldBlock(BaseBlock):
    label: str = ""
    required: bool = False
    field_name: str = ""


# ============================================================================
# CONTENT BLOCKS
# ============================================================================

class HeadingBlock(_TextBlock):
    type: Literal["heading"] = "heading"
    level: HeadingLevel = "h2"
    font_size: int = Field(24, ge=1)
    font_weight: int = Field(600, ge=100, le=900)
    line_height: float = Field(1.3, gt=0)
    margin_bottom: int = 12


class ParagraphBlock(_TextBlock):
    type: Literal["paragraph"] = "paragraph"


class DividerBlock(BaseBlock):
    type: Literal["divider"] = "divider"
    thickness: int = Field(1, ge=1)
    style: Literal["solid", "dashed", "dotted"] = "solid"
    color: str = "#000000"
    margin_top: int = 16
    margin_bottom: int = 16


class ImageBlock(BaseBlock):
    type: Literal["image"] = "image"
    src: str = ""
    alt: str = ""
    alignment: Literal["left", "center", "right"] = "center"
    border_radius: int = Field(0, ge=0)
    max_height: int = Field(300, ge=0)


class TableBlock(BaseBlock):
    """
    Rectangular grid of plain-text cells.

    Construction normalizes the grid: short rows are padded with empty cells,
    column_widths always has one entry per column and row_heights (when
    present) one entry per row.
    """

    type: Literal["table"] = "table"
    rows: List[List[str]] = Field(default_factory=lambda: [[""]])
    header_row: bool = False
    column_widths: List[float] = Field(default_factory=list, description="Percent per column")
    row_heights: List[float] = Field(default_factory=list, description="px per row, 0 = auto")
    margin_top: int = 8

    @model_validator(mode="after")
    def _normalize_grid(self):
        if not self.rows:
            self.rows = [[""]]
        width = max(len(row) for row in self.rows) or 1
        self.rows = [list(row) + [""] * (width - len(row)) for row in self.rows]
        if len(self.column_widths) != width:
            self.column_widths = equal_column_widths(width)
        if self.row_heights:
            heights = list(self.row_heights[: len(self.rows)])
            heights += [0.0] * (len(self.rows) - len(heights))
            self.row_heights = heights if any(h > 0 for h in heights) else []
        return self

    @property
    def column_count(self) -> int:
        return len(self.rows[0])

    @property
    def row_count(self) -> int:
        return len(self.rows)


class ListBlock(BaseBlock):
    type: Literal["list"] = "list"
    list_type: Literal["ordered", "unordered"] = "unordered"
    items: List[str] = Field(default_factory=list)


class RawHtmlBlock(BaseBlock):
    """Escape hatch: HTML the parser could not map, preserved verbatim."""

    type: Literal["raw-html"] = "raw-html"
    html_content: str = ""
    original_styles: str = ""


# ============================================================================
# FORM BLOCKS
# ============================================================================

class TextInputBlock(_FormFieldBlock):
    type: Literal["text-input"] = "text-input"
    placeholder: str = ""
    help_text: str = ""
    validation_type: Literal["none", "email", "phone", "number", "url"] = "none"
    max_length: str = ""


class TextareaBlock(_FormFieldBlock):
    type: Literal["textarea"] = "textarea"
    placeholder: str = ""
    help_text: str = ""
    rows: int = Field(4, ge=1)
    max_length: str = ""


class DropdownBlock(_FormFieldBlock):
    type: Literal["dropdown"] = "dropdown"
    help_text: str = ""
    options: List[str] = Field(default_factory=list)
    default_value: str = ""


class RadioGroupBlock(_FormFieldBlock):
    type: Literal["radio-group"] = "radio-group"
    help_text: str = ""
    options: List[str] = Field(default_factory=list)
    layout: ChoiceLayout = "vertical"


class CheckboxGroupBlock(_FormFieldBlock):
    type: Literal["checkbox-group"] = "checkbox-group"
    help_text: str = ""
    options: List[str] = Field(default_factory=list)
    layout: ChoiceLayout = "vertical"


class SingleCheckboxBlock(_FormFieldBlock):
    type: Literal["single-checkbox"] = "single-checkbox"


class DatePickerBlock(_FormFieldBlock):
    type: Literal["date-picker"] = "date-picker"
    help_text: str = ""


class FileUploadBlock(_FormFieldBlock):
    type: Literal["file-upload"] = "file-upload"
    help_text: str = ""
    accept_types: str = ""
    max_size: str = ""
    multiple: bool = False


class SignatureBlock(_FormFieldBlock):
    type: Literal["signature"] = "signature"
    help_text: str = ""
    signature_url: str = ""


class ButtonBlock(BaseBlock):
    type: Literal["button"] = "button"
    label: str = "Submit"
    button_type: Literal["button", "submit", "reset"] = "button"
    variant: Literal["primary", "secondary", "outline"] = "primary"


# ============================================================================
# UNION
# ============================================================================

Block = Annotated[
    Union[
        HeadingBlock,
        ParagraphBlock,
        DividerBlock,
        ImageBlock,
        TextInputBlock,
        TextareaBlock,
        DropdownBlock,
        RadioGroupBlock,
        CheckboxGroupBlock,
        SingleCheckboxBlock,
        DatePickerBlock,
        FileUploadBlock,
        SignatureBlock,
        TableBlock,
        ListBlock,
        ButtonBlock,
        RawHtmlBlock,
    ],
    Field(discriminator="type"),
]

BLOCK_CLASSES: Dict[BlockType, Type[BaseBlock]] = {
    BlockType.HEADING: HeadingBlock,
    BlockType.PARAGRAPH: ParagraphBlock,
    BlockType.DIVIDER: DividerBlock,
    BlockType.IMAGE: ImageBlock,
    BlockType.TEXT_INPUT: TextInputBlock,
    BlockType.TEXTAREA: TextareaBlock,
    BlockType.DROPDOWN: DropdownBlock,
    BlockType.RADIO_GROUP: RadioGroupBlock,
    BlockType.CHECKBOX_GROUP: CheckboxGroupBlock,
    BlockType.SINGLE_CHECKBOX: SingleCheckboxBlock,
    BlockType.DATE_PICKER: DatePickerBlock,
    BlockType.FILE_UPLOAD: FileUploadBlock,
    BlockType.SIGNATURE: SignatureBlock,
    BlockType.TABLE: TableBlock,
    BlockType.LIST: ListBlock,
    BlockType.BUTTON: ButtonBlock,
    BlockType.RAW_HTML: RawHtmlBlock,
}

block_adapter: TypeAdapter = TypeAdapter(Block)


def equal_column_widths(count: int) -> List[float]:
    """Split 100% evenly across `count` columns."""
    count = max(count, 1)
    return [round(100.0 / count, 4)] * count


def block_type_of(block: BaseBlock) -> BlockType:
    """Return the BlockType tag of a block instance."""
    return BlockType(block.type)
