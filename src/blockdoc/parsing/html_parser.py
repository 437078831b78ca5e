"""
Structural HTML parser: HTML document -> sections of columns of blocks.

Import runs in stages:

1. Sanitize (script-like elements, event handlers, javascript: URLs).
2. Native format: a `doc-metadata` comment rebuilds the document exactly.
3. Marker fallback: exports whose comment was stripped still carry
   data-editor-section / data-editor-column / data-block-* attributes.
4. Heuristic walk of the body for arbitrary HTML.

Only input that yields no tree at all raises MalformedInputError. Everything
else is recovered; content that matches no rule is kept as a raw-html block
and reported in `warnings`.
"""

from typing import List, Optional, Sequence, Union

import structlog
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from pydantic import ValidationError

from ..blocks.factory import create_section, fill_defaults
from ..errors import MalformedInputError
from ..models.blocks import (
    BLOCK_CLASSES,
    BaseBlock,
    BlockType,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ParagraphBlock,
    RawHtmlBlock,
    block_adapter,
)
from ..models.document import (
    MAX_COLUMNS,
    ParseResult,
    ParseWarning,
    Section,
    WarningCode,
    new_section_id,
)
from ..models.marks import MarkType, TextSegment, segments_text
from .encoding import decode_html_bytes
from .forms import (
    CONTROL_TAGS,
    button_block,
    choice_group_block,
    control_block,
    find_controls,
    input_block,
    is_claimed,
    is_signature_container,
    labelled_field,
    loose_choice_group,
    option_source,
    select_block,
    signature_block,
    textarea_block,
    unclaimed_content,
)
from .marks import collapse_text, parse_mark_nodes, parse_marks
from .metadata import (
    BLOCK_TYPE_ATTR,
    COLUMN_ATTR,
    LAYOUT_ATTR,
    SECTION_ATTR,
    SECTION_ID_ATTR,
    InvalidMetadataError,
    block_record_from_attributes,
    decode_metadata,
    find_metadata_comment,
)
from .sanitizer import has_dangerous_content, sanitize_html, sanitize_tree
from .styles import (
    font_weight_value,
    parse_box,
    parse_number,
    parse_percent,
    parse_px,
    parse_style,
)
from .tables import TableKind, classify_table, extract_table, own_rows, row_cells

logger = structlog.get_logger(__name__)

Item = Union[BaseBlock, Section]

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
HEADING_FONT_SIZES = {"h1": 24, "h2": 18, "h3": 15, "h4": 14, "h5": 13, "h6": 12}

INLINE_TAGS = frozenset({
    "a", "abbr", "b", "big", "br", "cite", "code", "del", "em", "font", "i", "ins",
    "kbd", "mark", "q", "s", "samp", "small", "span", "strike", "strong", "sub",
    "sup", "time", "tt", "u", "var", "wbr",
})
CONTAINER_TAGS = frozenset({
    "html", "body", "div", "section", "article", "header", "footer", "main", "nav",
    "aside", "center", "form", "blockquote", "figure", "figcaption", "address",
    "details", "summary", "dl", "dt", "dd", "li", "td", "th", "tr", "tbody",
    "thead", "tfoot", "caption", "legend", "hgroup", "search",
})
SKIPPED_TAGS = frozenset({
    "head", "style", "script", "meta", "link", "title", "template", "base", "colgroup", "col",
})
MEDIA_CONTENT_TAGS = ("img", "input", "select", "textarea", "button", "hr")

TEXT_ALIGNS = frozenset({"left", "center", "right", "justify"})
DIVIDER_STYLES = frozenset({"solid", "dashed", "dotted"})
FLEX_DISPLAYS = frozenset({"flex", "-webkit-flex", "inline-flex"})


# ============================================================================
# STYLE -> BLOCK FIELDS
# ============================================================================

def _geometry(style: dict) -> dict:
    """Margins and padding (px) from inline style."""
    fields = {}
    box = parse_box(style.get("margin"))
    if box:
        fields.update(margin_top=box[0], margin_right=box[1], margin_bottom=box[2], margin_left=box[3])
    for side in ("top", "right", "bottom", "left"):
        value = parse_px(style.get(f"margin-{side}"))
        if value is not None:
            fields[f"margin_{side}"] = value

    padding = parse_box(style.get("padding"))
    pad_x = parse_px(style.get("padding-left"))
    pad_y = parse_px(style.get("padding-top"))
    if pad_x is None and padding:
        pad_x = padding[3]
    if pad_y is None and padding:
        pad_y = padding[0]
    if pad_x is not None:
        fields["padding_x"] = max(pad_x, 0)
    if pad_y is not None:
        fields["padding_y"] = max(pad_y, 0)

    width = parse_percent(style.get("width"))
    if width is not None and 0 < width <= 100:
        fields["width"] = max(int(round(width)), 1)
    return fields


def _line_height(style: dict, font_size: int) -> Optional[float]:
    value = style.get("line-height")
    if not value or value.strip().lower() == "normal":
        return None
    number = parse_number(value)
    if number is None or number <= 0:
        return None
    value = value.strip().lower()
    if value.endswith("px") and font_size:
        return round(number / font_size, 2)
    if value.endswith("%"):
        return round(number / 100, 2)
    return number


def _typography(style: dict, default_size: int, default_weight: int, default_line: float) -> dict:
    font_size = parse_px(style.get("font-size")) or default_size
    weight = font_weight_value(style.get("font-weight")) or default_weight
    align = (style.get("text-align") or "left").strip().lower()
    return {
        "font_size": max(font_size, 1),
        "font_weight": min(max(weight, 100), 900),
        "text_align": align if align in TEXT_ALIGNS else "left",
        "line_height": _line_height(style, font_size) or default_line,
        "color": style.get("color", ""),
    }


def detect_column_count(tag: Tag) -> Optional[int]:
    """
    Number of side-by-side columns a container lays out, if it is one.

    Recognizes CSS grid with equal tracks, flex rows whose 2-3 children all
    carry a width/flex, and common column class names.
    """
    style = parse_style(tag.get("style"))
    display = style.get("display", "").strip().lower()
    children = [c for c in tag.find_all(True, recursive=False) if c.name not in SKIPPED_TAGS]

    count = None
    tracks = style.get("grid-template-columns", "").strip().lower()
    if display in ("grid", "inline-grid") and tracks:
        if tracks.startswith("repeat("):
            number = parse_number(tracks)
            count = int(number) if number else None
        else:
            parts = tracks.split()
            if len(parts) >= 2 and len(set(parts)) == 1:
                count = len(parts)
    elif display in FLEX_DISPLAYS and style.get("flex-direction", "row").strip() in ("row", "row-reverse"):
        if 2 <= len(children) <= MAX_COLUMNS and all(
            {"width", "flex", "flex-basis"} & set(parse_style(c.get("style"))) for c in children
        ):
            count = len(children)
    else:
        classes = set(tag.get("class") or [])
        if classes & {"col-2", "two-col", "two-columns", "2-col", "grid-2"}:
            count = 2
        elif classes & {"col-3", "three-col", "three-columns", "3-col", "grid-3"}:
            count = 3
        elif "row" in classes:
            columns = [
                c for c in children
                if any(cls in ("col", "column", "columns") or cls.startswith("col-")
                       for cls in c.get("class") or [])
            ]
            if len(columns) == len(children) and 2 <= len(columns) <= MAX_COLUMNS:
                count = len(columns)

    if count is None or count < 2:
        return None
    return min(count, MAX_COLUMNS)


def _has_content(tag: Tag) -> bool:
    return bool(collapse_text(tag)) or tag.find(MEDIA_CONTENT_TAGS) is not None


def _flatten(items: Sequence[Item]) -> List[BaseBlock]:
    blocks: List[BaseBlock] = []
    for item in items:
        if isinstance(item, Section):
            for column in item.columns:
                blocks.extend(column)
        else:
            blocks.append(item)
    return blocks


# ============================================================================
# HEURISTIC WALK
# ============================================================================

class _Walker:
    """
    Recursive element classifier.

    `allow_sections` is False inside a column: sections do not nest, so
    multi-column structures found there are flowed into the column.
    """

    def __init__(self, warnings: List[ParseWarning], document_styles: str = ""):
        self.warnings = warnings
        self.document_styles = document_styles

    # ---- traversal -------------------------------------------------------

    def children(self, parent: Tag, allow_sections: bool) -> List[Item]:
        """Classify the children of `parent`, turning inline runs into paragraphs."""
        return self.walk(list(parent.children), allow_sections)

    def walk(self, nodes: Sequence, allow_sections: bool) -> List[Item]:
        items: List[Item] = []
        run: list = []
        for child in nodes:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                if type(child) is NavigableString:
                    run.append(child)
                continue
            if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
                continue
            if self._is_inline(child):
                run.append(child)
                continue
            items.extend(self._paragraph_from_run(run))
            run = []
            items.extend(self.element(child, allow_sections))
        items.extend(self._paragraph_from_run(run))
        return items

    def element(self, tag: Tag, allow_sections: bool) -> List[Item]:
        """Classify one element into zero or more blocks (or sections)."""
        name = tag.name
        if tag.has_attr(BLOCK_TYPE_ATTR):
            return [self.restore_block(tag)]
        if name in SKIPPED_TAGS:
            return []
        if name in HEADING_TAGS:
            return self._text_block(tag, HeadingBlock)
        if name in ("p", "pre"):
            if find_controls(tag) or tag.find("button") is not None:
                return self._container(tag, allow_sections)
            return self._text_block(tag, ParagraphBlock)
        if name == "hr":
            return [self._divider(tag)]
        if name == "img":
            return [self._image(tag)] if tag.get("src") or tag.get("alt") else []
        if name in ("ul", "ol"):
            return self._list(tag, allow_sections)
        if name == "table":
            return self._table(tag, allow_sections)
        if name == "input":
            block = input_block(tag)
            return [block] if block is not None else []
        if name == "textarea":
            return [textarea_block(tag)]
        if name == "select":
            return [select_block(tag)]
        if name == "button":
            return [button_block(tag)]
        if name == "fieldset":
            return self._fieldset(tag, allow_sections)
        if name == "label":
            return self._label(tag, allow_sections)
        if name in INLINE_TAGS:
            # Inline element wrapping block content (e.g. a linked image)
            return self.children(tag, allow_sections)
        if name in CONTAINER_TAGS:
            return self._container(tag, allow_sections)
        return self._unrecognized(tag)

    def _is_inline(self, tag: Tag) -> bool:
        if tag.name not in INLINE_TAGS or tag.has_attr(BLOCK_TYPE_ATTR):
            return False
        return tag.find(lambda t: t.name not in INLINE_TAGS) is None

    def _paragraph_from_run(self, run: list) -> List[BaseBlock]:
        if not run:
            return []
        segments = parse_mark_nodes(run)
        if not segments or not segments_text(segments).strip():
            return []
        return [ParagraphBlock(segments=segments)]

    # ---- containers ------------------------------------------------------

    def _container(self, tag: Tag, allow_sections: bool) -> List[Item]:
        if is_signature_container(tag):
            return [signature_block(tag)]

        if allow_sections:
            section = self._column_section(tag)
            if section is not None:
                return [section]

        if find_controls(tag):
            field = labelled_field(tag)
            if field is not None:
                return [field]
            child_tags = {c.name for c in tag.find_all(True, recursive=False)}
            if child_tags <= {"label", "input", "br", "span"}:
                group = loose_choice_group(tag)
                if group is not None:
                    return [group]

        element_children = [c for c in tag.find_all(True, recursive=False) if c.name not in SKIPPED_TAGS]
        direct_text = any(
            type(c) is NavigableString and c.strip() for c in tag.children
        )
        if len(element_children) == 1 and not direct_text:
            return self.element(element_children[0], allow_sections)

        if direct_text and all(self._is_inline(c) for c in element_children):
            return self._text_block(tag, ParagraphBlock)

        return self.children(tag, allow_sections)

    def _column_section(self, tag: Tag) -> Optional[Section]:
        count = detect_column_count(tag)
        if count is None:
            return None
        children = [c for c in tag.find_all(True, recursive=False) if c.name not in SKIPPED_TAGS]
        if len(children) == count:
            columns = [_flatten(self.element(child, False)) for child in children]
        elif "grid" in parse_style(tag.get("style")).get("display", ""):
            columns = [[] for _ in range(count)]
            for index, block in enumerate(_flatten(self.children(tag, False))):
                columns[index % count].append(block)
        else:
            return None
        if not any(columns):
            return None
        return Section(column_count=count, columns=columns)

    def _fieldset(self, tag: Tag, allow_sections: bool) -> List[Item]:
        """
        Choice fieldset: the group block, with the fieldset's other content
        (help text, images) as ordinary blocks before or after it.
        """
        legend = tag.find("legend")
        group = choice_group_block(tag, collapse_text(legend) if legend is not None else None)
        if group is None:
            return self.children(tag, allow_sections)

        sources = [s for s in (option_source(c) for c in find_controls(tag)) if s is not None]
        before: list = []
        after: list = []
        in_group = False
        for child in tag.children:
            if isinstance(child, Comment) or child is legend:
                continue
            if isinstance(child, Tag) and (child.name in CONTROL_TAGS or find_controls(child)):
                if unclaimed_content(child, sources):
                    # Controls mixed with other content: read it element by element
                    return self.children(tag, allow_sections)
                in_group = True
            elif is_claimed(child, sources):
                in_group = True
            else:
                (after if in_group else before).append(child)
        return self.walk(before, allow_sections) + [group] + self.walk(after, allow_sections)

    def _label(self, tag: Tag, allow_sections: bool) -> List[Item]:
        controls = find_controls(tag)
        if len(controls) == 1:
            control = controls[0]
            text = " ".join(
                s.strip() for s in tag.find_all(string=True)
                if type(s) is NavigableString and s.strip()
                and s.find_parent(["select", "textarea"]) is None
            )
            block = control_block(control, text)
            return [block] if block is not None else []
        if controls:
            return self.children(tag, allow_sections)
        return self._text_block(tag, ParagraphBlock)

    # ---- leaf blocks -----------------------------------------------------

    def _text_block(self, tag: Tag, block_class) -> List[BaseBlock]:
        """Heading/paragraph from an element; images inside it follow as image blocks."""
        style = parse_style(tag.get("style"))
        segments = parse_marks(tag, include_root=False)
        images = [self._image(img) for img in tag.find_all("img") if img.get("src") or img.get("alt")]
        if not segments_text(segments).strip():
            return images

        if block_class is HeadingBlock:
            level = tag.name if tag.name in ("h1", "h2", "h3", "h4") else "h4"
            default_size = HEADING_FONT_SIZES.get(tag.name, 24)
            fields = _typography(style, default_size, 700, 1.3)
            fields["level"] = level
        else:
            fields = _typography(style, 14, 400, 1.6)
        fields.update(_geometry(style))
        return [block_class(segments=segments, **fields)] + images

    def _divider(self, tag: Tag) -> DividerBlock:
        style = parse_style(tag.get("style"))
        fields = _geometry(style)
        border = style.get("border-top") or style.get("border-bottom") or style.get("border") or ""
        for token in border.split():
            lowered = token.lower()
            if lowered in DIVIDER_STYLES:
                fields["style"] = lowered
            elif parse_px(lowered) is not None and lowered[0].isdigit():
                fields["thickness"] = max(parse_px(lowered), 1)
            elif lowered != "none":
                fields["color"] = token
        if tag.get("size") and str(tag["size"]).isdigit():
            fields.setdefault("thickness", max(int(tag["size"]), 1))
        if tag.get("color"):
            fields.setdefault("color", tag["color"])
        return DividerBlock(**fields)

    def _image(self, tag: Tag) -> ImageBlock:
        style = parse_style(tag.get("style"))
        fields = _geometry(style)
        fields.pop("padding_x", None)
        fields.pop("padding_y", None)
        width = parse_percent(tag.get("width") or "")
        if width is not None and 0 < width <= 100:
            fields["width"] = max(int(round(width)), 1)

        alignment = (tag.get("align") or style.get("float") or "").strip().lower()
        fields["alignment"] = alignment if alignment in ("left", "right", "center") else "center"
        radius = parse_px(style.get("border-radius"))
        if radius is not None:
            fields["border_radius"] = max(radius, 0)
        max_height = parse_px(style.get("max-height"))
        if max_height is not None:
            fields["max_height"] = max(max_height, 0)
        return ImageBlock(src=tag.get("src") or "", alt=tag.get("alt") or "", **fields)

    def _list(self, tag: Tag, allow_sections: bool) -> List[Item]:
        items = [
            segments_text(parse_marks(li, include_root=False))
            for li in tag.find_all("li", recursive=False)
        ]
        if not any(item.strip() for item in items):
            return self.children(tag, allow_sections) if _has_content(tag) else []
        style = parse_style(tag.get("style"))
        fields = _geometry(style)
        images = [self._image(img) for img in tag.find_all("img") if img.get("src") or img.get("alt")]
        block = ListBlock(
            list_type="ordered" if tag.name == "ol" else "unordered", items=items, **fields
        )
        return [block] + images

    def _table(self, tag: Tag, allow_sections: bool) -> List[Item]:
        if classify_table(tag) == TableKind.DATA:
            block = extract_table(tag)
            geometry = _geometry(parse_style(tag.get("style")))
            geometry.pop("width", None)
            return [block.model_copy(update=geometry)]
        return self._layout_table(tag, allow_sections)

    def _layout_table(self, table: Tag, allow_sections: bool) -> List[Item]:
        """
        Unwrap a layout table. A row of 2-3 non-empty cells becomes a
        multi-column section; any other row flows its cells in order.
        """
        items: List[Item] = []
        for tr in own_rows(table):
            cells = [cell for cell in row_cells(tr) if _has_content(cell)]
            if not cells:
                continue
            if allow_sections and 2 <= len(cells) <= MAX_COLUMNS:
                columns = [_flatten(self.children(cell, False)) for cell in cells]
                if sum(1 for column in columns if column) >= 2:
                    items.append(Section(column_count=len(columns), columns=columns))
                    continue
                items.extend(block for column in columns for block in column)
                continue
            for cell in cells:
                items.extend(self.children(cell, allow_sections))
        caption = table.find("caption")
        if caption is not None and caption.find_parent("table") is table:
            items = self._text_block(caption, ParagraphBlock) + items
        return items

    def _unrecognized(self, tag: Tag) -> List[BaseBlock]:
        if not _has_content(tag) and not tag.find(True) and not tag.attrs:
            return []
        return [self._raw_html(tag)]

    def _raw_html(self, tag: Tag) -> RawHtmlBlock:
        block = RawHtmlBlock(html_content=str(tag), original_styles=self.document_styles)
        self.warnings.append(
            ParseWarning(
                code=WarningCode.UNRECOGNIZED_ELEMENT,
                message=f"<{tag.name}> preserved as raw HTML",
                element=tag.name,
                block_id=block.id,
            )
        )
        return block

    # ---- marker restoration ----------------------------------------------

    def restore_block(self, tag: Tag) -> BaseBlock:
        """Rebuild a block this system exported, from its data-* attributes and content."""
        try:
            block_type = BlockType(tag.get(BLOCK_TYPE_ATTR))
        except ValueError:
            return self._raw_html(tag)

        record = block_record_from_attributes(tag, BLOCK_CLASSES[block_type])
        if block_type in (BlockType.HEADING, BlockType.PARAGRAPH):
            segments = parse_marks(tag, include_root=False)
            record["segments"] = [s.model_dump() for s in segments]
            if not segments:
                record["content"] = ""
        elif block_type == BlockType.RAW_HTML:
            record["html_content"] = tag.decode_contents()

        block, repaired = fill_defaults(record)
        repaired = [f for f in repaired if f not in ("id", "content", "segments", "html_content", "original_styles")]
        if repaired:
            self.warnings.append(
                ParseWarning(
                    code=WarningCode.SCHEMA_MISMATCH,
                    message=f"{block_type.value} block missing or invalid fields: {', '.join(repaired)}",
                    element=tag.name,
                    block_id=block.id,
                )
            )
        return block

    def marker_sections(self, section_tags: List[Tag]) -> List[Section]:
        sections = []
        for tag in section_tags:
            try:
                count = int(tag.get(LAYOUT_ATTR, "1"))
            except ValueError:
                count = 1
            count = min(max(count, 1), MAX_COLUMNS)
            columns: List[List[BaseBlock]] = [[] for _ in range(count)]
            column_tags = tag.find_all(attrs={COLUMN_ATTR: True}, recursive=False)
            if column_tags:
                for column_tag in column_tags:
                    try:
                        index = int(column_tag.get(COLUMN_ATTR, "0"))
                    except ValueError:
                        index = 0
                    index = min(max(index, 0), count - 1)
                    columns[index].extend(_flatten(self.children(column_tag, False)))
            else:
                columns[0] = _flatten(self.children(tag, False))
            sections.append(
                Section(
                    id=tag.get(SECTION_ID_ATTR) or new_section_id(),
                    column_count=count,
                    columns=columns,
                )
            )
        return sections


def _assemble(items: Sequence[Item]) -> List[Section]:
    """Group loose blocks into 1-column sections around multi-column ones."""
    sections: List[Section] = []
    pending: List[BaseBlock] = []
    for item in items:
        if isinstance(item, Section):
            if pending:
                sections.append(Section(column_count=1, columns=[pending]))
                pending = []
            sections.append(item)
        else:
            pending.append(item)
    if pending:
        sections.append(Section(column_count=1, columns=[pending]))
    return sections


# ============================================================================
# NATIVE FORMAT
# ============================================================================

def _scrub_native_block(block: BaseBlock) -> BaseBlock:
    """Apply sanitization to content that bypasses the DOM (metadata JSON)."""
    if isinstance(block, RawHtmlBlock) and has_dangerous_content(block.html_content):
        return block.model_copy(update={"html_content": sanitize_html(block.html_content)})
    if isinstance(block, (HeadingBlock, ParagraphBlock)):
        unsafe = any(
            m.type == MarkType.LINK and (m.value or "").strip().lower().startswith("javascript:")
            for s in block.segments for m in s.marks
        )
        if unsafe:
            segments = [
                TextSegment(
                    text=s.text,
                    marks=[
                        m for m in s.marks
                        if not (m.type == MarkType.LINK
                                and (m.value or "").strip().lower().startswith("javascript:"))
                    ],
                )
                for s in block.segments
            ]
            return block.model_copy(update={"segments": segments})
    return block


def sections_from_records(records: List[dict], warnings: List[ParseWarning]) -> List[Section]:
    """
    Rebuild sections from metadata records.

    Blocks that do not validate are repaired through the defaults factory
    and reported as schema mismatches; nothing is dropped.
    """
    sections = []
    for record in records:
        raw_columns = record.get("columns")
        raw_columns = [c for c in raw_columns if isinstance(c, list)] if isinstance(raw_columns, list) else []
        count = record.get("column_count")
        if not isinstance(count, int) or not 1 <= count <= MAX_COLUMNS:
            fixed = min(max(len(raw_columns), 1), MAX_COLUMNS)
            warnings.append(
                ParseWarning(
                    code=WarningCode.SCHEMA_MISMATCH,
                    message=f"Section column_count {count!r} replaced with {fixed}",
                )
            )
            count = fixed

        columns: List[List[BaseBlock]] = [[] for _ in range(count)]
        for index, raw_column in enumerate(raw_columns):
            # Surplus columns are appended to the last one rather than lost
            target = columns[min(index, count - 1)]
            for data in raw_column:
                target.append(_native_block(data, warnings))

        section_id = record.get("id")
        sections.append(
            Section(
                id=section_id if isinstance(section_id, str) and section_id else new_section_id(),
                column_count=count,
                columns=columns,
            )
        )
    return sections


def _native_block(data, warnings: List[ParseWarning]) -> BaseBlock:
    try:
        block = block_adapter.validate_python(data)
    except ValidationError:
        block, repaired = fill_defaults(data if isinstance(data, dict) else {})
        warnings.append(
            ParseWarning(
                code=WarningCode.SCHEMA_MISMATCH,
                message=f"{block.type} block repaired, defaults used for: {', '.join(repaired)}",
                block_id=block.id,
            )
        )
    return _scrub_native_block(block)


# ============================================================================
# ENTRY POINT
# ============================================================================

def parse_html(html: Union[str, bytes]) -> ParseResult:
    """
    Parse an HTML document or fragment into sections.

    Args:
        html: HTML text (bytes are decoded with charset detection)

    Returns:
        ParseResult with sections, warnings and whether the input was a
        native export

    Raises:
        MalformedInputError: If the input is not text or yields no tree
    """
    if isinstance(html, (bytes, bytearray)):
        html = decode_html_bytes(bytes(html))
    if not isinstance(html, str):
        raise MalformedInputError(f"Expected HTML text, got {type(html).__name__}")

    if not html.strip():
        return ParseResult(sections=[create_section(1)])

    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as e:
        raise MalformedInputError(f"HTML could not be parsed: {e}") from e

    sanitize_tree(soup)
    warnings: List[ParseWarning] = []

    raw_metadata = find_metadata_comment(soup)
    if raw_metadata is not None:
        try:
            records = decode_metadata(raw_metadata)
        except InvalidMetadataError as e:
            logger.warning("invalid_metadata", error=str(e))
            warnings.append(ParseWarning(code=WarningCode.INVALID_METADATA, message=str(e)))
        else:
            result = ParseResult(
                sections=sections_from_records(records, warnings),
                warnings=warnings,
                is_native_format=True,
            )
            logger.info("html_parsed", path="native", **result.summary())
            return result

    document_styles = "\n".join(
        style.get_text() for style in soup.find_all("style") if style.get_text().strip()
    )
    walker = _Walker(warnings, document_styles)

    section_tags = [
        tag for tag in soup.find_all(attrs={SECTION_ATTR: True})
        if tag.find_parent(attrs={SECTION_ATTR: True}) is None
    ]
    if section_tags:
        path = "markers"
        sections = walker.marker_sections(section_tags)
    else:
        path = "heuristic"
        root = soup.body if soup.body is not None else soup
        sections = _assemble(walker.children(root, allow_sections=True))

    if not sections:
        sections = [create_section(1)]

    result = ParseResult(sections=sections, warnings=warnings)
    logger.info("html_parsed", path=path, **result.summary())
    if result.raw_html_block_count():
        logger.warning("raw_html_preserved", count=result.raw_html_block_count())
    return result
