"""
HTML serializer: sections -> standalone HTML document.

Every block element carries its full field set as data-* attributes and its
styling inline; the document embeds the round-trip metadata comment. Parsing
the output reproduces the document exactly (metadata path) or, if a mail
client stripped the comment, structurally (marker path).
"""

import html
from typing import Callable, Dict, List, Sequence

import structlog

from ..config import settings
from ..errors import UnsupportedBlockError
from ..models.blocks import (
    BaseBlock,
    BlockType,
    ButtonBlock,
    DatePickerBlock,
    DividerBlock,
    DropdownBlock,
    FileUploadBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    RadioGroupBlock,
    RawHtmlBlock,
    SignatureBlock,
    SingleCheckboxBlock,
    TableBlock,
    TextareaBlock,
    TextInputBlock,
    block_type_of,
)
from ..models.document import ExportResult, Section
from ..models.marks import split_placeholders
from ..parsing.marks import serialize_marks
from ..parsing.metadata import (
    COLUMN_ATTR,
    LAYOUT_ATTR,
    SECTION_ATTR,
    SECTION_ID_ATTR,
    VERSION_ATTR,
    block_data_attributes,
    encode_metadata,
)
from ..version import METADATA_FORMAT_VERSION

logger = structlog.get_logger(__name__)

SECTION_GAP_PX = 24

FIELD_INPUT_STYLE = (
    "width: 100%; padding: 8px 12px; border: 1px solid #e2e8f0; border-radius: 6px; font-size: 14px;"
)
FIELD_LABEL_STYLE = "display: block; font-size: 14px; font-weight: 500; margin-bottom: 6px;"
REQUIRED_MARKER = ' <span style="color: #ef4444;">*</span>'

BUTTON_VARIANT_STYLES = {
    "primary": "background-color: #3b82f6; color: white; border: none;",
    "secondary": "background-color: #f1f5f9; color: #1e293b; border: none;",
    "outline": "background-color: transparent; color: #1e293b; border: 1px solid #e2e8f0;",
}

DOCUMENT_STYLESHEET = f"""
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      color: #1e293b;
      background: #f1f5f9;
      font-size: 14px;
      line-height: 1.6;
    }}
    form {{
      max-width: 800px;
      margin: 32px auto;
      padding: 40px;
      background: white;
      border-radius: 8px;
    }}
    h1, h2, h3, h4 {{ line-height: 1.3; color: #0f172a; }}
    p {{ word-wrap: break-word; }}
    table {{ width: 100%; border-collapse: collapse; table-layout: fixed; }}
    td, th {{ padding: 8px; border: 1px solid #000; vertical-align: top; word-wrap: break-word; }}
    th {{ font-weight: bold; }}
    input, select, textarea {{ outline: none; font-family: inherit; font-size: inherit; }}
    fieldset {{ border: none; padding: 0; }}
    legend {{ font-size: 14px; font-weight: 500; margin-bottom: 8px; }}
    .placeholder {{ background-color: #b3d4fc; padding: 0 2px; border-radius: 2px; }}
    a {{ color: #2563eb; text-decoration: underline; }}
    ul, ol {{ margin-left: 24px; }}
    li {{ padding: 4px 0; }}
    @media (max-width: 768px) {{
      form {{ margin: 16px; padding: 24px; }}
      [{SECTION_ATTR}] {{ flex-direction: column !important; }}
      [{COLUMN_ATTR}] {{ width: 100% !important; }}
    }}
"""


def _escape(value) -> str:
    return html.escape(str(value), quote=True)


def _inline_text(text: str) -> str:
    """Plain text with placeholder tokens highlighted."""
    return serialize_marks(split_placeholders(text or ""))


def _attributes(block: BaseBlock, extra: Dict[str, str] = None) -> str:
    attrs = block_data_attributes(block)
    if extra:
        attrs.update(extra)
    return " ".join(f'{name}="{_escape(value)}"' for name, value in attrs.items())


def _box_style(block: BaseBlock) -> str:
    style = (
        f"margin-top: {block.margin_top}px; margin-bottom: {block.margin_bottom}px; "
        f"margin-left: {block.margin_left}px; margin-right: {block.margin_right}px;"
    )
    if block.padding_x or block.padding_y:
        style += (
            f" padding-left: {block.padding_x}px; padding-right: {block.padding_x}px;"
            f" padding-top: {block.padding_y}px; padding-bottom: {block.padding_y}px;"
        )
    if block.width != 100:
        style += f" width: {block.width}%;"
    return style


def _field_label(block, for_id: bool = True) -> str:
    target = f' for="{_escape(block.field_name)}"' if for_id and block.field_name else ""
    marker = REQUIRED_MARKER if block.required else ""
    return f'<label{target} style="{FIELD_LABEL_STYLE}">{_escape(block.label)}{marker}</label>'


def _required(block) -> str:
    return " required" if block.required else ""


def _help_text(block) -> str:
    text = getattr(block, "help_text", "")
    if not text:
        return ""
    return f'\n  <div class="help-text" style="font-size: 12px; color: #64748b; margin-top: 4px;">{_escape(text)}</div>'


# ============================================================================
# BLOCK RENDERERS
# ============================================================================

def _render_text(block) -> str:
    tag = block.level if isinstance(block, HeadingBlock) else "p"
    color = f" color: {block.color};" if block.color else ""
    style = (
        f"font-size: {block.font_size}px; font-weight: {block.font_weight}; "
        f"text-align: {block.text_align}; line-height: {block.line_height};{color} {_box_style(block)}"
    )
    return f'<{tag} {_attributes(block)} style="{_escape(style)}">{serialize_marks(block.segments)}</{tag}>'


def _render_divider(block: DividerBlock) -> str:
    style = f"border: none; border-top: {block.thickness}px {block.style} {block.color}; {_box_style(block)}"
    return f'<hr {_attributes(block)} style="{_escape(style)}">'


def _render_image(block: ImageBlock) -> str:
    margin = {"left": "0 auto 0 0", "right": "0 0 0 auto"}.get(block.alignment, "0 auto")
    img_style = (
        f"max-width: 100%; border-radius: {block.border_radius}px; "
        f"max-height: {block.max_height}px; display: block; margin: {margin};"
    )
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">'
        f'<img src="{_escape(block.src)}" alt="{_escape(block.alt)}" style="{img_style}"></div>'
    )


def _render_text_input(block: TextInputBlock) -> str:
    input_type = {"email": "email", "phone": "tel", "number": "number", "url": "url"}.get(
        block.validation_type, "text"
    )
    max_length = f' maxlength="{_escape(block.max_length)}"' if block.max_length else ""
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        f"  {_field_label(block)}\n"
        f'  <input type="{input_type}" id="{_escape(block.field_name)}" name="{_escape(block.field_name)}" '
        f'placeholder="{_escape(block.placeholder)}"{max_length}{_required(block)} style="{FIELD_INPUT_STYLE}">'
        f"{_help_text(block)}\n</div>"
    )


def _render_textarea(block: TextareaBlock) -> str:
    max_length = f' maxlength="{_escape(block.max_length)}"' if block.max_length else ""
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        f"  {_field_label(block)}\n"
        f'  <textarea id="{_escape(block.field_name)}" name="{_escape(block.field_name)}" rows="{block.rows}" '
        f'placeholder="{_escape(block.placeholder)}"{max_length}{_required(block)} '
        f'style="{FIELD_INPUT_STYLE} resize: vertical;"></textarea>'
        f"{_help_text(block)}\n</div>"
    )


def _render_dropdown(block: DropdownBlock) -> str:
    options = ['<option value="">Select an option...</option>']
    for option in block.options:
        selected = " selected" if option == block.default_value else ""
        options.append(f'<option value="{_escape(option)}"{selected}>{_escape(option)}</option>')
    joined = "\n    ".join(options)
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        f"  {_field_label(block)}\n"
        f'  <select id="{_escape(block.field_name)}" name="{_escape(block.field_name)}"{_required(block)} '
        f'style="{FIELD_INPUT_STYLE} background: white;">\n    {joined}\n  </select>'
        f"{_help_text(block)}\n</div>"
    )


def _render_choice_group(block) -> str:
    input_type = "radio" if isinstance(block, RadioGroupBlock) else "checkbox"
    direction = "row" if block.layout == "horizontal" else "column"
    choices = []
    for index, option in enumerate(block.options):
        required = " required" if block.required and index == 0 and input_type == "radio" else ""
        choices.append(
            '<label style="display: flex; align-items: center; gap: 8px; font-size: 14px; cursor: pointer;">'
            f'<input type="{input_type}" name="{_escape(block.field_name)}" value="{_escape(option)}"{required}> '
            f"{_escape(option)}</label>"
        )
    joined = "\n    ".join(choices)
    marker = REQUIRED_MARKER if block.required else ""
    return (
        f'<fieldset {_attributes(block)} style="{_box_style(block)}">\n'
        f"  <legend>{_escape(block.label)}{marker}</legend>\n"
        f'  <div style="display: flex; flex-direction: {direction}; gap: 8px;">\n    {joined}\n  </div>'
        f"{_help_text(block)}\n</fieldset>"
    )


def _render_single_checkbox(block: SingleCheckboxBlock) -> str:
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        '  <label style="display: flex; align-items: flex-start; gap: 10px; font-size: 14px; cursor: pointer; line-height: 1.5;">\n'
        f'    <input type="checkbox" name="{_escape(block.field_name)}"{_required(block)} '
        'style="margin-top: 4px; flex-shrink: 0;">\n'
        f"    <span>{_inline_text(block.label)}</span>\n"
        "  </label>\n</div>"
    )


def _render_date_picker(block: DatePickerBlock) -> str:
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        f"  {_field_label(block)}\n"
        f'  <input type="date" id="{_escape(block.field_name)}" name="{_escape(block.field_name)}"'
        f'{_required(block)} style="{FIELD_INPUT_STYLE}">'
        f"{_help_text(block)}\n</div>"
    )


def _render_file_upload(block: FileUploadBlock) -> str:
    accept = f' accept="{_escape(block.accept_types)}"' if block.accept_types else ""
    multiple = " multiple" if block.multiple else ""
    return (
        f'<div {_attributes(block)} style="{_box_style(block)}">\n'
        f"  {_field_label(block)}\n"
        f'  <input type="file" id="{_escape(block.field_name)}" name="{_escape(block.field_name)}"'
        f'{_required(block)}{accept}{multiple} style="{FIELD_INPUT_STYLE}">'
        f"{_help_text(block)}\n</div>"
    )


def _render_signature(block: SignatureBlock) -> str:
    image = ""
    if block.signature_url:
        image = (
            f'\n  <img class="signature-image" src="{_escape(block.signature_url)}" alt="Signature" '
            'style="max-height: 50px; margin-left: 8px;">'
        )
    return (
        f'<div {_attributes(block)} class="signature-area" style="{_box_style(block)}">\n'
        '  <button type="button" data-signature-button class="sign-button" '
        'style="background: #ffeb3b; border: 1px solid #000; padding: 4px 16px; cursor: pointer; '
        'font-weight: bold; font-size: 12px;">SIGN</button>\n'
        f'  <span style="margin-left: 8px;">{_inline_text(block.label)}</span>{image}\n</div>'
    )


def _render_table(block: TableBlock) -> str:
    cols = "".join(f'<col style="width: {width:g}%">' for width in block.column_widths)
    lines = [
        f'<table {_attributes(block)} style="width: 100%; border-collapse: collapse; {_box_style(block)}">',
        f"  <colgroup>{cols}</colgroup>",
    ]
    body_rows = block.rows
    if block.header_row:
        header = "".join(
            f'<th style="padding: 8px; border: 1px solid #000; font-weight: bold;">{_inline_text(cell)}</th>'
            for cell in block.rows[0]
        )
        lines.append(f"  <thead>\n    <tr>{header}</tr>\n  </thead>")
        body_rows = block.rows[1:]

    lines.append("  <tbody>")
    offset = 1 if block.header_row else 0
    for index, row in enumerate(body_rows):
        height = block.row_heights[index + offset] if block.row_heights else 0
        row_style = f' style="height: {height:g}px;"' if height else ""
        cells = "".join(
            f'<td style="padding: 8px; border: 1px solid #000;">{_inline_text(cell)}</td>' for cell in row
        )
        lines.append(f"    <tr{row_style}>{cells}</tr>")
    lines.append("  </tbody>\n</table>")
    return "\n".join(lines)


def _render_list(block: ListBlock) -> str:
    tag = "ol" if block.list_type == "ordered" else "ul"
    marker = "decimal" if block.list_type == "ordered" else "disc"
    items = "".join(f'\n  <li style="padding: 4px 0;">{_inline_text(item)}</li>' for item in block.items)
    return (
        f'<{tag} {_attributes(block)} style="list-style-type: {marker}; margin-left: 24px; {_box_style(block)}">'
        f"{items}\n</{tag}>"
    )


def _render_button(block: ButtonBlock) -> str:
    variant = BUTTON_VARIANT_STYLES.get(block.variant, BUTTON_VARIANT_STYLES["primary"])
    style = (
        "padding: 10px 20px; border-radius: 6px; font-size: 14px; font-weight: 500; cursor: pointer; "
        f"{variant} {_box_style(block)}"
    )
    return (
        f'<button {_attributes(block)} type="{block.button_type}" style="{style}">'
        f"{_escape(block.label)}</button>"
    )


def _render_raw_html(block: RawHtmlBlock) -> str:
    # Content is emitted verbatim inside its marker wrapper
    return f'<div {_attributes(block)}>{block.html_content}</div>'


RENDERERS: Dict[BlockType, Callable[[BaseBlock], str]] = {
    BlockType.HEADING: _render_text,
    BlockType.PARAGRAPH: _render_text,
    BlockType.DIVIDER: _render_divider,
    BlockType.IMAGE: _render_image,
    BlockType.TEXT_INPUT: _render_text_input,
    BlockType.TEXTAREA: _render_textarea,
    BlockType.DROPDOWN: _render_dropdown,
    BlockType.RADIO_GROUP: _render_choice_group,
    BlockType.CHECKBOX_GROUP: _render_choice_group,
    BlockType.SINGLE_CHECKBOX: _render_single_checkbox,
    BlockType.DATE_PICKER: _render_date_picker,
    BlockType.FILE_UPLOAD: _render_file_upload,
    BlockType.SIGNATURE: _render_signature,
    BlockType.TABLE: _render_table,
    BlockType.LIST: _render_list,
    BlockType.BUTTON: _render_button,
    BlockType.RAW_HTML: _render_raw_html,
}

_unrendered = set(BlockType) - set(RENDERERS)
if _unrendered:
    raise UnsupportedBlockError(sorted(t.value for t in _unrendered)[0], "html serializer")


def render_block(block: BaseBlock) -> str:
    """Render one block to HTML."""
    return RENDERERS[block_type_of(block)](block)


# ============================================================================
# SECTIONS AND DOCUMENT
# ============================================================================

def render_section(section: Section) -> str:
    attrs = (
        f'{SECTION_ATTR}="true" {LAYOUT_ATTR}="{section.column_count}" '
        f'{SECTION_ID_ATTR}="{_escape(section.id)}"'
    )
    if section.column_count == 1:
        blocks = "\n".join("    " + render_block(b) for b in section.columns[0])
        return (
            f'<div {attrs} style="margin-bottom: {SECTION_GAP_PX}px;">\n'
            f'  <div {COLUMN_ATTR}="0">\n{blocks}\n  </div>\n</div>'
        )

    width = f"{100 / section.column_count:g}%"
    columns = []
    for index, column in enumerate(section.columns):
        blocks = "\n".join("    " + render_block(b) for b in column)
        columns.append(
            f'  <div {COLUMN_ATTR}="{index}" style="width: {width}; padding: 0 8px; box-sizing: border-box;">\n'
            f"{blocks}\n  </div>"
        )
    joined = "\n".join(columns)
    return (
        f'<div {attrs} style="display: flex; gap: 0; margin-bottom: {SECTION_GAP_PX}px;">\n'
        f"{joined}\n</div>"
    )


def serialize_body(sections: Sequence[Section]) -> str:
    """Metadata comment followed by the sections, without the page chrome."""
    parts = [encode_metadata(list(sections))]
    parts.extend(render_section(section) for section in sections)
    return "\n".join(parts)


def serialize(sections: Sequence[Section], title: str = None) -> str:
    """
    Render a complete, standalone HTML document.

    Args:
        sections: Document to render
        title: <title> text (defaults to settings.export_title)

    Returns:
        HTML with the stylesheet inline and the round-trip metadata embedded
    """
    title = settings.export_title if title is None else title
    body = "\n".join(render_section(section) for section in sections)
    return (
        "<!DOCTYPE html>\n"
        f'<html lang="en" {VERSION_ATTR}="{METADATA_FORMAT_VERSION}">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"  <title>{_escape(title)}</title>\n"
        f"  <style>{DOCUMENT_STYLESHEET}  </style>\n"
        "</head>\n"
        "<body>\n"
        f"{encode_metadata(list(sections))}\n"
        "  <form novalidate>\n"
        f"{body}\n"
        "  </form>\n"
        "</body>\n"
        "</html>\n"
    )


def export_document(sections: List[Section], body_only: bool = False) -> ExportResult:
    """
    Serialize a document and report its size.

    Exceeding settings.export_size_warning_kb adds a warning but never fails.
    """
    output = serialize_body(sections) if body_only else serialize(sections)
    size = len(output.encode("utf-8"))
    warnings: List[str] = []
    limit = settings.export_size_warning_kb * 1024
    if size > limit:
        warnings.append(
            f"Exported HTML is {size // 1024} KB, above the {settings.export_size_warning_kb} KB guideline"
        )
        logger.warning("export_size_exceeded", size_bytes=size, limit_bytes=limit)

    logger.info(
        "html_exported",
        sections=len(sections),
        size_bytes=size,
        body_only=body_only,
    )
    return ExportResult(html=output, size_bytes=size, warnings=warnings)
