"""
Table classification and extraction.

A <table> is either a layout table (positioning scaffolding from email
templates and legacy pages) or a data table (a grid of values). Decision
table, first matching rule wins:

    1. role="presentation" or role="none"             -> layout
    2. a cell holds embedded content (img, nested
       table, form controls, buttons)                 -> layout
    3. <thead> or any <th> in its own rows             -> data
    4. a cell holds other block content
       (p/div/headings/lists)                         -> layout
    5. cellpadding / cellspacing / bgcolor attribute,
       or explicit width >= layout_table_min_width_px  -> layout
    6. >= 2 rows and >= 2 columns                      -> data
    7. otherwise                                       -> layout

TableBlock cells hold text only, so embedded content makes a table layout
even under a header row. A data table read as layout still yields all of
its content as blocks.
"""

import re
from enum import Enum
from typing import Iterable, List, Optional

from bs4 import NavigableString, Tag

from ..config import settings
from ..models.blocks import TableBlock
from .styles import parse_percent, parse_px, parse_style

# Cell content with no text form in a TableBlock
EMBEDDED_CONTENT_TAGS = (
    "img", "table", "input", "select", "textarea", "button", "form", "fieldset",
    "iframe", "video", "audio", "object", "embed", "svg", "canvas",
)
BLOCK_CONTENT_TAGS = (
    "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "hr", "blockquote",
)
LEGACY_LAYOUT_ATTRIBUTES = ("cellpadding", "cellspacing", "bgcolor")

_WS_RE = re.compile(r"\s+")


class TableKind(str, Enum):
    LAYOUT = "layout"
    DATA = "data"


def own_rows(table: Tag) -> List[Tag]:
    """Rows belonging to this table (rows of nested tables excluded)."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def row_cells(tr: Tag) -> List[Tag]:
    return tr.find_all(["td", "th"], recursive=False)


def _table_width_px(table: Tag) -> Optional[int]:
    width = parse_style(table.get("style")).get("width") or table.get("width")
    return parse_px(width) if width else None


def classify_table(table: Tag, min_width_px: Optional[int] = None) -> TableKind:
    """Apply the layout/data decision table to one <table>."""
    if min_width_px is None:
        min_width_px = settings.layout_table_min_width_px

    role = (table.get("role") or "").strip().lower()
    if role in ("presentation", "none"):
        return TableKind.LAYOUT

    rows = own_rows(table)
    cells = [cell for tr in rows for cell in row_cells(tr)]
    if any(cell.find(EMBEDDED_CONTENT_TAGS) is not None for cell in cells):
        return TableKind.LAYOUT

    thead = table.find("thead")
    if (thead is not None and thead.find_parent("table") is table) or any(
        tr.find("th", recursive=False) is not None for tr in rows
    ):
        return TableKind.DATA

    if any(cell.find(BLOCK_CONTENT_TAGS) is not None for cell in cells):
        return TableKind.LAYOUT

    if any(table.has_attr(attr) for attr in LEGACY_LAYOUT_ATTRIBUTES):
        return TableKind.LAYOUT
    width = _table_width_px(table)
    if width is not None and width >= min_width_px:
        return TableKind.LAYOUT

    column_count = max((_span_width(row_cells(tr)) for tr in rows), default=0)
    if len(rows) >= 2 and column_count >= 2:
        return TableKind.DATA
    return TableKind.LAYOUT


def _span(cell: Tag, attr: str) -> int:
    value = (cell.get(attr) or "1").strip()
    return max(int(value), 1) if value.isdigit() else 1


def _span_width(cells: Iterable[Tag]) -> int:
    return sum(_span(cell, "colspan") for cell in cells)


# ============================================================================
# EXTRACTION
# ============================================================================

def cell_text(cell: Tag) -> str:
    """
    Plain text of a cell: <br> and block children become line breaks, list
    items become bullet lines.
    """
    parts: List[str] = []

    def newline():
        if parts and not parts[-1].endswith("\n"):
            parts.append("\n")

    def walk(node):
        if isinstance(node, NavigableString):
            if type(node) is NavigableString:
                parts.append(_WS_RE.sub(" ", str(node)))
            return
        if not isinstance(node, Tag) or node.name in ("style", "script"):
            return
        if node.name == "br":
            parts.append("\n")
        elif node.name in ("p", "div"):
            newline()
            for child in node.children:
                walk(child)
            newline()
        elif node.name in ("ul", "ol"):
            newline()
            for li in node.find_all("li", recursive=False):
                parts.append("• " + " ".join(li.get_text(" ").split()) + "\n")
        else:
            for child in node.children:
                walk(child)

    for child in cell.children:
        walk(child)
    lines = [" ".join(line.split()) for line in "".join(parts).split("\n")]
    text = "\n".join(lines).strip("\n ")
    while "\n\n\n" in text:
        text = text.replace("\n\n\n", "\n\n")
    return text


def extract_table(table: Tag) -> TableBlock:
    """
    Convert a data table into a TableBlock.

    colspan/rowspan are expanded into empty cells so the grid stays
    rectangular; header_row is set when a <thead> or a first-row <th> exists.
    """
    rows: List[List[str]] = []
    row_heights: List[float] = []
    pending_rowspans = {}  # column index -> rows still covered

    header_row = False
    for index, tr in enumerate(own_rows(table)):
        if tr.find_parent("thead") is not None and tr.find_parent("table") is table:
            header_row = True
        elif index == 0 and tr.find("th", recursive=False) is not None:
            header_row = True

        cells: List[str] = []
        column = 0

        def fill_spanned():
            nonlocal column
            while column in pending_rowspans:
                remaining = pending_rowspans[column] - 1
                if remaining > 0:
                    pending_rowspans[column] = remaining
                else:
                    del pending_rowspans[column]
                cells.append("")
                column += 1

        for cell in row_cells(tr):
            fill_spanned()
            colspan = _span(cell, "colspan")
            rowspan = _span(cell, "rowspan")
            cells.append(cell_text(cell))
            cells.extend([""] * (colspan - 1))
            if rowspan > 1:
                for offset in range(colspan):
                    pending_rowspans[column + offset] = rowspan - 1
            column += colspan
        fill_spanned()

        if cells:
            rows.append(cells)
            height = parse_style(tr.get("style")).get("height") or tr.get("height")
            row_heights.append(float(parse_px(height) or 0) if height else 0.0)

    if not rows:
        rows = [[""]]
        row_heights = []

    width = max(len(row) for row in rows)
    return TableBlock(
        rows=rows,
        header_row=header_row,
        column_widths=_column_widths(table, width) or [],
        row_heights=row_heights if any(h > 0 for h in row_heights) else [],
    )


def _column_widths(table: Tag, count: int) -> Optional[List[float]]:
    """Percent widths from <colgroup>/<col> or from the first row's cells."""
    colgroup = table.find("colgroup")
    if colgroup is not None and colgroup.find_parent("table") is table:
        widths = []
        for col in colgroup.find_all("col"):
            pct = parse_percent(parse_style(col.get("style")).get("width") or col.get("width"))
            if pct is not None:
                widths.extend([pct] * _span(col, "span"))
        if len(widths) == count:
            return widths

    rows = own_rows(table)
    if not rows:
        return None
    widths = []
    for cell in row_cells(rows[0]):
        pct = parse_percent(parse_style(cell.get("style")).get("width") or cell.get("width"))
        if pct is None:
            return None
        span = _span(cell, "colspan")
        widths.extend([pct / span] * span)
    if len(widths) == count and all(w > 0 for w in widths):
        return widths
    return None
