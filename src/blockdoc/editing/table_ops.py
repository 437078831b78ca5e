"""
Table block edits.

Each operation returns a new TableBlock; the input is never mutated. Rows
stay rectangular and at least one row and one column always remain.
"""

from typing import List, Optional

from ..models.blocks import TableBlock, equal_column_widths


def _rebuild(table: TableBlock, rows: List[List[str]], **changes) -> TableBlock:
    data = table.model_dump()
    data.update(changes, rows=rows)
    return TableBlock.model_validate(data)


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise IndexError(f"{what} index {index} out of range (0-{size - 1})")


def add_row(table: TableBlock, index: Optional[int] = None) -> TableBlock:
    """Insert an empty row at `index` (default: append)."""
    rows = [list(row) for row in table.rows]
    position = len(rows) if index is None else max(0, min(index, len(rows)))
    rows.insert(position, [""] * table.column_count)
    heights = list(table.row_heights)
    if heights:
        heights.insert(position, 0.0)
    return _rebuild(table, rows, row_heights=heights)


def remove_row(table: TableBlock, index: int) -> TableBlock:
    """Remove the row at `index`; the last remaining row is kept."""
    _check_index(index, table.row_count, "Row")
    if table.row_count == 1:
        return table
    rows = [list(row) for i, row in enumerate(table.rows) if i != index]
    heights = [h for i, h in enumerate(table.row_heights) if i != index]
    header_row = table.header_row and index != 0
    return _rebuild(table, rows, row_heights=heights, header_row=header_row)


def add_column(table: TableBlock, index: Optional[int] = None) -> TableBlock:
    """Insert an empty column at `index` (default: append). Widths are reset to equal."""
    count = table.column_count
    position = count if index is None else max(0, min(index, count))
    rows = [list(row) for row in table.rows]
    for row in rows:
        row.insert(position, "")
    return _rebuild(table, rows, column_widths=equal_column_widths(count + 1))


def remove_column(table: TableBlock, index: int) -> TableBlock:
    """Remove the column at `index`; the last remaining column is kept."""
    _check_index(index, table.column_count, "Column")
    if table.column_count == 1:
        return table
    rows = [[cell for i, cell in enumerate(row) if i != index] for row in table.rows]
    widths = [w for i, w in enumerate(table.column_widths) if i != index]
    total = sum(widths)
    if total > 0:
        widths = [round(w * 100.0 / total, 4) for w in widths]
    else:
        widths = equal_column_widths(len(widths))
    return _rebuild(table, rows, column_widths=widths)


def update_cell(table: TableBlock, row: int, column: int, value: str) -> TableBlock:
    _check_index(row, table.row_count, "Row")
    _check_index(column, table.column_count, "Column")
    rows = [list(r) for r in table.rows]
    rows[row][column] = value
    return _rebuild(table, rows)
