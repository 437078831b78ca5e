"""
Editing session - the live document plus selection, clipboard and history.

Every collaborator intent goes through EditorSession. Structural intents
(add/remove/move/duplicate) record a history snapshot immediately; field
edits through `update_block` are debounced so a burst of edits becomes one
undo step.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from ..blocks.factory import create_default, create_section
from ..errors import BlockLockedError, BlockNotFoundError, SectionNotFoundError
from ..export.html_serializer import export_document
from ..history.manager import HistoryManager
from ..models.blocks import BLOCK_CLASSES, BaseBlock, BlockType, TableBlock, new_block_id
from ..models.document import (
    BlockLocation,
    ExportResult,
    ParseResult,
    Section,
    copy_sections,
    find_block,
)
from ..parsing.html_parser import parse_html
from . import table_ops

logger = structlog.get_logger(__name__)

# Fields an edit may never change
_IMMUTABLE_FIELDS = frozenset({"id", "type"})


class EditorSession:
    """
    One document being edited.

    Args:
        sections: Initial document (deep copied); defaults to one empty section
        history: History manager to use (a fresh one by default)
    """

    def __init__(self, sections: Sequence[Section] = None, history: HistoryManager = None):
        self.sections: List[Section] = copy_sections(sections) if sections else [create_section(1)]
        self.history = history or HistoryManager()
        self.selected_block_id: Optional[str] = None
        self.selected_section_id: Optional[str] = None
        self.clipboard: Optional[BaseBlock] = None
        self.history.push(self.sections)

    # ========================================================================
    # LOOKUP
    # ========================================================================

    def _section_index(self, section_id: str) -> int:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        raise SectionNotFoundError(section_id)

    def get_section(self, section_id: str) -> Section:
        return self.sections[self._section_index(section_id)]

    def _locate(self, block_id: str) -> BlockLocation:
        location = find_block(self.sections, block_id)
        if location is None:
            raise BlockNotFoundError(block_id)
        return location

    def get_block(self, block_id: str) -> BaseBlock:
        loc = self._locate(block_id)
        return self.sections[loc.section_index].columns[loc.column_index][loc.block_index]

    def _column(self, section_id: str, column_index: int) -> List[BaseBlock]:
        section = self.get_section(section_id)
        if not 0 <= column_index < section.column_count:
            raise IndexError(
                f"Column {column_index} out of range for section '{section_id}' "
                f"({section.column_count} columns)"
            )
        return section.columns[column_index]

    def _unlocked(self, block_id: str) -> BaseBlock:
        block = self.get_block(block_id)
        if block.locked:
            raise BlockLockedError(block_id)
        return block

    def _replace(self, block_id: str, block: BaseBlock) -> None:
        loc = self._locate(block_id)
        self.sections[loc.section_index].columns[loc.column_index][loc.block_index] = block

    def _commit(self, immediate: bool = True) -> None:
        self.history.push(self.sections, immediate=immediate)

    # ========================================================================
    # SECTIONS
    # ========================================================================

    def add_section(self, column_count: int = 1, index: Optional[int] = None) -> Section:
        """Insert a new empty section (appended when `index` is None)."""
        section = create_section(column_count)
        if index is None:
            self.sections.append(section)
        else:
            self.sections.insert(index, section)
        self._commit()
        return section

    def remove_section(self, section_id: str) -> None:
        index = self._section_index(section_id)
        removed = self.sections.pop(index)
        removed_ids = {block.id for block in removed.blocks()}
        if self.selected_section_id == section_id:
            self.selected_section_id = None
        if self.selected_block_id in removed_ids:
            self.selected_block_id = None
        self._commit()

    def reorder_sections(self, old_index: int, new_index: int) -> bool:
        """Move a section; out-of-range indexes leave the document unchanged."""
        size = len(self.sections)
        if not (0 <= old_index < size and 0 <= new_index < size) or old_index == new_index:
            return False
        self.sections.insert(new_index, self.sections.pop(old_index))
        self._commit()
        return True

    # ========================================================================
    # BLOCKS
    # ========================================================================

    def add_block(
        self,
        section_id: str,
        column_index: int,
        block: Union[BaseBlock, BlockType, str],
        index: Optional[int] = None,
    ) -> BaseBlock:
        """
        Insert a block (or a default block of the given type) and select it.

        Raises:
            SectionNotFoundError: Unknown section
            IndexError: Column index outside the section
        """
        if not isinstance(block, BaseBlock):
            block = create_default(block)
        column = self._column(section_id, column_index)
        if index is None:
            column.append(block)
        else:
            column.insert(index, block)
        self.selected_block_id = block.id
        self._commit()
        return block

    def remove_block(self, block_id: str) -> None:
        self._unlocked(block_id)
        loc = self._locate(block_id)
        del self.sections[loc.section_index].columns[loc.column_index][loc.block_index]
        if self.selected_block_id == block_id:
            self.selected_block_id = None
        self._commit()

    def update_block(self, block_id: str, **updates: Any) -> BaseBlock:
        """
        Change fields of a block. The history push is debounced.

        A locked block only accepts changing `locked` itself. Setting
        `content` on a heading/paragraph without `segments` re-derives the
        segments from the new text.

        Raises:
            BlockLockedError: The block is locked
            ValueError: An update tries to change `id` or `type`
            pydantic.ValidationError: A value is invalid for the field
        """
        block = self.get_block(block_id)
        if block.locked and set(updates) - {"locked"}:
            raise BlockLockedError(block_id)
        forbidden = _IMMUTABLE_FIELDS & set(updates)
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))} of a block")

        data: Dict[str, Any] = block.model_dump()
        if "content" in updates and "segments" not in updates and "segments" in data:
            data["segments"] = []
        data.update(updates)
        updated = BLOCK_CLASSES[BlockType(block.type)].model_validate(data)
        self._replace(block_id, updated)
        self._commit(immediate=False)
        return updated

    def move_block(
        self,
        block_id: str,
        to_section_id: str,
        to_column_index: int,
        to_index: Optional[int] = None,
    ) -> None:
        """Move a block to another position (any section/column)."""
        self._unlocked(block_id)
        target = self._column(to_section_id, to_column_index)
        loc = self._locate(block_id)
        block = self.sections[loc.section_index].columns[loc.column_index].pop(loc.block_index)
        if to_index is None:
            target.append(block)
        else:
            target.insert(to_index, block)
        self._commit()

    def reorder_blocks(self, section_id: str, column_index: int, old_index: int, new_index: int) -> bool:
        """Reorder within one column; out-of-range indexes leave it unchanged."""
        column = self._column(section_id, column_index)
        size = len(column)
        if not (0 <= old_index < size and 0 <= new_index < size) or old_index == new_index:
            return False
        if column[old_index].locked:
            raise BlockLockedError(column[old_index].id)
        column.insert(new_index, column.pop(old_index))
        self._commit()
        return True

    def duplicate_block(self, block_id: str) -> BaseBlock:
        """Insert a copy with a fresh id right after the block, and select it."""
        loc = self._locate(block_id)
        column = self.sections[loc.section_index].columns[loc.column_index]
        duplicate = column[loc.block_index].model_copy(deep=True, update={"id": new_block_id()})
        column.insert(loc.block_index + 1, duplicate)
        self.selected_block_id = duplicate.id
        self._commit()
        return duplicate

    # ========================================================================
    # SELECTION AND CLIPBOARD
    # ========================================================================

    def select_block(self, block_id: Optional[str]) -> None:
        if block_id is not None:
            self._locate(block_id)
        self.selected_block_id = block_id
        self.selected_section_id = None

    def select_section(self, section_id: Optional[str]) -> None:
        if section_id is not None:
            self._section_index(section_id)
        self.selected_section_id = section_id
        self.selected_block_id = None

    def copy_block(self, block_id: str) -> BaseBlock:
        """Put a deep copy of the block on the session clipboard."""
        self.clipboard = self.get_block(block_id).model_copy(deep=True)
        return self.clipboard

    def paste_block(
        self, section_id: str, column_index: int, index: Optional[int] = None
    ) -> Optional[BaseBlock]:
        """
        Insert the clipboard block with a fresh id.

        Returns:
            The pasted block, or None if the clipboard is empty
        """
        if self.clipboard is None:
            return None
        block = self.clipboard.model_copy(deep=True, update={"id": new_block_id(), "locked": False})
        return self.add_block(section_id, column_index, block, index)

    # ========================================================================
    # TABLES
    # ========================================================================

    def _edit_table(self, block_id: str, operation, *args) -> TableBlock:
        block = self._unlocked(block_id)
        if not isinstance(block, TableBlock):
            raise TypeError(f"Block '{block_id}' is a {block.type} block, not a table")
        updated = operation(block, *args)
        self._replace(block_id, updated)
        self._commit()
        return updated

    def add_table_row(self, block_id: str, index: Optional[int] = None) -> TableBlock:
        return self._edit_table(block_id, table_ops.add_row, index)

    def remove_table_row(self, block_id: str, index: int) -> TableBlock:
        return self._edit_table(block_id, table_ops.remove_row, index)

    def add_table_column(self, block_id: str, index: Optional[int] = None) -> TableBlock:
        return self._edit_table(block_id, table_ops.add_column, index)

    def remove_table_column(self, block_id: str, index: int) -> TableBlock:
        return self._edit_table(block_id, table_ops.remove_column, index)

    def update_table_cell(self, block_id: str, row: int, column: int, value: str) -> TableBlock:
        block = self._unlocked(block_id)
        if not isinstance(block, TableBlock):
            raise TypeError(f"Block '{block_id}' is a {block.type} block, not a table")
        updated = table_ops.update_cell(block, row, column, value)
        self._replace(block_id, updated)
        self._commit(immediate=False)
        return updated

    # ========================================================================
    # HISTORY
    # ========================================================================

    def _restore(self, snapshot: Optional[List[Section]]) -> bool:
        if snapshot is None:
            return False
        self.sections = snapshot
        self.selected_block_id = None
        self.selected_section_id = None
        return True

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False at the oldest one."""
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        """Restore the next snapshot. Returns False at the newest one."""
        return self._restore(self.history.redo())

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def tick(self) -> bool:
        """Commit a debounced edit whose delay has elapsed."""
        return self.history.poll()

    # ========================================================================
    # PERSISTENCE AND CONVERSION
    # ========================================================================

    def snapshot(self) -> List[Section]:
        """Deep copy of the live document."""
        return copy_sections(self.sections)

    def load(self, sections: Sequence[Section]) -> None:
        """Replace the document and start a fresh history."""
        self.sections = copy_sections(sections) if sections else [create_section(1)]
        self.selected_block_id = None
        self.selected_section_id = None
        self.history.clear()
        self.history.push(self.sections)

    def import_html(self, html: Union[str, bytes]) -> ParseResult:
        """
        Replace the document with parsed HTML (one undo step).

        Raises:
            MalformedInputError: Nothing is changed
        """
        result = parse_html(html)
        self.sections = copy_sections(result.sections)
        self.selected_block_id = None
        self.selected_section_id = None
        self._commit()
        logger.info("session_imported", **result.summary())
        return result

    def export_html(self, body_only: bool = False) -> ExportResult:
        return export_document(self.sections, body_only=body_only)
