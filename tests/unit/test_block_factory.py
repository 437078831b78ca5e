"""
Unit tests for the block defaults factory (blocks/factory.py).

Tests cover:
- A default exists for every block type
- Overrides and fresh ids
- Repair of partial, camelCase and invalid records
- Unknown types degrade to raw-html
"""

import pytest
from pydantic import ValidationError

from blockdoc.blocks.factory import create_default, create_section, fill_defaults
from blockdoc.models.blocks import (
    BLOCK_CLASSES,
    BlockCategory,
    BlockType,
    DatePickerBlock,
    RawHtmlBlock,
    TableBlock,
    TextInputBlock,
)


class TestCreateDefault:
    """Tests for create_default()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("block_type", list(BlockType))
    def test_every_type_has_default(self, block_type):
        """Test that every block type has a valid default."""
        block = create_default(block_type)

        assert isinstance(block, BLOCK_CLASSES[block_type])
        assert block.type == block_type.value
        assert block.id

    @pytest.mark.unit
    def test_accepts_string_type(self):
        """Test that the block type may be given as its string value."""
        block = create_default("date-picker")

        assert isinstance(block, DatePickerBlock)
        assert block.width == 50
        assert block.category == BlockCategory.FORM

    @pytest.mark.unit
    def test_fresh_ids_and_field_names(self):
        """Test that each default gets a new id and field name."""
        a = create_default(BlockType.TEXT_INPUT)
        b = create_default(BlockType.TEXT_INPUT)

        assert a.id != b.id
        assert a.field_name != b.field_name
        assert a.field_name.startswith("text_field_")

    @pytest.mark.unit
    def test_overrides_applied(self):
        """Test that keyword overrides replace default fields."""
        block = create_default(BlockType.TEXT_INPUT, label="Email", required=True)

        assert block.label == "Email"
        assert block.required is True
        assert block.placeholder == "Enter text..."

    @pytest.mark.unit
    def test_table_default_grid(self):
        """Test the default table is a 2x3 grid with a header row."""
        table = create_default(BlockType.TABLE)

        assert table.row_count == 2
        assert table.column_count == 3
        assert table.header_row is True

    @pytest.mark.unit
    def test_unknown_type_raises(self):
        """Test that an unknown block type is rejected."""
        with pytest.raises(ValueError):
            create_default("carousel")

    @pytest.mark.unit
    def test_invalid_override_raises(self):
        """Test that an invalid override value fails validation."""
        with pytest.raises(ValidationError):
            create_default(BlockType.HEADING, level="h9")


class TestCreateSection:
    """Tests for create_section()."""

    @pytest.mark.unit
    def test_empty_columns(self):
        """Test that a new section has one empty list per column."""
        section = create_section(2)

        assert section.column_count == 2
        assert section.columns == [[], []]

    @pytest.mark.unit
    @pytest.mark.parametrize("count", [0, 4])
    def test_out_of_range(self, count):
        """Test that column counts outside 1..3 are rejected."""
        with pytest.raises(ValueError):
            create_section(count)


class TestFillDefaults:
    """Tests for fill_defaults()."""

    @pytest.mark.unit
    def test_partial_record_filled(self):
        """Test that missing fields of a partial record are filled in."""
        block, repaired = fill_defaults({"type": "text-input", "id": "b1", "label": "Name"})

        assert isinstance(block, TextInputBlock)
        assert block.id == "b1"
        assert block.label == "Name"
        assert block.placeholder == "Enter text..."
        assert "placeholder" in repaired
        assert "label" not in repaired

    @pytest.mark.unit
    def test_camel_case_keys(self):
        """Test that camelCase keys are accepted."""
        block, repaired = fill_defaults(
            {"type": "text-input", "id": "b2", "fieldName": "email", "helpText": "Work email"}
        )

        assert block.field_name == "email"
        assert block.help_text == "Work email"
        assert "field_name" not in repaired

    @pytest.mark.unit
    def test_invalid_value_falls_back(self):
        """Test that an invalid field value falls back to the default."""
        block, repaired = fill_defaults({"type": "heading", "id": "h1", "level": "h9", "content": "T"})

        assert block.level == "h2"
        assert block.content == "T"
        assert "level" in repaired

    @pytest.mark.unit
    def test_unknown_keys_ignored(self):
        """Test that unknown keys are dropped."""
        block, _ = fill_defaults({"type": "divider", "id": "d1", "sparkle": True})

        assert block.type == "divider"
        assert not hasattr(block, "sparkle")

    @pytest.mark.unit
    def test_unknown_type_becomes_raw_html(self):
        """Test that a record of unknown type becomes a raw HTML block."""
        block, repaired = fill_defaults({"type": "carousel", "id": "c1", "htmlContent": "<div>x</div>"})

        assert isinstance(block, RawHtmlBlock)
        assert block.id == "c1"
        assert block.html_content == "<div>x</div>"
        assert repaired == ["type"]

    @pytest.mark.unit
    def test_table_rows_normalized(self):
        """Test that ragged table rows are padded to a rectangle."""
        block, _ = fill_defaults({"type": "table", "id": "t1", "rows": [["a", "b"], ["c"]]})

        assert isinstance(block, TableBlock)
        assert block.rows == [["a", "b"], ["c", ""]]
