"""
Unit tests for HTML sanitization and inline style helpers.

Tests cover:
- Removal of script-like elements and event handlers
- javascript: URLs and CSS expressions
- Preservation of style, classes and data attributes
- Inline style parsing and CSS length helpers
"""

import pytest

from blockdoc.parsing.sanitizer import has_dangerous_content, sanitize_html
from blockdoc.parsing.styles import (
    font_weight_value,
    is_bold_weight,
    parse_box,
    parse_percent,
    parse_px,
    parse_style,
)


class TestSanitizeHtml:
    """Tests for sanitize_html()."""

    @pytest.mark.unit
    def test_removes_script_and_iframe(self):
        """Test that script and iframe elements are removed."""
        html = "<p>Keep</p><script>alert(1)</script><iframe src='x'></iframe>"
        result = sanitize_html(html)

        assert "Keep" in result
        assert "<script" not in result
        assert "alert" not in result
        assert "<iframe" not in result

    @pytest.mark.unit
    def test_removes_event_handlers(self):
        """Test that on* event handler attributes are removed."""
        result = sanitize_html('<div onclick="steal()" onMouseOver="x()">Text</div>')

        assert "onclick" not in result.lower()
        assert "onmouseover" not in result.lower()
        assert "Text" in result

    @pytest.mark.unit
    def test_removes_javascript_urls(self):
        """Test that javascript: URLs are removed."""
        result = sanitize_html('<a href="javascript:alert(1)">link</a><img src=" JavaScript:x()">')

        assert "javascript" not in result.lower()
        assert "link" in result

    @pytest.mark.unit
    def test_strips_css_expressions(self):
        """Test that CSS expressions are stripped from styles."""
        result = sanitize_html('<div style="width: expression(alert(1)); color: red">x</div>')

        assert "expression(" not in result
        assert "color: red" in result

    @pytest.mark.unit
    def test_keeps_presentation_attributes(self):
        """Test that presentation attributes are kept."""
        html = '<style>.a { color: red; }</style><p class="a" data-x="1" style="margin: 4px">ok</p>'
        result = sanitize_html(html)

        assert "<style>" in result
        assert 'class="a"' in result
        assert 'data-x="1"' in result
        assert 'style="margin: 4px"' in result

    @pytest.mark.unit
    def test_empty(self):
        """Test sanitizing empty markup."""
        assert sanitize_html("") == ""


class TestHasDangerousContent:
    """Tests for has_dangerous_content()."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "html",
        [
            "<script>x</script>",
            '<img src="a" onerror="x()">',
            '<a href="javascript:void(0)">a</a>',
            '<div style="width: expression(1)">a</div>',
        ],
    )
    def test_detects(self, html):
        """Test that dangerous markup is detected."""
        assert has_dangerous_content(html) is True

    @pytest.mark.unit
    def test_clean_markup(self):
        """Test that clean markup is not flagged."""
        assert has_dangerous_content('<p class="note" style="color: red">Safe</p>') is False
        assert has_dangerous_content("") is False


class TestStyles:
    """Tests for inline style helpers."""

    @pytest.mark.unit
    def test_parse_style(self):
        """Test parsing an inline style into properties."""
        style = parse_style("Color: Red; font-size: 14px !important;; bogus; margin:0")

        assert style == {"color": "Red", "font-size": "14px", "margin": "0"}

    @pytest.mark.unit
    def test_parse_style_empty(self):
        """Test parsing empty or missing styles."""
        assert parse_style(None) == {}

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,expected",
        [("12px", 12), ("12", 12), ("12.6px", 13), ("50%", None), ("2em", None), (None, None)],
    )
    def test_parse_px(self, value, expected):
        """Test reading pixel values."""
        assert parse_px(value) == expected

    @pytest.mark.unit
    def test_parse_percent(self):
        """Test reading percentage values."""
        assert parse_percent("33.5%") == 33.5
        assert parse_percent("200px") is None

    @pytest.mark.unit
    def test_parse_box_shorthand(self):
        """Test expanding box shorthand values."""
        assert parse_box("4px") == (4, 4, 4, 4)
        assert parse_box("4px 8px") == (4, 8, 4, 8)
        assert parse_box("1px 2px 3px") == (1, 2, 3, 2)
        assert parse_box("0 auto") == (0, 0, 0, 0)
        assert parse_box("") is None

    @pytest.mark.unit
    def test_font_weight(self):
        """Test font weight values and bold detection."""
        assert font_weight_value("bold") == 700
        assert font_weight_value("normal") == 400
        assert is_bold_weight("600") is True
        assert is_bold_weight("500") is False
        assert is_bold_weight(None) is False
