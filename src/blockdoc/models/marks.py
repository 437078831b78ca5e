"""
Inline text model: styled text runs (segments) and the marks applied to them.

A TextSegment is a run of text plus an ordered set of marks. Marks are kept in
one canonical order (the order the serializer nests them in), so two segments
with the same styling always compare equal regardless of how the source HTML
nested its tags.
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MarkType(str, Enum):
    """Kinds of inline annotation a text run can carry."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    TEXT_COLOR = "text_color"
    BACKGROUND_COLOR = "background_color"
    FONT_SIZE = "font_size"
    FONT_FAMILY = "font_family"
    PLACEHOLDER = "placeholder"


# Innermost first: font_size wraps the text directly, placeholder is outermost.
MARK_ORDER: List[MarkType] = [
    MarkType.FONT_SIZE,
    MarkType.FONT_FAMILY,
    MarkType.TEXT_COLOR,
    MarkType.BACKGROUND_COLOR,
    MarkType.BOLD,
    MarkType.ITALIC,
    MarkType.UNDERLINE,
    MarkType.STRIKETHROUGH,
    MarkType.LINK,
    MarkType.PLACEHOLDER,
]

BOOLEAN_MARKS = frozenset(
    {MarkType.BOLD, MarkType.ITALIC, MarkType.UNDERLINE, MarkType.STRIKETHROUGH}
)

# At most one mark of each of these kinds per segment
EXCLUSIVE_MARKS = frozenset(set(MarkType) - BOOLEAN_MARKS)

# @Name and PH@Name merge fields; a token glued to a preceding word character
# (user@example.com) is not a placeholder.
PLACEHOLDER_PATTERN = re.compile(r"(?<!\w)(?:PH)?@\w+")


class Mark(BaseModel):
    """A single stylistic or semantic annotation."""

    model_config = ConfigDict(frozen=True)

    type: MarkType = Field(description="Mark kind")
    value: Optional[str] = Field(
        None, description="Payload for value-carrying kinds (url, color, size, token)"
    )

    @model_validator(mode="after")
    def _check_value(self) -> "Mark":
        if self.type in BOOLEAN_MARKS and self.value is not None:
            raise ValueError(f"Mark '{self.type.value}' does not take a value")
        if self.type in EXCLUSIVE_MARKS and self.value is None:
            raise ValueError(f"Mark '{self.type.value}' requires a value")
        return self


def canonicalize_marks(marks: Iterable[Mark]) -> List[Mark]:
    """
    Collapse marks to one per kind and sort them in MARK_ORDER.

    Later marks replace earlier ones of the same kind, so callers that append
    marks outermost-to-innermost get innermost-wins semantics.
    """
    by_type = {}
    for mark in marks:
        by_type[mark.type] = mark
    return sorted(by_type.values(), key=lambda m: MARK_ORDER.index(m.type))


class TextSegment(BaseModel):
    """A run of text sharing one set of marks."""

    text: str = Field(description="Raw (unescaped) text")
    marks: List[Mark] = Field(default_factory=list, description="Canonical mark set")

    @field_validator("marks")
    @classmethod
    def _canonical_marks(cls, v: List[Mark]) -> List[Mark]:
        return canonicalize_marks(v)

    def has_mark(self, mark_type: MarkType) -> bool:
        return any(m.type == mark_type for m in self.marks)

    def mark_value(self, mark_type: MarkType) -> Optional[str]:
        for mark in self.marks:
            if mark.type == mark_type:
                return mark.value
        return None


def split_placeholders(text: str, marks: Sequence[Mark] = ()) -> List[TextSegment]:
    """
    Split a text run at placeholder token boundaries.

    Token runs get an extra placeholder mark carrying the token itself; the
    surrounding text keeps `marks` unchanged.

    Args:
        text: Raw text
        marks: Marks shared by the whole run

    Returns:
        Segments in document order (empty text yields no segments)
    """
    segments: List[TextSegment] = []
    last = 0
    for match in PLACEHOLDER_PATTERN.finditer(text):
        if match.start() > last:
            segments.append(TextSegment(text=text[last:match.start()], marks=list(marks)))
        token = match.group(0)
        segments.append(
            TextSegment(
                text=token,
                marks=[*marks, Mark(type=MarkType.PLACEHOLDER, value=token)],
            )
        )
        last = match.end()
    if last < len(text):
        segments.append(TextSegment(text=text[last:], marks=list(marks)))
    return segments


def segments_text(segments: Iterable[TextSegment]) -> str:
    """Concatenate the plain text of a list of segments."""
    return "".join(s.text for s in segments)
