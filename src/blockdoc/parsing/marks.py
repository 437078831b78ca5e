"""
Inline mark parser and serializer.

HTML fragment <-> list of TextSegment. Parsing is a pure recursive walk: each
element computes its own marks and hands `inherited + own` to its children as
a new tuple, so a parent's marks are never mutated. For exclusive kinds the
innermost element wins; boolean kinds accumulate.

Serialization applies marks in one fixed order (font size innermost, the
placeholder wrapper outermost), so re-parsing recovers the same canonical
mark set however the source nested its tags.
"""

import html
import re
from typing import List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..models.marks import (
    MARK_ORDER,
    PLACEHOLDER_PATTERN,
    Mark,
    MarkType,
    TextSegment,
    canonicalize_marks,
    split_placeholders,
)
from .styles import is_bold_weight, parse_style

PLACEHOLDER_CLASS = "placeholder"
PLACEHOLDER_STYLE = "background-color: #b3d4fc; padding: 0 2px;"

_WS_RE = re.compile(r"[ \t\r\n\f]+")

_TAG_MARKS = {
    "strong": MarkType.BOLD,
    "b": MarkType.BOLD,
    "em": MarkType.ITALIC,
    "i": MarkType.ITALIC,
    "u": MarkType.UNDERLINE,
    "ins": MarkType.UNDERLINE,
    "s": MarkType.STRIKETHROUGH,
    "strike": MarkType.STRIKETHROUGH,
    "del": MarkType.STRIKETHROUGH,
}

# Elements whose text never belongs to the visible run
_SKIPPED_TAGS = frozenset({"style", "script", "head", "title", "meta", "link", "template"})
_PREFORMATTED_TAGS = frozenset({"pre", "textarea", "listing", "plaintext"})


# ============================================================================
# PARSING
# ============================================================================

def is_placeholder_wrapper(tag: Tag) -> bool:
    """True for the `<span class="placeholder" data-placeholder=...>` the serializer emits."""
    return (
        tag.name == "span"
        and tag.has_attr("data-placeholder")
        and PLACEHOLDER_CLASS in (tag.get("class") or [])
    )


def element_marks(tag: Tag) -> List[Mark]:
    """
    Marks contributed by one element: its tag semantics, then its inline style.

    Style marks come after tag marks so `<a style="color:red">` yields both.
    """
    if is_placeholder_wrapper(tag):
        return []

    marks: List[Mark] = []
    tag_mark = _TAG_MARKS.get(tag.name)
    if tag_mark is not None:
        marks.append(Mark(type=tag_mark))
    if tag.name == "a" and tag.get("href"):
        marks.append(Mark(type=MarkType.LINK, value=tag["href"]))
    if tag.name == "font":
        if tag.get("color"):
            marks.append(Mark(type=MarkType.TEXT_COLOR, value=tag["color"]))
        if tag.get("face"):
            marks.append(Mark(type=MarkType.FONT_FAMILY, value=tag["face"]))

    style = parse_style(tag.get("style"))
    if is_bold_weight(style.get("font-weight")):
        marks.append(Mark(type=MarkType.BOLD))
    if style.get("font-style", "").lower() in ("italic", "oblique"):
        marks.append(Mark(type=MarkType.ITALIC))
    decoration = " ".join(
        style.get(name, "") for name in ("text-decoration", "text-decoration-line")
    ).lower()
    if "underline" in decoration:
        marks.append(Mark(type=MarkType.UNDERLINE))
    if "line-through" in decoration:
        marks.append(Mark(type=MarkType.STRIKETHROUGH))
    if style.get("color"):
        marks.append(Mark(type=MarkType.TEXT_COLOR, value=style["color"]))
    background = style.get("background-color") or _background_color(style.get("background"))
    if background and background.lower() != "transparent":
        marks.append(Mark(type=MarkType.BACKGROUND_COLOR, value=background))
    if style.get("font-size"):
        marks.append(Mark(type=MarkType.FONT_SIZE, value=style["font-size"]))
    if style.get("font-family"):
        marks.append(Mark(type=MarkType.FONT_FAMILY, value=style["font-family"]))
    return marks


def _background_color(value: Optional[str]) -> Optional[str]:
    # Only the plain-color form of the `background` shorthand is a mark
    if not value or "url(" in value.lower() or len(value.split()) != 1:
        return None
    return value


def _walk(node, inherited: Tuple[Mark, ...], preformatted: bool, out: List[TextSegment]) -> None:
    if isinstance(node, Comment):
        return
    if isinstance(node, NavigableString):
        if type(node) is not NavigableString:
            # CData, ProcessingInstruction, Doctype and friends
            return
        text = str(node) if preformatted else _WS_RE.sub(" ", str(node))
        out.extend(split_placeholders(text, inherited))
        return
    if not isinstance(node, Tag) or node.name in _SKIPPED_TAGS:
        return
    if node.name == "br":
        out.append(TextSegment(text="\n", marks=list(inherited)))
        return

    own = element_marks(node)
    marks = inherited + tuple(own) if own else inherited
    preformatted = preformatted or node.name in _PREFORMATTED_TAGS
    for child in node.children:
        _walk(child, marks, preformatted, out)


def _collapse_whitespace(segments: List[TextSegment]) -> List[TextSegment]:
    """Apply HTML whitespace collapsing across segment boundaries."""
    result: List[TextSegment] = []
    for segment in segments:
        text = segment.text
        if result:
            previous = result[-1].text
            if previous.endswith((" ", "\n")) and text.startswith(" "):
                text = text.lstrip(" ")
            if text.startswith("\n") and previous.endswith(" "):
                result[-1].text = previous.rstrip(" ")
        elif text.startswith(" "):
            text = text.lstrip(" ")
        if text:
            result.append(TextSegment(text=text, marks=segment.marks))
    if result:
        result[-1].text = result[-1].text.rstrip(" ")
    return [s for s in result if s.text]


def merge_segments(segments: Sequence[TextSegment]) -> List[TextSegment]:
    """Merge adjacent segments with identical mark sets and drop empty ones."""
    merged: List[TextSegment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].marks == segment.marks and not segment.has_mark(MarkType.PLACEHOLDER):
            merged[-1] = TextSegment(text=merged[-1].text + segment.text, marks=segment.marks)
        else:
            merged.append(TextSegment(text=segment.text, marks=segment.marks))
    return merged


def parse_marks(
    fragment: Union[str, Tag],
    inherited_marks: Sequence[Mark] = (),
    include_root: bool = True,
) -> List[TextSegment]:
    """
    Parse an HTML fragment into styled text runs.

    Args:
        fragment: HTML string or an already parsed element
        inherited_marks: Marks applying to the whole fragment (never mutated)
        include_root: For an element, whether its own tag/style contributes
            marks. Block parsers pass False because the block element's
            style maps to block fields instead.

    Returns:
        Canonical, merged segments. Whitespace-only input yields []
    """
    if isinstance(fragment, str):
        if not fragment.strip():
            return []
        soup = BeautifulSoup(fragment, "lxml")
        root = soup.body if soup.body is not None else soup
        return parse_mark_nodes(list(root.children), inherited_marks)
    if include_root:
        return parse_mark_nodes([fragment], inherited_marks)
    return parse_mark_nodes(
        list(fragment.children),
        inherited_marks,
        preformatted=fragment.name in _PREFORMATTED_TAGS,
    )


def parse_mark_nodes(
    nodes: Sequence, inherited_marks: Sequence[Mark] = (), preformatted: bool = False
) -> List[TextSegment]:
    """Parse a run of sibling nodes (text and inline elements) as one text flow."""
    inherited = tuple(inherited_marks)
    out: List[TextSegment] = []
    for node in nodes:
        _walk(node, inherited, preformatted, out)

    # Canonicalize before merging so equal styling compares equal
    canonical = [TextSegment(text=s.text, marks=canonicalize_marks(s.marks)) for s in out]
    return merge_segments(_collapse_whitespace(canonical))


# ============================================================================
# SERIALIZATION
# ============================================================================

def _escape_text(text: str) -> str:
    return html.escape(text, quote=False).replace("\n", "<br>")


def _escape_attr(value: Optional[str]) -> str:
    return html.escape(value or "", quote=True)


def _wrap(mark: Mark, inner: str) -> str:
    value = _escape_attr(mark.value)
    if mark.type == MarkType.FONT_SIZE:
        return f'<span style="font-size: {value}">{inner}</span>'
    if mark.type == MarkType.FONT_FAMILY:
        return f'<span style="font-family: {value}">{inner}</span>'
    if mark.type == MarkType.TEXT_COLOR:
        return f'<span style="color: {value}">{inner}</span>'
    if mark.type == MarkType.BACKGROUND_COLOR:
        return f'<span style="background-color: {value}">{inner}</span>'
    if mark.type == MarkType.BOLD:
        return f"<strong>{inner}</strong>"
    if mark.type == MarkType.ITALIC:
        return f"<em>{inner}</em>"
    if mark.type == MarkType.UNDERLINE:
        return f"<u>{inner}</u>"
    if mark.type == MarkType.STRIKETHROUGH:
        return f"<s>{inner}</s>"
    if mark.type == MarkType.LINK:
        return f'<a href="{value or "#"}">{inner}</a>'
    if mark.type == MarkType.PLACEHOLDER:
        return (
            f'<span class="{PLACEHOLDER_CLASS}" data-placeholder="{value}" '
            f'style="{PLACEHOLDER_STYLE}">{inner}</span>'
        )
    raise ValueError(f"Unknown mark type: {mark.type}")


def serialize_marks(segments: Sequence[TextSegment]) -> str:
    """
    Render segments back to inline HTML.

    Marks are applied innermost to outermost in MARK_ORDER. Text is escaped
    and newlines become <br>.
    """
    parts = []
    for segment in segments:
        rendered = _escape_text(segment.text)
        for mark in sorted(segment.marks, key=lambda m: MARK_ORDER.index(m.type)):
            rendered = _wrap(mark, rendered)
        parts.append(rendered)
    return "".join(parts)


# ============================================================================
# PLACEHOLDER HELPERS
# ============================================================================

def contains_placeholders(text: str) -> bool:
    return bool(text) and PLACEHOLDER_PATTERN.search(text) is not None


def extract_placeholders(text: str) -> List[str]:
    """Unique placeholder tokens in order of first appearance."""
    seen = []
    for token in PLACEHOLDER_PATTERN.findall(text or ""):
        if token not in seen:
            seen.append(token)
    return seen


def replace_placeholder(text: str, placeholder: str, value: str) -> str:
    """Replace every whole occurrence of `placeholder` (not prefixes of longer tokens)."""
    pattern = re.compile(r"(?<!\w)" + re.escape(placeholder) + r"(?!\w)")
    return pattern.sub(lambda _: value, text)


def collapse_text(node) -> str:
    """Visible text of a node with whitespace runs collapsed (no marks)."""
    if node is None:
        return ""
    if isinstance(node, NavigableString):
        return " ".join(str(node).split())
    return " ".join(node.get_text(" ").split())
