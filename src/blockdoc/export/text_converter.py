"""
Plain text export.

Renders a document to HTML and converts it with html2text, keeping headings,
lists and table structure readable in a text-only context (previews, email
text parts, diffing).
"""

from typing import Sequence

import html2text
import structlog
from bs4 import BeautifulSoup

from ..models.document import Section
from .html_serializer import render_section

logger = structlog.get_logger(__name__)


def html_to_text(html: str, preserve_links: bool = False) -> str:
    """
    Convert HTML to plain text.

    Args:
        html: HTML content
        preserve_links: Whether to keep links as markdown [text](url)

    Returns:
        Plain text representation
    """
    if not html:
        return ""

    h = html2text.HTML2Text()
    h.ignore_links = not preserve_links
    h.ignore_images = True
    h.ignore_emphasis = True
    h.body_width = 0  # Don't wrap lines
    h.unicode_snob = True  # Use unicode instead of ASCII replacements

    try:
        return h.handle(html).strip()
    except Exception as e:
        # html2text chokes on some malformed tables; fall back to the DOM text
        logger.warning("html2text_failed", error=str(e))
        return strip_html_tags(html)


def strip_html_tags(html: str) -> str:
    """Text content of an HTML string with whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return " ".join(soup.get_text(" ").split())


def to_plain_text(sections: Sequence[Section], preserve_links: bool = False) -> str:
    """Plain text rendition of a document."""
    body = "\n".join(render_section(section) for section in sections)
    return html_to_text(body, preserve_links=preserve_links)
