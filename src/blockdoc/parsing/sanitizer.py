"""
HTML sanitization before structural parsing.

Removes executable content (script-like elements, on* event handlers,
javascript: URLs) while keeping everything the parser and a later re-export
rely on: inline `style`, `<style>` elements, classes and data-* attributes.
"""

import re

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

FORBIDDEN_TAGS = ("script", "iframe", "object", "embed", "applet", "noscript")

URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "background", "xlink:href"})

_JS_URL_RE = re.compile(r"^\s*javascript\s*:", re.IGNORECASE)
_UNSAFE_CSS_RE = re.compile(r"javascript\s*:|expression\s*\(", re.IGNORECASE)


def sanitize_tree(root: Tag) -> int:
    """
    Sanitize a parsed tree in place.

    Args:
        root: BeautifulSoup document or any element

    Returns:
        Number of elements and attributes removed
    """
    removed = 0

    for tag in root.find_all(FORBIDDEN_TAGS):
        tag.decompose()
        removed += 1

    for tag in root.find_all(True):
        for name in list(tag.attrs):
            value = tag.attrs[name]
            lowered = name.lower()
            if lowered.startswith("on"):
                del tag.attrs[name]
                removed += 1
            elif lowered in URL_ATTRIBUTES and isinstance(value, str) and _JS_URL_RE.match(value):
                del tag.attrs[name]
                removed += 1
            elif lowered == "style" and isinstance(value, str) and _UNSAFE_CSS_RE.search(value):
                tag.attrs[name] = _UNSAFE_CSS_RE.sub("", value)
                removed += 1

    if removed:
        logger.debug("html_sanitized", removed=removed)
    return removed


def sanitize_html(html: str) -> str:
    """
    Sanitize an HTML string.

    Args:
        html: Untrusted HTML

    Returns:
        Sanitized HTML (the whole document when one was given)
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    sanitize_tree(soup)
    if "<html" in html.lower():
        return str(soup)
    # Fragment input: lxml moves <style> into a synthesized <head>
    parts = [part.decode_contents() for part in (soup.head, soup.body) if part is not None]
    return "".join(parts)


def has_dangerous_content(html: str) -> bool:
    """Quick check whether a string carries script-like vectors."""
    if not html:
        return False
    return bool(
        re.search(r"<(script|iframe|object|embed|applet)\b", html, re.IGNORECASE)
        or re.search(r"\son\w+\s*=", html, re.IGNORECASE)
        or re.search(r"javascript\s*:", html, re.IGNORECASE)
        or re.search(r"expression\s*\(", html, re.IGNORECASE)
    )
