# HTML export module

from .html_serializer import (
    export_document,
    render_block,
    render_section,
    serialize,
    serialize_body,
)
from .text_converter import html_to_text, to_plain_text

__all__ = [
    "serialize",
    "serialize_body",
    "export_document",
    "render_block",
    "render_section",
    "html_to_text",
    "to_plain_text",
]
