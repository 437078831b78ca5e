# HTML import module

from .encoding import decode_html_bytes, sniff_meta_charset
from .html_parser import detect_column_count, parse_html
from .marks import (
    contains_placeholders,
    extract_placeholders,
    parse_marks,
    replace_placeholder,
    serialize_marks,
)
from .metadata import InvalidMetadataError, decode_metadata, encode_metadata
from .sanitizer import has_dangerous_content, sanitize_html
from .tables import TableKind, classify_table, extract_table

__all__ = [
    "parse_html",
    "detect_column_count",
    "decode_html_bytes",
    "sniff_meta_charset",
    "parse_marks",
    "serialize_marks",
    "contains_placeholders",
    "extract_placeholders",
    "replace_placeholder",
    "encode_metadata",
    "decode_metadata",
    "InvalidMetadataError",
    "sanitize_html",
    "has_dangerous_content",
    "TableKind",
    "classify_table",
    "extract_table",
]
