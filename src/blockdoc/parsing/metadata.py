"""
Round-trip metadata embedded in exported HTML.

Format: `<!-- doc-metadata: {"version":"1","sections":[...]} -->`. The JSON
escapes `<`, `>` and `&` as \\u003c, \\u003e, \\u0026 so block content can
never terminate the comment early.
"""

import json
from typing import Any, Dict, List, Optional, get_origin

from bs4 import Comment, Tag

from ..models.document import Section
from ..version import METADATA_FORMAT_VERSION, SUPPORTED_METADATA_VERSIONS

METADATA_PREFIX = "doc-metadata:"


class InvalidMetadataError(ValueError):
    """The metadata comment exists but cannot be used."""


def metadata_payload(sections: List[Section]) -> Dict[str, Any]:
    return {
        "version": METADATA_FORMAT_VERSION,
        "sections": [section.model_dump(mode="json") for section in sections],
    }


def encode_metadata(sections: List[Section]) -> str:
    """Render the metadata comment for a document."""
    payload = json.dumps(metadata_payload(sections), ensure_ascii=False, separators=(",", ":"))
    payload = payload.replace("&", "\\u0026").replace("<", "\\u003c").replace(">", "\\u003e")
    return f"<!-- {METADATA_PREFIX} {payload} -->"


def find_metadata_comment(root: Tag) -> Optional[str]:
    """Return the JSON text of the first doc-metadata comment, if any."""
    for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
        text = comment.strip()
        if text.startswith(METADATA_PREFIX):
            return text[len(METADATA_PREFIX):].strip()
    return None


def decode_metadata(raw: str) -> List[Dict[str, Any]]:
    """
    Parse and check the metadata JSON.

    Args:
        raw: Comment payload after the prefix

    Returns:
        Raw section records (validated per block later, so a single damaged
        block does not discard the document)

    Raises:
        InvalidMetadataError: On bad JSON, an unknown version or a payload
            without a sections list
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise InvalidMetadataError(f"Metadata is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidMetadataError("Metadata must be a JSON object")
    version = str(data.get("version", ""))
    if version not in SUPPORTED_METADATA_VERSIONS:
        raise InvalidMetadataError(f"Unsupported metadata version '{version}'")
    sections = data.get("sections")
    if not isinstance(sections, list) or not all(isinstance(s, dict) for s in sections):
        raise InvalidMetadataError("Metadata 'sections' must be a list of objects")
    return sections


# ============================================================================
# MARKER ATTRIBUTES
# ============================================================================
# Exported HTML also carries its structure in data-* attributes. They survive
# email clients that strip comments, so sections, columns and block ids can
# still be restored without the metadata comment.

VERSION_ATTR = "data-editor-version"
SECTION_ATTR = "data-editor-section"
LAYOUT_ATTR = "data-editor-layout"
SECTION_ID_ATTR = "data-section-id"
COLUMN_ATTR = "data-editor-column"
BLOCK_ID_ATTR = "data-block-id"
BLOCK_TYPE_ATTR = "data-block-type"

# Fields carried by element content (or too large for an attribute)
_CONTENT_FIELDS = frozenset({"id", "type", "content", "segments", "html_content", "original_styles"})


def _attr_name(field: str) -> str:
    return "data-" + field.replace("_", "-")


def block_data_attributes(block) -> Dict[str, str]:
    """
    Marker attributes for one block, in field order.

    Lists are JSON encoded, booleans are "true"/"false".
    """
    attrs = {BLOCK_ID_ATTR: block.id, BLOCK_TYPE_ATTR: block.type}
    for name in type(block).model_fields:
        if name in _CONTENT_FIELDS:
            continue
        value = getattr(block, name)
        if isinstance(value, bool):
            attrs[_attr_name(name)] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            attrs[_attr_name(name)] = json.dumps(value, ensure_ascii=False)
        else:
            attrs[_attr_name(name)] = str(value)
    return attrs


def block_record_from_attributes(element: Tag, block_class) -> Dict[str, Any]:
    """
    Rebuild a partial block record from marker attributes.

    Attributes that do not decode are skipped; the defaults factory fills
    whatever is missing.
    """
    record: Dict[str, Any] = {"type": element.get(BLOCK_TYPE_ATTR)}
    if element.get(BLOCK_ID_ATTR):
        record["id"] = element[BLOCK_ID_ATTR]
    for name, field in block_class.model_fields.items():
        if name in _CONTENT_FIELDS:
            continue
        raw = element.get(_attr_name(name))
        if raw is None or not isinstance(raw, str):
            continue
        if field.annotation is bool:
            record[name] = raw.strip().lower() == "true"
        elif get_origin(field.annotation) is list:
            try:
                record[name] = json.loads(raw)
            except ValueError:
                continue
        else:
            record[name] = raw
    return record
