"""
Block defaults factory.

Builds fully populated blocks for new content and repairs partial or legacy
block records (from corrupted or older exports) by overlaying them onto the
defaults of their type, so no block ever lacks a field.
"""

import re
import uuid
from typing import Any, Callable, Dict, List, Tuple

import structlog
from pydantic import ValidationError

from ..errors import UnsupportedBlockError
from ..models.blocks import BLOCK_CLASSES, BaseBlock, BlockType, RawHtmlBlock
from ..models.document import MAX_COLUMNS, MIN_COLUMNS, Section

logger = structlog.get_logger(__name__)


def _field_name(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


# ============================================================================
# DEFAULTS PER TYPE
# ============================================================================

_DEFAULTS: Dict[BlockType, Callable[[], Dict[str, Any]]] = {
    BlockType.HEADING: lambda: {"content": "Heading Text"},
    BlockType.PARAGRAPH: lambda: {
        "content": (
            "Enter your text here. This paragraph block supports rich content "
            "for legal agreements, descriptions, and professional documents."
        )
    },
    BlockType.DIVIDER: lambda: {},
    BlockType.IMAGE: lambda: {"alt": "Image", "border_radius": 4},
    BlockType.TEXT_INPUT: lambda: {
        "label": "Text Field",
        "placeholder": "Enter text...",
        "field_name": _field_name("text_field"),
    },
    BlockType.TEXTAREA: lambda: {
        "label": "Text Area",
        "placeholder": "Enter detailed text...",
        "field_name": _field_name("textarea"),
    },
    BlockType.DROPDOWN: lambda: {
        "label": "Dropdown",
        "field_name": _field_name("dropdown"),
        "options": ["Option 1", "Option 2", "Option 3"],
    },
    BlockType.RADIO_GROUP: lambda: {
        "label": "Radio Group",
        "field_name": _field_name("radio"),
        "options": ["Option A", "Option B", "Option C"],
    },
    BlockType.CHECKBOX_GROUP: lambda: {
        "label": "Checkbox Group",
        "field_name": _field_name("checkbox_group"),
        "options": ["Choice 1", "Choice 2", "Choice 3"],
    },
    BlockType.SINGLE_CHECKBOX: lambda: {
        "label": "I agree to the terms and conditions outlined in this agreement.",
        "field_name": _field_name("agreement"),
    },
    BlockType.DATE_PICKER: lambda: {
        "label": "Date",
        "field_name": _field_name("date"),
        "width": 50,
    },
    BlockType.FILE_UPLOAD: lambda: {
        "label": "File Upload",
        "field_name": _field_name("file"),
        "accept_types": ".pdf,.doc,.docx,.jpg,.png",
        "max_size": "10MB",
    },
    BlockType.SIGNATURE: lambda: {
        "label": "Signature",
        "field_name": _field_name("signature"),
        "help_text": "Click to insert signature",
    },
    BlockType.TABLE: lambda: {
        "rows": [["Header 1", "Header 2", "Header 3"], ["Cell 1", "Cell 2", "Cell 3"]],
        "header_row": True,
    },
    BlockType.LIST: lambda: {"items": ["Item 1", "Item 2", "Item 3"]},
    BlockType.BUTTON: lambda: {"label": "Submit", "button_type": "submit"},
    BlockType.RAW_HTML: lambda: {},
}

_missing = set(BlockType) - set(_DEFAULTS)
if _missing:
    raise UnsupportedBlockError(sorted(t.value for t in _missing)[0], "defaults factory")


def create_default(block_type, **overrides) -> BaseBlock:
    """
    Build a fully populated block of the given type.

    Args:
        block_type: BlockType or its string value
        **overrides: Field values replacing the defaults

    Returns:
        New block with a fresh id

    Raises:
        ValueError: If block_type is not a known type
    """
    block_type = BlockType(block_type)
    data = {**_DEFAULTS[block_type](), **overrides, "type": block_type.value}
    return BLOCK_CLASSES[block_type].model_validate(data)


def create_section(column_count: int = 1) -> Section:
    """Create an empty section with `column_count` empty columns."""
    if not MIN_COLUMNS <= column_count <= MAX_COLUMNS:
        raise ValueError(f"column_count must be between {MIN_COLUMNS} and {MAX_COLUMNS}")
    return Section(column_count=column_count)


# ============================================================================
# REPAIR OF PARTIAL RECORDS
# ============================================================================

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def fill_defaults(data: Dict[str, Any]) -> Tuple[BaseBlock, List[str]]:
    """
    Overlay a partial block record onto the defaults of its type.

    camelCase keys from older exports are accepted. Unknown keys are ignored
    and values that fail validation fall back to the default. A record whose
    type is unknown becomes a raw-html block keeping any html it carried.

    Args:
        data: Block record (typically from embedded round-trip metadata)

    Returns:
        (block, repaired) where `repaired` lists the fields that were missing
        or invalid and took their default value
    """
    record = {_snake(k): v for k, v in data.items()} if isinstance(data, dict) else {}

    try:
        block_type = BlockType(record.get("type"))
    except ValueError:
        html = record.get("html_content")
        raw = RawHtmlBlock(html_content=html if isinstance(html, str) else "")
        if isinstance(record.get("id"), str) and record["id"]:
            raw.id = record["id"]
        return raw, ["type"]

    cls = BLOCK_CLASSES[block_type]
    defaults = create_default(block_type).model_dump()
    known = {k: v for k, v in record.items() if k in cls.model_fields}
    if "content" in known and "segments" not in known:
        defaults.pop("segments", None)

    repaired = sorted(k for k in cls.model_fields if k not in known and k != "segments")
    merged = {**defaults, **known}

    # Each failing round drops the offending fields, so this terminates.
    for _ in range(len(known) + 1):
        try:
            block = cls.model_validate(merged)
            break
        except ValidationError as exc:
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
            bad &= set(known)
            if not bad:
                raise
            for key in bad:
                merged.pop(key, None)
                if key in defaults:
                    merged[key] = defaults[key]
                repaired.append(key)
            known = {k: v for k, v in known.items() if k not in bad}
    else:
        block = cls.model_validate(defaults)

    if repaired:
        logger.debug("block_defaults_filled", block_id=block.id, fields=repaired)
    return block, sorted(set(repaired))
