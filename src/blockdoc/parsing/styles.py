"""
Inline CSS helpers for the bounded style vocabulary (fonts, colors, spacing,
alignment, borders). No cascade and no stylesheet resolution.
"""

import re
from typing import Dict, Optional

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def parse_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse an inline `style` attribute into a property map.

    Property names are lower-cased; later declarations win. `!important` is
    dropped.
    """
    result: Dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        name, _, value = declaration.partition(":")
        name = name.strip().lower()
        value = value.replace("!important", "").strip()
        if name and value:
            result[name] = value
    return result


def parse_number(value: Optional[str]) -> Optional[float]:
    """First number in a CSS value (`12px` -> 12.0, `1.5em` -> 1.5)."""
    if value is None:
        return None
    match = _NUMBER_RE.search(str(value))
    return float(match.group(0)) if match else None


def parse_px(value: Optional[str]) -> Optional[int]:
    """Pixel length as int; bare numbers count as pixels, other units are ignored."""
    if value is None:
        return None
    value = str(value).strip().lower()
    if value.endswith("%") or (value and value[-1].isalpha() and not value.endswith("px")):
        return None
    number = parse_number(value)
    return int(round(number)) if number is not None else None


def parse_percent(value: Optional[str]) -> Optional[float]:
    """Percentage length (`33.3%` -> 33.3); None for anything else."""
    if value is None or not str(value).strip().endswith("%"):
        return None
    return parse_number(value)


def parse_box(value: Optional[str]) -> Optional[tuple]:
    """
    Expand a CSS margin/padding shorthand to (top, right, bottom, left) px.

    Returns None when the value carries no pixel lengths at all.
    """
    if not value:
        return None
    parts = [parse_px(p) if p != "auto" else 0 for p in value.split()]
    parts = [p if p is not None else 0 for p in parts]
    if not parts:
        return None
    if len(parts) == 1:
        return (parts[0],) * 4
    if len(parts) == 2:
        return (parts[0], parts[1], parts[0], parts[1])
    if len(parts) == 3:
        return (parts[0], parts[1], parts[2], parts[1])
    return tuple(parts[:4])


def font_weight_value(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    value = value.strip().lower()
    if value in ("bold", "bolder"):
        return 700
    if value in ("normal", "lighter"):
        return 400
    number = parse_number(value)
    return int(number) if number is not None else None


def is_bold_weight(value: Optional[str]) -> bool:
    weight = font_weight_value(value)
    return weight is not None and weight >= 600
