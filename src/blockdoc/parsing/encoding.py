"""
Decoding of uploaded HTML bytes.

Tries the declared charset (HTTP header or upload metadata), then a
`<meta charset>` declaration in the first kilobytes, then charset detection.
"""

import re
from typing import Optional

import charset_normalizer
import structlog

from ..errors import MalformedInputError

logger = structlog.get_logger(__name__)

_META_CHARSET_RE = re.compile(
    rb"""<meta[^>]+charset\s*=\s*["']?\s*([A-Za-z0-9_\-:.]+)""", re.IGNORECASE
)


def sniff_meta_charset(data: bytes) -> Optional[str]:
    """Return the charset named by a <meta> tag near the top of the document."""
    match = _META_CHARSET_RE.search(data[:4096])
    return match.group(1).decode("ascii", errors="ignore") if match else None


def decode_html_bytes(data: bytes, declared_charset: Optional[str] = None) -> str:
    """
    Decode HTML bytes to text.

    Args:
        data: Raw bytes
        declared_charset: Charset declared by the transport, if any

    Returns:
        Decoded text

    Raises:
        MalformedInputError: If no charset decodes the bytes
    """
    if not data:
        return ""

    if data.startswith(b"\xef\xbb\xbf"):
        try:
            return data[3:].decode("utf-8")
        except UnicodeDecodeError:
            pass

    for charset in (declared_charset, sniff_meta_charset(data), "utf-8"):
        if not charset:
            continue
        try:
            return data.decode(charset)
        except (UnicodeDecodeError, LookupError):
            continue

    # Try charset detection
    detected = charset_normalizer.from_bytes(data).best()
    if detected is not None:
        logger.info("html_charset_detected", encoding=detected.encoding)
        return str(detected)

    raise MalformedInputError("Input bytes could not be decoded with any known charset")
