"""
Version constants for blockdoc.

METADATA_FORMAT_VERSION is written into every exported document's round-trip
metadata comment; imports only trust metadata carrying a version they know.
"""

# API Version
API_VERSION = "1.0.0"

# Round-trip metadata format (doc-metadata comment)
METADATA_FORMAT_VERSION = "1"
SUPPORTED_METADATA_VERSIONS = frozenset({METADATA_FORMAT_VERSION})

# Component versions (update these when implementations change)
PARSER_VERSION = "html-parser-1.0.0"
SERIALIZER_VERSION = "html-serializer-1.0.0"
HISTORY_VERSION = "history-1.0.0"


def get_component_versions() -> dict:
    """
    Get current component version configuration.

    Returns:
        Mapping of component name to version string
    """
    return {
        "parser_version": PARSER_VERSION,
        "serializer_version": SERIALIZER_VERSION,
        "history_version": HISTORY_VERSION,
        "metadata_format_version": METADATA_FORMAT_VERSION,
    }
