"""
Exception hierarchy for blockdoc.

Only MalformedInputError surfaces as a failed import. Unrecognized elements,
schema mismatches and history boundaries are recovered silently and, where it
matters, reported as ParseWarning entries instead of exceptions.
"""


class BlockDocError(Exception):
    """Base class for all blockdoc errors."""


class MalformedInputError(BlockDocError, ValueError):
    """Input could not be parsed into any HTML tree at all."""


class UnsupportedBlockError(BlockDocError, TypeError):
    """A block variant reached a consumer that has no handler for it."""

    def __init__(self, block_type: str, consumer: str):
        super().__init__(f"No {consumer} registered for block type '{block_type}'")
        self.block_type = block_type
        self.consumer = consumer


class BlockNotFoundError(BlockDocError, KeyError):
    """No block with the given id exists in the document."""

    def __init__(self, block_id: str):
        super().__init__(block_id)
        self.block_id = block_id

    def __str__(self) -> str:
        return f"Block '{self.block_id}' not found"


class SectionNotFoundError(BlockDocError, KeyError):
    """No section with the given id exists in the document."""

    def __init__(self, section_id: str):
        super().__init__(section_id)
        self.section_id = section_id

    def __str__(self) -> str:
        return f"Section '{self.section_id}' not found"


class BlockLockedError(BlockDocError):
    """Attempted to modify, move or remove a locked block."""

    def __init__(self, block_id: str):
        super().__init__(f"Block '{block_id}' is locked")
        self.block_id = block_id
