# Document editing module

from . import table_ops
from .session import EditorSession

__all__ = ["EditorSession", "table_ops"]
