# Undo/redo history module

from .manager import DeferredAction, HistoryManager

__all__ = ["HistoryManager", "DeferredAction"]
