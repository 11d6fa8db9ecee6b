"""Error taxonomy for history persistence."""
from __future__ import annotations


class HistoryError(Exception):
    """Base class for chat history failures."""


class StorageDecodeError(HistoryError, ValueError):
    """Stored value is not valid JSON or not a list of persisted messages."""


class StorageWriteError(HistoryError, OSError):
    """The storage medium refused a write."""
