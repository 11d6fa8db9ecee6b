"""Bounded chat history persistence with rich markup reconstruction.

Typical usage
-------------
from chat_history import (
    BotOptions, FileStorage, HistorySession, MessageCodec, MessageList,
    load_chat_history, save_chat_history,
)

options = BotOptions()
session = HistorySession.from_options(options, FileStorage("data/history"))
codec = MessageCodec.from_options(options)

save_chat_history(session, messages.snapshot(), codec)
load_chat_history(session, options, messages, set_text_area_disabled)
"""

from __future__ import annotations

from .codec import MessageCodec, dump_window, parse_window
from .config import load_config, load_options
from .errors import HistoryError, StorageDecodeError, StorageWriteError
from .history import HistorySession, save_chat_history, write_history
from .loader import (
    HistoryLoader,
    LoadState,
    immediate_scheduler,
    load_chat_history,
    threading_scheduler,
)
from .markup import MarkupReconstructor, parse_style, reconstruct, render_markup
from .messages import MessageList
from .models import Element, Message, PersistedMessage, UiHandle
from .options import BotOptions, HistoryConfig
from .storage import FileStorage, MemoryStorage, Storage
from .styles import apply_style_rules, merge_style

__all__ = [
    "BotOptions",
    "Element",
    "FileStorage",
    "HistoryConfig",
    "HistoryError",
    "HistoryLoader",
    "HistorySession",
    "LoadState",
    "MarkupReconstructor",
    "MemoryStorage",
    "Message",
    "MessageCodec",
    "MessageList",
    "PersistedMessage",
    "Storage",
    "StorageDecodeError",
    "StorageWriteError",
    "UiHandle",
    "__version__",
    "apply_style_rules",
    "dump_window",
    "get_version",
    "immediate_scheduler",
    "load_chat_history",
    "load_config",
    "load_options",
    "merge_style",
    "parse_style",
    "parse_window",
    "reconstruct",
    "render_markup",
    "save_chat_history",
    "threading_scheduler",
    "write_history",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__
