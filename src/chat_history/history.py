"""Sliding-window persistence of the live conversation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .codec import MessageCodec, dump_window, parse_window
from .errors import StorageDecodeError
from .models import SYSTEM, Message, PersistedMessage
from .options import BotOptions, HistoryConfig
from .storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class _Written:
    """The last window this session wrote.

    Its final ``end - first`` entries are the live messages ``[first, end)``.
    """
    raw: str
    first: int
    end: int


@dataclass
class HistorySession:
    """Session-scoped history state passed to every history operation.

    Fields:
        config: active storage key / window size / disabled flag.
        storage: key-value backend holding the window.
        loaded: True once a load has been attempted this session.
    """
    config: HistoryConfig
    storage: Storage
    loaded: bool = False
    _written: Optional[_Written] = field(default=None, repr=False)

    @classmethod
    def from_options(cls, options: BotOptions, storage: Storage) -> "HistorySession":
        return cls(config=HistoryConfig.from_options(options), storage=storage)

    def configure(self, options: BotOptions) -> None:
        """Switch to the ``chat_history`` settings of ``options``."""
        self.config = HistoryConfig.from_options(options)
        self._written = None

    def mark_loaded(self) -> None:
        self.loaded = True
        # Loading splices restored entries into the live list; indices shift.
        self._written = None

    def shift(self, delta: int) -> None:
        """Account for ``delta`` live messages inserted (or removed) ahead of
        everything this session has saved."""
        if self._written is not None:
            w = self._written
            self._written = _Written(raw=w.raw, first=w.first + delta, end=w.end + delta)

    def read(self) -> Optional[str]:
        return self.storage.get_item(self.config.storage_key)

    def discard(self) -> None:
        self.storage.remove_item(self.config.storage_key)
        self._written = None

    def _tracked(self, raw: Optional[str]) -> Optional[_Written]:
        if self._written is not None and self._written.raw == raw:
            return self._written
        return None


def previous_window(raw: Optional[str]) -> List[PersistedMessage]:
    """Decode the stored window, treating missing or corrupt data as empty."""
    if raw is None:
        return []
    try:
        return parse_window(raw)
    except StorageDecodeError as e:
        logger.debug("ignoring unreadable stored history: %s", e)
        return []


def collect_batch(
    live_messages: Sequence[Message], offset: int, max_entries: int
) -> tuple[int, List[Message]]:
    """Walk back from the newest message to ``offset``.

    Stops before a system message or once ``max_entries`` are collected.
    Returns the live index of the oldest collected message and the batch,
    oldest first.
    """
    batch: List[Message] = []
    start = len(live_messages)
    for i in range(len(live_messages) - 1, offset - 1, -1):
        message = live_messages[i]
        if message.sender == SYSTEM:
            break
        batch.insert(0, message)
        start = i
        if len(batch) == max_entries:
            break
    return start, batch


def write_history(
    session: HistorySession,
    live_messages: Sequence[Message],
    previously_persisted: Optional[str],
    codec: MessageCodec,
) -> None:
    """Merge new live messages into the stored window and write it back.

    Storage write errors propagate to the caller.
    """
    config = session.config
    if config.disabled:
        return

    previous = previous_window(previously_persisted)
    offset = len(previous) if session.loaded else 0
    end = len(live_messages)
    start, batch = collect_batch(live_messages, offset, config.max_entries)
    encoded = [codec.encode(m) for m in batch]

    tracked = session._tracked(previously_persisted)
    overlap = 0
    if tracked is not None and encoded:
        # Entries from the last write that this scan collected again.
        overlap = max(0, min(tracked.end - max(start, tracked.first), len(previous)))
    source = previous[: len(previous) - overlap]

    window = encoded
    if len(encoded) < config.max_entries:
        window = source[-(config.max_entries - len(encoded)):] + encoded

    raw = dump_window(window)
    session.storage.set_item(config.storage_key, raw)
    logger.debug(
        "saved %d new of %d history entries under %r", len(encoded), len(window), config.storage_key
    )

    if encoded:
        first = tracked.first if tracked is not None and tracked.first < start <= tracked.end else start
    elif tracked is not None:
        first, end = tracked.first, tracked.end
    else:
        session._written = None
        return
    session._written = _Written(raw=raw, first=max(first, end - len(window)), end=end)


def save_chat_history(
    session: HistorySession, live_messages: Sequence[Message], codec: MessageCodec
) -> None:
    """Persist ``live_messages`` against whatever the storage holds now."""
    write_history(session, live_messages, session.read(), codec)
