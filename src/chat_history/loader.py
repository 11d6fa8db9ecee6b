"""Restore stored history into the live conversation.

Loading is a two-phase update of the message list: a loading placeholder is
shown right away, and after ``delay`` seconds the restored messages replace
it, followed by a "history loaded" separator.
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, List, Optional

from .codec import MessageCodec, parse_window
from .errors import StorageDecodeError
from .history import HistorySession
from .messages import MessageList
from .models import SYSTEM, Message, UiHandle
from .options import BotOptions

logger = logging.getLogger(__name__)

LOADING_SPINNER = UiHandle("loading-spinner")
HISTORY_LINE_BREAK = UiHandle("chat-history-line-break")

DEFAULT_DELAY = 0.5

Scheduler = Callable[[float, Callable[[], None]], Any]


def threading_scheduler(delay: float, fn: Callable[[], None]) -> threading.Timer:
    """Run ``fn`` once after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, fn)
    timer.daemon = True
    timer.start()
    return timer


def immediate_scheduler(delay: float, fn: Callable[[], None]) -> None:
    fn()


class LoadState(str, enum.Enum):
    IDLE = "idle"
    PLACEHOLDER_SHOWN = "placeholder_shown"
    RECONCILED = "reconciled"
    FAILED = "failed"


class HistoryLoader:
    """Drive one session's history load.

    ``state`` follows IDLE -> PLACEHOLDER_SHOWN -> RECONCILED, or ends in
    FAILED when the stored value cannot be decoded. In the failure case the
    stored key is deleted, the loading placeholder is taken back out and the
    text input is restored.
    """

    def __init__(
        self,
        session: HistorySession,
        options: BotOptions,
        codec: Optional[MessageCodec] = None,
        *,
        scheduler: Scheduler = threading_scheduler,
        delay: float = DEFAULT_DELAY,
        loading: Any = LOADING_SPINNER,
        separator: Any = HISTORY_LINE_BREAK,
    ) -> None:
        self.session = session
        self.options = options
        self.codec = codec or MessageCodec.from_options(options)
        self.scheduler = scheduler
        self.delay = delay
        self.loading = loading
        self.separator = separator
        self.state = LoadState.IDLE

    def load(
        self,
        chat_history: Optional[str],
        messages: MessageList,
        set_text_area_disabled: Callable[[bool], None],
    ) -> LoadState:
        self.session.mark_loaded()
        if chat_history is None:
            return self.state

        loader_message = Message(content=self.loading, sender=SYSTEM)
        messages.update(lambda prev: [loader_message] + prev[1:])
        self.state = LoadState.PLACEHOLDER_SHOWN

        try:
            restored = [self.codec.decode(p) for p in parse_window(chat_history)]
        except StorageDecodeError as e:
            self._fail(e, loader_message, messages, set_text_area_disabled)
            return self.state

        logger.info("restoring %d history entries", len(restored))
        self.scheduler(
            self.delay, lambda: self._reconcile(restored, messages, set_text_area_disabled)
        )
        return self.state

    def _reconcile(
        self,
        restored: List[Message],
        messages: MessageList,
        set_text_area_disabled: Callable[[bool], None],
    ) -> None:
        separator_message = Message(content=self.separator, sender=SYSTEM)
        removed: List[Message] = []

        def swap(prev: List[Message]) -> List[Message]:
            removed.extend(prev[:1])
            return restored + [separator_message] + prev[1:]

        messages.update(swap)
        # Saves made while the placeholder was up indexed the shorter list.
        self.session.shift(len(restored) + 1 - len(removed))
        set_text_area_disabled(self.options.chat_input.disabled)
        self.state = LoadState.RECONCILED
        logger.debug("history reconciled into the live conversation")

    def _fail(
        self,
        error: Exception,
        loader_message: Message,
        messages: MessageList,
        set_text_area_disabled: Callable[[bool], None],
    ) -> None:
        logger.warning(
            "discarding corrupted history under %r: %s", self.session.config.storage_key, error
        )
        self.session.discard()
        messages.update(lambda prev: [m for m in prev if m is not loader_message])
        set_text_area_disabled(self.options.chat_input.disabled)
        self.state = LoadState.FAILED


def load_chat_history(
    session: HistorySession,
    options: BotOptions,
    messages: MessageList,
    set_text_area_disabled: Callable[[bool], None],
    *,
    chat_history: Optional[str] = None,
    **kwargs: Any,
) -> HistoryLoader:
    """Load the session's stored history (or ``chat_history`` if given)."""
    if chat_history is None:
        chat_history = session.read()
    loader = HistoryLoader(session, options, **kwargs)
    loader.load(chat_history, messages, set_text_area_disabled)
    return loader
