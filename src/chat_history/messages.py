"""Shared live message list."""
from __future__ import annotations

import threading
from typing import Callable, Iterator, List, Sequence

from .models import Message

Updater = Callable[[List[Message]], Sequence[Message]]


class MessageList:
    """Mutable conversation list updated through whole-list swaps.

    ``update`` reads the current list, lets ``fn`` compute the next one from a
    private copy and swaps it in under the lock, so a deferred update never
    overwrites an append that happened in between.
    """

    def __init__(self, messages: Sequence[Message] = ()) -> None:
        self._messages: List[Message] = list(messages)
        self._lock = threading.RLock()

    def snapshot(self) -> List[Message]:
        with self._lock:
            return list(self._messages)

    def update(self, fn: Updater) -> List[Message]:
        with self._lock:
            self._messages = list(fn(list(self._messages)))
            return list(self._messages)

    def set(self, messages: Sequence[Message]) -> None:
        with self._lock:
            self._messages = list(messages)

    def append(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> Message:
        with self._lock:
            return self._messages[index]
