"""Conversion between live messages and their persisted string form."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Sequence

from pydantic import TypeAdapter, ValidationError

from .errors import StorageDecodeError
from .markup import MarkupReconstructor, render_markup
from .models import Message, Node, PersistedMessage
from .options import BotOptions

logger = logging.getLogger(__name__)

Renderer = Callable[[Any], str]
Reconstructor = Callable[[str], List[Node]]

_WINDOW = TypeAdapter(List[PersistedMessage])


def parse_window(raw: str) -> List[PersistedMessage]:
    """Decode a stored JSON array into persisted messages.

    Raises :class:`StorageDecodeError` if ``raw`` is not JSON or not a list
    of ``{content, type, sender}`` objects.
    """
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise StorageDecodeError(f"stored history is not valid JSON: {e}") from e
    try:
        return _WINDOW.validate_python(data)
    except ValidationError as e:
        raise StorageDecodeError(f"stored history has an unexpected shape: {e}") from e


def dump_window(window: Sequence[PersistedMessage]) -> str:
    return json.dumps([m.model_dump() for m in window], ensure_ascii=False)


class MessageCodec:
    """Encode live messages for storage and decode them back.

    Rich content is rendered to markup with ``renderer`` on the way out and
    rebuilt into a node tree with ``reconstructor`` on the way in. Plain text
    is stored verbatim.
    """

    def __init__(self, renderer: Renderer, reconstructor: Reconstructor) -> None:
        self.renderer = renderer
        self.reconstructor = reconstructor

    @classmethod
    def from_options(cls, options: BotOptions, renderer: Renderer = render_markup) -> "MessageCodec":
        return cls(renderer, MarkupReconstructor(options))

    def encode(self, message: Message) -> PersistedMessage:
        if message.is_rich:
            return PersistedMessage(
                content=self.renderer(message.content),
                type="object",
                sender=message.sender,
            )
        return PersistedMessage(content=message.content, type="string", sender=message.sender)

    def decode(self, persisted: PersistedMessage) -> Message:
        if persisted.is_markup:
            return Message(content=self.reconstructor(persisted.content), sender=persisted.sender)
        if persisted.type != "string":
            logger.debug("unknown message type %r, treating as text", persisted.type)
        return Message(content=persisted.content, sender=persisted.sender)
