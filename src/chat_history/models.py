"""Live and persisted message types plus the reconstructed node tree."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field

SYSTEM = "system"

StyleMap = Dict[str, str]
AttributeValue = Union[str, StyleMap]


@dataclass
class Element:
    """A reconstructed markup element.

    Fields:
        tag: lower-cased tag name.
        attributes: attribute name -> literal string, except ``style`` which
            maps camelCase property names to values.
        children: ordered child nodes (text leaves or elements).
    """
    tag: str
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)


Node = Union[str, Element]


@dataclass(frozen=True)
class UiHandle:
    """Opaque reference to a UI component rendered outside this package."""
    name: str


@dataclass
class Message:
    """A live conversation message.

    ``content`` is plain text or rich content (an ``Element``, a list of
    nodes, or any object the configured renderer understands).
    """
    content: Any
    sender: str = "bot"

    @property
    def is_rich(self) -> bool:
        return not isinstance(self.content, str)


class PersistedMessage(BaseModel):
    """String-only form of a message as stored in the history window."""

    content: str
    # "object" means content is serialized markup; anything else is text.
    type: str = Field(default="string")
    sender: str

    @property
    def is_markup(self) -> bool:
        return self.type == "object"
