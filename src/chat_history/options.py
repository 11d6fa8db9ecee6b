"""Validated widget options consumed by the history core.

Keys may be given in snake_case or in the camelCase used by the widget's
own option objects (``chatHistory.maxEntries`` == ``chat_history.max_entries``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ChatHistoryOptions(_Section):
    storage_key: str = Field(default="rcb-history", min_length=1)
    max_entries: int = Field(default=30, ge=1)
    disabled: bool = False


class BotBubbleOptions(_Section):
    show_avatar: bool = False


class ColorStyle(_Section):
    color: Optional[str] = None


class ThemeOptions(_Section):
    primary_color: str = "#42b0c5"
    action_disabled_icon: str = "assets/action_disabled_icon.svg"


class ChatInputOptions(_Section):
    disabled: bool = False


class BotOptions(_Section):
    chat_history: ChatHistoryOptions = Field(default_factory=ChatHistoryOptions)
    bot_bubble: BotBubbleOptions = Field(default_factory=BotBubbleOptions)
    bot_option_style: ColorStyle = Field(default_factory=ColorStyle)
    bot_checkbox_row_style: ColorStyle = Field(default_factory=ColorStyle)
    bot_checkbox_next_style: ColorStyle = Field(default_factory=ColorStyle)
    theme: ThemeOptions = Field(default_factory=ThemeOptions)
    chat_input: ChatInputOptions = Field(default_factory=ChatInputOptions)


@dataclass(frozen=True)
class HistoryConfig:
    """Immutable per-session view of the ``chat_history`` options."""
    storage_key: str = "rcb-history"
    max_entries: int = 30
    disabled: bool = False

    @classmethod
    def from_options(cls, options: BotOptions) -> "HistoryConfig":
        section = options.chat_history
        return cls(
            storage_key=section.storage_key,
            max_entries=section.max_entries,
            disabled=section.disabled,
        )
