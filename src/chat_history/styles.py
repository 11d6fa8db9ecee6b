"""Reapply theme styles that markup serialization drops.

Options, checkbox rows and the checkbox "next" button are styled from the
bot options at render time. Their stored markup only keeps the class names,
so each reconstructed element is matched against a fixed, ordered rule list
and the produced style patch is merged into its ``style`` map.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import AttributeValue, StyleMap
from .options import BotOptions

OPTIONS_CONTAINER = "rcb-options-container"
CHECKBOX_CONTAINER = "rcb-checkbox-container"
OPTIONS = "rcb-options"
CHECKBOX_ROW_CONTAINER = "rcb-checkbox-row-container"
CHECKBOX_NEXT_BUTTON = "rcb-checkbox-next-button"

AVATAR_MARGIN = "50px"

Attributes = Dict[str, AttributeValue]


@dataclass(frozen=True)
class StyleRule:
    """Inject ``produce(options)`` into elements carrying a trigger class."""
    name: str
    triggers: Tuple[str, ...]
    produce: Callable[[BotOptions], StyleMap]
    enabled: Callable[[BotOptions], bool] = lambda options: True

    def matches(self, classes: Iterable[str], options: BotOptions) -> bool:
        if not self.enabled(options):
            return False
        present = set(classes)
        return any(t in present for t in self.triggers)


def merge_style(attributes: Attributes, patch: StyleMap) -> Attributes:
    """Merge ``patch`` into the element's style map; patch keys win."""
    current = attributes.get("style")
    merged: StyleMap = dict(current) if isinstance(current, dict) else {}
    merged.update(patch)
    attributes["style"] = merged
    return attributes


def _accent(override: Optional[str], options: BotOptions) -> StyleMap:
    color = override or options.theme.primary_color
    return {
        "color": color,
        "borderColor": color,
        "cursor": f"url({options.theme.action_disabled_icon}), auto",
    }


RULES: List[StyleRule] = [
    StyleRule(
        name="containers",
        triggers=(OPTIONS_CONTAINER, CHECKBOX_CONTAINER),
        produce=lambda options: {"marginLeft": AVATAR_MARGIN},
        enabled=lambda options: options.bot_bubble.show_avatar,
    ),
    StyleRule(
        name="options",
        triggers=(OPTIONS,),
        produce=lambda options: _accent(options.bot_option_style.color, options),
    ),
    StyleRule(
        name="checkbox-row",
        triggers=(CHECKBOX_ROW_CONTAINER,),
        produce=lambda options: _accent(options.bot_checkbox_row_style.color, options),
    ),
    StyleRule(
        name="checkbox-next-button",
        triggers=(CHECKBOX_NEXT_BUTTON,),
        produce=lambda options: _accent(options.bot_checkbox_next_style.color, options),
    ),
]


def apply_style_rules(
    classes: Iterable[str],
    attributes: Attributes,
    options: BotOptions,
    rules: Optional[List[StyleRule]] = None,
) -> Attributes:
    """Run every rule, in order, against one element's class list."""
    classes = list(classes)
    for rule in RULES if rules is None else rules:
        if rule.matches(classes, options):
            merge_style(attributes, rule.produce(options))
    return attributes
