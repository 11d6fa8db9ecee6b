"""Markup <-> node tree conversion for rich message content.

Parsing is split in two stages: :func:`parse_fragment` hands the string to
lxml's HTML parser inside a detached document (no network access, comments
and processing instructions dropped), and :class:`MarkupReconstructor` walks
the parsed tree recursively into :class:`Element` / text nodes.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List

import lxml.html
from lxml import etree

from .models import Element, Node, StyleMap
from .options import BotOptions
from .styles import apply_style_rules

logger = logging.getLogger(__name__)

_PARSER = lxml.html.HTMLParser(remove_comments=True, remove_pis=True, no_network=True)
_CONTAINER = "div"

_HYPHEN_RE = re.compile(r"-([a-z])")
_UPPER_RE = re.compile(r"[A-Z]")
# Code points outside the XML 1.0 Char production (controls, lone surrogates).
_INVALID_XML_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")
# The fragment is wrapped in its own body; stray closers would end it early.
_BODY_CLOSE_RE = re.compile(r"</\s*(?:body|html)\s*>", re.IGNORECASE)


def xml_safe(text: str) -> str:
    """Drop characters lxml refuses to store in text or attribute values."""
    return _INVALID_XML_RE.sub("", text)


# -----------------------------
# Style attribute helpers
# -----------------------------
def to_camel_case(name: str) -> str:
    """``background-color`` -> ``backgroundColor``."""
    return _HYPHEN_RE.sub(lambda m: m.group(1).upper(), name)


def to_hyphen_case(name: str) -> str:
    """``backgroundColor`` -> ``background-color``."""
    return _UPPER_RE.sub(lambda m: "-" + m.group(0).lower(), name)


def parse_style(value: str) -> StyleMap:
    """Parse an inline ``style`` attribute into a camelCase style map.

    Empty fragments are dropped; fragments without ``:`` are skipped.
    """
    style: StyleMap = {}
    for fragment in value.split(";"):
        if not fragment.strip():
            continue
        key, sep, val = fragment.partition(":")
        key = key.strip()
        if not sep or not key:
            logger.debug("skipping malformed style fragment %r", fragment)
            continue
        style[to_camel_case(key)] = val.strip()
    return style


def format_style(style: StyleMap) -> str:
    return ";".join(f"{to_hyphen_case(k)}:{v}" for k, v in style.items())


# -----------------------------
# Parsing
# -----------------------------
def parse_fragment(markup: str) -> lxml.html.HtmlElement:
    """Parse ``markup`` and return the ``<body>`` holding its top-level nodes."""
    cleaned = _BODY_CLOSE_RE.sub("", xml_safe(markup))
    if len(cleaned) != len(markup):
        logger.debug("removed %d characters the parser cannot keep", len(markup) - len(cleaned))
    doc = lxml.html.document_fromstring(
        f"<html><body>{cleaned}</body></html>", parser=_PARSER
    )
    return doc.body


class MarkupReconstructor:
    """Rebuild stored markup into a node tree, reapplying theme styles."""

    def __init__(self, options: BotOptions) -> None:
        self.options = options

    def parse(self, markup: str) -> List[Node]:
        try:
            body = parse_fragment(markup)
        except (etree.ParserError, etree.ParseError, ValueError) as e:
            # Unparseable input degrades to the raw text.
            logger.debug("markup parse failed, keeping raw text: %s", e)
            return [markup] if markup else []
        return self.build_nodes(body)

    __call__ = parse

    def build_nodes(self, parent: etree._Element) -> List[Node]:
        """Convert the children of ``parent`` (text and elements, in order)."""
        nodes: List[Node] = []
        if parent.text:
            nodes.append(parent.text)
        for child in parent:
            if isinstance(child.tag, str):
                nodes.append(self.build_element(child))
            if child.tail:
                nodes.append(child.tail)
        return nodes

    def build_element(self, el: etree._Element) -> Element:
        attributes = {}
        for name, value in el.attrib.items():
            name = name.lower()
            attributes[name] = parse_style(value) if name == "style" else value
        classes = (el.get("class") or "").split()
        apply_style_rules(classes, attributes, self.options)
        return Element(
            tag=el.tag.lower(),
            attributes=attributes,
            children=self.build_nodes(el),
        )


def reconstruct(markup: str, options: BotOptions) -> List[Node]:
    return MarkupReconstructor(options).parse(markup)


# -----------------------------
# Rendering
# -----------------------------
def _append_text(parent: etree._Element, text: str) -> None:
    text = xml_safe(text)
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def _append_node(parent: etree._Element, node: Any) -> None:
    if isinstance(node, str):
        _append_text(parent, node)
        return
    if isinstance(node, (list, tuple)):
        for item in node:
            _append_node(parent, item)
        return
    if not isinstance(node, Element):
        raise TypeError(f"cannot render {type(node).__name__} as markup")

    attrib = {}
    for name, value in node.attributes.items():
        if isinstance(value, dict):
            value = format_style(value)
        attrib[name] = xml_safe(str(value))
    el = parent.makeelement(node.tag, attrib)
    parent.append(el)
    for child in node.children:
        _append_node(el, child)


def render_markup(content: Any) -> str:
    """Serialize an ``Element`` (or a list of nodes) to an HTML string."""
    container = lxml.html.Element(_CONTAINER)
    _append_node(container, content)
    html = lxml.html.tostring(container, encoding="unicode")
    return html[len(f"<{_CONTAINER}>"):-len(f"</{_CONTAINER}>")]


def text_content(nodes: Iterable[Node]) -> str:
    """Flatten a node tree into its plain text."""
    parts: List[str] = []
    for node in nodes:
        if isinstance(node, str):
            parts.append(node)
        elif isinstance(node, Element):
            parts.append(text_content(node.children))
    return "".join(parts)
