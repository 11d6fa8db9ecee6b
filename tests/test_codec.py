from __future__ import annotations

import json

import pytest

from chat_history.codec import MessageCodec, dump_window, parse_window
from chat_history.errors import StorageDecodeError
from chat_history.models import Element, Message, PersistedMessage


def test_encode_text_message_verbatim(codec: MessageCodec):
    persisted = codec.encode(Message(content="hi <b>", sender="user"))
    assert persisted == PersistedMessage(content="hi <b>", type="string", sender="user")


def test_encode_rich_message_renders_markup(codec: MessageCodec):
    tree = Element("p", {"class": "note"}, ["hello"])
    persisted = codec.encode(Message(content=tree, sender="bot"))
    assert persisted.type == "object"
    assert persisted.sender == "bot"
    assert persisted.content == '<p class="note">hello</p>'


def test_encode_uses_injected_renderer():
    codec = MessageCodec(renderer=lambda content: "<x-widget></x-widget>", reconstructor=lambda s: [s])
    persisted = codec.encode(Message(content={"component": "Widget"}, sender="bot"))
    assert persisted.content == "<x-widget></x-widget>"


def test_encode_does_not_alias_message(codec: MessageCodec):
    message = Message(content="hi", sender="user")
    persisted = codec.encode(message)
    persisted.content = "changed"
    assert message.content == "hi"


def test_decode_object_rebuilds_tree(codec: MessageCodec):
    message = codec.decode(PersistedMessage(content="<p>hello</p>", type="object", sender="bot"))
    assert message == Message(content=[Element("p", {}, ["hello"])], sender="bot")


def test_decode_string_and_unknown_type_pass_through(codec: MessageCodec):
    assert codec.decode(PersistedMessage(content="<p>x</p>", type="string", sender="user")).content == "<p>x</p>"
    assert codec.decode(PersistedMessage(content="<p>x</p>", type="weird", sender="user")).content == "<p>x</p>"


def test_round_trip_rich_message(codec: MessageCodec):
    tree = Element("div", {"id": "m1"}, ["a", Element("code", {}, ["b"])])
    restored = codec.decode(codec.encode(Message(content=tree, sender="bot")))
    assert restored.content == [tree]


def test_parse_window_defaults_missing_type():
    (entry,) = parse_window('[{"content": "hi", "sender": "user"}]')
    assert entry.type == "string"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"content": "hi"}',
        '[{"content": "hi"}]',
        '["hi"]',
    ],
)
def test_parse_window_rejects_bad_values(raw: str):
    with pytest.raises(StorageDecodeError):
        parse_window(raw)


def test_dump_window_is_plain_json():
    raw = dump_window([PersistedMessage(content="hi", type="string", sender="user")])
    assert json.loads(raw) == [{"content": "hi", "type": "string", "sender": "user"}]
