from __future__ import annotations

from chat_history.messages import MessageList
from chat_history.models import Message


def test_update_swaps_whole_list():
    messages = MessageList([Message("a", "user")])
    result = messages.update(lambda prev: prev + [Message("b", "bot")])
    assert result == [Message("a", "user"), Message("b", "bot")]
    assert len(messages) == 2
    assert messages[1] == Message("b", "bot")


def test_snapshot_is_a_copy():
    messages = MessageList([Message("a", "user")])
    snap = messages.snapshot()
    snap.append(Message("x", "bot"))
    messages.append(Message("b", "user"))
    assert [m.content for m in messages] == ["a", "b"]
    assert len(snap) == 2
