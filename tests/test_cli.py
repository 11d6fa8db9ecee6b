from __future__ import annotations

import json
from pathlib import Path

from chat_history.cli import main
from chat_history.storage import FileStorage


def _args(tmp_path: Path, *rest: str):
    return ["--config", str(tmp_path / "missing.yaml"), "--storage-dir", str(tmp_path / "data"), *rest]


def _seed(tmp_path: Path, value: str) -> None:
    FileStorage(tmp_path / "data").set_item("rcb-history", value)


def test_show_prints_window(tmp_path: Path, capsys, clean_env):
    _seed(tmp_path, '[{"content": "hi", "sender": "user"}]')
    assert main(_args(tmp_path, "show")) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{"content": "hi", "type": "string", "sender": "user"}]


def test_export_flattens_markup(tmp_path: Path, capsys, clean_env):
    _seed(
        tmp_path,
        json.dumps(
            [
                {"content": "hi", "type": "string", "sender": "user"},
                {"content": "<p>Pick <b>one</b></p>", "type": "object", "sender": "bot"},
            ]
        ),
    )
    assert main(_args(tmp_path, "export")) == 0
    assert capsys.readouterr().out.strip().splitlines() == ["user: hi", "bot: Pick one"]


def test_corrupt_value_exits_nonzero(tmp_path: Path, capsys, clean_env):
    _seed(tmp_path, "{broken")
    assert main(_args(tmp_path, "show")) == 1
    assert "corrupt" in capsys.readouterr().err


def test_clear_removes_key(tmp_path: Path, clean_env):
    _seed(tmp_path, "[]")
    assert main(_args(tmp_path, "clear")) == 0
    assert FileStorage(tmp_path / "data").get_item("rcb-history") is None


def test_key_override(tmp_path: Path, capsys, clean_env):
    FileStorage(tmp_path / "data").set_item("other", '[{"content": "x", "sender": "bot"}]')
    assert main(_args(tmp_path, "--key", "other", "export")) == 0
    assert capsys.readouterr().out.strip() == "bot: x"
