"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from chat_history.codec import MessageCodec  # noqa: E402
from chat_history.history import HistorySession  # noqa: E402
from chat_history.options import BotOptions  # noqa: E402
from chat_history.storage import MemoryStorage  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture
def options() -> BotOptions:
    return BotOptions.model_validate(
        {
            "chat_history": {"storage_key": "rcb-history", "max_entries": 30},
            "theme": {"primary_color": "#123456", "action_disabled_icon": "disabled.svg"},
        }
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(options: BotOptions, storage: MemoryStorage) -> HistorySession:
    return HistorySession.from_options(options, storage)


@pytest.fixture
def codec(options: BotOptions) -> MessageCodec:
    return MessageCodec.from_options(options)


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover vars)."""
    import os

    for var in list(os.environ):
        if var.startswith("CHAT_HISTORY"):
            monkeypatch.delenv(var, raising=False)
    yield
