"""Key-value storage backends for the persisted history window."""
from __future__ import annotations

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .errors import StorageWriteError


class Storage(Protocol):
    """String key -> string value store (browser ``localStorage`` semantics)."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, mainly for tests and embedding."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._items)


# -----------------------------
# Helpers
# -----------------------------
def _safe_key(key: str) -> str:
    # Keep it readable but filesystem-safe.
    s = re.sub(r"[^\w.\-@]+", "_", key.strip() or "default")
    return s[:128]


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, dir=str(path.parent)) as tmp:
        tmp.write(text)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_name = tmp.name
    os.replace(tmp_name, path)


class FileStorage:
    """One ``<key>.json`` file per key under ``root``, written atomically.

    Values are stored exactly as given; the history core already hands over
    a JSON document.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _path(self, key: str) -> Path:
        return self.root / f"{_safe_key(key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            try:
                _atomic_write_text(self._path(key), value)
            except OSError as e:
                raise StorageWriteError(f"failed to write history key {key!r}: {e}") from e

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))
