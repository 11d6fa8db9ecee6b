"""Inspect, export or clear a stored history window."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .codec import MessageCodec, parse_window
from .config import load_config
from .errors import StorageDecodeError
from .history import HistorySession
from .markup import text_content
from .models import PersistedMessage
from .options import BotOptions
from .storage import FileStorage


def export_text(window: List[PersistedMessage], codec: MessageCodec, limit_chars: int = 8000) -> str:
    """Human-readable ``sender: text`` transcript of a stored window."""
    lines: List[str] = []
    for persisted in window:
        content = codec.decode(persisted).content
        text = content if isinstance(content, str) else text_content(content)
        text = " ".join(text.split())
        if text:
            lines.append(f"{persisted.sender}: {text}")
    return "\n".join(lines)[:limit_chars]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chat-history", description=__doc__)
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML config file.")
    parser.add_argument(
        "--storage-dir",
        type=str,
        default=None,
        help="Directory holding stored history (default: storage.data_dir or data/history)",
    )
    parser.add_argument("--key", type=str, default=None, help="Override the storage key.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("show", help="Print the stored window as JSON.")
    sub.add_parser("export", help="Print a readable transcript of the stored window.")
    sub.add_parser("clear", help="Delete the stored window.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    options = BotOptions.model_validate(cfg)
    if args.key:
        options.chat_history.storage_key = args.key
    data_dir = args.storage_dir or (cfg.get("storage") or {}).get("data_dir") or "data/history"
    session = HistorySession.from_options(options, FileStorage(data_dir))

    if args.command == "clear":
        session.discard()
        return 0

    raw = session.read()
    if raw is None:
        print(f"no history stored under {session.config.storage_key!r}", file=sys.stderr)
        return 0
    try:
        window = parse_window(raw)
    except StorageDecodeError as e:
        print(f"stored history is corrupt: {e}", file=sys.stderr)
        return 1

    if args.command == "show":
        print(json.dumps([m.model_dump() for m in window], ensure_ascii=False, indent=2))
    else:
        print(export_text(window, MessageCodec.from_options(options)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
