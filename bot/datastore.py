# bot/datastore.py
"""
Tiny JSON persistence used by the bot.

- load_json/save_json: read/write small state files under data/
- ChoiceStore: the single "which slot should we book today" record

Writes go through a temp file + os.replace so a crash mid-write leaves either
the old file or the new one on disk, never half of each.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger


def load_json(path: Path, default: Any) -> Any:
    """Return the parsed file, or `default` if it is missing or unreadable."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.warning(f"[datastore] could not read {path}: {e}")
        return default


def save_json(path: Path, obj: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class ChoiceStore:
    """
    Durable single-slot record of today's choice.

    Nothing is cached in memory: the noon prompt and the 17:00 booking may run
    in different processes, so every load() goes back to disk.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, slot_id: str) -> None:
        save_json(self.path, {"choice": slot_id})
        logger.info(f"[state] choice saved: {slot_id}")

    def load(self) -> str | None:
        data = load_json(self.path, None)
        choice = data.get("choice") if isinstance(data, dict) else None
        logger.debug(f"[state] loaded choice: {choice}")
        return str(choice) if choice is not None else None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.info("[state] choice cleared")
