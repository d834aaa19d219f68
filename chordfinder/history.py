"""Chord and progression history, persisted as a small JSON document."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from chordfinder.config import (
    DEFAULT_KEY_MODE,
    DEFAULT_KEY_ROOT,
    HISTORY_LIMIT,
    PROGRESSION_HISTORY_LIMIT,
)
from chordfinder.errors import HistoryError

logger = logging.getLogger(__name__)


class ChordHistory:
    """Most-recent-first list of chord symbols, capped and free of duplicates."""

    def __init__(self, items: Iterable[str] = (), limit: int = HISTORY_LIMIT) -> None:
        self.limit = limit
        self._items: list[str] = []
        for symbol in reversed(list(items)):
            self.add(symbol)

    @property
    def items(self) -> list[str]:
        return list(self._items)

    def add(self, symbol: str) -> None:
        """Put *symbol* first; an earlier copy of it is dropped."""
        if not symbol:
            return
        if symbol in self._items:
            self._items.remove(symbol)
        self._items.insert(0, symbol)
        del self._items[self.limit:]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class ProgressionHistory:
    """Saved progressions, newest first, capped at *limit*."""

    def __init__(
        self,
        items: Iterable[Sequence[str]] = (),
        limit: int = PROGRESSION_HISTORY_LIMIT,
    ) -> None:
        self.limit = limit
        self._items: list[list[str]] = [list(progression) for progression in items if progression]
        del self._items[self.limit:]

    @property
    def items(self) -> list[list[str]]:
        return [list(progression) for progression in self._items]

    def add(self, progression: Sequence[str]) -> bool:
        """Save a copy of *progression*; empty progressions are ignored."""
        if not progression:
            return False
        self._items.insert(0, list(progression))
        del self._items[self.limit:]
        return True

    def remove(self, index: int) -> list[str]:
        """
        Remove and return the progression at *index*.

        Raises:
            IndexError: If there is no progression at *index*.
        """
        return self._items.pop(index)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class HistoryStore:
    """
    JSON-backed store for chord history, saved progressions and the last key.

    A missing file means a fresh start. A damaged file, or a field with the
    wrong shape, is logged and replaced by its default so the CLI still runs.
    """

    HISTORY = "history"
    PROGRESSION_HISTORY = "progression_history"
    KEY_ROOT = "key_root"
    KEY_MODE = "key_mode"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.chords = ChordHistory()
        self.progressions = ProgressionHistory()
        self.key_root = DEFAULT_KEY_ROOT
        self.key_mode = DEFAULT_KEY_MODE

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring history file %s: expected a JSON object", self.path)
            return {}
        return raw

    def _field(self, data: dict[str, Any], name: str, expected: type, fallback: Any) -> Any:
        value = data.get(name, fallback)
        if value is None or not isinstance(value, expected):
            if name in data:
                logger.warning("History field %r has the wrong type; using default", name)
            return fallback
        return value

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> HistoryStore:
        store = cls(path)
        data = store._read()

        symbols = store._field(data, cls.HISTORY, list, [])
        store.chords = ChordHistory(item for item in symbols if isinstance(item, str))

        progressions = store._field(data, cls.PROGRESSION_HISTORY, list, [])
        store.progressions = ProgressionHistory(
            [chord for chord in progression if isinstance(chord, str)]
            for progression in progressions
            if isinstance(progression, list)
        )

        store.key_root = store._field(data, cls.KEY_ROOT, str, DEFAULT_KEY_ROOT)
        store.key_mode = store._field(data, cls.KEY_MODE, str, DEFAULT_KEY_MODE)
        return store

    def to_dict(self) -> dict[str, Any]:
        return {
            self.HISTORY: self.chords.items,
            self.PROGRESSION_HISTORY: self.progressions.items,
            self.KEY_ROOT: self.key_root,
            self.KEY_MODE: self.key_mode,
        }

    def save(self) -> None:
        """
        Write the store to disk, creating parent directories.

        Raises:
            HistoryError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise HistoryError(f"Could not write history file '{self.path}': {exc}") from exc
