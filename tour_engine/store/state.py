"""SQLite-backed persistence for completed tours, preferences and visited markers."""
from __future__ import annotations

import json
import logging
import sqlite3
from typing import TYPE_CHECKING

from tour_engine.types import TourPreferences

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

COMPLETED_KEY = "tours_completed"
PREFERENCES_KEY = "tour_preferences"
FIRST_VISIT_PREFIX = "tour_first_visit_"

INIT_SQL = """
CREATE TABLE IF NOT EXISTS tour_kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tour_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    action TEXT NOT NULL,
    tour_id TEXT,
    data TEXT,
    timestamp TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class TourStore:
    """Durable key-value store.

    Writes raise ``sqlite3.Error`` on failure; callers decide whether that is
    fatal. The two startup loaders never raise and fall back to defaults.
    """

    def __init__(self, db_path: str | Path):
        self.db = sqlite3.connect(str(db_path))
        self.db.execute("PRAGMA journal_mode = WAL")
        self.db.executescript(INIT_SQL)

    # ─── Raw key-value access ───

    def get_value(self, key: str) -> str | None:
        row = self.db.execute("SELECT value FROM tour_kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_value(self, key: str, value: str) -> None:
        self.db.execute(
            "INSERT OR REPLACE INTO tour_kv (key, value) VALUES (?, ?)", (key, value)
        )
        self.db.commit()

    # ─── Completed tours ───

    def load_completed(self) -> list[str]:
        try:
            stored = self.get_value(COMPLETED_KEY)
            if stored is None:
                return []
            ids = json.loads(stored)
            if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
                raise ValueError(f"expected a list of tour ids, got {stored!r}")
        except (sqlite3.Error, ValueError) as e:
            logger.warning("Failed to load completed tours, using defaults: %s", e)
            return []
        # stored ids are kept as-is, even for tours no longer in the registry
        return list(dict.fromkeys(ids))

    def save_completed(self, tour_ids: list[str] | tuple[str, ...]) -> None:
        self.set_value(COMPLETED_KEY, json.dumps(list(tour_ids)))

    # ─── Preferences ───

    def load_preferences(self) -> TourPreferences:
        try:
            stored = self.get_value(PREFERENCES_KEY)
            if stored is None:
                return TourPreferences()
            raw = json.loads(stored)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a preferences object, got {stored!r}")
            return TourPreferences.from_dict(raw)
        except (sqlite3.Error, ValueError) as e:
            logger.warning("Failed to load tour preferences, using defaults: %s", e)
            return TourPreferences()

    def save_preferences(self, preferences: TourPreferences) -> None:
        self.set_value(PREFERENCES_KEY, json.dumps(preferences.to_dict()))

    # ─── Visited markers ───

    def has_visited(self, tour_id: str) -> bool:
        return self.get_value(FIRST_VISIT_PREFIX + tour_id) is not None

    def mark_visited(self, tour_id: str) -> None:
        self.set_value(FIRST_VISIT_PREFIX + tour_id, "true")

    def visited_tours(self) -> list[str]:
        rows = self.db.execute(
            "SELECT key FROM tour_kv WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(FIRST_VISIT_PREFIX), FIRST_VISIT_PREFIX),
        ).fetchall()
        return [r[0][len(FIRST_VISIT_PREFIX):] for r in rows]

    def clear_visited(self) -> None:
        self.db.execute(
            "DELETE FROM tour_kv WHERE substr(key, 1, ?) = ?",
            (len(FIRST_VISIT_PREFIX), FIRST_VISIT_PREFIX),
        )
        self.db.commit()

    # ─── History ───

    def add_history(self, action: str, tour_id: str | None = None, data: str | None = None) -> None:
        self.db.execute(
            "INSERT INTO tour_history (action, tour_id, data) VALUES (?, ?, ?)",
            (action, tour_id, data),
        )
        self.db.commit()

    def get_history(self, limit: int = 20) -> list[dict]:
        rows = self.db.execute(
            "SELECT id, action, tour_id, data, timestamp "
            "FROM tour_history ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            {"id": r[0], "action": r[1], "tour_id": r[2], "data": r[3], "timestamp": r[4]}
            for r in rows
        ]

    def reset(self) -> None:
        self.db.execute("DELETE FROM tour_kv")
        self.db.execute("DELETE FROM tour_history")
        self.db.commit()

    def close(self) -> None:
        self.db.close()
