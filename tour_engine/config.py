"""Workspace settings for the tour engine.

Everything lives under one directory (``.tours/`` by default)::

    .tours/
    ├── tours.yaml      tour registry
    ├── hooks/          beforeStep/afterStep hook modules
    ├── locales/        <locale>.yaml message catalogs
    └── state.db        completed tours, preferences, visited markers

Environment overrides: ``TOURS_DIR``, ``TOURS_LOCALE``, ``TOURS_SETTLE_DELAY``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from tour_engine.engine.autostart import DEFAULT_SETTLE_DELAY


@dataclass(frozen=True)
class TourSettings:
    tours_dir: Path
    registry_file: str = "tours.yaml"
    db_file: str = "state.db"
    locale: str = "en"
    settle_delay: float = DEFAULT_SETTLE_DELAY

    @property
    def registry_path(self) -> Path:
        return self.tours_dir / self.registry_file

    @property
    def db_path(self) -> Path:
        return self.tours_dir / self.db_file

    @property
    def hooks_dir(self) -> Path:
        return self.tours_dir / "hooks"

    @property
    def locales_dir(self) -> Path:
        return self.tours_dir / "locales"

    @classmethod
    def from_env(cls, cwd: str | Path | None = None) -> TourSettings:
        base = Path(cwd) if cwd is not None else Path.cwd()
        tours_dir = Path(os.environ.get("TOURS_DIR", base / ".tours"))
        if not tours_dir.is_absolute():
            tours_dir = base / tours_dir
        delay = os.environ.get("TOURS_SETTLE_DELAY")
        try:
            settle_delay = float(delay) if delay else DEFAULT_SETTLE_DELAY
        except ValueError as e:
            raise ValueError(f"TOURS_SETTLE_DELAY must be a number of seconds, got {delay!r}") from e
        return cls(
            tours_dir=tours_dir,
            locale=os.environ.get("TOURS_LOCALE", "en"),
            settle_delay=settle_delay,
        )
