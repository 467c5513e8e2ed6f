from __future__ import annotations

import sys

from tour_engine.config import TourSettings
from tour_engine.workspace import TourWorkspace


def open_workspace(cwd: str) -> TourWorkspace:
    """Open the .tours/ workspace under cwd, exiting with a message on a broken registry."""
    try:
        return TourWorkspace(TourSettings.from_env(cwd))
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
