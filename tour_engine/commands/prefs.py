"""tours prefs: show or change tour preferences."""
from __future__ import annotations

import sys

from tour_engine.commands import open_workspace

# persisted (camelCase) name -> keyword accepted by set_preferences
PREFERENCE_KEYS = {
    "autoStartEnabled": "auto_start_enabled",
    "showHelpButton": "show_help_button",
}

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def parse_assignments(assignments: list[str]) -> dict[str, bool]:
    changes: dict[str, bool] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {item!r}")
        name = PREFERENCE_KEYS.get(key, key)
        if name not in PREFERENCE_KEYS.values():
            raise ValueError(f"Unknown preference {key!r}. Available: {', '.join(PREFERENCE_KEYS)}")
        if value.lower() in _TRUE:
            changes[name] = True
        elif value.lower() in _FALSE:
            changes[name] = False
        else:
            raise ValueError(f"Expected true or false for {key}, got {value!r}")
    return changes


def cmd_prefs(assignments: list[str], cwd: str):
    try:
        changes = parse_assignments(assignments)
    except ValueError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    ws = open_workspace(cwd)
    try:
        if changes:
            ws.controller.set_preferences(**changes)
        for key, value in ws.controller.preferences.to_dict().items():
            print(f"{key}={str(value).lower()}")
    finally:
        ws.close()
