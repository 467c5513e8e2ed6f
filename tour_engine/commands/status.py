"""tours status / progress / history: read-only views of the persisted tour state."""
from __future__ import annotations

from tour_engine.commands import open_workspace


def cmd_status(cwd: str):
    ws = open_workspace(cwd)
    try:
        st = ws.get_status()
        print(st["summary"])
        if st["completed_tours"]:
            print(f'Completed: {", ".join(st["completed_tours"])}')
        prefs = st["preferences"]
        print(f'Preferences: autoStartEnabled={prefs["autoStartEnabled"]}, showHelpButton={prefs["showHelpButton"]}')
        if st.get("last_action"):
            la = st["last_action"]
            print(f'Last action: {la["action"]} at {la["timestamp"]}')
    finally:
        ws.close()


def cmd_progress(cwd: str, role: str | None = None):
    ws = open_workspace(cwd)
    try:
        progress = ws.progress(role)
        print(f"{progress.completed_tours}/{progress.total_tours} tours completed ({progress.percentage}%)")
        for category, cp in progress.by_category.items():
            print(f"  {category}: {cp.completed}/{cp.total}")
    finally:
        ws.close()


def cmd_history(cwd: str, limit: int = 20):
    ws = open_workspace(cwd)
    try:
        history = ws.store.get_history(limit)
        if not history:
            print("No recorded tour actions.")
            return
        for entry in reversed(history):
            target = f" {entry['tour_id']}" if entry["tour_id"] else ""
            data = f" {entry['data']}" if entry["data"] else ""
            print(f"{entry['timestamp']}  {entry['action']}{target}{data}")
    finally:
        ws.close()
