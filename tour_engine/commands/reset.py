"""tours reset / reset-all: forget completions so tours can be offered again."""
from __future__ import annotations

from tour_engine.commands import open_workspace


def cmd_reset(tour_id: str, cwd: str):
    ws = open_workspace(cwd)
    try:
        if not ws.controller.is_completed(tour_id):
            print(f'Tour "{tour_id}" is not completed; nothing to reset.')
            return
        ws.controller.reset(tour_id)
        print(f'Tour "{tour_id}" reset. It can be started again from the help menu.')
    finally:
        ws.close()


def cmd_reset_all(cwd: str):
    ws = open_workspace(cwd)
    try:
        count = len(ws.controller.completed_tour_ids)
        ws.controller.reset_all()
        print(f"Cleared {count} completed tour(s) and all first-visit markers.")
        print("Tours will auto-start again on the next visit to each page.")
    finally:
        ws.close()
