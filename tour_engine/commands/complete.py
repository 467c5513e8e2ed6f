"""tours complete: record a tour as completed without running it."""
from __future__ import annotations

from tour_engine.commands import open_workspace


def cmd_complete(tour_id: str, cwd: str):
    ws = open_workspace(cwd)
    try:
        if tour_id not in ws.registry:
            print(f'Note: "{tour_id}" is not in the registry; recording it anyway.')
        if ws.controller.is_completed(tour_id):
            print(f'Tour "{tour_id}" is already completed.')
            return
        ws.controller.complete(tour_id)
        print(f'Tour "{tour_id}" marked as completed.')
    finally:
        ws.close()
