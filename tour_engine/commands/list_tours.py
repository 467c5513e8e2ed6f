"""tours list: show the tours in the registry with their completion state."""
from __future__ import annotations

from tour_engine.commands import open_workspace


def cmd_list(cwd: str, role: str | None = None):
    ws = open_workspace(cwd)
    try:
        tours = ws.registry.for_role(role) if role else list(ws.registry)
        if not tours:
            print("No tours registered." if role is None else f'No tours available to role "{role}".')
            return
        for tour in tours:
            mark = "✓" if ws.controller.is_completed(tour.id) else " "
            roles = ", ".join(sorted(tour.roles)) if tour.roles is not None else "all roles"
            page = f" {tour.page}" if tour.page else ""
            print(f"[{mark}] {tour.id} ({tour.category}, {len(tour.steps)} steps, {roles}){page}")
    finally:
        ws.close()
