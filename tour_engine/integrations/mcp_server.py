"""MCP Server: exposes tour_* tools to an assistant-driven UI shell.

One workspace lives for the whole server process, so the running tour and
pending auto-starts survive between tool calls the way they would inside a
single browser tab.
"""
from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from tour_engine.config import TourSettings
from tour_engine.types import SpotlightEvent
from tour_engine.workspace import TourWorkspace

if TYPE_CHECKING:
    from tour_engine.engine.autostart import MountHandle
    from tour_engine.engine.runner import StepRunner
    from tour_engine.types import RenderedStep

logger = logging.getLogger(__name__)

mcp = FastMCP("tour-engine")


class SnapshotWidget:
    """Spotlight stand-in that remembers the last render for the client to fetch."""

    def __init__(self):
        self.steps: list[RenderedStep] = []
        self.step_index = 0
        self.running = False

    def render(self, steps: list[RenderedStep], step_index: int, running: bool) -> None:
        self.steps = steps
        self.step_index = step_index
        self.running = running

    def to_dict(self) -> dict[str, Any]:
        return {
            "run": self.running,
            "stepIndex": self.step_index,
            "steps": [s.to_dict() for s in self.steps],
        }


_workspace: TourWorkspace | None = None
_runner: StepRunner | None = None
_widget = SnapshotWidget()
_mounts: dict[str, MountHandle] = {}


def _get_workspace() -> TourWorkspace:
    global _workspace, _runner
    if _workspace is None:
        _workspace = TourWorkspace(TourSettings.from_env(os.getcwd()))
        _runner = _workspace.runner(_widget)
    return _workspace


def _get_runner() -> StepRunner:
    _get_workspace()
    assert _runner is not None
    return _runner


def shutdown() -> None:
    global _workspace, _runner
    for handle in _mounts.values():
        handle.unmount()
    _mounts.clear()
    if _runner is not None:
        _runner.close()
    if _workspace is not None:
        _workspace.close()
    _widget.render([], 0, False)
    _workspace = None
    _runner = None


def _forget_mount(handle: MountHandle) -> None:
    if _mounts.get(handle.tour_id) is handle:
        del _mounts[handle.tour_id]


def _error(e: Exception) -> str:
    return json.dumps({"error": str(e)}, ensure_ascii=False)


@mcp.tool()
def tour_status() -> str:
    """Get tour state, progress, and what the spotlight should currently show."""
    try:
        ws = _get_workspace()
        st = ws.get_status()
        st["spotlight"] = _widget.to_dict()
        st["locale"] = _get_runner().locale()
        return json.dumps(st, ensure_ascii=False, indent=2)
    except Exception as e:
        return _error(e)


@mcp.tool()
def tour_list(role: str | None = None) -> str:
    """List registered tours, optionally only those visible to a role."""
    try:
        ws = _get_workspace()
        tours = ws.registry.for_role(role) if role else list(ws.registry)
        return json.dumps([
            {
                "id": t.id,
                "category": t.category,
                "page": t.page,
                "name": ws.translate(t.name_key) if t.name_key else t.id,
                "steps": len(t.steps),
                "completed": ws.controller.is_completed(t.id),
            }
            for t in tours
        ], ensure_ascii=False, indent=2)
    except Exception as e:
        return _error(e)


@mcp.tool()
def tour_progress(role: str | None = None) -> str:
    """Get completion progress overall and per category."""
    try:
        return json.dumps(_get_workspace().progress(role).to_dict(), indent=2)
    except Exception as e:
        return _error(e)


@mcp.tool()
def tour_start(tour_id: str) -> str:
    """Start a tour from its first step."""
    try:
        ws = _get_workspace()
        ws.controller.start(tour_id)
        if tour_id not in ws.registry:
            return f'Tour "{tour_id}" is not registered; nothing will be shown.'
        return f'Tour "{tour_id}" started.'
    except Exception as e:
        return f"Start failed: {e}"


@mcp.tool()
def tour_stop() -> str:
    """Stop the running tour without recording completion."""
    try:
        ws = _get_workspace()
        active = ws.controller.active_tour_id
        ws.controller.stop()
        return f'Tour "{active}" stopped.' if active else "No tour was running."
    except Exception as e:
        return f"Stop failed: {e}"


@mcp.tool()
def tour_complete(tour_id: str) -> str:
    """Mark a tour as completed."""
    try:
        _get_workspace().controller.complete(tour_id)
        return f'Tour "{tour_id}" completed.'
    except Exception as e:
        return f"Complete failed: {e}"


@mcp.tool()
def tour_reset(tour_id: str | None = None) -> str:
    """Reset one tour's completion, or every tour when no id is given."""
    try:
        ws = _get_workspace()
        if tour_id is None:
            ws.controller.reset_all()
            return "All tours reset."
        ws.controller.reset(tour_id)
        return f'Tour "{tour_id}" reset.'
    except Exception as e:
        return f"Reset failed: {e}"


@mcp.tool()
async def tour_page_mount(tour_id: str, enabled: bool = True) -> str:
    """Tell the engine a page owning `tour_id` mounted; may schedule an auto-start."""
    try:
        ws = _get_workspace()
        previous = _mounts.pop(tour_id, None)
        if previous is not None:
            previous.unmount()
        handle = ws.autostart.on_mount(tour_id, enabled)
        if handle.scheduled:
            _mounts[tour_id] = handle
            handle.add_done_callback(_forget_mount)
            return f'Auto-start of "{tour_id}" scheduled in {ws.autostart.settle_delay}s.'
        return f'No auto-start for "{tour_id}".'
    except Exception as e:
        return f"Mount failed: {e}"


@mcp.tool()
def tour_page_unmount(tour_id: str) -> str:
    """Tell the engine the page unmounted; cancels a pending auto-start."""
    handle = _mounts.pop(tour_id, None)
    if handle is None:
        return f'No pending auto-start for "{tour_id}".'
    handle.unmount()
    return f'Pending auto-start of "{tour_id}" cancelled.'


@mcp.tool()
async def tour_spotlight_event(status: str, action: str, index: int, type: str = "") -> str:
    """Forward a spotlight widget callback ({status, action, index, type})."""
    try:
        runner = _get_runner()
        await runner.handle_event(SpotlightEvent(status=status, action=action, index=index, type=type))
        return json.dumps(_widget.to_dict(), ensure_ascii=False, indent=2)
    except Exception as e:
        return _error(e)


def run_server():
    try:
        mcp.run(transport="stdio")
    finally:
        shutdown()
