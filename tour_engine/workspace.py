"""Composition root: wires registry, store, runtime and policies for one .tours/ directory."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tour_engine.compiler.parser import parse_registry_yaml
from tour_engine.engine.autostart import AutoStartPolicy
from tour_engine.engine.controller import TourController
from tour_engine.engine.hook_loader import load_hooks
from tour_engine.engine.progress import compute_progress
from tour_engine.engine.runner import StepRunner
from tour_engine.engine.runtime import TourRuntime
from tour_engine.i18n import Catalog
from tour_engine.registry import TourRegistry
from tour_engine.store.state import TourStore

if TYPE_CHECKING:
    from tour_engine.config import TourSettings
    from tour_engine.engine.runner import SpotlightWidget
    from tour_engine.types import TourProgress

logger = logging.getLogger(__name__)


def load_registry(settings: TourSettings) -> TourRegistry:
    """Load hooks, then parse the registry file. A missing file is an empty registry."""
    hooks = load_hooks(settings.hooks_dir)
    if not settings.registry_path.exists():
        logger.info("no tour registry at %s", settings.registry_path)
        return TourRegistry()
    return parse_registry_yaml(settings.registry_path.read_text(encoding="utf-8"), hooks)


class TourWorkspace:
    def __init__(self, settings: TourSettings):
        self.settings = settings
        settings.tours_dir.mkdir(parents=True, exist_ok=True)
        self.registry = load_registry(settings)
        self.store = TourStore(settings.db_path)
        self.runtime = TourRuntime.from_store(self.store)
        self.controller = TourController(self.runtime)
        self.translate = Catalog.load(settings.locales_dir, settings.locale)
        self.autostart = AutoStartPolicy(self.controller, self.store, settings.settle_delay)

    def runner(self, widget: SpotlightWidget | None = None) -> StepRunner:
        return StepRunner(self.controller, self.registry, self.translate, widget)

    def progress(self, role: str | None = None) -> TourProgress:
        registry = self.registry if role is None else TourRegistry(self.registry.for_role(role))
        return compute_progress(registry, self.controller.completed_tour_ids)

    def get_status(self) -> dict[str, Any]:
        state = self.runtime.state
        progress = self.progress()
        active = self.registry.get(state.active_tour_id)
        history = self.store.get_history(1)
        last_action = history[0] if history else None

        result: dict[str, Any] = {
            "active_tour": state.active_tour_id,
            "is_running": state.is_running,
            "step_index": state.step_index,
            "total_steps": len(active.steps) if active else 0,
            "completed_tours": list(state.completed_tour_ids),
            "preferences": state.preferences.to_dict(),
            "progress": progress.to_dict(),
            "last_action": last_action,
        }

        summary_parts = [f"{progress.completed_tours}/{progress.total_tours} tours completed ({progress.percentage}%)"]
        if state.is_running:
            if active:
                summary_parts.append(f"running {state.active_tour_id} step {state.step_index + 1}/{len(active.steps)}")
            else:
                summary_parts.append(f"running {state.active_tour_id} (not in registry)")
        if not state.preferences.auto_start_enabled:
            summary_parts.append("auto-start off")
        if last_action:
            summary_parts.append(f"last: {last_action['action']}")
        result["summary"] = ", ".join(summary_parts)
        return result

    def close(self) -> None:
        self.store.close()
