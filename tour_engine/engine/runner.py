"""Step runner: drives the external spotlight widget for the active tour.

The runner is either Idle (nothing to render) or Active(tour_id, step_index).
Active needs a running tour whose id resolves to a registry entry with at
least one step; an unknown id keeps the runner Idle even while running.

Widget callbacks arrive as ``SpotlightEvent`` and are handled one at a time:
  step:before  → await the step's before_step hook
  step:after   → await after_step, then move to index ± 1 on next/prev
  finished     → complete the tour
  skipped      → stop without recording completion
  action=close → stop, whatever the status
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tour_engine.types import (
    ACTION_CLOSE,
    ACTION_NEXT,
    ACTION_PREV,
    EVENT_STEP_AFTER,
    EVENT_STEP_BEFORE,
    STATUS_FINISHED,
    STATUS_SKIPPED,
    RenderedStep,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from typing import Any

    from tour_engine.engine.controller import TourController
    from tour_engine.registry import TourRegistry
    from tour_engine.types import SpotlightEvent, StepHook, TourDefinition, TourState

    Translate = Callable[[str, Mapping[str, Any] | None], str]

logger = logging.getLogger(__name__)

LOCALE_KEYS = {
    "back": "tours.common.back",
    "close": "tours.common.close",
    "last": "tours.common.finish",
    "next": "tours.common.next",
    "skip": "tours.common.skip",
}


class SpotlightWidget(Protocol):
    def render(self, steps: list[RenderedStep], step_index: int, running: bool) -> None: ...


# ─── Runner phases ───

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Active:
    tour_id: str
    step_index: int


def _verbatim(key: str, args: Mapping[str, Any] | None = None) -> str:
    return key


class StepRunner:
    def __init__(
        self,
        controller: TourController,
        registry: TourRegistry,
        translate: Translate | None = None,
        widget: SpotlightWidget | None = None,
    ):
        self.controller = controller
        self.registry = registry
        self.translate = translate or _verbatim
        self.widget = widget
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._steps: list[RenderedStep] = []
        self._rendered_tour: str | None = None
        self._was_active = False
        self._unsubscribe = controller.subscribe(self._on_change)
        self.refresh()

    # ─── Rendering ───

    @property
    def phase(self) -> Idle | Active:
        tour = self._active_tour()
        if tour is None:
            return Idle()
        return Active(tour.id, self.controller.step_index)

    @property
    def steps(self) -> list[RenderedStep]:
        return list(self._steps)

    def refresh(self) -> None:
        tour = self._active_tour()
        if tour is None:
            self._steps = []
            self._rendered_tour = None
            if self._was_active and self.widget:
                self.widget.render([], 0, False)
            self._was_active = False
            return

        if self._rendered_tour != tour.id:
            self._steps = self.render_steps(tour)
            self._rendered_tour = tour.id
        self._was_active = True
        if self.widget:
            self.widget.render(self.steps, self.controller.step_index, True)

    def render_steps(self, tour: TourDefinition) -> list[RenderedStep]:
        return [
            RenderedStep(
                target=step.target,
                title=self.translate(step.title_key, None),
                content=self.translate(step.content_key, None),
                placement=step.placement or "auto",
                spotlight_padding=step.spotlight_padding,
                disable_interaction=step.disable_interaction,
                disable_beacon=True,
            )
            for step in tour.steps
        ]

    def locale(self) -> dict[str, str]:
        return {label: self.translate(key, None) for label, key in LOCALE_KEYS.items()}

    # ─── Widget callbacks ───

    def dispatch_event(self, event: SpotlightEvent) -> asyncio.Task:
        """Schedule ``handle_event`` on the running loop; ``close`` cancels it."""
        task = asyncio.get_running_loop().create_task(self.handle_event(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def handle_event(self, event: SpotlightEvent) -> None:
        async with self._lock:
            session = self.controller.session
            tour = self._active_tour()
            step = None
            if tour is not None and 0 <= event.index < len(tour.steps):
                step = tour.steps[event.index]

            if event.type == EVENT_STEP_BEFORE and step and step.before_step:
                await self._run_hook(step.before_step, "before_step", tour.id, event.index)
            if event.type == EVENT_STEP_AFTER and step and step.after_step:
                await self._run_hook(step.after_step, "after_step", tour.id, event.index)

            if self.controller.session != session:
                logger.debug("tour changed while a step hook was running; dropping %s", event)
                return

            # dismissing never records completion, even on the last step
            if event.action == ACTION_CLOSE or event.status == STATUS_SKIPPED:
                if self.controller.is_running:
                    self.controller.stop()
                return

            if event.type == EVENT_STEP_AFTER:
                if event.action == ACTION_NEXT:
                    self.controller.set_step_index(event.index + 1)
                elif event.action == ACTION_PREV:
                    self.controller.set_step_index(event.index - 1)

            active = self.controller.active_tour_id
            if event.status == STATUS_FINISHED and active:
                self.controller.complete(active)

    def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._unsubscribe()

    # ─── Private ───

    def _active_tour(self) -> TourDefinition | None:
        if not self.controller.is_running:
            return None
        tour = self.controller.get_tour_config(self.controller.active_tour_id, self.registry)
        if tour is None or not tour.steps:
            return None
        return tour

    def _on_change(self, old: TourState, new: TourState, action: object) -> None:
        if new.session == old.session and new.step_index == old.step_index:
            return
        if new.session != old.session:
            self._rendered_tour = None
        tour = self._active_tour()
        if tour is not None and new.step_index >= len(tour.steps):
            # ran past the last step: finish instead of rendering an empty spotlight
            logger.debug("step index ran past the last step of %r; completing", tour.id)
            self.controller.complete(tour.id)
            return
        self.refresh()

    async def _run_hook(self, fn: StepHook, kind: str, tour_id: str, index: int) -> None:
        try:
            result = fn()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("%s hook failed for tour %r step %d; continuing", kind, tour_id, index)
