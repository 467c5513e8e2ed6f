"""Command/query facade over the tour runtime."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from tour_engine.engine.runtime import Listener, TourRuntime
    from tour_engine.registry import TourRegistry
    from tour_engine.types import TourDefinition, TourPreferences


class TourController:
    def __init__(self, runtime: TourRuntime):
        self.runtime = runtime

    def start(self, tour_id: str) -> None:
        self.runtime.start(tour_id)

    def stop(self) -> None:
        self.runtime.stop()

    def complete(self, tour_id: str) -> None:
        self.runtime.complete(tour_id)

    def reset(self, tour_id: str) -> None:
        self.runtime.reset(tour_id)

    def reset_all(self) -> None:
        self.runtime.reset_all()

    def set_step_index(self, index: int) -> None:
        self.runtime.set_step_index(index)

    def set_preferences(self, **changes: bool) -> None:
        self.runtime.set_preferences(**changes)

    def is_completed(self, tour_id: str) -> bool:
        return tour_id in self.runtime.state.completed_tour_ids

    @property
    def is_running(self) -> bool:
        return self.runtime.state.is_running

    @property
    def active_tour_id(self) -> str | None:
        return self.runtime.state.active_tour_id

    @property
    def completed_tour_ids(self) -> list[str]:
        return list(self.runtime.state.completed_tour_ids)

    @property
    def step_index(self) -> int:
        return self.runtime.state.step_index

    @property
    def preferences(self) -> TourPreferences:
        return self.runtime.state.preferences

    @property
    def session(self) -> int:
        return self.runtime.state.session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.runtime.subscribe(listener)

    def get_tour_config(self, tour_id: str, registry: TourRegistry) -> TourDefinition | None:
        return registry.get(tour_id)
