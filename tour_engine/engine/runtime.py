"""Tour runtime: injectable state container with write-through persistence."""
from __future__ import annotations

import json
import logging
import sqlite3
from collections import deque
from typing import TYPE_CHECKING

from tour_engine.engine.reducer import (
    ACTION_NAMES,
    CompleteTour,
    NextStep,
    PreviousStep,
    ResetAllTours,
    ResetTour,
    SetPreferences,
    SetStepIndex,
    StartTour,
    StopTour,
    reduce,
)
from tour_engine.types import TourState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tour_engine.engine.reducer import Action
    from tour_engine.store.state import TourStore

    Listener = Callable[[TourState, TourState, Action], None]

logger = logging.getLogger(__name__)


class TourRuntime:
    """Holds the current ``TourState`` and applies actions to it.

    Listeners run after each transition with ``(old, new, action)``. Actions
    dispatched from inside a listener are queued and applied once the current
    round of listeners has finished, so every listener sees transitions in order.
    """

    def __init__(self, state: TourState | None = None, listeners: Iterable[Listener] = ()):
        self._state = state or TourState()
        self._listeners: list[Listener] = list(listeners)
        self._queue: deque[Action] = deque()
        self._dispatching = False

    @classmethod
    def from_store(cls, store: TourStore) -> TourRuntime:
        state = TourState(
            completed_tour_ids=tuple(store.load_completed()),
            preferences=store.load_preferences(),
        )
        return cls(state, listeners=[PersistenceMiddleware(store)])

    @property
    def state(self) -> TourState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> TourState:
        self._queue.append(action)
        if self._dispatching:
            return self._state
        self._dispatching = True
        try:
            while self._queue:
                current = self._queue.popleft()
                old = self._state
                self._state = reduce(old, current)
                logger.debug("tour action %s: %s -> %s", current, old, self._state)
                for listener in list(self._listeners):
                    listener(old, self._state, current)
        finally:
            self._queue.clear()
            self._dispatching = False
        return self._state

    # ─── Commands ───

    def start(self, tour_id: str) -> TourState:
        return self.dispatch(StartTour(tour_id))

    def stop(self) -> TourState:
        return self.dispatch(StopTour())

    def complete(self, tour_id: str) -> TourState:
        return self.dispatch(CompleteTour(tour_id))

    def reset(self, tour_id: str) -> TourState:
        return self.dispatch(ResetTour(tour_id))

    def reset_all(self) -> TourState:
        return self.dispatch(ResetAllTours())

    def set_step_index(self, index: int) -> TourState:
        return self.dispatch(SetStepIndex(index))

    def next_step(self) -> TourState:
        return self.dispatch(NextStep())

    def previous_step(self) -> TourState:
        return self.dispatch(PreviousStep())

    def set_preferences(self, **changes: bool) -> TourState:
        return self.dispatch(SetPreferences(changes))


class PersistenceMiddleware:
    """Writes completed ids and preferences through to the store on change.

    Store failures are logged and swallowed; the in-memory state stays authoritative.
    """

    def __init__(self, store: TourStore):
        self.store = store

    def __call__(self, old: TourState, new: TourState, action: Action) -> None:
        try:
            if new.completed_tour_ids != old.completed_tour_ids or isinstance(action, ResetAllTours):
                self.store.save_completed(new.completed_tour_ids)
            if new.preferences != old.preferences:
                self.store.save_preferences(new.preferences)
            if isinstance(action, ResetAllTours):
                self.store.clear_visited()
            if not isinstance(action, (SetStepIndex, NextStep, PreviousStep)):
                self.store.add_history(ACTION_NAMES[type(action)], *_history_fields(action))
        except sqlite3.Error as e:
            logger.warning("Failed to persist tour state after %s: %s", action, e)


def _history_fields(action: Action) -> tuple[str | None, str | None]:
    tour_id = getattr(action, "tour_id", None)
    if isinstance(action, SetPreferences):
        return tour_id, json.dumps(action.changes)
    return tour_id, None
