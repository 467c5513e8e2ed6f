"""Pure state transitions for the tour runtime.

Every command is an explicit action object; ``reduce`` never touches storage.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from tour_engine.types import TourState

# ─── Actions ───

@dataclass(frozen=True)
class StartTour:
    tour_id: str


@dataclass(frozen=True)
class StopTour:
    pass


@dataclass(frozen=True)
class CompleteTour:
    tour_id: str


@dataclass(frozen=True)
class ResetTour:
    tour_id: str


@dataclass(frozen=True)
class ResetAllTours:
    pass


@dataclass(frozen=True)
class SetStepIndex:
    index: int


@dataclass(frozen=True)
class NextStep:
    pass


@dataclass(frozen=True)
class PreviousStep:
    pass


@dataclass(frozen=True)
class SetPreferences:
    changes: dict[str, Any] = field(default_factory=dict)


Action = (
    StartTour | StopTour | CompleteTour | ResetTour | ResetAllTours
    | SetStepIndex | NextStep | PreviousStep | SetPreferences
)

ACTION_NAMES: dict[type, str] = {
    StartTour: "start",
    StopTour: "stop",
    CompleteTour: "complete",
    ResetTour: "reset",
    ResetAllTours: "reset_all",
    SetStepIndex: "set_step_index",
    NextStep: "next_step",
    PreviousStep: "previous_step",
    SetPreferences: "set_preferences",
}

# ─── Reducer ───

def reduce(state: TourState, action: Action) -> TourState:
    match action:
        case StartTour(tour_id=tour_id):
            return replace(
                state,
                active_tour_id=tour_id,
                is_running=True,
                step_index=0,
                session=state.session + 1,
            )
        case StopTour():
            return _stopped(state)
        case CompleteTour(tour_id=tour_id):
            completed = state.completed_tour_ids
            if tour_id not in completed:
                completed = (*completed, tour_id)
            return _stopped(replace(state, completed_tour_ids=completed))
        case ResetTour(tour_id=tour_id):
            if tour_id not in state.completed_tour_ids:
                return state
            completed = tuple(t for t in state.completed_tour_ids if t != tour_id)
            return replace(state, completed_tour_ids=completed)
        case ResetAllTours():
            return _stopped(replace(state, completed_tour_ids=()))
        case SetStepIndex(index=index):
            if state.active_tour_id is None:
                return state
            return replace(state, step_index=max(0, index))
        case NextStep():
            # no upper bound here; running past the last step is the runner's call
            if state.active_tour_id is None:
                return state
            return replace(state, step_index=state.step_index + 1)
        case PreviousStep():
            if state.active_tour_id is None or state.step_index == 0:
                return state
            return replace(state, step_index=state.step_index - 1)
        case SetPreferences(changes=changes):
            return replace(state, preferences=state.preferences.merged(**changes))
    raise TypeError(f"Unknown tour action: {action!r}")


def _stopped(state: TourState) -> TourState:
    return replace(
        state,
        active_tour_id=None,
        is_running=False,
        step_index=0,
        session=state.session + 1,
    )
