from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    StepHook = Callable[[], Awaitable[None] | None]

# ─── Vocabulary ───

CATEGORIES = ("operations", "management", "administration")
ROLES = ("admin", "manager", "operator")

# Step target meaning "whole page, non-interactive"
WHOLE_PAGE = "body"

PLACEMENTS = frozenset({
    "auto", "center",
    "top", "top-start", "top-end",
    "bottom", "bottom-start", "bottom-end",
    "left", "left-start", "left-end",
    "right", "right-start", "right-end",
})

# Spotlight widget callback vocabulary
STATUS_RUNNING = "running"
STATUS_FINISHED = "finished"
STATUS_SKIPPED = "skipped"

ACTION_NEXT = "next"
ACTION_PREV = "prev"
ACTION_CLOSE = "close"
ACTION_SKIP = "skip"

EVENT_STEP_BEFORE = "step:before"
EVENT_STEP_AFTER = "step:after"

# ─── Tour Definition IR (parsed from YAML or built in code) ───

@dataclass(frozen=True)
class StepDefinition:
    target: str
    title_key: str
    content_key: str
    placement: str = "auto"
    spotlight_padding: int | None = None
    disable_interaction: bool = False
    before_step: StepHook | None = None
    after_step: StepHook | None = None
    # hook names as authored; kept so unresolved names can be reported
    before_step_name: str | None = None
    after_step_name: str | None = None

    @property
    def is_whole_page(self) -> bool:
        return self.target == WHOLE_PAGE


@dataclass(frozen=True)
class TourDefinition:
    id: str
    category: str
    steps: tuple[StepDefinition, ...] = ()
    roles: frozenset[str] | None = None  # None = every role
    page: str | None = None
    name_key: str = ""
    description_key: str = ""

    def allows_role(self, role: str | None) -> bool:
        if self.roles is None:
            return True
        return role in self.roles

# ─── Runtime State ───

@dataclass(frozen=True)
class TourPreferences:
    auto_start_enabled: bool = True
    show_help_button: bool = True

    def merged(self, **changes: bool) -> TourPreferences:
        unknown = set(changes) - set(self.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown tour preference(s): {', '.join(sorted(unknown))}")
        return TourPreferences(**{**self.__dict__, **{k: bool(v) for k, v in changes.items()}})

    def to_dict(self) -> dict[str, bool]:
        return {"autoStartEnabled": self.auto_start_enabled, "showHelpButton": self.show_help_button}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> TourPreferences:
        defaults = cls()
        return cls(
            auto_start_enabled=bool(raw.get("autoStartEnabled", defaults.auto_start_enabled)),
            show_help_button=bool(raw.get("showHelpButton", defaults.show_help_button)),
        )


@dataclass(frozen=True)
class TourState:
    active_tour_id: str | None = None
    is_running: bool = False
    step_index: int = 0
    completed_tour_ids: tuple[str, ...] = ()
    preferences: TourPreferences = field(default_factory=TourPreferences)
    # bumped whenever the active tour changes; in-flight step hooks compare against it
    session: int = 0

# ─── Step Runner output ───

@dataclass(frozen=True)
class RenderedStep:
    target: str
    title: str
    content: str
    placement: str = "auto"
    spotlight_padding: int | None = None
    disable_interaction: bool = False
    disable_beacon: bool = True

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "target": self.target,
            "title": self.title,
            "content": self.content,
            "placement": self.placement,
            "disableBeacon": self.disable_beacon,
        }
        if self.spotlight_padding is not None:
            d["spotlightPadding"] = self.spotlight_padding
        if self.disable_interaction:
            d["disableInteraction"] = True
        return d


@dataclass(frozen=True)
class SpotlightEvent:
    status: str = STATUS_RUNNING
    action: str = ACTION_NEXT
    index: int = 0
    type: str = ""

# ─── Progress read model ───

@dataclass(frozen=True)
class CategoryProgress:
    total: int = 0
    completed: int = 0


@dataclass(frozen=True)
class TourProgress:
    total_tours: int
    completed_tours: int
    percentage: int
    by_category: dict[str, CategoryProgress]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTours": self.total_tours,
            "completedTours": self.completed_tours,
            "percentage": self.percentage,
            "byCategory": {
                name: {"total": cp.total, "completed": cp.completed}
                for name, cp in self.by_category.items()
            },
        }
