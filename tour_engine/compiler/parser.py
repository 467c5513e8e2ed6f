"""Parse YAML tour registries into TourDefinition objects."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

from tour_engine.engine.hook_loader import registered_hooks
from tour_engine.registry import TourRegistry
from tour_engine.types import StepDefinition, TourDefinition

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tour_engine.types import StepHook

# camelCase authoring keys -> internal keys
KEYWORD_MAP = {
    "nameKey": "name_key",
    "descriptionKey": "description_key",
    "titleKey": "title_key",
    "contentKey": "content_key",
    "spotlightPadding": "spotlight_padding",
    "disableInteraction": "disable_interaction",
    "beforeStep": "before_step",
    "afterStep": "after_step",
}


def _normalize_key(key: str) -> str:
    return KEYWORD_MAP.get(key, key)


def _normalize(obj):
    if isinstance(obj, dict):
        return {_normalize_key(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_normalize(item) for item in obj]
    return obj


def _parse_step(raw, tour_id: str, idx: int, hooks: Mapping[str, StepHook]) -> StepDefinition:
    where = f'tour "{tour_id}" step {idx + 1}'
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid {where}: expected a mapping")

    missing = [k for k in ("target", "title_key", "content_key") if not raw.get(k)]
    if missing:
        raise ValueError(f"Invalid {where}: missing {', '.join(missing)}")

    padding = raw.get("spotlight_padding")
    if padding is not None and not isinstance(padding, int):
        raise ValueError(f"Invalid {where}: spotlightPadding must be an integer")

    before_name = raw.get("before_step")
    after_name = raw.get("after_step")
    return StepDefinition(
        target=str(raw["target"]),
        title_key=str(raw["title_key"]),
        content_key=str(raw["content_key"]),
        placement=str(raw.get("placement") or "auto"),
        spotlight_padding=padding,
        disable_interaction=bool(raw.get("disable_interaction", False)),
        before_step=hooks.get(before_name) if before_name else None,
        after_step=hooks.get(after_name) if after_name else None,
        before_step_name=before_name,
        after_step_name=after_name,
    )


def _parse_tour(raw, idx: int, hooks: Mapping[str, StepHook]) -> TourDefinition:
    if not isinstance(raw, dict) or not raw.get("id"):
        raise ValueError(f"Invalid tour #{idx + 1}: expected a mapping with an id")

    tour_id = str(raw["id"])
    if not raw.get("category"):
        raise ValueError(f'Invalid tour "{tour_id}": missing category')

    raw_steps = raw.get("steps") or []
    if not isinstance(raw_steps, list):
        raise ValueError(f'Invalid tour "{tour_id}": "steps" must be a list')

    roles: Any = raw.get("roles")
    if roles is not None:
        if isinstance(roles, str):
            roles = [roles]
        roles = frozenset(str(r) for r in roles)

    return TourDefinition(
        id=tour_id,
        category=str(raw["category"]),
        steps=tuple(_parse_step(s, tour_id, i, hooks) for i, s in enumerate(raw_steps)),
        roles=roles,
        page=raw.get("page"),
        name_key=str(raw.get("name_key", "")),
        description_key=str(raw.get("description_key", "")),
    )


def parse_registry_yaml(content: str, hooks: Mapping[str, StepHook] | None = None) -> TourRegistry:
    """Parse a registry document; hook names resolve against ``hooks`` or the loaded hooks."""
    raw = yaml.safe_load(content)
    if not isinstance(raw, dict):
        raise ValueError("Invalid YAML: expected a mapping")

    normalized = _normalize(raw)
    raw_tours = normalized.get("tours")
    if not isinstance(raw_tours, list):
        raise ValueError('Invalid registry: missing "tours" list')

    hook_map = registered_hooks() if hooks is None else hooks
    tours = [_parse_tour(t, i, hook_map) for i, t in enumerate(raw_tours)]

    seen: dict[str, int] = {}
    for t in tours:
        seen[t.id] = seen.get(t.id, 0) + 1
    dupes = [n for n, c in seen.items() if c > 1]
    if dupes:
        raise ValueError(f"Duplicate tour ids: {', '.join(dupes)}")

    return TourRegistry(tours)
