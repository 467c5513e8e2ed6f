"""Static analysis for tour registries: catch authoring issues before they ship."""
from __future__ import annotations

from typing import TYPE_CHECKING

from tour_engine.types import CATEGORIES, PLACEMENTS, ROLES

if TYPE_CHECKING:
    from tour_engine.registry import TourRegistry


class ValidationError:
    def __init__(self, level: str, message: str, tour: str | None = None):
        self.level = level  # "error" | "warning"
        self.message = message
        self.tour = tour

    def __str__(self):
        prefix = f"[{self.tour}] " if self.tour else ""
        return f"{self.level.upper()}: {prefix}{self.message}"


def validate_registry(registry: TourRegistry) -> list[ValidationError]:
    """Run all static checks on a tour registry."""
    errors: list[ValidationError] = []

    if not len(registry):
        errors.append(ValidationError("warning", "Registry has no tours"))
        return errors

    errors.extend(_check_categories(registry))
    errors.extend(_check_roles(registry))
    errors.extend(_check_steps(registry))
    errors.extend(_check_hooks(registry))

    return errors


def format_errors(errors: list[ValidationError]) -> str:
    if not errors:
        return ""
    lines = []
    errs = [e for e in errors if e.level == "error"]
    warns = [e for e in errors if e.level == "warning"]
    if errs:
        lines.append(f"  {len(errs)} error(s):")
        for e in errs:
            lines.append(f"    ✗ {e}")
    if warns:
        lines.append(f"  {len(warns)} warning(s):")
        for e in warns:
            lines.append(f"    ⚠ {e}")
    return "\n".join(lines)


# ─── Checks ───

def _check_categories(registry: TourRegistry) -> list[ValidationError]:
    return [
        ValidationError(
            "error",
            f"Unknown category '{t.category}' (expected one of: {', '.join(CATEGORIES)})",
            t.id,
        )
        for t in registry
        if t.category not in CATEGORIES
    ]


def _check_roles(registry: TourRegistry) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for t in registry:
        if t.roles is None:
            continue
        if not t.roles:
            errors.append(ValidationError("warning", "Empty role list; no user will see this tour", t.id))
        for role in sorted(t.roles - set(ROLES)):
            errors.append(ValidationError("warning", f"Unknown role '{role}'", t.id))
    return errors


def _check_steps(registry: TourRegistry) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for t in registry:
        if not t.steps:
            errors.append(ValidationError("warning", "Tour has no steps and will never render", t.id))
        for i, step in enumerate(t.steps, 1):
            if step.placement not in PLACEMENTS:
                errors.append(ValidationError("warning", f"Step {i}: unknown placement '{step.placement}'", t.id))
            if step.spotlight_padding is not None and step.spotlight_padding < 0:
                errors.append(ValidationError("warning", f"Step {i}: negative spotlight padding", t.id))
            if step.is_whole_page and not step.disable_interaction:
                errors.append(ValidationError(
                    "warning", f"Step {i}: whole-page step should set disableInteraction", t.id,
                ))
    return errors


def _check_hooks(registry: TourRegistry) -> list[ValidationError]:
    """Every hook named in YAML must resolve to a loaded hook function."""
    errors: list[ValidationError] = []
    for t in registry:
        for i, step in enumerate(t.steps, 1):
            if step.before_step_name and step.before_step is None:
                errors.append(ValidationError("error", f"Step {i}: beforeStep hook not found: '{step.before_step_name}'", t.id))
            if step.after_step_name and step.after_step is None:
                errors.append(ValidationError("error", f"Step {i}: afterStep hook not found: '{step.after_step_name}'", t.id))
    return errors
