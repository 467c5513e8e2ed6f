"""tours validate: parse the registry, run static checks, summarise the catalog."""
from __future__ import annotations

import sys

from tour_engine.compiler import format_errors, parse_registry_yaml, validate_registry
from tour_engine.config import TourSettings
from tour_engine.engine.hook_loader import load_hooks
from tour_engine.types import CATEGORIES


def cmd_validate(cwd: str):
    settings = TourSettings.from_env(cwd)
    registry_path = settings.registry_path

    if not registry_path.exists():
        print(f"Tour registry not found: {registry_path}", file=sys.stderr)
        sys.exit(1)

    hooks = load_hooks(settings.hooks_dir)
    try:
        registry = parse_registry_yaml(registry_path.read_text(encoding="utf-8"), hooks)
    except ValueError as e:
        print(f"✗ Parse error: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_registry(registry)
    has_errors = any(e.level == "error" for e in errors)

    if has_errors:
        print(f"✗ Registry {registry_path.name} failed validation:")
        print(format_errors(errors))
        sys.exit(1)

    steps = sum(len(t.steps) for t in registry)
    print(f"✓ Registry compiled ({len(registry)} tours, {steps} steps, {len(hooks)} hooks)")
    if errors:
        print(format_errors(errors))
    print()

    for category in CATEGORIES:
        tours = registry.by_category(category)
        if tours:
            print(f"{category}: {', '.join(t.id for t in tours)}")
