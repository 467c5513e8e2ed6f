"""Load step hooks (beforeStep/afterStep side effects) from .py files in .tours/hooks/."""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tour_engine.types import StepHook

logger = logging.getLogger(__name__)

_HOOK_REGISTRY: dict[str, StepHook] = {}


def hook(name_or_fn=None):
    """Register a step hook under its function name (or an explicit name).

    Usage in .tours/hooks/settings.py::

        from tour_engine import hook

        @hook
        async def open_parameters_tab():
            await ui.select_tab("parameters")

        @hook("close-parameters-tab")
        def close_tab():
            ui.select_tab("general")

    Tour YAML then refers to it with ``beforeStep: open_parameters_tab``.
    """
    def register(fn: StepHook, name: str | None = None) -> StepHook:
        _HOOK_REGISTRY[name or fn.__name__] = fn
        return fn

    if callable(name_or_fn):
        return register(name_or_fn)
    return lambda fn: register(fn, name_or_fn)


def load_hooks(hooks_dir: str | Path) -> dict[str, StepHook]:
    _HOOK_REGISTRY.clear()
    hooks_path = Path(hooks_dir)
    if not hooks_path.is_dir():
        return {}

    for py_file in sorted(hooks_path.glob("*.py")):
        try:
            spec = importlib.util.spec_from_file_location(f"tour_hooks_{py_file.stem}", py_file)
            if not spec or not spec.loader:
                continue
            mod = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(mod)
        except Exception as e:
            logger.warning("Failed to load hooks from %s: %s", py_file, e)

    return dict(_HOOK_REGISTRY)


def get_hook(name: str) -> StepHook | None:
    return _HOOK_REGISTRY.get(name)


def registered_hooks() -> dict[str, StepHook]:
    return dict(_HOOK_REGISTRY)
