"""Guided product tour engine: runtime state, auto-start, step runner and progress."""
from tour_engine.engine.hook_loader import hook
from tour_engine.registry import TourRegistry
from tour_engine.types import StepDefinition, TourDefinition

__all__ = ["StepDefinition", "TourDefinition", "TourRegistry", "hook"]
