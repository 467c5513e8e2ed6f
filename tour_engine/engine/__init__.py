from tour_engine.engine.autostart import AutoStartPolicy, MountHandle
from tour_engine.engine.controller import TourController
from tour_engine.engine.progress import compute_progress
from tour_engine.engine.runner import Active, Idle, StepRunner
from tour_engine.engine.runtime import PersistenceMiddleware, TourRuntime

__all__ = [
    "Active",
    "AutoStartPolicy",
    "Idle",
    "MountHandle",
    "PersistenceMiddleware",
    "StepRunner",
    "TourController",
    "TourRuntime",
    "compute_progress",
]
