"""Shared fixtures for tour engine tests."""
from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import pytest

from tour_engine.config import TourSettings
from tour_engine.engine.controller import TourController
from tour_engine.engine.runtime import TourRuntime
from tour_engine.registry import TourRegistry
from tour_engine.types import StepDefinition, TourDefinition
from tour_engine.workspace import TourWorkspace

FIXTURE_DIR = Path(__file__).parent / ".tours"

SETTLE_DELAY = 0.02


class RecordingWidget:
    """Spotlight widget stand-in that keeps every render call."""

    def __init__(self):
        self.renders: list[tuple[list, int, bool]] = []

    def render(self, steps, step_index, running):
        self.renders.append((list(steps), step_index, running))

    @property
    def last(self):
        return self.renders[-1] if self.renders else None


class TourHarness:
    """A throwaway .tours/ workspace per test.

    Copies the fixture registry, hooks and locales into a temp directory and
    opens a TourWorkspace on it. ``restart`` closes and reopens the workspace
    on the same state.db to simulate a new process.
    """

    def __init__(self, *, registry_yaml: str | None = None, settle_delay: float = SETTLE_DELAY):
        self.tmp = Path(tempfile.mkdtemp())
        self.tours_dir = self.tmp / ".tours"
        shutil.copytree(FIXTURE_DIR, self.tours_dir)
        if registry_yaml is not None:
            (self.tours_dir / "tours.yaml").write_text(registry_yaml, encoding="utf-8")
        self.settings = TourSettings(tours_dir=self.tours_dir, settle_delay=settle_delay)
        self.workspace = TourWorkspace(self.settings)

    @property
    def controller(self) -> TourController:
        return self.workspace.controller

    @property
    def store(self):
        return self.workspace.store

    @property
    def state(self):
        return self.workspace.runtime.state

    def restart(self) -> None:
        self.workspace.close()
        self.workspace = TourWorkspace(self.settings)

    def close(self):
        self.workspace.close()
        shutil.rmtree(self.tmp, ignore_errors=True)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


@pytest.fixture
def harness_factory():
    """Factory fixture that creates TourHarness instances and cleans up after test."""
    created: list[TourHarness] = []

    def _make(**kwargs) -> TourHarness:
        h = TourHarness(**kwargs)
        created.append(h)
        return h

    yield _make

    for h in created:
        h.close()


@pytest.fixture
def harness(harness_factory) -> TourHarness:
    return harness_factory()


def _make_tour(tour_id: str, category: str = "operations", n_steps: int = 2, **kwargs) -> TourDefinition:
    if "steps" in kwargs:
        steps = kwargs.pop("steps")
    else:
        steps = [
            StepDefinition(
                target=f'[data-tour="{tour_id}-{i}"]',
                title_key=f"tours.{tour_id}.steps.{i}.title",
                content_key=f"tours.{tour_id}.steps.{i}.content",
            )
            for i in range(n_steps)
        ]
    return TourDefinition(id=tour_id, category=category, steps=tuple(steps), **kwargs)


@pytest.fixture
def registry() -> TourRegistry:
    return TourRegistry([
        _make_tour("A", "operations"),
        _make_tour("B", "management", n_steps=3),
        _make_tour("C", "administration", roles=frozenset({"admin"})),
    ])


@pytest.fixture
def runtime() -> TourRuntime:
    return TourRuntime()


@pytest.fixture
def controller(runtime) -> TourController:
    return TourController(runtime)


@pytest.fixture
def widget() -> RecordingWidget:
    return RecordingWidget()


@pytest.fixture
def tour_factory():
    """Build an in-code TourDefinition: tour_factory("A", "operations", n_steps=2)."""
    return _make_tour
