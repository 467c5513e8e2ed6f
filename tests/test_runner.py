"""Step runner: Idle/Active phases, rendering, widget callbacks and hook sequencing."""
from __future__ import annotations

import asyncio

import pytest

from tour_engine.engine.runner import Active, Idle, StepRunner
from tour_engine.i18n import Catalog
from tour_engine.registry import TourRegistry
from tour_engine.types import (
    ACTION_CLOSE,
    ACTION_NEXT,
    ACTION_PREV,
    EVENT_STEP_AFTER,
    EVENT_STEP_BEFORE,
    STATUS_FINISHED,
    STATUS_RUNNING,
    STATUS_SKIPPED,
    SpotlightEvent,
    StepDefinition,
)


def _after(index, action=ACTION_NEXT, status=STATUS_RUNNING):
    return SpotlightEvent(status=status, action=action, index=index, type=EVENT_STEP_AFTER)


def _before(index):
    return SpotlightEvent(status=STATUS_RUNNING, action=ACTION_NEXT, index=index, type=EVENT_STEP_BEFORE)


# ─── Phases & rendering ───

def test_idle_until_started(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    assert runner.phase == Idle()
    assert runner.steps == []
    assert widget.renders == []


def test_active_after_start(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("B")
    assert runner.phase == Active("B", 0)
    steps, index, running = widget.last
    assert len(steps) == 3
    assert index == 0
    assert running


def test_unknown_tour_stays_idle_while_running(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("not-registered")
    assert controller.is_running
    assert runner.phase == Idle()
    assert runner.steps == []
    assert widget.renders == []


def test_tour_without_steps_stays_idle(controller, tour_factory, widget):
    registry = TourRegistry([tour_factory("empty", steps=())])
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("empty")
    assert runner.phase == Idle()


def test_steps_are_translated_and_never_beacon(controller, tour_factory):
    catalog = Catalog({"tours": {"A": {"steps": {"0": {"title": "Hello", "content": "First"}}}}})
    registry = TourRegistry([tour_factory("A")])
    runner = StepRunner(controller, registry, translate=catalog)
    controller.start("A")
    first, second = runner.steps
    assert (first.title, first.content) == ("Hello", "First")
    # missing keys render as the key itself
    assert second.title == "tours.A.steps.1.title"
    assert all(s.disable_beacon for s in runner.steps)
    assert all(s.placement == "auto" for s in runner.steps)


def test_render_carries_step_options(controller):
    step = StepDefinition(
        target="body",
        title_key="t",
        content_key="c",
        placement="bottom-end",
        spotlight_padding=12,
        disable_interaction=True,
    )
    from tour_engine.types import TourDefinition

    registry = TourRegistry([TourDefinition(id="X", category="operations", steps=(step,))])
    runner = StepRunner(controller, registry)
    controller.start("X")
    rendered = runner.steps[0]
    assert rendered.to_dict() == {
        "target": "body",
        "title": "t",
        "content": "c",
        "placement": "bottom-end",
        "disableBeacon": True,
        "spotlightPadding": 12,
        "disableInteraction": True,
    }


def test_stop_renders_idle_once(controller, registry, widget):
    StepRunner(controller, registry, widget=widget)
    controller.start("A")
    controller.stop()
    assert widget.last == ([], 0, False)
    count = len(widget.renders)
    controller.stop()
    assert len(widget.renders) == count


def test_locale_labels(controller, registry):
    catalog = Catalog({"tours": {"common": {"back": "Back", "close": "Close", "finish": "Finish", "next": "Next", "skip": "Skip"}}})
    runner = StepRunner(controller, registry, translate=catalog)
    assert runner.locale() == {"back": "Back", "close": "Close", "last": "Finish", "next": "Next", "skip": "Skip"}


# ─── Widget callbacks ───

def test_step_after_advances_and_goes_back(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("B")

    async def scenario():
        await runner.handle_event(_after(0))
        assert controller.step_index == 1
        await runner.handle_event(_after(1))
        assert controller.step_index == 2
        await runner.handle_event(_after(2, ACTION_PREV))
        assert controller.step_index == 1

    asyncio.run(scenario())
    assert widget.last[1] == 1


def test_prev_on_first_step_floors(controller, registry):
    runner = StepRunner(controller, registry)
    controller.start("A")
    asyncio.run(runner.handle_event(_after(0, ACTION_PREV)))
    assert controller.step_index == 0
    assert controller.is_running


def test_finished_completes_active_tour(controller, registry):
    runner = StepRunner(controller, registry)
    controller.start("A")
    asyncio.run(runner.handle_event(SpotlightEvent(status=STATUS_FINISHED, action=ACTION_NEXT, index=1, type="tour:end")))
    assert controller.is_completed("A")
    assert not controller.is_running
    assert runner.phase == Idle()


def test_skipped_stops_without_completion(controller, registry):
    runner = StepRunner(controller, registry)
    controller.start("A")
    asyncio.run(runner.handle_event(SpotlightEvent(status=STATUS_SKIPPED, action="skip", index=0, type="tour:end")))
    assert not controller.is_completed("A")
    assert not controller.is_running


def test_close_stops_regardless_of_status(controller, registry):
    runner = StepRunner(controller, registry)
    controller.start("B")
    asyncio.run(runner.handle_event(_after(1, ACTION_CLOSE)))
    assert not controller.is_running
    assert not controller.is_completed("B")


@pytest.mark.parametrize("status, action", [
    (STATUS_RUNNING, ACTION_CLOSE),
    (STATUS_SKIPPED, "skip"),
])
def test_dismissing_last_step_does_not_complete(controller, registry, widget, status, action):
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("A")
    asyncio.run(runner.handle_event(_after(1, action, status)))
    assert not controller.is_running
    assert controller.completed_tour_ids == []
    assert widget.last == ([], 0, False)


def test_advancing_past_last_step_completes(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    controller.start("A")

    async def scenario():
        await runner.handle_event(_after(0))
        await runner.handle_event(_after(1))

    asyncio.run(scenario())
    assert controller.is_completed("A")
    assert not controller.is_running
    # never asked the widget to show an index past the end
    assert all(index < 2 for _, index, running in widget.renders if running)


def test_runtime_next_step_overrun_completes_when_runner_attached(controller, registry):
    StepRunner(controller, registry)
    controller.start("A")
    for _ in range(3):
        controller.runtime.next_step()
    assert controller.is_completed("A")


def test_events_without_tour_are_ignored(controller, registry):
    runner = StepRunner(controller, registry)
    asyncio.run(runner.handle_event(SpotlightEvent(status=STATUS_FINISHED, index=0)))
    assert controller.completed_tour_ids == []


# ─── Hooks ───

def _hooked_registry(tour_factory, before=None, after=None):
    steps = (
        StepDefinition(target="#a", title_key="a.t", content_key="a.c", before_step=before, after_step=after),
        StepDefinition(target="#b", title_key="b.t", content_key="b.c"),
    )
    return TourRegistry([tour_factory("H", steps=steps)])


def test_before_hook_awaited(controller, tour_factory):
    calls = []

    async def open_panel():
        await asyncio.sleep(0)
        calls.append("opened")

    runner = StepRunner(controller, _hooked_registry(tour_factory, before=open_panel))
    controller.start("H")
    asyncio.run(runner.handle_event(_before(0)))
    assert calls == ["opened"]


def test_sync_after_hook_runs_before_index_moves(controller, tour_factory):
    seen = []

    def after():
        seen.append(controller.step_index)

    runner = StepRunner(controller, _hooked_registry(tour_factory, after=after))
    controller.start("H")
    asyncio.run(runner.handle_event(_after(0)))
    assert seen == [0]
    assert controller.step_index == 1


def test_events_are_processed_one_at_a_time(controller, tour_factory):
    order = []
    release = None

    async def slow_before():
        order.append("before:start")
        await release.wait()
        order.append("before:end")

    def after():
        order.append("after")

    steps = (
        StepDefinition(target="#a", title_key="a", content_key="a", before_step=slow_before, after_step=after),
        StepDefinition(target="#b", title_key="b", content_key="b"),
    )
    runner = StepRunner(controller, TourRegistry([tour_factory("H", steps=steps)]))
    controller.start("H")

    async def scenario():
        nonlocal release
        release = asyncio.Event()
        first = runner.dispatch_event(_before(0))
        second = runner.dispatch_event(_after(0))
        await asyncio.sleep(0.01)
        # the after event waits behind the pending before hook
        assert order == ["before:start"]
        assert controller.step_index == 0
        release.set()
        await asyncio.gather(first, second)

    asyncio.run(scenario())
    assert order == ["before:start", "before:end", "after"]
    assert controller.step_index == 1


def test_stop_during_hook_drops_the_transition(controller, tour_factory):
    side_effects = []

    async def after():
        side_effects.append("panel closed")
        controller.stop()
        await asyncio.sleep(0)

    runner = StepRunner(controller, _hooked_registry(tour_factory, after=after))
    controller.start("H")
    asyncio.run(runner.handle_event(_after(0)))
    # hook side effect stays, but the stale event must not touch the stopped state
    assert side_effects == ["panel closed"]
    assert not controller.is_running
    assert controller.step_index == 0


def test_restart_during_hook_does_not_leak_old_index(controller, tour_factory):
    async def before():
        controller.start("H")
        await asyncio.sleep(0)

    runner = StepRunner(controller, _hooked_registry(tour_factory, before=before))
    controller.start("H")
    asyncio.run(runner.handle_event(SpotlightEvent(status=STATUS_FINISHED, index=0, type=EVENT_STEP_BEFORE)))
    # the finished status belonged to the previous session
    assert controller.is_running
    assert not controller.is_completed("H")


@pytest.mark.parametrize("kind", ["before", "after"])
def test_failing_hook_is_logged_and_tour_continues(controller, tour_factory, caplog, kind):
    async def broken():
        raise RuntimeError("panel missing")

    registry = _hooked_registry(tour_factory, **{kind: broken})
    runner = StepRunner(controller, registry)
    controller.start("H")
    event = _before(0) if kind == "before" else _after(0)
    asyncio.run(runner.handle_event(event))
    assert controller.is_running
    assert controller.step_index == (0 if kind == "before" else 1)
    assert f"{kind}_step hook failed" in caplog.text


def test_close_cancels_pending_events(controller, tour_factory):
    async def forever():
        await asyncio.sleep(60)

    runner = StepRunner(controller, _hooked_registry(tour_factory, after=forever))
    controller.start("H")

    async def scenario():
        task = runner.dispatch_event(_after(0))
        await asyncio.sleep(0.01)
        runner.close()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert controller.step_index == 0


def test_close_unsubscribes(controller, registry, widget):
    runner = StepRunner(controller, registry, widget=widget)
    runner.close()
    controller.start("A")
    assert widget.renders == []
