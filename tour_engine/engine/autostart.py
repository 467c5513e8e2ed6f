"""Auto-start policy: offer a tour once, shortly after its page first mounts.

The visited marker is written *before* the delayed start is scheduled, so the
offer is at-most-once per tour: a page that mounts, unmounts inside the settle
window and mounts again will not be offered the tour a second time.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from tour_engine.engine.controller import TourController
    from tour_engine.store.state import TourStore

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.5


class MountHandle:
    """Returned by ``on_mount``; call ``unmount`` when the page goes away.

    ``scheduled`` is true only while the start is still pending: it turns
    false once the timer fires or is cancelled.
    """

    def __init__(self, tour_id: str):
        self.tour_id = tour_id
        self._timer: asyncio.TimerHandle | None = None
        self._callbacks: list[Callable[[MountHandle], None]] = []

    @property
    def scheduled(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    def add_done_callback(self, fn: Callable[[MountHandle], None]) -> None:
        """Call ``fn(handle)`` after the timer has fired."""
        self._callbacks.append(fn)

    def unmount(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fired(self) -> None:
        self._timer = None
        for fn in self._callbacks:
            fn(self)


class AutoStartPolicy:
    def __init__(
        self,
        controller: TourController,
        store: TourStore,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.controller = controller
        self.store = store
        self.settle_delay = settle_delay
        self._loop = loop

    def is_eligible(self, tour_id: str, enabled: bool = True) -> bool:
        if not enabled or not self.controller.preferences.auto_start_enabled:
            return False
        if self.controller.is_running:
            return False
        return not self.controller.is_completed(tour_id)

    def on_mount(self, tour_id: str, enabled: bool = True) -> MountHandle:
        if not self.is_eligible(tour_id, enabled):
            return MountHandle(tour_id)

        try:
            if self.store.has_visited(tour_id):
                return MountHandle(tour_id)
            self.store.mark_visited(tour_id)
        except sqlite3.Error as e:
            logger.warning("Failed to check first visit for tour %r: %s", tour_id, e)
            return MountHandle(tour_id)

        handle = MountHandle(tour_id)
        loop = self._loop or asyncio.get_running_loop()
        handle._timer = loop.call_later(self.settle_delay, self._fire, handle)
        logger.debug("auto-start of %r scheduled in %.2fs", tour_id, self.settle_delay)
        return handle

    def _fire(self, handle: MountHandle) -> None:
        handle._fired()
        tour_id = handle.tour_id
        # state may have moved on during the settle delay
        if not self.is_eligible(tour_id):
            logger.debug("auto-start of %r no longer eligible", tour_id)
            return
        logger.info("auto-starting tour %r", tour_id)
        self.controller.start(tour_id)
