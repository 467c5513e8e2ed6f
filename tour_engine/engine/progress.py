"""Completion progress read model."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

from tour_engine.types import CATEGORIES, CategoryProgress, TourProgress

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tour_engine.registry import TourRegistry


def compute_progress(registry: TourRegistry, completed_tour_ids: Iterable[str]) -> TourProgress:
    completed_ids = set(completed_tour_ids)
    totals = dict.fromkeys(CATEGORIES, 0)
    done = dict.fromkeys(CATEGORIES, 0)
    total_tours = 0
    completed = 0

    for tour in registry:
        total_tours += 1
        is_done = tour.id in completed_ids
        completed += is_done
        # tours with an unrecognised category still count towards the overall total
        if tour.category in totals:
            totals[tour.category] += 1
            done[tour.category] += is_done

    return TourProgress(
        total_tours=total_tours,
        completed_tours=completed,
        percentage=_percent(completed, total_tours),
        by_category={c: CategoryProgress(total=totals[c], completed=done[c]) for c in CATEGORIES},
    )


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    # half-up, not banker's rounding
    return math.floor(100 * part / whole + 0.5)
