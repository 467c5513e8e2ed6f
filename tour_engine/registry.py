"""Ordered, read-only catalog of tour definitions."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tour_engine.types import TourDefinition


class TourRegistry:
    def __init__(self, tours: Iterable[TourDefinition] = ()):
        self._tours: dict[str, TourDefinition] = {}
        dupes: list[str] = []
        for tour in tours:
            if tour.id in self._tours:
                dupes.append(tour.id)
            self._tours[tour.id] = tour
        if dupes:
            raise ValueError(f"Duplicate tour ids: {', '.join(dupes)}")

    def __iter__(self) -> Iterator[TourDefinition]:
        return iter(self._tours.values())

    def __len__(self) -> int:
        return len(self._tours)

    def __contains__(self, tour_id: object) -> bool:
        return tour_id in self._tours

    def get(self, tour_id: str | None) -> TourDefinition | None:
        if tour_id is None:
            return None
        return self._tours.get(tour_id)

    @property
    def ids(self) -> list[str]:
        return list(self._tours)

    def for_role(self, role: str | None) -> list[TourDefinition]:
        return [t for t in self._tours.values() if t.allows_role(role)]

    def for_page(self, page: str) -> list[TourDefinition]:
        return [t for t in self._tours.values() if t.page == page]

    def by_category(self, category: str) -> list[TourDefinition]:
        return [t for t in self._tours.values() if t.category == category]
