"""
Draft and applied filter/sort selections for the filter screen.

Edits go to a mutable draft. `accept()` turns the draft into an immutable
FilterSet + SortKey pair; `clear()` resets both to the defaults.
"""

import logging
from collections.abc import Iterable

from discovery.models.events import EventRecord
from discovery.models.filters import (
    DurationFilter,
    DurationPreset,
    DurationRange,
    FilterSet,
    SortKey,
)

logger = logging.getLogger(__name__)

CUSTOM_MIN_DEFAULT = 0
CUSTOM_MAX_DEFAULT = 300


def available_cities(events: Iterable[EventRecord]) -> list[str]:
    """Distinct non-empty cities offered as filter chips."""
    return sorted({event.city for event in events if event.city})


class FilterSessionState:
    """Mutable filter selection reconciled into an applied FilterSet on accept."""

    def __init__(
        self,
        filters: FilterSet | None = None,
        sort: SortKey | str = SortKey.DATE,
    ):
        self._applied_filters = filters or FilterSet()
        self._applied_sort = SortKey.parse(sort) or SortKey.DATE
        self._reset_draft()

    def _reset_draft(self) -> None:
        applied = self._applied_filters
        self.draft_cities: set[str] = set(applied.city)
        self.draft_rating: float | None = applied.rating
        self.draft_sort: SortKey = self._applied_sort

        self.draft_preset: DurationPreset | None = None
        self.custom_active = False
        self.custom_min: float = CUSTOM_MIN_DEFAULT
        self.custom_max: float = CUSTOM_MAX_DEFAULT

        duration = applied.duration
        if duration is not None and duration.custom is not None:
            self.custom_active = True
            self.custom_min = duration.custom.min
            self.custom_max = duration.custom.max
        elif duration is not None:
            self.draft_preset = duration.preset

    @property
    def applied_filters(self) -> FilterSet:
        return self._applied_filters

    @property
    def applied_sort(self) -> SortKey:
        return self._applied_sort

    @property
    def has_active_filters(self) -> bool:
        """Whether the applied filters restrict anything (drives the filter badge)."""
        return not self._applied_filters.is_empty

    # Draft edits

    def toggle_city(self, city: str) -> None:
        """Add or remove one city; other facets are untouched."""
        if city in self.draft_cities:
            self.draft_cities.remove(city)
        else:
            self.draft_cities.add(city)

    def toggle_rating(self, rating: float) -> None:
        """Select a minimum rating; selecting the current one clears it."""
        self.draft_rating = None if self.draft_rating == rating else rating

    def toggle_duration_preset(self, preset: DurationPreset | str) -> None:
        """Select a duration preset; selecting the current one clears it."""
        try:
            preset = DurationPreset(preset)
        except ValueError:
            logger.debug("Ignoring unknown duration preset: %s", preset)
            return

        if self.custom_active:
            # In-progress custom values are dropped, not merged
            self.custom_active = False
            self.custom_min = CUSTOM_MIN_DEFAULT
            self.custom_max = CUSTOM_MAX_DEFAULT
        self.draft_preset = None if self.draft_preset == preset else preset

    def toggle_custom_duration(self) -> None:
        """Switch custom range mode on or off; turning it on clears any preset."""
        if self.custom_active:
            self.custom_active = False
        else:
            self.custom_active = True
            self.draft_preset = None

    def set_custom_range(self, minimum: float, maximum: float) -> None:
        """Update the custom range, keeping min >= 0 and max >= min."""
        self.custom_min = max(minimum, 0)
        self.custom_max = max(maximum, self.custom_min)

    def set_sort(self, key: SortKey | str) -> None:
        """Pick the sort key (radio semantics). Unknown keys are ignored."""
        sort_key = SortKey.parse(key)
        if sort_key is None:
            logger.debug("Ignoring unknown sort key: %s", key)
            return
        self.draft_sort = sort_key

    # Reconciliation

    def draft_filters(self) -> FilterSet:
        """Materialize the current draft without applying it."""
        duration = None
        if self.custom_active:
            duration = DurationFilter(
                custom=DurationRange(min=self.custom_min, max=self.custom_max)
            )
        elif self.draft_preset is not None:
            duration = DurationFilter(preset=self.draft_preset)

        return FilterSet(
            city=frozenset(self.draft_cities),
            rating=self.draft_rating,
            duration=duration,
        )

    def accept(self) -> tuple[FilterSet, SortKey]:
        """Apply the draft and return the new applied filters and sort key."""
        self._applied_filters = self.draft_filters()
        self._applied_sort = self.draft_sort
        logger.debug(
            "Applied filters %s sorted by %s",
            self._applied_filters,
            self._applied_sort.value,
        )
        return self._applied_filters, self._applied_sort

    def cancel(self) -> None:
        """Throw away draft edits."""
        self._reset_draft()

    def clear(self) -> None:
        """Reset draft and applied state to no filters, sorted by date."""
        self._applied_filters = FilterSet()
        self._applied_sort = SortKey.DATE
        self._reset_draft()
