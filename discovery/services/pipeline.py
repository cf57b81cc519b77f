"""
Discovery pipeline: snapshot -> filter -> search -> sort -> buckets.

The pipeline holds the latest event snapshot, the filter session and the
search history. Every read is a pure computation over the snapshot; only
`submit_search` writes anything (the history log).
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from discovery.models.events import EventRecord
from discovery.models.filters import FilterSet, SortKey
from discovery.services.categorizer import Bucket, build_buckets
from discovery.services.filter_session import FilterSessionState
from discovery.services.predicates import filter_events, reference_time
from discovery.services.search_history import (
    InMemoryKeyValueStore,
    SearchHistoryStore,
)
from discovery.services.sorter import sort_events

logger = logging.getLogger(__name__)


def filter_and_sort_events(
    events: Iterable[EventRecord],
    filters: FilterSet | None = None,
    sort_key: SortKey | str | None = SortKey.DATE,
    query: str | None = "",
    now: datetime | None = None,
) -> list[EventRecord]:
    """Visible events matching the query, ordered by `sort_key`."""
    return sort_events(filter_events(events, filters, query, now=now), sort_key)


def coerce_events(raw_events: Iterable[EventRecord | Mapping[str, Any]]) -> list[EventRecord]:
    """
    Convert event service payloads into EventRecords.

    Records that fail validation are skipped and logged.
    """
    events: list[EventRecord] = []
    skipped = 0

    for raw in raw_events:
        if isinstance(raw, EventRecord):
            events.append(raw)
            continue
        try:
            events.append(EventRecord.model_validate(raw))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed event %r: %d validation error(s)",
                raw.get("id") if isinstance(raw, Mapping) else raw,
                e.error_count(),
            )

    if skipped:
        logger.info("Loaded %d events, skipped %d malformed", len(events), skipped)
    return events


class EventDiscovery:
    """
    Event discovery state for one browsing screen.

    Usage:
        discovery = EventDiscovery()
        discovery.replace_snapshot(fetch_events())
        discovery.session.toggle_city("Brno")
        discovery.session.accept()
        rows = discovery.landing()
        results = discovery.filtered("yoga")
    """

    def __init__(
        self,
        session: FilterSessionState | None = None,
        history: SearchHistoryStore | None = None,
    ):
        self.session = session or FilterSessionState()
        self.history = history or SearchHistoryStore(InMemoryKeyValueStore())
        self._events: tuple[EventRecord, ...] = ()

    @property
    def events(self) -> tuple[EventRecord, ...]:
        """The current snapshot."""
        return self._events

    def replace_snapshot(
        self, raw_events: Iterable[EventRecord | Mapping[str, Any]]
    ) -> int:
        """
        Replace the snapshot with a fresh fetch.

        Returns:
            Number of events in the new snapshot
        """
        self._events = tuple(coerce_events(raw_events))
        logger.debug("Snapshot replaced with %d events", len(self._events))
        return len(self._events)

    def filtered(self, query: str | None = "", now: datetime | None = None) -> list[EventRecord]:
        """Flat list under the applied filters and sort key, narrowed by `query`."""
        return filter_and_sort_events(
            self._events,
            self.session.applied_filters,
            self.session.applied_sort,
            query,
            now=now,
        )

    def landing(self, now: datetime | None = None) -> list[Bucket]:
        """Landing-view buckets over the filtered snapshot."""
        now = reference_time(now)
        return build_buckets(self.filtered(now=now), now=now)

    def submit_search(self, query: str) -> list[str]:
        """Record a confirmed search term and return the updated history."""
        return self.history.record(query)

    def suggestions(self, query: str | None) -> list[str]:
        return self.history.suggestions(query)

    def select(self, event_id: str) -> EventRecord | None:
        """Find an event in the current snapshot by id."""
        for event in self._events:
            if event.id == event_id:
                return event
        return None
