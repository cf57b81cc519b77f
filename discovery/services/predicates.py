"""
Per-event predicates for filtered and searched event views.

An event is visible when it starts in the future and passes every active
facet of a FilterSet (city, rating floor, duration). Search matching is
layered on top as a logical AND.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from discovery.models.events import EventRecord
from discovery.models.filters import DurationFilter, DurationPreset, FilterSet

# Preset bounds in minutes; all comparisons are strict
LESS_2H_MINUTES = 120
MORE_3H_MINUTES = 180
MORE_30MIN_MINUTES = 30

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("name",)


def reference_time(now: datetime | None = None) -> datetime:
    """The given reference time as an aware datetime, defaulting to now in UTC."""
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


def event_duration_minutes(event: EventRecord) -> float | None:
    """Duration of the event in minutes, or None if it cannot be computed."""
    return event.duration_minutes


def _passes_duration(event: EventRecord, duration: DurationFilter | None) -> bool:
    if duration is None or not duration.is_active:
        return True

    minutes = event_duration_minutes(event)
    if minutes is None or minutes < 0:
        return False

    if duration.custom is not None:
        return duration.custom.min <= minutes <= duration.custom.max

    if duration.preset == DurationPreset.LESS_2H:
        return minutes < LESS_2H_MINUTES
    if duration.preset == DurationPreset.MORE_3H:
        return minutes > MORE_3H_MINUTES
    if duration.preset == DurationPreset.MORE_30MIN:
        return minutes > MORE_30MIN_MINUTES
    return True


def is_visible(
    event: EventRecord,
    filters: FilterSet | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Decide whether an event survives the given filter set.

    Args:
        event: Event to check
        filters: Applied filters; None behaves like an empty FilterSet
        now: Reference time for the future-only gate. Defaults to current UTC time;
            naive values are taken as UTC

    Returns:
        True if the event has both timestamps, starts strictly after `now`
        and passes every active facet
    """
    now = reference_time(now)

    if event.start_date_time is None or event.end_date_time is None:
        return False
    if event.start_date_time <= now:
        return False

    if filters is None:
        return True

    if filters.city and event.city not in filters.city:
        return False

    # Unknown creator rating is not penalized
    rating = event.creator_rating
    if filters.rating is not None and rating is not None and rating < filters.rating:
        return False

    return _passes_duration(event, filters.duration)


def matches_search(
    event: EventRecord,
    query: str | None,
    fields: Iterable[str] = DEFAULT_SEARCH_FIELDS,
) -> bool:
    """Case-insensitive substring match of the query against event text fields."""
    if query is None:
        return True
    needle = query.strip().lower()
    if not needle:
        return True

    for field in fields:
        value = getattr(event, field, None)
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def filter_events(
    events: Iterable[EventRecord],
    filters: FilterSet | None = None,
    query: str | None = "",
    now: datetime | None = None,
    fields: Iterable[str] = DEFAULT_SEARCH_FIELDS,
) -> list[EventRecord]:
    """Keep events that are visible and match the search query, in input order."""
    now = reference_time(now)
    fields = tuple(fields)
    return [
        event
        for event in events
        if is_visible(event, filters, now=now) and matches_search(event, query, fields)
    ]
