"""Stable ordering of event lists by a single sort key."""

import logging
from collections.abc import Iterable

from discovery.models.events import EventRecord
from discovery.models.filters import SortKey

logger = logging.getLogger(__name__)


def _rating(event: EventRecord) -> float:
    rating = event.creator_rating
    return rating if rating is not None else 0


def _start(event: EventRecord) -> tuple[bool, float]:
    # Missing start times go last
    if event.start_date_time is None:
        return (True, 0.0)
    return (False, event.start_date_time.timestamp())


def sort_events(events: Iterable[EventRecord], key: SortKey | str | None) -> list[EventRecord]:
    """
    Return a new list ordered by the given key.

    - rating: highest creator rating first, unrated creators count as 0
    - date: soonest start first
    - points: highest price first

    Sorting is stable, so events with equal keys keep their input order.
    An unknown key returns the events in input order.
    """
    ordered = list(events)
    sort_key = SortKey.parse(key)

    if sort_key is None:
        logger.debug("Unknown sort key %r, keeping input order", key)
        return ordered

    if sort_key == SortKey.RATING:
        ordered.sort(key=_rating, reverse=True)
    elif sort_key == SortKey.DATE:
        ordered.sort(key=_start)
    elif sort_key == SortKey.POINTS:
        ordered.sort(key=lambda event: event.price, reverse=True)
    return ordered
