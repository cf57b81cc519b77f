"""
Landing-view buckets built from the visible event set.

Each bucket is derived independently from the full visible set, never from
another bucket. Gated buckets are suppressed unless at least
MIN_BUCKET_POPULATION events qualify; the "All events" bucket is always shown.

Registering a custom bucket::

    from discovery.services.categorizer import BucketDefinition, register_bucket

    register_bucket(BucketDefinition(
        key="free",
        label="Free entry",
        predicate=lambda event, now: event.price == 0,
        priority=35,
    ))
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from discovery.config import Settings, get_settings
from discovery.models.events import EventRecord
from discovery.models.filters import SortKey
from discovery.services.predicates import reference_time
from discovery.services.sorter import sort_events

logger = logging.getLogger(__name__)

MIN_BUCKET_POPULATION = 5
PREVIEW_LIMIT = 5

ALL_EVENTS_KEY = "all"


class Bucket(BaseModel):
    """A named category row on the landing view."""

    key: str
    label: str
    events: list[EventRecord] = Field(
        default_factory=list, description="Every qualifying event, ordered"
    )
    preview_limit: int = PREVIEW_LIMIT

    @property
    def preview(self) -> list[EventRecord]:
        """Events shown in the compact horizontal row."""
        return self.events[: self.preview_limit]

    @property
    def total(self) -> int:
        return len(self.events)

    @property
    def is_empty(self) -> bool:
        return not self.events


@dataclass
class BucketDefinition:
    """How to derive one bucket from the visible event set."""

    key: str
    """Unique identifier for this bucket (e.g., 'closest')"""

    label: str
    """Title shown above the row."""

    predicate: Callable[[EventRecord, datetime], bool]
    """Decides whether an event qualifies. Receives the event and the reference time."""

    sort_key: SortKey | None = None
    """Ordering applied inside the bucket. None keeps the visible set's order."""

    gated: bool = True
    """Whether the minimum-population gate applies."""

    priority: int = 100
    """Lower priority buckets are displayed first."""


@dataclass
class BucketRegistry:
    """Registry of bucket definitions, kept in display order."""

    _definitions: dict[str, BucketDefinition] = field(default_factory=dict)

    def register(self, definition: BucketDefinition) -> None:
        """
        Register a bucket definition.

        Raises:
            ValueError: If a bucket with the same key is already registered
        """
        if definition.key in self._definitions:
            raise ValueError(f"Bucket '{definition.key}' is already registered")
        self._definitions[definition.key] = definition
        logger.debug("Registered bucket: %s", definition.key)

    def unregister(self, key: str) -> bool:
        """Remove a bucket definition. Returns False if it was not registered."""
        if key in self._definitions:
            del self._definitions[key]
            return True
        return False

    def get(self, key: str) -> BucketDefinition | None:
        return self._definitions.get(key)

    def get_all(self) -> list[BucketDefinition]:
        """Get all definitions sorted by priority."""
        return sorted(self._definitions.values(), key=lambda d: d.priority)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key: str) -> bool:
        return key in self._definitions


def default_bucket_definitions(settings: Settings | None = None) -> list[BucketDefinition]:
    """Built-in buckets, with thresholds taken from settings."""
    if settings is None:
        settings = get_settings()

    proximity = settings.proximity_threshold
    high_points = settings.high_points_threshold
    few_places = settings.few_places_threshold
    soon_window = timedelta(hours=settings.starting_soon_hours)

    def is_close(event: EventRecord, now: datetime) -> bool:
        return event.distance is not None and event.distance < proximity

    def is_high_value(event: EventRecord, now: datetime) -> bool:
        return event.price >= high_points

    def is_starting_soon(event: EventRecord, now: datetime) -> bool:
        start = event.start_date_time
        return start is not None and now < start < now + soon_window

    def has_few_places(event: EventRecord, now: datetime) -> bool:
        places = event.free_places
        return places is not None and places <= few_places

    return [
        BucketDefinition(
            key="good_reviews",
            label="With good reviews",
            predicate=lambda event, now: True,
            sort_key=SortKey.RATING,
            priority=10,
        ),
        BucketDefinition(
            key="closest",
            label="Closest to you",
            predicate=is_close,
            priority=20,
        ),
        BucketDefinition(
            key="many_points",
            label="Many points",
            predicate=is_high_value,
            priority=30,
        ),
        BucketDefinition(
            key="starting_soon",
            label="Starting soon",
            predicate=is_starting_soon,
            sort_key=SortKey.DATE,
            priority=40,
        ),
        BucketDefinition(
            key="few_places",
            label="Few free places",
            predicate=has_few_places,
            priority=50,
        ),
        BucketDefinition(
            key=ALL_EVENTS_KEY,
            label="All events",
            predicate=lambda event, now: True,
            gated=False,
            priority=1000,
        ),
    ]


def create_default_registry(settings: Settings | None = None) -> BucketRegistry:
    """Create a registry holding the built-in buckets."""
    registry = BucketRegistry()
    for definition in default_bucket_definitions(settings):
        registry.register(definition)
    return registry


# Global registry instance
_registry: BucketRegistry | None = None


def get_bucket_registry() -> BucketRegistry:
    """Get the global bucket registry, creating it with the built-in buckets."""
    global _registry
    if _registry is None:
        _registry = create_default_registry()
    return _registry


def register_bucket(definition: BucketDefinition) -> None:
    """Convenience function to register a bucket with the global registry."""
    get_bucket_registry().register(definition)


def build_bucket(
    definition: BucketDefinition,
    events: Iterable[EventRecord],
    now: datetime,
) -> Bucket:
    """Apply a single definition to the visible event set."""
    qualifying = [event for event in events if definition.predicate(event, now)]
    if definition.sort_key is not None:
        qualifying = sort_events(qualifying, definition.sort_key)
    return Bucket(key=definition.key, label=definition.label, events=qualifying)


def build_buckets(
    events: Iterable[EventRecord],
    now: datetime | None = None,
    registry: BucketRegistry | None = None,
) -> list[Bucket]:
    """
    Group visible events into landing-view buckets.

    Args:
        events: The already filtered and sorted visible set
        now: Reference time for time-based buckets. Defaults to current UTC time
        registry: Bucket definitions to apply. Defaults to the global registry

    Returns:
        Buckets in display order. Gated buckets with fewer than
        MIN_BUCKET_POPULATION events are left out.
    """
    now = reference_time(now)
    if registry is None:
        registry = get_bucket_registry()

    visible = list(events)
    buckets: list[Bucket] = []

    for definition in registry.get_all():
        bucket = build_bucket(definition, visible, now)
        if definition.gated and bucket.total < MIN_BUCKET_POPULATION:
            logger.debug(
                "Suppressing bucket %s: %d of %d required events",
                definition.key,
                bucket.total,
                MIN_BUCKET_POPULATION,
            )
            continue
        buckets.append(bucket)

    return buckets


def all_events(events: Iterable[EventRecord], now: datetime | None = None) -> Bucket:
    """The ungated 'All events' bucket, used by the flat list and search views."""
    now = reference_time(now)
    definition = get_bucket_registry().get(ALL_EVENTS_KEY)
    if definition is None:
        return Bucket(key=ALL_EVENTS_KEY, label="All events", events=list(events))
    return build_bucket(definition, events, now)


def expand_bucket(bucket: Bucket, sort_key: SortKey | str | None = None) -> list[EventRecord]:
    """
    The 'see all' view of a bucket: every event, without the preview cap.

    When the viewer picks a sort order there, the bucket is re-sorted;
    otherwise the bucket's own order is kept.
    """
    if sort_key is None:
        return list(bucket.events)
    return sort_events(bucket.events, sort_key)
