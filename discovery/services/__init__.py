"""
Services for the event discovery engine.

Everything here works on an in-memory event snapshot handed over by the
event service. Nothing fetches or renders.

Typical flow::

    from discovery.services import EventDiscovery

    discovery = EventDiscovery()
    discovery.replace_snapshot(raw_events)
    for bucket in discovery.landing():
        print(bucket.label, [e.name for e in bucket.preview])

Available Services
------------------
- is_visible, matches_search, filter_events: per-event predicates
- sort_events: stable ordering by rating, date or points
- build_buckets, expand_bucket, BucketRegistry: landing-view categories
- SearchHistoryStore: bounded recent-search log over a key-value store
- FilterSessionState: draft/applied filter selection
- EventDiscovery: snapshot holder tying the above together
- calculate_event_points, points_to_stars: points and rating display helpers
"""

from .categorizer import (
    MIN_BUCKET_POPULATION,
    PREVIEW_LIMIT,
    Bucket,
    BucketDefinition,
    BucketRegistry,
    all_events,
    build_buckets,
    expand_bucket,
    get_bucket_registry,
    register_bucket,
)
from .filter_session import FilterSessionState, available_cities
from .pipeline import EventDiscovery, coerce_events, filter_and_sort_events
from .points import calculate_event_points, points_to_stars
from .predicates import event_duration_minutes, filter_events, is_visible, matches_search
from .search_history import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SearchHistoryStore,
    SQLiteKeyValueStore,
    create_history_store,
    push_history,
)
from .sorter import sort_events

__all__ = [
    "MIN_BUCKET_POPULATION",
    "PREVIEW_LIMIT",
    "Bucket",
    "BucketDefinition",
    "BucketRegistry",
    "all_events",
    "build_buckets",
    "expand_bucket",
    "get_bucket_registry",
    "register_bucket",
    "FilterSessionState",
    "available_cities",
    "EventDiscovery",
    "coerce_events",
    "filter_and_sort_events",
    "calculate_event_points",
    "points_to_stars",
    "event_duration_minutes",
    "filter_events",
    "is_visible",
    "matches_search",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SearchHistoryStore",
    "SQLiteKeyValueStore",
    "create_history_store",
    "push_history",
    "sort_events",
]
