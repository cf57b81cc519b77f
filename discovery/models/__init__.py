"""Data models for the event discovery engine."""

from .events import CreatorSummary, EventRecord, parse_timestamp
from .filters import (
    RATING_THRESHOLDS,
    DurationFilter,
    DurationPreset,
    DurationRange,
    FilterSet,
    SortKey,
)

__all__ = [
    "CreatorSummary",
    "DurationFilter",
    "DurationPreset",
    "DurationRange",
    "EventRecord",
    "FilterSet",
    "RATING_THRESHOLDS",
    "SortKey",
    "parse_timestamp",
]
