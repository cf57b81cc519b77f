"""Filter and sort selection models."""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

# Rating thresholds offered by the filter screen ("From 3", "From 4.2", "From 5")
RATING_THRESHOLDS: tuple[float, ...] = (3, 4.2, 5)


class SortKey(str, Enum):
    """Ordering applied to a filtered event list."""

    RATING = "rating"
    DATE = "date"
    POINTS = "points"

    @classmethod
    def parse(cls, value: Any) -> "SortKey | None":
        """Return the matching key, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class DurationPreset(str, Enum):
    """Named duration ranges."""

    LESS_2H = "less2h"
    MORE_3H = "more3h"
    MORE_30MIN = "more30min"


class DurationRange(BaseModel):
    """Custom duration window in minutes, inclusive on both ends."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(default=0, ge=0)
    max: float = Field(default=300, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "DurationRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class DurationFilter(BaseModel):
    """Exactly one duration mode: a preset or a custom range."""

    model_config = ConfigDict(frozen=True)

    preset: DurationPreset | None = None
    custom: DurationRange | None = None

    @model_validator(mode="after")
    def _one_mode(self) -> "DurationFilter":
        if self.preset is not None and self.custom is not None:
            raise ValueError("duration preset and custom range are mutually exclusive")
        return self

    @property
    def is_active(self) -> bool:
        return self.preset is not None or self.custom is not None


class FilterSet(BaseModel):
    """Applied filter selection. Empty fields mean no restriction."""

    model_config = ConfigDict(frozen=True)

    city: frozenset[str] = Field(default_factory=frozenset)
    rating: float | None = None
    duration: DurationFilter | None = None

    @property
    def is_empty(self) -> bool:
        """True when no facet restricts the event list."""
        return (
            not self.city
            and self.rating is None
            and (self.duration is None or not self.duration.is_active)
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FilterSet":
        """
        Build a FilterSet from the loose dict shape used by the client.

        Example:
            FilterSet.from_dict({"city": ["Brno"], "duration": {"preset": "less2h"}})

        Unknown or malformed duration facets are dropped rather than rejected, so an
        unrecognized facet degrades to "no restriction".
        """
        if not data:
            return cls()

        duration = None
        raw_duration = data.get("duration") or {}
        if not isinstance(raw_duration, Mapping):
            logger.debug("Ignoring malformed duration filter: %r", raw_duration)
            raw_duration = {}
        preset = raw_duration.get("preset")
        custom = raw_duration.get("custom")
        if custom:
            duration = DurationFilter(custom=DurationRange(**custom))
        elif preset:
            try:
                duration = DurationFilter(preset=DurationPreset(preset))
            except ValueError:
                logger.debug("Ignoring unknown duration preset: %s", preset)

        return cls(
            city=frozenset(data.get("city") or ()),
            rating=data.get("rating"),
            duration=duration,
        )
