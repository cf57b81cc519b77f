"""Event models shared by the filtering, sorting and bucketing services."""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Best-effort parser for event timestamps.

    Accepts datetime objects and ISO 8601 strings (with or without 'Z').
    Naive values are taken as UTC. Returns None if the value is missing
    or cannot be parsed.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class CreatorSummary(BaseModel):
    """Summary of the user who created an event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    name: str = ""
    points_as_creator: float | None = Field(
        default=None,
        alias="pointsAsCreator",
        description="Creator rating proxy; None when the creator has no rating yet",
    )


class EventRecord(BaseModel):
    """One event from the event service snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    city: str = ""
    address: str = ""
    start_date_time: datetime | None = Field(default=None, alias="startDateTime")
    end_date_time: datetime | None = Field(default=None, alias="endDateTime")
    price: float = Field(default=0, description="Points awarded for attendance")
    creator: CreatorSummary = Field(default_factory=CreatorSummary)
    distance: float | None = Field(
        default=None, description="Distance from the viewer, when location is known"
    )
    description: str = ""
    image_url: str | None = Field(default=None, alias="imageURL")
    capacity: int | None = None
    occupied_quantity: int = Field(default=0, alias="occupiedQuantity")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # The event service hands out numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("creator", mode="before")
    @classmethod
    def _default_creator(cls, value: Any) -> Any:
        if value is None:
            return CreatorSummary()
        return value

    @field_validator("start_date_time", "end_date_time", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> datetime | None:
        parsed = parse_timestamp(value)
        if parsed is None and value not in (None, ""):
            logger.warning("Unparsable event timestamp %r, treating as missing", value)
        return parsed

    @property
    def duration_minutes(self) -> float | None:
        """Length of the event in minutes, or None when a timestamp is missing."""
        if self.start_date_time is None or self.end_date_time is None:
            return None
        return (self.end_date_time - self.start_date_time).total_seconds() / 60

    @property
    def creator_rating(self) -> float | None:
        """Shortcut for the creator's rating."""
        return self.creator.points_as_creator

    @property
    def free_places(self) -> int | None:
        """Remaining places, or None when capacity is unknown."""
        if self.capacity is None:
            return None
        return self.capacity - self.occupied_quantity
