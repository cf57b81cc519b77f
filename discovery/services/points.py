"""Attendance points and star ratings."""

from datetime import UTC, datetime

BASE_POINTS = 50
EVENING_BONUS = 20
WEEKEND_BONUS = 30
SOON_BONUS = 10

EVENING_HOUR = 18
SOON_WINDOW_HOURS = 48


def calculate_event_points(start: datetime, now: datetime | None = None) -> int:
    """
    Points awarded for attending an event starting at `start`.

    Base 50, +20 for starts after 18:00, +30 on weekends and +10 when the
    event starts within the next 48 hours. Evening and weekend are judged in
    the event's own timezone.
    """
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)

    points = BASE_POINTS

    evening = start.replace(hour=EVENING_HOUR, minute=0, second=0, microsecond=0)
    if start > evening:
        points += EVENING_BONUS

    if start.weekday() >= 5:
        points += WEEKEND_BONUS

    # Whole hours, truncated toward zero
    hours_until = int((start - now).total_seconds() / 3600)
    if hours_until <= SOON_WINDOW_HOURS:
        points += SOON_BONUS

    return points


def points_to_stars(points: float | None, max_stars: int = 5) -> tuple[int, int]:
    """Split a rating into (filled, empty) star counts."""
    if points is None:
        return 0, max_stars
    filled = min(max(round(points), 0), max_stars)
    return filled, max_stars - filled
