"""Tests for visibility and search predicates."""

from datetime import timedelta

import pytest

from discovery.models.events import EventRecord
from discovery.models.filters import (
    DurationFilter,
    DurationPreset,
    DurationRange,
    FilterSet,
)
from discovery.services.predicates import (
    event_duration_minutes,
    filter_events,
    is_visible,
    matches_search,
)


def preset(value: DurationPreset) -> FilterSet:
    return FilterSet(duration=DurationFilter(preset=value))


def custom(minimum: float, maximum: float) -> FilterSet:
    return FilterSet(duration=DurationFilter(custom=DurationRange(min=minimum, max=maximum)))


class TestTemporalGate:
    """Past events and events missing a start or end are never visible."""

    def test_future_event_visible_without_filters(self, make_event, now):
        assert is_visible(make_event("a"), FilterSet(), now=now)
        assert is_visible(make_event("a"), None, now=now)

    def test_past_event_hidden(self, make_event, now):
        assert not is_visible(make_event("b", start=timedelta(days=-1)), FilterSet(), now=now)

    def test_start_equal_to_now_hidden(self, make_event, now):
        """The future gate is strict."""
        assert not is_visible(make_event("c", start=timedelta(0)), FilterSet(), now=now)

    def test_missing_start_hidden(self, make_event, now):
        assert not is_visible(make_event("d", start=None), FilterSet(), now=now)

    def test_malformed_start_hidden(self, now):
        event = EventRecord.model_validate(
            {"id": "e", "name": "Bad", "startDateTime": "not a date"}
        )
        assert not is_visible(event, FilterSet(), now=now)

    def test_missing_end_hidden(self, make_event, now):
        assert not is_visible(make_event("f", duration=None), FilterSet(), now=now)

    def test_malformed_end_hidden(self, now):
        event = EventRecord.model_validate(
            {
                "id": "g",
                "name": "Bad end",
                "startDateTime": (now + timedelta(days=1)).isoformat(),
                "endDateTime": "garbage",
            }
        )
        assert event.end_date_time is None
        assert not is_visible(event, FilterSet(), now=now)

    def test_naive_now_treated_as_utc(self, make_event, now):
        naive = now.replace(tzinfo=None)
        assert is_visible(make_event("h"), FilterSet(), now=naive)
        assert not is_visible(make_event("i", start=timedelta(days=-1)), FilterSet(), now=naive)
        assert len(filter_events([make_event("h")], now=naive)) == 1


class TestCityFilter:
    """City is an exact set-membership filter."""

    def test_member_passes(self, make_event, now):
        filters = FilterSet(city=frozenset({"Brno", "Praha"}))
        assert is_visible(make_event("a", city="Brno"), filters, now=now)

    def test_non_member_excluded(self, make_event, now):
        filters = FilterSet(city=frozenset({"Brno"}))
        assert not is_visible(make_event("a", city="Ostrava"), filters, now=now)

    def test_match_is_exact(self, make_event, now):
        filters = FilterSet(city=frozenset({"Brno"}))
        assert not is_visible(make_event("a", city="brno"), filters, now=now)


class TestRatingFilter:
    """Rating is an inclusive floor on the creator's rating."""

    def test_equal_rating_passes(self, make_event, now):
        assert is_visible(make_event("a", rating=4.2), FilterSet(rating=4.2), now=now)

    def test_lower_rating_excluded(self, make_event, now):
        assert not is_visible(make_event("a", rating=3.0), FilterSet(rating=4), now=now)

    def test_unknown_rating_not_penalized(self, make_event, now):
        assert is_visible(make_event("a", rating=None), FilterSet(rating=5), now=now)


class TestDurationFilter:
    """Duration presets use strict bounds, custom ranges are inclusive."""

    @pytest.mark.parametrize(
        "minutes,expected",
        [(119, True), (120, False), (30, True)],
    )
    def test_less_2h(self, make_event, now, minutes, expected):
        event = make_event("a", duration=timedelta(minutes=minutes))
        assert is_visible(event, preset(DurationPreset.LESS_2H), now=now) is expected

    @pytest.mark.parametrize(
        "minutes,expected",
        [(180, False), (181, True)],
    )
    def test_more_3h(self, make_event, now, minutes, expected):
        event = make_event("a", duration=timedelta(minutes=minutes))
        assert is_visible(event, preset(DurationPreset.MORE_3H), now=now) is expected

    @pytest.mark.parametrize(
        "minutes,expected",
        [(30, False), (31, True)],
    )
    def test_more_30min(self, make_event, now, minutes, expected):
        event = make_event("a", duration=timedelta(minutes=minutes))
        assert is_visible(event, preset(DurationPreset.MORE_30MIN), now=now) is expected

    @pytest.mark.parametrize(
        "minutes,expected",
        [(59, False), (60, True), (90, True), (120, True), (121, False)],
    )
    def test_custom_range_inclusive(self, make_event, now, minutes, expected):
        event = make_event("a", duration=timedelta(minutes=minutes))
        assert is_visible(event, custom(60, 120), now=now) is expected

    def test_negative_duration_fails_every_mode(self, make_event, now):
        event = make_event("a", duration=timedelta(minutes=-30))
        assert event_duration_minutes(event) == -30
        assert not is_visible(event, preset(DurationPreset.LESS_2H), now=now)
        assert not is_visible(event, custom(0, 300), now=now)
        # No duration mode: duration is not checked
        assert is_visible(event, FilterSet(), now=now)

    def test_missing_end_fails_duration_filter(self, make_event, now):
        event = make_event("a", duration=None)
        assert not is_visible(event, preset(DurationPreset.MORE_30MIN), now=now)
        assert not is_visible(event, custom(0, 1000), now=now)


class TestMatchesSearch:
    """Search is a case-insensitive substring match on the name."""

    def test_substring_case_insensitive(self, make_event):
        event = make_event("a", name="Riverside Cleanup")
        assert matches_search(event, "cleanup")
        assert matches_search(event, "RIVER")
        assert not matches_search(event, "concert")

    def test_blank_query_matches_everything(self, make_event):
        event = make_event("a")
        assert matches_search(event, "")
        assert matches_search(event, "   ")
        assert matches_search(event, None)

    def test_query_is_trimmed(self, make_event):
        assert matches_search(make_event("a", name="Food bank"), "  food ")

    def test_name_only_by_default(self, make_event):
        event = make_event("a", name="Tree planting", city="Brno")
        assert not matches_search(event, "brno")
        assert matches_search(event, "brno", fields=("name", "city", "address"))


class TestFilterEvents:
    """filter_events composes visibility and search with AND."""

    def test_and_composition_keeps_order(self, make_event, now):
        events = [
            make_event("1", name="Yoga in the park", city="Brno"),
            make_event("2", name="Yoga at dawn", city="Praha"),
            make_event("3", name="Book swap", city="Brno"),
            make_event("4", name="Yoga night", city="Brno", start=timedelta(hours=-2)),
        ]
        filters = FilterSet(city=frozenset({"Brno"}))
        result = filter_events(events, filters, "yoga", now=now)
        assert [e.id for e in result] == ["1"]

    def test_empty_input(self, now):
        assert filter_events([], FilterSet(), "x", now=now) == []

    def test_does_not_mutate_input(self, make_event, now):
        events = [make_event("1"), make_event("2", start=timedelta(days=-1))]
        snapshot = list(events)
        filter_events(events, FilterSet(), now=now)
        assert events == snapshot
