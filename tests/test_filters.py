"""Tests for search, facet filters and date windows."""

from datetime import date, datetime, time

import pytest
from conftest import NOW

from eventdesk.models import DateRange, Event, EventCategory, EventStatus
from eventdesk.service.dates import is_upcoming, month_bounds, time_until, week_bounds
from eventdesk.service.filters import FilterCriteria, filter_events, matches_search, upcoming_events


def _event(title, day, **kwargs):
    fields = {"start_time": time(10, 0)}
    fields.update(kwargs)
    return Event(title=title, start_date=day, **fields)


@pytest.fixture(name="events")
def events_fixture():
    return [
        _event("Youth Bible Study", date(2025, 6, 18), category=EventCategory.BIBLE_STUDY,
               organizer="Sarah Wanjiku"),
        _event("Morning Prayer", date(2025, 6, 11), start_time=time(6, 0),
               category=EventCategory.PRAYER_MEETING),
        _event("Church Picnic", date(2025, 6, 14), description="Bring a dish to share",
               status=EventStatus.CANCELLED),
        _event("Women Fellowship Breakfast", date(2025, 6, 5), category=EventCategory.WOMEN_FELLOWSHIP),
        _event("Easter Bible Study", date(2025, 7, 2), category=EventCategory.BIBLE_STUDY),
        _event("Archived Planning Meeting", date(2025, 6, 12), is_active=False),
    ]


def titles(events):
    return [e.title for e in events]


class TestDateHelpers:
    """Tests for local calendar windows."""

    def test_week_runs_sunday_to_saturday(self):
        assert week_bounds(date(2025, 6, 11)) == (date(2025, 6, 8), date(2025, 6, 14))
        assert week_bounds(date(2025, 6, 8)) == (date(2025, 6, 8), date(2025, 6, 14))
        assert week_bounds(date(2025, 6, 14)) == (date(2025, 6, 8), date(2025, 6, 14))

    def test_month_bounds(self):
        assert month_bounds(date(2025, 2, 10)) == (date(2025, 2, 1), date(2025, 2, 28))
        assert month_bounds(date(2025, 12, 31)) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_countdown(self):
        event = _event("Later", date(2025, 6, 11), start_time=time(12, 30))
        assert is_upcoming(event, NOW)
        assert time_until(event, NOW).total_seconds() == 2.5 * 3600
        assert not is_upcoming(event, datetime(2025, 6, 11, 12, 31))


class TestSearch:
    """Tests for the text search."""

    def test_case_insensitive_on_title_description_and_organizer(self, events):
        assert matches_search(events[0], "bible")
        assert matches_search(events[0], "WANJIKU")
        assert matches_search(events[2], "dish")
        assert not matches_search(events[1], "bible")

    def test_blank_term_matches_everything(self, events):
        assert all(matches_search(e, "  ") for e in events)


class TestFilterEvents:
    """Tests for combined filtering."""

    def test_no_criteria_hides_inactive_only(self, events):
        result = filter_events(events, now=NOW)
        assert "Archived Planning Meeting" not in titles(result)
        assert len(result) == 5

    def test_include_inactive(self, events):
        result = filter_events(events, FilterCriteria(include_inactive=True), now=NOW)
        assert len(result) == 6

    def test_search_and_category_combine(self, events):
        criteria = FilterCriteria(search_term="Bible", category="Bible Study")
        assert titles(filter_events(events, criteria, now=NOW)) == [
            "Youth Bible Study",
            "Easter Bible Study",
        ]

    def test_search_with_other_category_is_empty(self, events):
        criteria = FilterCriteria(search_term="Bible", category="Wedding")
        assert filter_events(events, criteria, now=NOW) == []

    def test_status_facet(self, events):
        criteria = FilterCriteria(status="Cancelled")
        assert titles(filter_events(events, criteria, now=NOW)) == ["Church Picnic"]

    def test_today(self, events):
        criteria = FilterCriteria(date_range=DateRange.TODAY)
        # Started at 06:00, still today's event
        assert titles(filter_events(events, criteria, now=NOW)) == ["Morning Prayer"]

    def test_week(self, events):
        criteria = FilterCriteria(date_range=DateRange.WEEK)
        assert titles(filter_events(events, criteria, now=NOW)) == ["Morning Prayer", "Church Picnic"]

    def test_month(self, events):
        criteria = FilterCriteria(date_range=DateRange.MONTH)
        assert titles(filter_events(events, criteria, now=NOW)) == [
            "Youth Bible Study",
            "Morning Prayer",
            "Church Picnic",
            "Women Fellowship Breakfast",
        ]

    def test_upcoming_excludes_today_and_sorts(self, events):
        criteria = FilterCriteria(date_range=DateRange.UPCOMING)
        assert titles(filter_events(events, criteria, now=NOW)) == [
            "Church Picnic",
            "Youth Bible Study",
            "Easter Bible Study",
        ]

    def test_preserves_input_order(self, events):
        reversed_events = list(reversed(events))
        result = filter_events(reversed_events, FilterCriteria(category="Bible Study"), now=NOW)
        assert titles(result) == ["Easter Bible Study", "Youth Bible Study"]

    def test_does_not_mutate_input(self, events):
        before = titles(events)
        filter_events(events, FilterCriteria(date_range=DateRange.UPCOMING), now=NOW)
        assert titles(events) == before


class TestUpcomingEvents:
    """Tests for the dashboard's upcoming list."""

    def test_sorted_active_not_started(self, events):
        result = upcoming_events(events, now=NOW)
        # Morning Prayer started at 06:00 today, the archived meeting is inactive
        assert titles(result) == ["Church Picnic", "Youth Bible Study", "Easter Bible Study"]

    def test_includes_later_today(self, events):
        events.append(_event("Evening Vespers", date(2025, 6, 11), start_time=time(18, 0)))
        assert titles(upcoming_events(events, now=NOW))[0] == "Evening Vespers"

    def test_limit(self, events):
        assert len(upcoming_events(events, now=NOW, limit=2)) == 2


class TestScenarios:
    """Filter scenarios over a mixed event set."""

    def test_category_selects_exactly_matching_event(self):
        study = _event("Midweek Study", date(2025, 6, 18), category=EventCategory.BIBLE_STUDY)
        conference = _event("Regional Conference", date(2025, 6, 19), category=EventCategory.CONFERENCE)

        result = filter_events([study, conference], FilterCriteria(category="Bible Study"), now=NOW)

        assert result == [study]

    def test_filtering_is_idempotent_and_a_subset(self, events):
        criteria = FilterCriteria(search_term="study", date_range=DateRange.MONTH)

        once = filter_events(events, criteria, now=NOW)
        twice = filter_events(once, criteria, now=NOW)

        assert once == twice
        assert all(e in events for e in once)
