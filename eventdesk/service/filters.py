"""Search and facet filtering over an event snapshot.

All functions here are pure: they read the list they are given and
return a new list. Nothing is cached between calls.
"""
from datetime import datetime

from sqlmodel import SQLModel

from eventdesk.models import DateRange, Event
from eventdesk.service.dates import in_month, in_week, is_upcoming, local_now

ALL = "all"


class FilterCriteria(SQLModel):
    """Facets selected in the events list.

    ``"all"`` disables the category or status facet. Inactive events are
    hidden unless ``include_inactive`` is set.
    """
    search_term: str = ""
    category: str = ALL
    status: str = ALL
    date_range: DateRange = DateRange.ALL
    include_inactive: bool = False


def matches_search(event: Event, term: str) -> bool:
    """Case-insensitive substring match on title, description or organizer."""
    needle = term.strip().lower()
    if not needle:
        return True
    return any(
        needle in (value or "").lower()
        for value in (event.title, event.description, event.organizer)
    )


def matches_date_range(event: Event, date_range: DateRange, now: datetime) -> bool:
    today = now.date()
    if date_range == DateRange.TODAY:
        return event.start_date == today
    if date_range == DateRange.WEEK:
        return in_week(event, today)
    if date_range == DateRange.MONTH:
        return in_month(event, today)
    if date_range == DateRange.UPCOMING:
        return event.start_date > today
    return True


def filter_events(
    events: list[Event],
    criteria: FilterCriteria | None = None,
    now: datetime | None = None,
) -> list[Event]:
    """Apply every active filter (logical AND), keeping input order.

    The upcoming range is the one exception to ordering: its result is
    sorted by start, soonest first.
    """
    criteria = criteria or FilterCriteria()
    now = now or local_now()
    date_range = DateRange(criteria.date_range)

    result = [
        event
        for event in events
        if (criteria.include_inactive or event.is_active)
        and matches_search(event, criteria.search_term)
        and (criteria.category == ALL or event.category == criteria.category)
        and (criteria.status == ALL or event.status == criteria.status)
        and matches_date_range(event, date_range, now)
    ]

    if date_range == DateRange.UPCOMING:
        result.sort(key=lambda e: e.starts_at)
    return result


def upcoming_events(
    events: list[Event],
    now: datetime | None = None,
    limit: int | None = None,
) -> list[Event]:
    """Active events that have not started yet, soonest first."""
    now = now or local_now()
    result = sorted(
        (e for e in events if e.is_active and is_upcoming(e, now)),
        key=lambda e: e.starts_at,
    )
    return result[:limit] if limit else result
