"""Summary statistics computed locally from the event set."""
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from uuid import UUID

from eventdesk.core.config import settings
from eventdesk.models import Event, StatsSummary
from eventdesk.service.dates import in_month, in_week, is_upcoming, local_now


def compute_statistics(
    events: list[Event],
    registration_counts: Mapping[UUID, int] | None = None,
    confirmed_counts: Mapping[UUID, int] | None = None,
    now: datetime | None = None,
    default_average_attendance: float | None = None,
) -> StatsSummary:
    """
    Summarize the active events in a single pass.

    Registration counts are passed in per event id so no per-event
    lookups are needed. Average attendance is the mean fill rate
    (confirmed / capacity, capped at 100%) over events that take
    registrations and have a capacity limit. With no such event the
    configured default is reported.
    """
    registration_counts = registration_counts or {}
    confirmed_counts = confirmed_counts or {}
    now = now or local_now()
    today = now.date()
    if default_average_attendance is None:
        default_average_attendance = settings.default_average_attendance

    stats = StatsSummary()
    by_category: Counter = Counter()
    by_status: Counter = Counter()
    fill_rates = []

    for event in events:
        if not event.is_active:
            continue
        stats.total += 1
        if is_upcoming(event, now):
            stats.upcoming += 1
        else:
            stats.past += 1
        if in_week(event, today):
            stats.this_week += 1
        if in_month(event, today):
            stats.this_month += 1
        stats.total_registrations += registration_counts.get(event.id, 0)
        stats.total_budget += event.budget
        stats.total_spent += event.actual_cost
        by_category[event.category.value] += 1
        by_status[event.status.value] += 1
        if event.registration_required and event.has_capacity_limit:
            confirmed = confirmed_counts.get(event.id, 0)
            fill_rates.append(min(confirmed / event.max_attendees, 1.0) * 100)

    if fill_rates:
        stats.average_attendance = sum(fill_rates) / len(fill_rates)
    else:
        stats.average_attendance = default_average_attendance
    stats.by_category = dict(by_category)
    stats.by_status = dict(by_status)
    return stats
