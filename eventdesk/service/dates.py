"""Calendar helpers for local wall-clock comparisons.

Everything here works on naive local dates and datetimes. Date-window
checks compare calendar days, never instants, so an event at 23:30 is
still "today" regardless of any timezone offset.
"""
from collections.abc import Callable
from datetime import date, datetime, timedelta

from eventdesk.models import Event

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now()


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday through Saturday containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    start = day.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month - timedelta(days=1)


def in_week(event: Event, today: date) -> bool:
    start, end = week_bounds(today)
    return start <= event.start_date <= end


def in_month(event: Event, today: date) -> bool:
    start, end = month_bounds(today)
    return start <= event.start_date <= end


def is_upcoming(event: Event, now: datetime) -> bool:
    """Countdown predicate: the event has not started yet (start >= now)."""
    return event.starts_at >= now


def time_until(event: Event, now: datetime) -> timedelta:
    """Countdown to the event start. Negative once it has started."""
    return event.starts_at - now
