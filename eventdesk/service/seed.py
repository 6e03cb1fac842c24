"""Baseline events used when no remote data has ever been loaded."""
import calendar
from datetime import date, datetime, time, timedelta

from eventdesk.models import Event, EventCategory, EventStatus, RecurrencePattern


def _add_month(day: date) -> date:
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    # Clamp to the last valid day (Jan 31 -> Feb 28/29)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def baseline_events(now: datetime | None = None) -> list[Event]:
    """The fixed three-event baseline, dated relative to ``now``."""
    now = now or datetime.now()
    today = now.date()
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)
    next_month = _add_month(today)
    year = today.year

    return [
        Event(
            event_id=f"EVT-{year}-001",
            title="Sunday Morning Service",
            description="Weekly Sunday worship service with Pastor John Kamau",
            category=EventCategory.WORSHIP_SERVICE,
            location="Main Sanctuary",
            organizer="Pastor John Kamau",
            start_date=tomorrow,
            start_time=time(9, 0),
            end_time=time(11, 30),
            is_recurring=True,
            recurrence_pattern=RecurrencePattern.WEEKLY,
            max_attendees=500,
            registration_required=False,
            budget=25000,
            actual_cost=12000,
            status=EventStatus.PLANNED,
            created_at=now,
            updated_at=now,
        ),
        Event(
            event_id=f"EVT-{year}-002",
            title="Youth Bible Study",
            description="Interactive Bible study session for youth members",
            category=EventCategory.BIBLE_STUDY,
            location="Youth Hall",
            organizer="Sarah Wanjiku",
            start_date=next_week,
            start_time=time(18, 0),
            end_time=time(20, 0),
            is_recurring=True,
            recurrence_pattern=RecurrencePattern.WEEKLY,
            max_attendees=80,
            registration_required=True,
            registration_deadline=next_week,
            budget=15000,
            actual_cost=5000,
            status=EventStatus.PLANNED,
            created_at=now,
            updated_at=now,
        ),
        Event(
            event_id=f"EVT-{year}-003",
            title="Easter Celebration",
            description="Special Easter service and celebration with community feast",
            category=EventCategory.HOLIDAY_CELEBRATION,
            location="Main Sanctuary & Community Hall",
            organizer="Admin",
            start_date=next_month,
            start_time=time(7, 0),
            end_time=time(12, 0),
            max_attendees=800,
            registration_required=True,
            registration_deadline=next_month - timedelta(days=7),
            budget=150000,
            actual_cost=45000,
            status=EventStatus.PLANNED,
            created_at=now,
            updated_at=now,
        ),
    ]
