"""Fixed enumerations shared by the events core and its Event Service."""

from enum import Enum


class EventCategory(str, Enum):
    WORSHIP_SERVICE = "Worship Service"
    PRAYER_MEETING = "Prayer Meeting"
    BIBLE_STUDY = "Bible Study"
    YOUTH_MEETING = "Youth Meeting"
    WOMEN_FELLOWSHIP = "Women Fellowship"
    MEN_FELLOWSHIP = "Men Fellowship"
    CHILDREN_MINISTRY = "Children Ministry"
    CONFERENCE = "Conference"
    SEMINAR = "Seminar"
    WORKSHOP = "Workshop"
    OUTREACH = "Outreach"
    COMMUNITY_SERVICE = "Community Service"
    WEDDING = "Wedding"
    BAPTISM = "Baptism"
    FUNERAL = "Funeral"
    SPECIAL_EVENT = "Special Event"
    HOLIDAY_CELEBRATION = "Holiday Celebration"
    FUNDRAISING = "Fundraising"


class EventStatus(str, Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class RegistrationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class DateRange(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    UPCOMING = "upcoming"


# Suggestions offered when recording an expense; any string is accepted.
EXPENSE_CATEGORIES = (
    "catering",
    "equipment",
    "decorations",
    "transportation",
    "materials",
    "services",
    "other",
)
