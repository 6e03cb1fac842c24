from eventdesk.models.enums import (
    EXPENSE_CATEGORIES,
    DateRange,
    EventCategory,
    EventStatus,
    RecurrencePattern,
    RegistrationStatus,
)
from eventdesk.models.event import Event, EventCreate, EventUpdate, StatusChange
from eventdesk.models.expense import Expense, ExpenseCreate
from eventdesk.models.registration import RegistrantInput, Registration
from eventdesk.models.summary import BudgetStatus, StatsSummary

__all__ = [
    "EXPENSE_CATEGORIES",
    "BudgetStatus",
    "DateRange",
    "Event",
    "EventCategory",
    "EventCreate",
    "EventStatus",
    "EventUpdate",
    "Expense",
    "ExpenseCreate",
    "RecurrencePattern",
    "RegistrantInput",
    "Registration",
    "RegistrationStatus",
    "StatsSummary",
    "StatusChange",
]
