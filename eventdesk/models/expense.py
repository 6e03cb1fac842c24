"""Expense model for spend recorded against an event budget."""

import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class ExpenseCreate(SQLModel):
    description: str = ""
    amount: float
    category: str = "other"  # free-form, suggestions in EXPENSE_CATEGORIES
    date: datetime.date | None = None
    receipt_url: str | None = None


class Expense(SQLModel):
    """A committed spend record. Expenses are append-only.

    Each Expense increments its Event's ``actual_cost`` by ``amount``
    at the moment it is recorded.
    """
    id: UUID = Field(default_factory=uuid4)
    event_id: UUID
    description: str
    amount: float
    category: str = "other"
    date: datetime.date = Field(default_factory=datetime.date.today)
    receipt_url: str | None = None
