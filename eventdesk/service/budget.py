"""Budget tracking: spend recorded against each event's allocation."""
import logging
import math
from datetime import date
from uuid import UUID

from eventdesk.core.errors import ValidationError
from eventdesk.models import BudgetStatus, Event, Expense
from eventdesk.service.dates import Clock, local_now
from eventdesk.service.store import EventStore

logger = logging.getLogger(__name__)


def budget_status(event: Event) -> BudgetStatus:
    """Spent-versus-allocated for one event.

    ``remaining`` goes negative on overspend. ``percent_used`` is None
    when no budget is allocated.
    """
    percent_used = None
    if event.budget > 0:
        percent_used = event.actual_cost / event.budget * 100
    return BudgetStatus(
        budget=event.budget,
        spent=event.actual_cost,
        remaining=event.budget - event.actual_cost,
        percent_used=percent_used,
        over_budget=event.actual_cost > event.budget,
    )


class BudgetTracker:
    """Records expenses and reports budget health.

    ``record_expense`` does not suspend between reading the event and
    committing the new cost, so two submissions for the same event on the
    event loop can never interleave or lose an update.
    """

    def __init__(self, store: EventStore, clock: Clock = local_now) -> None:
        self.store = store
        self._clock = clock

    def status(self, key: UUID | str) -> BudgetStatus:
        return budget_status(self.store.get(key))

    def record_expense(
        self,
        key: UUID | str,
        amount: float,
        description: str,
        category: str = "other",
        spent_on: date | None = None,
        receipt_url: str | None = None,
    ) -> Expense:
        """Append an expense and add ``amount`` to the event's actual cost."""
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise ValidationError("Expense amount must be greater than zero", field="amount")
        if not (description or "").strip():
            raise ValidationError("Expense description is required", field="description")

        event = self.store.get(key)
        expense = Expense(
            event_id=event.id,
            description=description.strip(),
            amount=float(amount),
            category=(category or "other").strip(),
            date=spent_on or self._clock().date(),
            receipt_url=receipt_url,
        )
        updated = self.store.append_expense(expense)
        logger.info(
            f"Recorded expense {expense.amount:.2f} for {updated.event_id}: "
            f"{updated.actual_cost:.2f} of {updated.budget:.2f} spent"
        )
        return expense

    def expenses(self, key: UUID | str) -> list[Expense]:
        return self.store.expenses(key)

    def total_expenses(self, key: UUID | str) -> float:
        return sum(expense.amount for expense in self.store.expenses(key))
