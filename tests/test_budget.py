"""Tests for budget tracking."""

import asyncio
from datetime import date, time, timedelta
from uuid import uuid4

import pytest
from conftest import NOW, make_draft

from eventdesk.core.errors import NotFoundError, ValidationError
from eventdesk.models import Event
from eventdesk.service.budget import BudgetTracker, budget_status
from eventdesk.service.module import EventsModule
from eventdesk.service.store import EventStore


@pytest.fixture(name="tracker")
def tracker_fixture(store: EventStore, clock) -> BudgetTracker:
    return BudgetTracker(store, clock)


class TestBudgetStatus:
    """Tests for the spent-versus-allocated view."""

    def test_sunday_service(self):
        event = Event(title="Sunday Morning Service", budget=25000, actual_cost=12000,
                      start_date=date(2025, 6, 15), start_time=time(9, 0))

        status = budget_status(event)

        assert status.remaining == 13000
        assert status.percent_used == pytest.approx(48.0)
        assert status.over_budget is False

    def test_overspend(self):
        status = budget_status(Event(budget=1000, actual_cost=1250))
        assert status.remaining == -250
        assert status.over_budget is True
        assert status.percent_used == pytest.approx(125.0)

    def test_no_budget(self):
        status = budget_status(Event(budget=0, actual_cost=0))
        assert status.percent_used is None
        assert status.over_budget is False

    def test_spend_without_budget_is_over(self):
        status = budget_status(Event(budget=0, actual_cost=300))
        assert status.percent_used is None
        assert status.over_budget is True


class TestRecordExpense:
    """Tests for recording expenses."""

    def test_increments_actual_cost(self, tracker: BudgetTracker, sample_event):
        expense = tracker.record_expense(sample_event.id, 1200, "Sound system hire", "equipment")

        assert expense.date == NOW.date()
        assert expense.category == "equipment"
        assert tracker.status(sample_event.id).spent == sample_event.actual_cost + 1200
        assert tracker.total_expenses(sample_event.id) == 1200
        assert len(tracker.expenses(sample_event.id)) == 1

    def test_explicit_date(self, tracker: BudgetTracker, sample_event):
        expense = tracker.record_expense(sample_event.id, 50, "Receipt book", spent_on=date(2025, 6, 1))
        assert expense.date == date(2025, 6, 1)

    @pytest.mark.parametrize("amount", [0, -10, float("nan"), float("inf")])
    def test_rejects_bad_amounts(self, tracker: BudgetTracker, sample_event, amount):
        with pytest.raises(ValidationError):
            tracker.record_expense(sample_event.id, amount, "Bad")
        assert tracker.status(sample_event.id).spent == sample_event.actual_cost

    def test_requires_description(self, tracker: BudgetTracker, sample_event):
        with pytest.raises(ValidationError):
            tracker.record_expense(sample_event.id, 100, "  ")

    def test_unknown_event(self, tracker: BudgetTracker):
        with pytest.raises(NotFoundError):
            tracker.record_expense(uuid4(), 100, "Lost")

    def test_concurrent_expenses_are_all_counted(self, module: EventsModule, sample_event):
        async def submit():
            return await asyncio.gather(
                *(module.add_expense(sample_event.id, 100, f"Item {i}") for i in range(10))
            )

        results = asyncio.run(submit())

        assert all(r.ok for r in results)
        assert module.budget_status(sample_event.id).value.spent == sample_event.actual_cost + 1000
        assert len(module.list_expenses(sample_event.id).value) == 10

    def test_store_created_event_reports_through_module(self, module: EventsModule, store: EventStore):
        event = store.create(make_draft(budget=25000, actual_cost=12000))
        result = module.budget_status(event.event_id)
        assert result.ok
        assert result.value.remaining == 13000


class TestScenarios:
    """End-to-end budget scenarios through the events module."""

    def test_sunday_service_expense(self, module: EventsModule, auth):
        created = asyncio.run(
            module.create_event(
                auth,
                make_draft(
                    title="Sunday Service",
                    start_date=NOW.date() + timedelta(days=1),
                    start_time=time(9, 0),
                    end_time=None,
                    budget=25000,
                ),
            )
        ).value

        result = asyncio.run(module.add_expense(created.id, 12000, "Sound system", "equipment"))

        assert result.ok
        event = module.get_event(created.id).value
        assert event.actual_cost == 12000
        assert event.updated_at > created.updated_at
        status = module.budget_status(created.id).value
        assert status.remaining == 13000
        assert status.percent_used == pytest.approx(48.0)

    def test_actual_cost_equals_sum_of_expenses(self, module: EventsModule, sample_event):
        for amount in (250.5, 1000, 49.5):
            asyncio.run(module.add_expense(sample_event.id, amount, "Supplies"))

        event = module.get_event(sample_event.id).value
        total = sum(e.amount for e in module.list_expenses(sample_event.id).value)
        assert event.actual_cost == sample_event.actual_cost + total
        assert module.budget_status(sample_event.id).value.remaining == event.budget - event.actual_cost
