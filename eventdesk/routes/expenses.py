"""Expense and budget routes."""
from fastapi import APIRouter, Depends

from eventdesk.models import ExpenseCreate
from eventdesk.routes.errors import unwrap
from eventdesk.service.module import EventsModule, get_events_module

router = APIRouter(prefix="/events/{event_id}", tags=["budget"])


@router.get("/expenses")
async def list_expenses(event_id: str, module: EventsModule = Depends(get_events_module)):
    expenses = unwrap(module.list_expenses(event_id))
    return {"success": True, "data": [e.model_dump(mode="json") for e in expenses]}


@router.post("/expenses", status_code=201)
async def add_expense(
    event_id: str,
    expense: ExpenseCreate,
    module: EventsModule = Depends(get_events_module),
):
    """Record an expense; the event's actual cost grows by its amount."""
    created = unwrap(
        await module.add_expense(
            event_id,
            expense.amount,
            expense.description,
            expense.category,
            expense.date,
            expense.receipt_url,
        )
    )
    return {"success": True, "data": created.model_dump(mode="json")}


@router.get("/budget")
async def budget(event_id: str, module: EventsModule = Depends(get_events_module)):
    """Spent versus allocated. ``percent_used`` is null when no budget is set."""
    status = unwrap(module.budget_status(event_id))
    return {"success": True, "data": status.model_dump(mode="json")}
