#!/usr/bin/env python3
"""
Print event statistics and per-event budget health.

Runs one sync against the configured Event Service, falling back to the
local baseline events when the service is unavailable, then reports on
the resulting set.

Usage:
    python scripts/events_report.py [--range RANGE] [--category CATEGORY]

Options:
    --range       all, today, week, month or upcoming (default: all)
    --category    Only report events in this category
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from eventdesk.core.auth import AuthContext
from eventdesk.models import DateRange, EventCategory
from eventdesk.service.budget import budget_status
from eventdesk.service.filters import FilterCriteria
from eventdesk.service.module import EventsModule


def print_statistics(stats):
    print("Statistics")
    print(f"  Total events:      {stats.total}")
    print(f"  Upcoming / past:   {stats.upcoming} / {stats.past}")
    print(f"  This week / month: {stats.this_week} / {stats.this_month}")
    print(f"  Registrations:     {stats.total_registrations}")
    print(f"  Avg attendance:    {stats.average_attendance:.1f}%")
    print(f"  Budget / spent:    {stats.total_budget:,.2f} / {stats.total_spent:,.2f}")
    for category, count in sorted(stats.by_category.items()):
        print(f"    {category}: {count}")
    print()


def print_budgets(events):
    if not events:
        print("No events match.")
        return

    print("Budgets")
    for event in events:
        status = budget_status(event)
        used = f"{status.percent_used:.0f}%" if status.percent_used is not None else "n/a"
        flag = "  OVER BUDGET" if status.over_budget else ""
        print(f"  {event.event_id}  {event.title}")
        print(
            f"    {status.spent:,.2f} of {status.budget:,.2f} spent ({used}), "
            f"{status.remaining:,.2f} remaining{flag}"
        )


async def main(date_range: DateRange, category: str):
    """Sync once, then print the report."""
    module = EventsModule()
    try:
        outcome = await module.sync(AuthContext.service())
        if outcome.source == "remote":
            print(f"Synced {outcome.events} events from the Event Service.\n")
        else:
            print(f"Using local events ({outcome.error}).\n")

        print_statistics(module.statistics)
        criteria = FilterCriteria(category=category, date_range=date_range)
        print_budgets(module.filtered(criteria))
    finally:
        await module.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Event statistics and budget report")
    parser.add_argument(
        "--range",
        dest="date_range",
        choices=[r.value for r in DateRange],
        default=DateRange.ALL.value,
    )
    parser.add_argument(
        "--category",
        choices=["all"] + [c.value for c in EventCategory],
        default="all",
    )
    args = parser.parse_args()
    asyncio.run(main(DateRange(args.date_range), args.category))
