"""Derived read models: statistics and budget health.

These are recomputed from the live event set on demand and never stored
alongside it.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class StatsSummary(BaseModel):
    """Summary metrics over the current event set.

    Accepts the Event Service's camelCase payload (``thisWeek``,
    ``totalRegistrations``...) as well as snake_case. Fields the service
    omits fall back to zero.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    upcoming: int = 0
    past: int = 0
    this_week: int = 0
    this_month: int = 0
    total_registrations: int = 0
    average_attendance: float = 0.0
    total_budget: float = 0.0
    total_spent: float = 0.0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)

    @field_validator("by_category", "by_status", mode="before")
    @classmethod
    def _rows_to_counts(cls, value):
        # The service returns GROUP BY rows: [{"category": "...", "count": 3}]
        if isinstance(value, list):
            counts = {}
            for row in value:
                if not isinstance(row, dict):
                    continue
                key = row.get("category") or row.get("status")
                if key is not None:
                    counts[key] = int(row.get("count", 0))
            return counts
        return value or {}


class BudgetStatus(BaseModel):
    budget: float
    spent: float
    remaining: float
    percent_used: float | None  # None when no budget is allocated
    over_budget: bool
