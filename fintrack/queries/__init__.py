"""Transaction aggregation package."""

from fintrack.queries.aggregates import (
    expense_totals_by_category,
    month_label,
    monthly_totals,
    summarize,
)

__all__ = [
    "expense_totals_by_category",
    "month_label",
    "monthly_totals",
    "summarize",
]
