"""Budget allocation package."""

from fintrack.budget.allocator import (
    DEFAULT_CATEGORIES,
    BudgetAllocator,
    BudgetError,
    BudgetRejectedError,
    CategoryNotFoundError,
    allocate,
    default_plan,
    percent_of,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "BudgetAllocator",
    "BudgetError",
    "BudgetRejectedError",
    "CategoryNotFoundError",
    "allocate",
    "default_plan",
    "percent_of",
]
