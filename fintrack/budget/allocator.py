"""
Budget Allocator

Splits a total budget across named categories by percentage share and
measures spending against the resulting limits.

DESIGN DECISION: The allocator is a plain in-memory object that mutates
a BudgetPlan. It knows nothing about HTTP or storage; the budget flow
loads a plan, runs one operation here and saves the plan back.

RULES:
1. Changing the total recomputes every limit, unconditionally.
2. Changing one percentage recomputes every limit ONLY when the
   percentages then sum to exactly 100. Otherwise limits stay as they
   were and a warning issue says so.
3. Limits are whole amounts: round(total * percentage / 100), half-up.
4. Spending is matched by category id when the transaction carries one,
   by exact category name otherwise. Labels that match nothing are
   returned, never silently dropped.
"""

import random
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

import structlog

from fintrack.models.finance import (
    CATEGORY_COLORS,
    BudgetCategory,
    BudgetPlan,
    BudgetSummary,
    CategoryStatus,
    Transaction,
    ValidationIssue,
)


logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")
ZERO = Decimal("0")
CENT = Decimal("0.01")

# (name, percentage, color) of the plan every new user starts with
DEFAULT_CATEGORIES = (
    ("Food & Dining", Decimal("25"), "blue"),
    ("Transportation", Decimal("15"), "green"),
    ("Entertainment", Decimal("10"), "purple"),
    ("Shopping", Decimal("20"), "yellow"),
    ("Bills & Utilities", Decimal("30"), "red"),
)


class BudgetError(Exception):
    """Base exception for budget operations."""
    pass


class BudgetRejectedError(BudgetError):
    """The operation was refused; nothing was changed."""

    def __init__(self, message: str, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(message)


class CategoryNotFoundError(BudgetError):
    """No category with the given id exists in the plan."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Budget category not found: {category_id}")


def allocate(total: Decimal, percentage: Decimal) -> Decimal:
    """Monetary limit for a percentage share of `total`, rounded half-up."""
    share = Decimal(total) * Decimal(percentage) / HUNDRED
    return share.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def percent_of(part: Decimal, whole: Decimal) -> float:
    """part / whole * 100, or 0.0 when whole is zero."""
    if whole <= 0:
        return 0.0
    return float(Decimal(part) / Decimal(whole) * HUNDRED)


def default_plan(user_id: str, total_budget: Decimal = Decimal("20000")) -> BudgetPlan:
    """Build the starter plan for a user with no stored budget."""
    categories = [
        BudgetCategory(
            name=name,
            percentage=percentage,
            color=color,
            limit=allocate(total_budget, percentage),
        )
        for name, percentage, color in DEFAULT_CATEGORIES
    ]
    return BudgetPlan(
        user_id=user_id,
        total_budget=total_budget,
        categories=categories,
    )


class BudgetAllocator:
    """
    Operations over one user's BudgetPlan.

    The plan passed in is mutated in place and also available
    as `allocator.plan`.
    """

    def __init__(
        self,
        plan: BudgetPlan,
        rng: Optional[random.Random] = None,
    ):
        self._plan = plan
        self._rng = rng or random.Random()
        self._unmatched: dict[str, Decimal] = {}

    @property
    def plan(self) -> BudgetPlan:
        return self._plan

    @property
    def categories(self) -> list[BudgetCategory]:
        return self._plan.categories

    @property
    def unmatched_spending(self) -> dict[str, Decimal]:
        return dict(self._unmatched)

    def get_category(self, category_id: str) -> BudgetCategory:
        for category in self._plan.categories:
            if category.id == category_id:
                return category
        raise CategoryNotFoundError(category_id)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def _redistribute(self) -> None:
        total = self._plan.total_budget
        for category in self._plan.categories:
            category.limit = allocate(total, category.percentage)

    def set_total_budget(self, total: Decimal) -> None:
        """Store a new total and recompute every category's limit from it."""
        total = Decimal(total)
        if total < 0:
            raise BudgetRejectedError(
                "Total budget cannot be negative",
                [ValidationIssue(
                    field="total",
                    issue_type="invalid_value",
                    message=f"Total budget must be zero or more, got {total}",
                    severity="error",
                )],
            )
        self._plan.total_budget = total
        self._redistribute()
        logger.debug("budget_total_set", total=str(total), categories=len(self.categories))

    def set_category_percentage(
        self,
        category_id: str,
        new_percentage: Decimal,
    ) -> list[ValidationIssue]:
        """
        Update one category's percentage.

        The new share is rounded half-up to two places. Limits are
        recomputed for all categories only when the percentages now sum
        to exactly 100. Returns the percentage-sum issues (empty when the
        plan is consistent).
        """
        new_percentage = Decimal(new_percentage).quantize(CENT, rounding=ROUND_HALF_UP)
        if new_percentage < 0 or new_percentage > HUNDRED:
            raise BudgetRejectedError(
                "Percentage must be between 0 and 100",
                [ValidationIssue(
                    field="percentage",
                    issue_type="out_of_range",
                    message=f"Percentage must be between 0 and 100, got {new_percentage}",
                    severity="error",
                )],
            )

        category = self.get_category(category_id)
        category.percentage = new_percentage

        if self._plan.percentage_total == HUNDRED:
            self._redistribute()
            return []

        logger.debug(
            "budget_limits_left_stale",
            category_id=category_id,
            percentage_total=str(self._plan.percentage_total),
        )
        return self.validate_percentages()

    def validate_percentages(self) -> list[ValidationIssue]:
        """Report when the category shares do not add up to the whole budget."""
        total = self._plan.percentage_total
        if total == HUNDRED:
            return []
        return [ValidationIssue(
            field="percentage",
            issue_type="percentage_sum",
            message=(
                f"Category percentages sum to {total}, not 100; "
                "limits were not recomputed"
            ),
            severity="warning",
            suggested_fix="Adjust the shares so they add up to 100",
        )]

    # ------------------------------------------------------------------
    # Spending
    # ------------------------------------------------------------------

    def record_spending(self, transactions: Iterable[Transaction]) -> dict[str, Decimal]:
        """
        Recompute every category's `spent` from the given transactions.

        Only EXPENSE transactions count. Returns expense totals per label
        for transactions that matched no category.
        """
        by_id = {c.id: c for c in self._plan.categories}
        by_name = {c.name: c for c in self._plan.categories}
        spent: dict[str, Decimal] = defaultdict(Decimal)
        unmatched: dict[str, Decimal] = defaultdict(Decimal)

        for transaction in transactions:
            if not transaction.is_expense:
                continue
            category = None
            if transaction.category_id:
                category = by_id.get(transaction.category_id)
            if category is None:
                category = by_name.get(transaction.category)
            if category is None:
                unmatched[transaction.category] += transaction.amount
            else:
                spent[category.id] += transaction.amount

        for category in self._plan.categories:
            category.spent = spent.get(category.id, ZERO)

        self._unmatched = dict(unmatched)
        if self._unmatched:
            logger.debug("unmatched_spending", labels=sorted(self._unmatched))
        return self.unmatched_spending

    # ------------------------------------------------------------------
    # Category CRUD
    # ------------------------------------------------------------------

    def _check_category_input(self, name: str, limit: Decimal) -> None:
        issues = []
        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Category name is required",
                severity="error",
            ))
        if limit < 0:
            issues.append(ValidationIssue(
                field="limit",
                issue_type="invalid_value",
                message=f"Limit must be zero or more, got {limit}",
                severity="error",
            ))
        if issues:
            raise BudgetRejectedError("Invalid budget category", issues)

    def add_category(self, name: str, limit: Decimal) -> BudgetCategory:
        """Append a category with no share of the total and a random palette color."""
        limit = Decimal(limit)
        self._check_category_input(name, limit)
        category = BudgetCategory(
            name=name.strip(),
            limit=limit,
            spent=ZERO,
            percentage=ZERO,
            color=self._rng.choice(CATEGORY_COLORS),
        )
        self._plan.categories.append(category)
        return category

    def edit_category(self, category_id: str, name: str, limit: Decimal) -> BudgetCategory:
        limit = Decimal(limit)
        self._check_category_input(name, limit)
        category = self.get_category(category_id)
        category.name = name.strip()
        category.limit = limit
        return category

    def delete_category(self, category_id: str) -> None:
        category = self.get_category(category_id)
        self._plan.categories.remove(category)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @staticmethod
    def category_status(category: BudgetCategory) -> CategoryStatus:
        """Position of one category against its limit."""
        over = category.spent > category.limit
        return CategoryStatus(
            category_id=category.id,
            name=category.name,
            color=category.color,
            percentage=category.percentage,
            limit=category.limit,
            spent=category.spent,
            remaining=category.limit - category.spent,
            percent_used=percent_of(category.spent, category.limit),
            is_over_budget=over,
            overage=category.spent - category.limit if over else ZERO,
        )

    def summary(self) -> BudgetSummary:
        total_spent = sum((c.spent for c in self._plan.categories), ZERO)
        return BudgetSummary(
            total_budget=self._plan.total_budget,
            total_spent=total_spent,
            remaining=self._plan.total_budget - total_spent,
            percentage_total=self._plan.percentage_total,
            categories=[self.category_status(c) for c in self._plan.categories],
            unmatched_spending=self.unmatched_spending,
            issues=self.validate_percentages(),
        )
