"""
Core Data Models for FinTrack

These models define the schemas for all data flowing through the system:
transactions, budget categories and plans, financial goals, and the
derived status/progress views built from them.

They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the camelCase JSON the HTTP API speaks
4. Support the audit trail

DESIGN DECISION: Money is held as Decimal everywhere so that sums and
percentage shares are exact. It is written to JSON as a plain number.
Request bodies carry at most two decimal places, the scale money and
percentages are stored at.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


def new_id() -> str:
    """Generate a fresh identifier for a stored entity."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FinanceModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class GoalCategory(str, Enum):
    """What a financial goal is for."""
    SAVINGS = "SAVINGS"
    DEBT_PAYMENT = "DEBT_PAYMENT"
    PURCHASE = "PURCHASE"
    INVESTMENT = "INVESTMENT"


class GoalPriority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# Presentation-only colors a budget category can carry
CATEGORY_COLORS = ("blue", "green", "purple", "yellow", "red")


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionCreate(FinanceModel):
    """
    Request body for recording a transaction.

    The owner and the date are never taken from the caller: they are
    assigned by the server from the session and the clock.
    """

    amount: Money = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Positive amount; the direction comes from `type`"
    )
    type: TransactionType
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    description: str = Field(
        default="",
        max_length=500,
    )
    category_id: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Explicit reference to a budget category"
    )


class Transaction(FinanceModel):
    """
    A recorded income or expense.

    Immutable once created: there is no update or delete path.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    amount: Money = Field(..., gt=0)
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    category_id: Optional[str] = None
    date: datetime = Field(default_factory=utcnow)
    user_id: str = Field(..., min_length=1)

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


# =============================================================================
# BUDGETS
# =============================================================================

class BudgetCategory(FinanceModel):
    """
    A named share of the total budget.

    `spent` is derived from transactions and never stored.
    The percentages of a plan *should* sum to 100; this is reported,
    not enforced.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    limit: Money = Field(default=Decimal("0"), ge=0)
    spent: Money = Field(default=Decimal("0"), ge=0)
    color: str = Field(default="blue")
    percentage: Money = Field(default=Decimal("0"), ge=0, le=100)


class BudgetPlan(FinanceModel):
    """A user's total budget and its categories, in display order."""

    model_config = ConfigDict(validate_assignment=True)

    user_id: str = Field(..., min_length=1)
    total_budget: Money = Field(default=Decimal("0"), ge=0)
    categories: list[BudgetCategory] = Field(default_factory=list)

    @property
    def percentage_total(self) -> Decimal:
        return sum((c.percentage for c in self.categories), Decimal("0"))


class CategoryStatus(FinanceModel):
    """Spending position of one category against its limit."""

    category_id: str
    name: str
    color: str
    percentage: Money
    limit: Money
    spent: Money
    remaining: Money
    percent_used: float
    is_over_budget: bool
    overage: Money


class ValidationIssue(FinanceModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'percentage_sum')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(FinanceModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields)
    Stage 2: Semantic validation (limits, cross-checks)
    """

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")


class BudgetSummary(FinanceModel):
    """Everything the budget page shows, computed in one place."""

    total_budget: Money
    total_spent: Money
    remaining: Money
    percentage_total: Money
    categories: list[CategoryStatus] = Field(default_factory=list)
    unmatched_spending: dict[str, Money] = Field(
        default_factory=dict,
        description="Expense totals whose label matched no category"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def over_budget_categories(self) -> list[CategoryStatus]:
        return [c for c in self.categories if c.is_over_budget]


# =============================================================================
# GOALS
# =============================================================================

class FinancialGoal(FinanceModel):
    """
    A savings / payoff / purchase target.

    current_amount never exceeds target_amount after an update.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Money = Field(..., ge=0)
    current_amount: Money = Field(default=Decimal("0"), ge=0)
    deadline: date
    category: GoalCategory = GoalCategory.SAVINGS
    priority: GoalPriority = GoalPriority.MEDIUM


class GoalProgress(FinanceModel):
    goal_id: str
    percent_complete: float
    remaining: Money
    is_complete: bool


class GoalCreate(FinanceModel):
    """
    Request body for adding a goal.

    Fields are loose on purpose: missing name/target/deadline are
    reported by the goal tracker as a rejected operation.
    """

    name: str = ""
    target_amount: Optional[Money] = Field(default=None, ge=0, decimal_places=2)
    current_amount: Money = Field(default=Decimal("0"), ge=0, decimal_places=2)
    deadline: Optional[date] = None
    category: GoalCategory = GoalCategory.SAVINGS
    priority: GoalPriority = GoalPriority.MEDIUM

    @field_validator('deadline', 'target_amount', mode='before')
    @classmethod
    def blank_is_missing(cls, v):
        """HTML forms send empty strings for untouched inputs."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ContributionRequest(FinanceModel):
    amount: Money = Field(..., gt=0, decimal_places=2, description="Amount to add to the goal")


class BudgetTotalUpdate(FinanceModel):
    total: Money = Field(..., ge=0, decimal_places=2)


class PercentageUpdate(FinanceModel):
    percentage: Money = Field(..., ge=0, le=100, decimal_places=2)


class CategoryInput(FinanceModel):
    name: str = Field(..., min_length=1, max_length=100)
    limit: Money = Field(default=Decimal("0"), ge=0, decimal_places=2)


# =============================================================================
# AGGREGATES
# =============================================================================

class MonthlyTotals(FinanceModel):
    month: str = Field(..., description="Month label, M/YYYY")
    income: Money = Decimal("0")
    expenses: Money = Decimal("0")


class TransactionSummary(FinanceModel):
    """Totals the overview charts are drawn from."""

    total_income: Money = Decimal("0")
    total_expenses: Money = Decimal("0")
    net: Money = Decimal("0")
    transaction_count: int = 0
    monthly: list[MonthlyTotals] = Field(default_factory=list)
    expenses_by_category: dict[str, Money] = Field(default_factory=dict)
