"""
Data Models Package

This package contains all Pydantic models used in FinTrack.
All data flowing through the system must conform to these schemas.
"""

from fintrack.models.finance import (
    CATEGORY_COLORS,
    BudgetCategory,
    BudgetPlan,
    BudgetSummary,
    BudgetTotalUpdate,
    CategoryInput,
    CategoryStatus,
    ContributionRequest,
    FinancialGoal,
    GoalCategory,
    GoalCreate,
    GoalPriority,
    GoalProgress,
    MonthlyTotals,
    PercentageUpdate,
    Transaction,
    TransactionCreate,
    TransactionSummary,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "CATEGORY_COLORS",
    "BudgetCategory",
    "BudgetPlan",
    "BudgetSummary",
    "BudgetTotalUpdate",
    "CategoryInput",
    "CategoryStatus",
    "ContributionRequest",
    "FinancialGoal",
    "GoalCategory",
    "GoalCreate",
    "GoalPriority",
    "GoalProgress",
    "MonthlyTotals",
    "PercentageUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionSummary",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
