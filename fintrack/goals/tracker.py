"""
Goal Tracker

Keeps a list of financial goals and tracks progress towards them.

RULES:
1. A goal needs a name, a non-zero target and a deadline. Anything less
   is rejected and the list is left untouched.
2. current_amount stays between 0 and target_amount: contributions are
   clamped at the target, so contributing to a finished goal changes
   nothing, and a withdrawal never takes a goal below zero.
3. The tracker does not police contribution amounts; callers validate
   amount > 0 before contributing.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from fintrack.models.finance import (
    FinancialGoal,
    GoalCategory,
    GoalPriority,
    GoalProgress,
    ValidationIssue,
)


logger = structlog.get_logger(__name__)

ZERO = Decimal("0")

# (name, target, current, deadline, category, priority)
DEMO_GOALS = (
    ("Emergency Fund", Decimal("100000"), Decimal("25000"), date(2024, 12, 31),
     GoalCategory.SAVINGS, GoalPriority.HIGH),
    ("New Car", Decimal("500000"), Decimal("75000"), date(2025, 6, 30),
     GoalCategory.PURCHASE, GoalPriority.MEDIUM),
    ("Student Loan", Decimal("200000"), Decimal("150000"), date(2024, 8, 31),
     GoalCategory.DEBT_PAYMENT, GoalPriority.HIGH),
)


class GoalError(Exception):
    """Base exception for goal operations."""
    pass


class GoalRejectedError(GoalError):
    """The goal could not be created; nothing was changed."""

    def __init__(self, message: str, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(message)


class GoalNotFoundError(GoalError):
    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__(f"Goal not found: {goal_id}")


def demo_goals() -> list[FinancialGoal]:
    return [
        FinancialGoal(
            name=name,
            target_amount=target,
            current_amount=current,
            deadline=deadline,
            category=category,
            priority=priority,
        )
        for name, target, current, deadline, category, priority in DEMO_GOALS
    ]


def goal_progress(goal: FinancialGoal) -> GoalProgress:
    """Percent complete and amount left for one goal."""
    if goal.target_amount > 0:
        percent = float(goal.current_amount / goal.target_amount * 100)
    else:
        percent = 0.0
    remaining = max(goal.target_amount - goal.current_amount, ZERO)
    return GoalProgress(
        goal_id=goal.id,
        percent_complete=percent,
        remaining=remaining,
        is_complete=goal.target_amount > 0 and goal.current_amount >= goal.target_amount,
    )


class GoalTracker:
    """Add, fund and remove goals held in memory."""

    def __init__(self, goals: Optional[Iterable[FinancialGoal]] = None):
        self._goals: list[FinancialGoal] = list(goals or [])

    @property
    def goals(self) -> list[FinancialGoal]:
        return self._goals

    def get_goal(self, goal_id: str) -> FinancialGoal:
        for goal in self._goals:
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def add_goal(
        self,
        name: Optional[str],
        target_amount: Optional[Decimal],
        deadline: Optional[date],
        current_amount: Optional[Decimal] = None,
        category: GoalCategory = GoalCategory.SAVINGS,
        priority: GoalPriority = GoalPriority.MEDIUM,
    ) -> FinancialGoal:
        """
        Append a new goal.

        Raises:
            GoalRejectedError: a required field is missing or an amount is
                out of range
        """
        issues = []
        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Goal name is required",
                severity="error",
            ))
        if target_amount is None or target_amount == 0:
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="missing",
                message="Target amount is required and must be greater than zero",
                severity="error",
            ))
        elif target_amount < 0:
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="out_of_range",
                message=f"Target amount must be greater than zero, got {target_amount}",
                severity="error",
            ))
        if current_amount is not None and current_amount < 0:
            issues.append(ValidationIssue(
                field="current_amount",
                issue_type="out_of_range",
                message=f"Current amount must be zero or more, got {current_amount}",
                severity="error",
            ))
        if not deadline:
            issues.append(ValidationIssue(
                field="deadline",
                issue_type="missing",
                message="Deadline is required",
                severity="error",
            ))
        if issues:
            raise GoalRejectedError("Goal is invalid", issues)

        target = Decimal(target_amount)
        current = Decimal(current_amount or 0)
        goal = FinancialGoal(
            name=name.strip(),
            target_amount=target,
            current_amount=min(current, target),
            deadline=deadline,
            category=category,
            priority=priority,
        )
        self._goals.append(goal)
        return goal

    def contribute(self, goal_id: str, amount: Decimal) -> FinancialGoal:
        """Add `amount` to a goal, keeping it between zero and its target."""
        goal = self.get_goal(goal_id)
        new_amount = goal.current_amount + Decimal(amount)
        new_amount = min(max(new_amount, ZERO), goal.target_amount)
        goal.current_amount = new_amount
        logger.debug(
            "goal_contribution",
            goal_id=goal_id,
            amount=str(amount),
            current_amount=str(new_amount),
        )
        return goal

    def delete_goal(self, goal_id: str) -> None:
        goal = self.get_goal(goal_id)
        self._goals.remove(goal)

    def progress(self, goal_id: str) -> GoalProgress:
        return goal_progress(self.get_goal(goal_id))

    def progress_all(self) -> list[GoalProgress]:
        return [goal_progress(goal) for goal in self._goals]
