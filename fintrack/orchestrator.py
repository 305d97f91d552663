"""
Main Orchestrator for FinTrack

This module ties together storage, the budget allocator, the goal tracker
and the audit log, and defines the end-to-end flows for:
1. Transactions (validate -> stamp owner and date -> persist)
2. Budget (load plan -> apply one allocator operation -> save -> report)
3. Goals (load goals -> apply one tracker operation -> save)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The owner of every record is the authenticated caller, never the body
- Budgets and goals are loaded, changed and saved as a whole per call
- Every change and every rejection is audited

Storage errors are not caught here; they propagate to the HTTP layer,
which reports them as a server error.
"""

import random
from datetime import datetime
from decimal import Decimal
from typing import Callable, NamedTuple, Optional
from uuid import UUID

import structlog

from fintrack.audit import AuditLogger, create_correlation_id
from fintrack.budget import DEFAULT_CATEGORIES, BudgetAllocator, BudgetRejectedError, default_plan
from fintrack.config import get_settings
from fintrack.goals import GoalRejectedError, GoalTracker, demo_goals, goal_progress
from fintrack.models.audit import AuditEventType
from fintrack.models.finance import (
    BudgetCategory,
    BudgetPlan,
    BudgetSummary,
    FinancialGoal,
    GoalCreate,
    GoalProgress,
    Transaction,
    TransactionSummary,
    utcnow,
)
from fintrack.queries import summarize
from fintrack.services.storage import (
    BudgetStorageInterface,
    Database,
    GoalStorageInterface,
    SqlAuditStorage,
    SqlBudgetStorage,
    SqlGoalStorage,
    SqlTransactionStorage,
    TransactionStorageInterface,
)
from fintrack.validation import RequestRejectedError, TransactionValidator


logger = structlog.get_logger(__name__)


class BudgetFlow:
    """
    Orchestrates budget changes for one user at a time.

    A user who never saved a budget gets the default plan, saved on
    first use so its category ids stay stable.
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        transaction_storage: TransactionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        default_total: Optional[Decimal] = None,
        rng: Optional[random.Random] = None,
    ):
        self._budget_storage = budget_storage
        self._transaction_storage = transaction_storage
        self._audit_logger = audit_logger or AuditLogger()
        if default_total is None:
            default_total = get_settings().budget.default_total_budget
        self._default_total = Decimal(default_total)
        self._rng = rng

    def load_plan(self, user_id: str) -> BudgetPlan:
        """The stored plan, or the default plan saved for the user on first use."""
        plan = self._budget_storage.get_plan(user_id)
        if plan is None:
            plan = default_plan(user_id, self._default_total)
            self._budget_storage.save_plan(plan)
            logger.info("default_budget_created", user_id=user_id, total=str(self._default_total))
        return plan

    def category_names(self, user_id: str) -> set[str]:
        """Names of the user's budget categories. Never writes."""
        plan = self._budget_storage.get_plan(user_id)
        if plan is None:
            return {name for name, _, _ in DEFAULT_CATEGORIES}
        return {c.name for c in plan.categories}

    def _allocator(self, user_id: str) -> BudgetAllocator:
        return BudgetAllocator(self.load_plan(user_id), rng=self._rng)

    def _summarize(self, allocator: BudgetAllocator) -> BudgetSummary:
        transactions = self._transaction_storage.list_transactions(allocator.plan.user_id)
        allocator.record_spending(transactions)
        return allocator.summary()

    def _rejected(
        self,
        user_id: str,
        operation: str,
        error: BudgetRejectedError,
        correlation_id: Optional[UUID],
    ) -> None:
        self._audit_logger.log_rejected(
            user_id=user_id,
            operation=operation,
            issues=error.issues,
            correlation_id=correlation_id,
        )

    def summary(self, user_id: str) -> BudgetSummary:
        """Budget, limits and spending to date."""
        return self._summarize(self._allocator(user_id))

    def set_total(
        self,
        user_id: str,
        total: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetSummary:
        allocator = self._allocator(user_id)
        try:
            allocator.set_total_budget(total)
        except BudgetRejectedError as e:
            self._rejected(user_id, "set_total_budget", e, correlation_id)
            raise

        self._budget_storage.save_plan(allocator.plan)
        self._audit_logger.log_budget_change(
            event_type=AuditEventType.BUDGET_TOTAL_SET,
            user_id=user_id,
            description=f"Total budget set to {total}",
            details={"total": str(total)},
            correlation_id=correlation_id,
        )
        return self._summarize(allocator)

    def set_percentage(
        self,
        user_id: str,
        category_id: str,
        percentage: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetSummary:
        """
        Change one category's share.

        The returned summary carries a warning issue when the shares no
        longer sum to 100 (limits are then left as they were).
        """
        allocator = self._allocator(user_id)
        try:
            issues = allocator.set_category_percentage(category_id, percentage)
        except BudgetRejectedError as e:
            self._rejected(user_id, "set_category_percentage", e, correlation_id)
            raise

        self._budget_storage.save_plan(allocator.plan)
        self._audit_logger.log_budget_change(
            event_type=AuditEventType.BUDGET_PERCENTAGE_SET,
            user_id=user_id,
            category_id=category_id,
            description=f"Category share set to {percentage}%",
            details={
                "percentage": str(percentage),
                "limits_recomputed": not issues,
                "percentage_total": str(allocator.plan.percentage_total),
            },
            correlation_id=correlation_id,
        )
        return self._summarize(allocator)

    def add_category(
        self,
        user_id: str,
        name: str,
        limit: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetCategory:
        allocator = self._allocator(user_id)
        try:
            category = allocator.add_category(name, limit)
        except BudgetRejectedError as e:
            self._rejected(user_id, "add_category", e, correlation_id)
            raise

        self._budget_storage.save_plan(allocator.plan)
        self._audit_logger.log_budget_change(
            event_type=AuditEventType.BUDGET_CATEGORY_ADDED,
            user_id=user_id,
            category_id=category.id,
            description=f"Budget category added: {category.name}",
            details={"name": category.name, "limit": str(category.limit)},
            correlation_id=correlation_id,
        )
        return category

    def edit_category(
        self,
        user_id: str,
        category_id: str,
        name: str,
        limit: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetCategory:
        allocator = self._allocator(user_id)
        try:
            category = allocator.edit_category(category_id, name, limit)
        except BudgetRejectedError as e:
            self._rejected(user_id, "edit_category", e, correlation_id)
            raise

        self._budget_storage.save_plan(allocator.plan)
        self._audit_logger.log_budget_change(
            event_type=AuditEventType.BUDGET_CATEGORY_EDITED,
            user_id=user_id,
            category_id=category_id,
            description=f"Budget category edited: {category.name}",
            details={"name": category.name, "limit": str(category.limit)},
            correlation_id=correlation_id,
        )
        return category

    def delete_category(
        self,
        user_id: str,
        category_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        allocator = self._allocator(user_id)
        allocator.delete_category(category_id)
        self._budget_storage.save_plan(allocator.plan)
        self._audit_logger.log_budget_change(
            event_type=AuditEventType.BUDGET_CATEGORY_DELETED,
            user_id=user_id,
            category_id=category_id,
            description="Budget category deleted",
            correlation_id=correlation_id,
        )


class TransactionFlow:
    """
    Orchestrates recording and listing transactions.

    Flow (create):
    1. Validate the body (schema, then semantics)
    2. Stamp owner = caller, date = now
    3. Persist in one call
    4. Audit
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
        budget_flow: Optional[BudgetFlow] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._storage = transaction_storage
        self._validator = validator or TransactionValidator()
        self._budget_flow = budget_flow
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock

    def _known_categories(self, user_id: str) -> Optional[set[str]]:
        if self._budget_flow is None:
            return None
        return self._budget_flow.category_names(user_id)

    def create(
        self,
        user_id: str,
        payload: dict,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Transaction, list]:
        """
        Record a transaction for `user_id`.

        Returns:
            (stored transaction, non-blocking issues)

        Raises:
            RequestRejectedError: the body failed validation
            StorageError: the write failed
        """
        correlation_id = correlation_id or create_correlation_id()

        request, result = self._validator.validate(payload, self._known_categories(user_id))
        if request is None or result.has_errors:
            self._audit_logger.log_rejected(
                user_id=user_id,
                operation="create_transaction",
                issues=result.issues,
                correlation_id=correlation_id,
            )
            raise RequestRejectedError("Transaction is invalid", result.issues)

        transaction = Transaction(
            amount=request.amount,
            type=request.type,
            category=request.category,
            category_id=request.category_id,
            description=request.description,
            date=self._clock(),
            user_id=user_id,
        )
        stored = self._storage.create_transaction(transaction)

        self._audit_logger.log_transaction_created(
            user_id=user_id,
            transaction_id=stored.id,
            transaction_type=stored.type.value,
            category=stored.category,
            amount=str(stored.amount),
            correlation_id=correlation_id,
        )
        return stored, result.issues

    def list(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """The caller's transactions, newest first."""
        transactions = self._storage.list_transactions(user_id)
        self._audit_logger.log_transactions_listed(
            user_id=user_id,
            result_count=len(transactions),
            correlation_id=correlation_id,
        )
        return transactions

    def summary(self, user_id: str) -> TransactionSummary:
        return summarize(self._storage.list_transactions(user_id))


class GoalFlow:
    """
    Orchestrates goal changes for one user at a time.

    A user who never saved goals gets the demo goals (when enabled),
    saved on first use.
    """

    def __init__(
        self,
        goal_storage: GoalStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        seed_demo_goals: Optional[bool] = None,
    ):
        self._storage = goal_storage
        self._audit_logger = audit_logger or AuditLogger()
        if seed_demo_goals is None:
            seed_demo_goals = get_settings().budget.seed_demo_goals
        self._seed_demo_goals = seed_demo_goals

    def _tracker(self, user_id: str) -> GoalTracker:
        goals = self._storage.get_goals(user_id)
        if goals is None:
            goals = demo_goals() if self._seed_demo_goals else []
            self._storage.save_goals(user_id, goals)
            logger.info("goals_seeded", user_id=user_id, count=len(goals))
        return GoalTracker(goals)

    def list_goals(self, user_id: str) -> list[tuple[FinancialGoal, GoalProgress]]:
        tracker = self._tracker(user_id)
        return [(goal, goal_progress(goal)) for goal in tracker.goals]

    def add_goal(
        self,
        user_id: str,
        request: GoalCreate,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialGoal:
        tracker = self._tracker(user_id)
        try:
            goal = tracker.add_goal(
                name=request.name,
                target_amount=request.target_amount,
                deadline=request.deadline,
                current_amount=request.current_amount,
                category=request.category,
                priority=request.priority,
            )
        except GoalRejectedError as e:
            self._audit_logger.log_rejected(
                user_id=user_id,
                operation="add_goal",
                issues=e.issues,
                correlation_id=correlation_id,
            )
            raise

        self._storage.save_goals(user_id, tracker.goals)
        self._audit_logger.log_goal_change(
            event_type=AuditEventType.GOAL_ADDED,
            user_id=user_id,
            goal_id=goal.id,
            description=f"Goal added: {goal.name}",
            details={"target_amount": str(goal.target_amount)},
            correlation_id=correlation_id,
        )
        return goal

    def contribute(
        self,
        user_id: str,
        goal_id: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[FinancialGoal, GoalProgress]:
        """Add `amount` (already validated > 0) towards a goal."""
        tracker = self._tracker(user_id)
        goal = tracker.contribute(goal_id, amount)
        self._storage.save_goals(user_id, tracker.goals)
        self._audit_logger.log_goal_change(
            event_type=AuditEventType.GOAL_CONTRIBUTION,
            user_id=user_id,
            goal_id=goal_id,
            description=f"Contribution of {amount} to {goal.name}",
            details={
                "amount": str(amount),
                "current_amount": str(goal.current_amount),
            },
            correlation_id=correlation_id,
        )
        return goal, goal_progress(goal)

    def delete_goal(
        self,
        user_id: str,
        goal_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        tracker = self._tracker(user_id)
        tracker.delete_goal(goal_id)
        self._storage.save_goals(user_id, tracker.goals)
        self._audit_logger.log_goal_change(
            event_type=AuditEventType.GOAL_DELETED,
            user_id=user_id,
            goal_id=goal_id,
            description="Goal deleted",
            correlation_id=correlation_id,
        )


class AppComponents(NamedTuple):
    database: Database
    audit_logger: AuditLogger
    transaction_flow: TransactionFlow
    budget_flow: BudgetFlow
    goal_flow: GoalFlow


def create_app_components(
    database: Database,
    clock: Callable[[], datetime] = utcnow,
) -> AppComponents:
    """
    Factory function to create all application components on one database.

    The database must already be connected (tables created).
    """
    audit_logger = AuditLogger(SqlAuditStorage(database))
    transaction_storage = SqlTransactionStorage(database)

    budget_flow = BudgetFlow(
        budget_storage=SqlBudgetStorage(database),
        transaction_storage=transaction_storage,
        audit_logger=audit_logger,
    )
    transaction_flow = TransactionFlow(
        transaction_storage=transaction_storage,
        budget_flow=budget_flow,
        audit_logger=audit_logger,
        clock=clock,
    )
    goal_flow = GoalFlow(
        goal_storage=SqlGoalStorage(database),
        audit_logger=audit_logger,
    )

    return AppComponents(
        database=database,
        audit_logger=audit_logger,
        transaction_flow=transaction_flow,
        budget_flow=budget_flow,
        goal_flow=goal_flow,
    )
