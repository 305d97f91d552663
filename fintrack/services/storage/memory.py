"""
In-Memory Storage

Dict-backed implementations of the storage interfaces. Used by tests and
by flows that run without a database. Nothing survives the process.
"""

from typing import Optional

from fintrack.models.audit import AuditEvent
from fintrack.models.finance import BudgetPlan, FinancialGoal, Transaction
from fintrack.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    GoalStorageInterface,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    def __init__(self):
        self._transactions: list[Transaction] = []

    def create_transaction(self, transaction: Transaction) -> Transaction:
        self._transactions.append(transaction)
        return transaction

    def list_transactions(self, user_id: str) -> list[Transaction]:
        owned = [t for t in self._transactions if t.user_id == user_id]
        owned.sort(key=lambda t: t.date, reverse=True)
        return owned


class InMemoryBudgetStorage(BudgetStorageInterface):
    def __init__(self):
        self._plans: dict[str, BudgetPlan] = {}

    def get_plan(self, user_id: str) -> Optional[BudgetPlan]:
        plan = self._plans.get(user_id)
        # Hand out copies so callers cannot change stored state without saving
        return plan.model_copy(deep=True) if plan else None

    def save_plan(self, plan: BudgetPlan) -> BudgetPlan:
        self._plans[plan.user_id] = plan.model_copy(deep=True)
        return plan


class InMemoryGoalStorage(GoalStorageInterface):
    def __init__(self):
        self._goals: dict[str, list[FinancialGoal]] = {}

    def get_goals(self, user_id: str) -> Optional[list[FinancialGoal]]:
        if user_id not in self._goals:
            return None
        return [goal.model_copy() for goal in self._goals[user_id]]

    def save_goals(self, user_id: str, goals: list[FinancialGoal]) -> list[FinancialGoal]:
        self._goals[user_id] = [goal.model_copy() for goal in goals]
        return goals


class InMemoryAuditStorage(AuditStorageInterface):
    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if user_id is None or e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
