"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run on any relational database SQLAlchemy supports
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

Budgets and goals are stored as per-user aggregates: the whole plan or
the whole goal list is loaded, changed in memory, and saved back.
Transactions are append-only.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fintrack.models.audit import AuditEvent
from fintrack.models.finance import BudgetPlan, FinancialGoal, Transaction


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage.

    There is deliberately no update or delete: a transaction is
    immutable once recorded.
    """

    @abstractmethod
    def create_transaction(self, transaction: Transaction) -> Transaction:
        """
        Persist a new transaction.

        Args:
            transaction: Fully populated transaction (owner and date set)

        Returns:
            The stored transaction

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def list_transactions(self, user_id: str) -> list[Transaction]:
        """
        List every transaction owned by a user.

        Returns:
            Transactions ordered by date, newest first

        Raises:
            StorageError: If the read fails
        """
        pass


class BudgetStorageInterface(ABC):
    """Abstract interface for budget plan storage."""

    @abstractmethod
    def get_plan(self, user_id: str) -> Optional[BudgetPlan]:
        """
        Load a user's budget plan.

        Returns:
            The plan with categories in display order, or None if the
            user has never saved one
        """
        pass

    @abstractmethod
    def save_plan(self, plan: BudgetPlan) -> BudgetPlan:
        """
        Replace the user's stored plan with `plan`.

        Categories missing from `plan` are removed from storage.
        `spent` is derived and is not stored.
        """
        pass


class GoalStorageInterface(ABC):
    """Abstract interface for financial goal storage."""

    @abstractmethod
    def get_goals(self, user_id: str) -> Optional[list[FinancialGoal]]:
        """
        Load a user's goals in the order they were added.

        Returns:
            The goals, or None if the user has never saved any
        """
        pass

    @abstractmethod
    def save_goals(self, user_id: str, goals: list[FinancialGoal]) -> list[FinancialGoal]:
        """Replace the user's stored goals with `goals`."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return
            user_id: Only events for this user

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
