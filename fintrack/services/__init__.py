"""Services package."""

from fintrack.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    Database,
    GoalStorageInterface,
    SqlAuditStorage,
    SqlBudgetStorage,
    SqlGoalStorage,
    SqlTransactionStorage,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "ConnectionError",
    "Database",
    "GoalStorageInterface",
    "SqlAuditStorage",
    "SqlBudgetStorage",
    "SqlGoalStorage",
    "SqlTransactionStorage",
    "StorageError",
    "TransactionStorageInterface",
]
