"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
SQLAlchemy is the production backend; the in-memory backend serves tests.
"""

from fintrack.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    GoalStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from fintrack.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryGoalStorage,
    InMemoryTransactionStorage,
)
from fintrack.services.storage.sql import (
    Database,
    SqlAuditStorage,
    SqlBudgetStorage,
    SqlGoalStorage,
    SqlTransactionStorage,
    create_db_engine,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "GoalStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryGoalStorage",
    "InMemoryTransactionStorage",
    # SQL implementation
    "Database",
    "SqlAuditStorage",
    "SqlBudgetStorage",
    "SqlGoalStorage",
    "SqlTransactionStorage",
    "create_db_engine",
]
