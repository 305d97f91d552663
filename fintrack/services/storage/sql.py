"""
SQLAlchemy Storage Implementation

DESIGN DECISION: A relational database behind SQLAlchemy is the storage
backend because:
1. SQLite needs no setup for a single user on a laptop
2. The same code runs on PostgreSQL/MySQL by changing the URL
3. Each operation is one transaction: it fully succeeds or fully fails

TRADEOFFS:
- Tables are created with create_all(); there are no migrations
- Budgets and goals are rewritten whole on every save (they are small)

The implementation follows the abstract interface, so business logic
never sees SQLAlchemy objects.
"""

import json
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional
from uuid import UUID

import structlog
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    delete,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fintrack.models.audit import AuditEvent, AuditEventType, AuditSeverity
from fintrack.models.finance import (
    BudgetCategory,
    BudgetPlan,
    FinancialGoal,
    GoalCategory,
    GoalPriority,
    Transaction,
    TransactionType,
)
from fintrack.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    GoalStorageInterface,
    StorageError,
    TransactionStorageInterface,
)


logger = structlog.get_logger(__name__)


# =============================================================================
# TABLES
# =============================================================================

class Base(DeclarativeBase):
    pass


class TransactionRow(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    type: Mapped[str] = mapped_column(String(10))
    category: Mapped[str] = mapped_column(String(100))
    category_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class BudgetPlanRow(Base):
    __tablename__ = "budget_plans"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    total_budget: Mapped[Decimal] = mapped_column(Numeric(14, 2))


class BudgetCategoryRow(Base):
    __tablename__ = "budget_categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("budget_plans.user_id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(100))
    # "limit" is a reserved word in SQL
    limit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    color: Mapped[str] = mapped_column(String(20))


class GoalRow(Base):
    __tablename__ = "goals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    position: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(200))
    target_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    current_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    deadline: Mapped[date] = mapped_column(Date)
    category: Mapped[str] = mapped_column(String(20))
    priority: Mapped[str] = mapped_column(String(10))


class GoalOwnerRow(Base):
    """Marks that a user has saved goals, so an empty list is not re-seeded."""

    __tablename__ = "goal_owners"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)


class AuditEventRow(Base):
    __tablename__ = "audit_events"

    event_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    event_type: Mapped[str] = mapped_column(String(50))
    severity: Mapped[str] = mapped_column(String(10))
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    entity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    correlation_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    description: Mapped[str] = mapped_column(String(500))
    details_json: Mapped[str] = mapped_column(Text, default="")
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_user_action: Mapped[bool] = mapped_column(Boolean, default=False)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# ENGINE / SESSIONS
# =============================================================================

def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `url`.

    SQLite engines are shared across Flask's threads; an in-memory SQLite
    database is pinned to one connection so every session sees the same data.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


class Database:
    """
    Owns the engine and hands out transactional sessions.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        engine: Optional[Engine] = None,
        echo: bool = False,
    ):
        if engine is None:
            if url is None:
                raise ValueError("Either a database URL or an engine is required")
            engine = create_db_engine(url, echo=echo)
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ConnectionError),
        reraise=True,
    )
    def connect(self) -> None:
        """
        Check the database is reachable and create missing tables.
        """
        try:
            with self._engine.begin() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(self._engine)
        except OperationalError as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        """One session, one transaction: commit on success, roll back on error."""
        with self._session_factory.begin() as session:
            yield session


# =============================================================================
# TRANSACTIONS
# =============================================================================

class SqlTransactionStorage(TransactionStorageInterface):
    """
    SQL implementation of transaction storage.
    """

    def __init__(self, database: Database):
        self._db = database

    def _transaction_to_row(self, transaction: Transaction) -> TransactionRow:
        return TransactionRow(
            id=transaction.id,
            user_id=transaction.user_id,
            amount=transaction.amount,
            type=transaction.type.value,
            category=transaction.category,
            category_id=transaction.category_id,
            description=transaction.description,
            date=transaction.date,
        )

    def _row_to_transaction(self, row: TransactionRow) -> Transaction:
        return Transaction(
            id=row.id,
            user_id=row.user_id,
            amount=row.amount,
            type=TransactionType(row.type),
            category=row.category,
            category_id=row.category_id,
            description=row.description or "",
            date=_as_utc(row.date),
        )

    def create_transaction(self, transaction: Transaction) -> Transaction:
        """Insert a transaction row."""
        try:
            with self._db.session() as session:
                session.add(self._transaction_to_row(transaction))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save transaction: {e}") from e
        return transaction

    def list_transactions(self, user_id: str) -> list[Transaction]:
        """All of a user's transactions, newest first."""
        try:
            with self._db.session() as session:
                rows = session.scalars(
                    select(TransactionRow)
                    .where(TransactionRow.user_id == user_id)
                    .order_by(TransactionRow.date.desc())
                ).all()
                return [self._row_to_transaction(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list transactions: {e}") from e


# =============================================================================
# BUDGETS
# =============================================================================

class SqlBudgetStorage(BudgetStorageInterface):
    """
    SQL implementation of budget plan storage.

    One budget_plans row per user, one budget_categories row per category.
    """

    def __init__(self, database: Database):
        self._db = database

    def get_plan(self, user_id: str) -> Optional[BudgetPlan]:
        try:
            with self._db.session() as session:
                plan_row = session.get(BudgetPlanRow, user_id)
                if plan_row is None:
                    return None
                category_rows = session.scalars(
                    select(BudgetCategoryRow)
                    .where(BudgetCategoryRow.user_id == user_id)
                    .order_by(BudgetCategoryRow.position)
                ).all()
                return BudgetPlan(
                    user_id=user_id,
                    total_budget=plan_row.total_budget,
                    categories=[
                        BudgetCategory(
                            id=row.id,
                            name=row.name,
                            limit=row.limit_amount,
                            percentage=row.percentage,
                            color=row.color,
                        )
                        for row in category_rows
                    ],
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load budget: {e}") from e

    def save_plan(self, plan: BudgetPlan) -> BudgetPlan:
        try:
            with self._db.session() as session:
                session.merge(BudgetPlanRow(
                    user_id=plan.user_id,
                    total_budget=plan.total_budget,
                ))
                session.execute(
                    delete(BudgetCategoryRow).where(BudgetCategoryRow.user_id == plan.user_id)
                )
                session.add_all([
                    BudgetCategoryRow(
                        id=category.id,
                        user_id=plan.user_id,
                        position=position,
                        name=category.name,
                        limit_amount=category.limit,
                        percentage=category.percentage,
                        color=category.color,
                    )
                    for position, category in enumerate(plan.categories)
                ])
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save budget: {e}") from e
        return plan


# =============================================================================
# GOALS
# =============================================================================

class SqlGoalStorage(GoalStorageInterface):
    """SQL implementation of goal storage."""

    def __init__(self, database: Database):
        self._db = database

    def _row_to_goal(self, row: GoalRow) -> FinancialGoal:
        return FinancialGoal(
            id=row.id,
            name=row.name,
            target_amount=row.target_amount,
            current_amount=row.current_amount,
            deadline=row.deadline,
            category=GoalCategory(row.category),
            priority=GoalPriority(row.priority),
        )

    def get_goals(self, user_id: str) -> Optional[list[FinancialGoal]]:
        try:
            with self._db.session() as session:
                if session.get(GoalOwnerRow, user_id) is None:
                    return None
                rows = session.scalars(
                    select(GoalRow)
                    .where(GoalRow.user_id == user_id)
                    .order_by(GoalRow.position)
                ).all()
                return [self._row_to_goal(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load goals: {e}") from e

    def save_goals(self, user_id: str, goals: list[FinancialGoal]) -> list[FinancialGoal]:
        try:
            with self._db.session() as session:
                session.merge(GoalOwnerRow(user_id=user_id))
                session.execute(delete(GoalRow).where(GoalRow.user_id == user_id))
                session.add_all([
                    GoalRow(
                        id=goal.id,
                        user_id=user_id,
                        position=position,
                        name=goal.name,
                        target_amount=goal.target_amount,
                        current_amount=goal.current_amount,
                        deadline=goal.deadline,
                        category=goal.category.value,
                        priority=goal.priority.value,
                    )
                    for position, goal in enumerate(goals)
                ])
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save goals: {e}") from e
        return goals


# =============================================================================
# AUDIT
# =============================================================================

class SqlAuditStorage(AuditStorageInterface):
    """
    SQL implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, database: Database):
        self._db = database

    def _event_to_row(self, event: AuditEvent) -> AuditEventRow:
        return AuditEventRow(
            event_id=str(event.event_id),
            timestamp=event.timestamp,
            event_type=event.event_type.value,
            severity=event.severity.value,
            user_id=event.user_id,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            correlation_id=str(event.correlation_id) if event.correlation_id else None,
            description=event.description,
            details_json=json.dumps(event.details, default=str) if event.details else "",
            error_message=event.error_message,
            is_user_action=event.is_user_action,
        )

    def _row_to_event(self, row: AuditEventRow) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(row.event_id),
            timestamp=_as_utc(row.timestamp),
            event_type=AuditEventType(row.event_type),
            severity=AuditSeverity(row.severity),
            user_id=row.user_id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            correlation_id=UUID(row.correlation_id) if row.correlation_id else None,
            description=row.description,
            details=json.loads(row.details_json) if row.details_json else {},
            error_message=row.error_message,
            is_user_action=row.is_user_action,
        )

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            with self._db.session() as session:
                session.add(self._event_to_row(event))
            return True
        except SQLAlchemyError as e:
            # Never fails the caller
            logger.warning("audit_append_failed", error=str(e), event_id=str(event.event_id))
            return False

    def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """Get recent events, newest first."""
        try:
            with self._db.session() as session:
                query = select(AuditEventRow)
                if user_id is not None:
                    query = query.where(AuditEventRow.user_id == user_id)
                rows = session.scalars(
                    query.order_by(AuditEventRow.timestamp.desc()).limit(limit)
                ).all()
                return [self._row_to_event(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get audit events: {e}") from e
