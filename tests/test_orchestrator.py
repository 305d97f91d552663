"""Integration tests for the flows, on in-memory storage."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.budget import BudgetRejectedError, CategoryNotFoundError
from fintrack.goals import GoalNotFoundError, GoalRejectedError
from fintrack.models.audit import AuditEventType
from fintrack.models.finance import GoalCreate
from fintrack.orchestrator import BudgetFlow, GoalFlow, TransactionFlow
from fintrack.services.storage import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryGoalStorage,
    InMemoryTransactionStorage,
)
from fintrack.validation import RequestRejectedError, TransactionValidator

from tests.conftest import TickingClock


USER = "user-1"


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def transaction_storage():
    return InMemoryTransactionStorage()


@pytest.fixture
def budget_storage():
    return InMemoryBudgetStorage()


@pytest.fixture
def budget_flow(budget_storage, transaction_storage, audit_logger):
    return BudgetFlow(
        budget_storage=budget_storage,
        transaction_storage=transaction_storage,
        audit_logger=audit_logger,
        default_total=Decimal("20000"),
    )


@pytest.fixture
def transaction_flow(transaction_storage, budget_flow, audit_logger):
    return TransactionFlow(
        transaction_storage=transaction_storage,
        validator=TransactionValidator(max_amount=Decimal("1000000")),
        budget_flow=budget_flow,
        audit_logger=audit_logger,
        clock=TickingClock(),
    )


@pytest.fixture
def goal_flow(audit_logger):
    return GoalFlow(InMemoryGoalStorage(), audit_logger=audit_logger, seed_demo_goals=True)


def _event_types(audit_storage) -> list[AuditEventType]:
    return [event.event_type for event in audit_storage.events]


def _expense(category: str, amount: int = 100, **extra) -> dict:
    return {"amount": amount, "type": "EXPENSE", "category": category, **extra}


class TestTransactionFlow:
    """Tests for TransactionFlow."""

    def test_create_stamps_owner_and_date(self, transaction_flow, audit_storage):
        transaction, issues = transaction_flow.create(USER, _expense("Food & Dining"))
        assert transaction.user_id == USER
        assert transaction.date == datetime(2024, 1, 1, 9, 1, tzinfo=timezone.utc)
        assert issues == []
        assert AuditEventType.TRANSACTION_CREATED in _event_types(audit_storage)

    def test_body_cannot_choose_owner(self, transaction_flow):
        transaction, _ = transaction_flow.create(USER, _expense("Food & Dining", userId="someone-else"))
        assert transaction.user_id == USER

    def test_invalid_body_is_rejected_and_audited(self, transaction_flow, transaction_storage, audit_storage):
        with pytest.raises(RequestRejectedError) as exc_info:
            transaction_flow.create(USER, {"type": "EXPENSE"})
        assert exc_info.value.issues
        assert transaction_storage.list_transactions(USER) == []
        assert _event_types(audit_storage) == [AuditEventType.OPERATION_REJECTED]

    def test_create_does_not_write_the_budget(self, transaction_flow, budget_storage):
        _, issues = transaction_flow.create(USER, _expense("Shopping"))
        assert issues == []
        assert budget_storage.get_plan(USER) is None

    def test_known_labels_follow_the_saved_plan(self, transaction_flow, budget_flow):
        budget_flow.add_category(USER, "Pets", Decimal("200"))
        _, issues = transaction_flow.create(USER, _expense("Pets"))
        assert issues == []

    def test_unmatched_label_is_a_warning(self, transaction_flow):
        transaction, issues = transaction_flow.create(USER, _expense("Pets"))
        assert transaction.category == "Pets"
        assert [issue.issue_type for issue in issues] == ["unmatched_category"]

    def test_list_newest_first(self, transaction_flow):
        for category in ("Food & Dining", "Shopping", "Transportation"):
            transaction_flow.create(USER, _expense(category))
        listed = transaction_flow.list(USER)
        assert [t.category for t in listed] == ["Transportation", "Shopping", "Food & Dining"]

    def test_summary(self, transaction_flow):
        transaction_flow.create(USER, {"amount": 500, "type": "INCOME", "category": "Salary"})
        transaction_flow.create(USER, _expense("Food & Dining", amount=120))
        summary = transaction_flow.summary(USER)
        assert summary.net == Decimal("380")
        assert summary.monthly[0].month == "1/2024"


class TestBudgetFlow:
    """Tests for BudgetFlow."""

    def test_default_plan_is_saved_on_first_use(self, budget_flow, budget_storage):
        first = budget_flow.summary(USER)
        second = budget_flow.summary(USER)
        assert budget_storage.get_plan(USER) is not None
        assert [c.category_id for c in first.categories] == [c.category_id for c in second.categories]

    def test_spending_comes_from_transactions(self, budget_flow, transaction_flow):
        transaction_flow.create(USER, _expense("Shopping", amount=4500))
        summary = budget_flow.summary(USER)
        shopping = next(c for c in summary.categories if c.name == "Shopping")
        assert shopping.spent == Decimal("4500")
        assert shopping.is_over_budget is True
        assert shopping.overage == Decimal("500")

    def test_set_total_persists(self, budget_flow, budget_storage, audit_storage):
        summary = budget_flow.set_total(USER, Decimal("40000"))
        assert summary.total_budget == Decimal("40000")
        assert budget_storage.get_plan(USER).categories[0].limit == Decimal("10000")
        assert AuditEventType.BUDGET_TOTAL_SET in _event_types(audit_storage)

    def test_set_total_rejected_is_audited(self, budget_flow, audit_storage):
        with pytest.raises(BudgetRejectedError):
            budget_flow.set_total(USER, Decimal("-5"))
        assert _event_types(audit_storage) == [AuditEventType.OPERATION_REJECTED]

    def test_set_percentage_reports_stale_limits(self, budget_flow):
        plan = budget_flow.load_plan(USER)
        food = plan.categories[0]
        summary = budget_flow.set_percentage(USER, food.id, Decimal("40"))
        assert summary.percentage_total == Decimal("115")
        assert summary.categories[0].limit == Decimal("5000")
        assert summary.issues[0].issue_type == "percentage_sum"
        assert budget_flow.load_plan(USER).categories[0].percentage == Decimal("40")

    def test_category_crud(self, budget_flow):
        category = budget_flow.add_category(USER, "Pets", Decimal("300"))
        edited = budget_flow.edit_category(USER, category.id, "Pet care", Decimal("350"))
        assert edited.name == "Pet care"
        assert budget_flow.load_plan(USER).categories[-1].limit == Decimal("350")

        budget_flow.delete_category(USER, category.id)
        assert category.id not in [c.id for c in budget_flow.load_plan(USER).categories]

    def test_unknown_category(self, budget_flow):
        with pytest.raises(CategoryNotFoundError):
            budget_flow.delete_category(USER, "missing")


class TestGoalFlow:
    """Tests for GoalFlow."""

    def test_demo_goals_are_seeded_once(self, goal_flow):
        first = goal_flow.list_goals(USER)
        second = goal_flow.list_goals(USER)
        assert len(first) == 3
        assert [g.id for g, _ in first] == [g.id for g, _ in second]

    def test_no_seeding_when_disabled(self, audit_logger):
        flow = GoalFlow(InMemoryGoalStorage(), audit_logger=audit_logger, seed_demo_goals=False)
        assert flow.list_goals(USER) == []

    def test_deleted_demo_goals_stay_deleted(self, goal_flow):
        for goal, _ in goal_flow.list_goals(USER):
            goal_flow.delete_goal(USER, goal.id)
        assert goal_flow.list_goals(USER) == []

    def test_add_and_contribute(self, goal_flow, audit_storage):
        goal = goal_flow.add_goal(
            USER,
            GoalCreate(name="Laptop", target_amount=Decimal("2000"), deadline=date(2025, 1, 1)),
        )
        updated, progress = goal_flow.contribute(USER, goal.id, Decimal("500"))
        assert updated.current_amount == Decimal("500")
        assert progress.percent_complete == pytest.approx(25.0)
        assert _event_types(audit_storage)[-2:] == [
            AuditEventType.GOAL_ADDED,
            AuditEventType.GOAL_CONTRIBUTION,
        ]

    def test_add_rejected(self, goal_flow):
        before = len(goal_flow.list_goals(USER))
        with pytest.raises(GoalRejectedError):
            goal_flow.add_goal(USER, GoalCreate(name="", deadline=date(2025, 1, 1)))
        assert len(goal_flow.list_goals(USER)) == before

    def test_contribute_unknown_goal(self, goal_flow):
        with pytest.raises(GoalNotFoundError):
            goal_flow.contribute(USER, "missing", Decimal("1"))
