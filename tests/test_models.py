"""
Tests for FinTrack

Test strategy:
1. Unit tests for individual components (models, allocator, tracker, validators)
2. Integration tests for flows and the HTTP API (in-memory SQLite)
3. No real network calls in tests (httpx MockTransport)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from fintrack.models.finance import (
    BudgetCategory,
    BudgetPlan,
    FinancialGoal,
    GoalCategory,
    GoalCreate,
    GoalPriority,
    Transaction,
    TransactionCreate,
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


class TestTransactionModels:
    """Tests for transaction models."""

    def test_transaction_create_accepts_camel_case(self):
        """Test request bodies use camelCase keys."""
        request = TransactionCreate.model_validate({
            "amount": 100,
            "type": "EXPENSE",
            "category": "Food & Dining",
            "categoryId": "cat-1",
        })
        assert request.amount == Decimal("100")
        assert request.type == TransactionType.EXPENSE
        assert request.category_id == "cat-1"
        assert request.description == ""

    def test_transaction_create_strips_whitespace(self):
        """Test that whitespace is stripped from the category label."""
        request = TransactionCreate(amount=Decimal("5"), type=TransactionType.INCOME, category="  Salary  ")
        assert request.category == "Salary"

    def test_transaction_create_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-10"):
            with pytest.raises(ValueError):
                TransactionCreate(amount=Decimal(amount), type=TransactionType.EXPENSE, category="Food")

    def test_transaction_create_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            TransactionCreate.model_validate({"amount": 1, "type": "TRANSFER", "category": "x"})

    def test_transaction_defaults(self):
        """Test id and date are generated."""
        transaction = Transaction(
            amount=Decimal("12.50"),
            type=TransactionType.EXPENSE,
            category="Shopping",
            user_id="user-1",
        )
        assert transaction.id
        assert transaction.date.tzinfo is not None
        assert transaction.is_expense is True

    def test_transaction_is_immutable(self):
        transaction = Transaction(
            amount=Decimal("1"),
            type=TransactionType.INCOME,
            category="Salary",
            user_id="user-1",
        )
        with pytest.raises(ValueError):
            transaction.amount = Decimal("2")

    def test_transaction_json_dump(self):
        """Test JSON output is camelCase with numeric amounts."""
        transaction = Transaction(
            amount=Decimal("100"),
            type=TransactionType.EXPENSE,
            category="Food & Dining",
            user_id="user-1",
            date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        data = transaction.model_dump(mode="json", by_alias=True)
        assert data["amount"] == 100
        assert data["userId"] == "user-1"
        assert data["type"] == "EXPENSE"
        assert data["date"].startswith("2024-03-01")


class TestBudgetModels:
    """Tests for budget models."""

    def test_category_percentage_bounds(self):
        """Test percentage must be between 0 and 100."""
        with pytest.raises(ValueError):
            BudgetCategory(name="Food", percentage=Decimal("120"))
        with pytest.raises(ValueError):
            BudgetCategory(name="Food", percentage=Decimal("-1"))

    def test_category_assignment_is_validated(self):
        category = BudgetCategory(name="Food", limit=Decimal("100"))
        with pytest.raises(ValueError):
            category.limit = Decimal("-5")

    def test_plan_percentage_total(self):
        plan = BudgetPlan(
            user_id="user-1",
            total_budget=Decimal("1000"),
            categories=[
                BudgetCategory(name="A", percentage=Decimal("60")),
                BudgetCategory(name="B", percentage=Decimal("30")),
            ],
        )
        assert plan.percentage_total == Decimal("90")


class TestGoalModels:
    """Tests for goal models."""

    def test_goal_rejects_negative_current(self):
        goal = FinancialGoal(
            name="Trip",
            target_amount=Decimal("1000"),
            deadline=date(2025, 1, 1),
        )
        with pytest.raises(ValueError):
            goal.current_amount = Decimal("-1")

    def test_goal_defaults(self):
        goal = FinancialGoal(name="Trip", target_amount=Decimal("1000"), deadline=date(2025, 1, 1))
        assert goal.current_amount == Decimal("0")
        assert goal.category == GoalCategory.SAVINGS
        assert goal.priority == GoalPriority.MEDIUM

    def test_goal_create_blank_form_fields_are_missing(self):
        """Test empty strings from forms become None."""
        request = GoalCreate.model_validate({"name": "Trip", "targetAmount": "", "deadline": ""})
        assert request.target_amount is None
        assert request.deadline is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            description="Test transaction recorded",
        )
        assert event.event_type == AuditEventType.TRANSACTION_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.GOAL_ADDED,
            user_id="user-1",
            description="Goal added",
            details={"target_amount": "1000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "goal_added"
        assert log_dict["user_id"] == "user-1"
        assert log_dict["details"]["target_amount"] == "1000"

    def test_audit_event_builder_transaction_created(self):
        """Test AuditEventBuilder.transaction_created."""
        correlation_id = uuid4()

        event = AuditEventBuilder.transaction_created(
            user_id="user-1",
            transaction_id="tx-1",
            transaction_type="EXPENSE",
            category="Food & Dining",
            amount="100",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TRANSACTION_CREATED
        assert event.entity_id == "tx-1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_unauthorized(self):
        """Test AuditEventBuilder.unauthorized_access."""
        event = AuditEventBuilder.unauthorized_access(path="/transactions", method="POST")

        assert event.event_type == AuditEventType.UNAUTHORIZED_ACCESS
        assert event.severity == AuditSeverity.WARNING
        assert event.user_id is None
        assert event.details["path"] == "/transactions"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="category",
                    issue_type="unmatched_category",
                    message="No such category",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_validation_issue_severity_pattern(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestTransactionTypes:
    """Tests for the transaction type enum."""

    def test_type_values(self):
        assert TransactionType("INCOME") == TransactionType.INCOME
        assert TransactionType.EXPENSE.value == "EXPENSE"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
