"""Tests for the two-stage transaction validator."""

from decimal import Decimal

import pytest

from fintrack.models.finance import BudgetTotalUpdate, TransactionType
from fintrack.validation import RequestRejectedError, TransactionValidator, parse_request


KNOWN = {"Food & Dining", "Shopping"}


@pytest.fixture
def validator():
    return TransactionValidator(max_amount=Decimal("1000000"))


def _payload(**overrides) -> dict:
    payload = {
        "amount": 100,
        "type": "EXPENSE",
        "category": "Food & Dining",
        "description": "lunch",
    }
    payload.update(overrides)
    return payload


class TestSchemaStage:
    """Tests for stage 1 (schema)."""

    def test_valid_payload(self, validator):
        request, result = validator.validate(_payload(), KNOWN)
        assert result.is_valid is True
        assert result.issues == []
        assert request.amount == Decimal("100")
        assert request.type == TransactionType.EXPENSE

    def test_missing_amount(self, validator):
        payload = _payload()
        del payload["amount"]
        request, result = validator.validate(payload)
        assert request is None
        assert result.schema_valid is False
        assert result.semantic_valid is False
        assert "amount" in [issue.field for issue in result.issues]

    def test_negative_amount(self, validator):
        request, result = validator.validate(_payload(amount=-5))
        assert request is None
        assert result.has_errors is True

    def test_unknown_type(self, validator):
        _, result = validator.validate(_payload(type="REFUND"))
        assert [issue.field for issue in result.issues] == ["type"]

    def test_not_an_object(self, validator):
        _, result = validator.validate(["amount", 100])
        assert result.schema_valid is False
        assert result.issues[0].field == "body"


class TestSemanticStage:
    """Tests for stage 2 (semantic)."""

    def test_absurd_amount_is_an_error(self, validator):
        _, result = validator.validate(_payload(amount=5000000))
        assert result.schema_valid is True
        assert result.semantic_valid is False
        assert result.issues[0].issue_type == "suspicious_value"

    def test_unmatched_expense_label_is_a_warning(self, validator):
        request, result = validator.validate(_payload(category="Pets"), KNOWN)
        assert request is not None
        assert result.is_valid is True
        assert [issue.issue_type for issue in result.issues] == ["unmatched_category"]
        assert result.issues[0].severity == "warning"

    def test_income_label_is_not_checked(self, validator):
        _, result = validator.validate(_payload(type="INCOME", category="Salary"), KNOWN)
        assert result.issues == []

    def test_explicit_category_id_skips_label_check(self, validator):
        _, result = validator.validate(_payload(category="Pets", categoryId="cat-1"), KNOWN)
        assert result.issues == []

    def test_label_check_skipped_without_categories(self, validator):
        _, result = validator.validate(_payload(category="Pets"))
        assert result.issues == []


class TestParseRequest:
    def test_parse_request(self):
        update = parse_request(BudgetTotalUpdate, {"total": 30000})
        assert update.total == Decimal("30000")

    def test_parse_request_rejects_missing_body(self):
        with pytest.raises(RequestRejectedError) as exc_info:
            parse_request(BudgetTotalUpdate, None)
        assert exc_info.value.issues[0].issue_type == "invalid_format"

    def test_parse_request_rejects_invalid_value(self):
        with pytest.raises(RequestRejectedError) as exc_info:
            parse_request(BudgetTotalUpdate, {"total": -1})
        assert exc_info.value.issues[0].field == "total"
