"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation of an incoming transaction happens in two
distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking
- Required field presence
- Positive amount, known transaction type
- This catches malformed request bodies

STAGE 2 - SEMANTIC VALIDATION:
- Absurd amount detection
- Expense labels that match no budget category
- This catches logically suspicious data

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, and errors reject the request.
"""

from decimal import Decimal
from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from fintrack.config import get_settings
from fintrack.models.finance import (
    TransactionCreate,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


ModelT = TypeVar("ModelT", bound=BaseModel)


class RequestRejectedError(Exception):
    """A request body failed validation; nothing was changed."""

    def __init__(self, message: str, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(message)


def issues_from_error(error: PydanticValidationError) -> list[ValidationIssue]:
    """Translate pydantic's error list into ValidationIssues."""
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        issues.append(ValidationIssue(
            field=location or "body",
            issue_type=detail.get("type", "invalid"),
            message=detail.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


def parse_request(model: type[ModelT], payload: Any) -> ModelT:
    """
    Validate a JSON body against `model`.

    Raises:
        RequestRejectedError: body missing, not an object, or invalid
    """
    if not isinstance(payload, dict):
        raise RequestRejectedError(
            "Request body must be a JSON object",
            [ValidationIssue(
                field="body",
                issue_type="invalid_format",
                message="Request body must be a JSON object",
                severity="error",
            )],
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise RequestRejectedError("Request body is invalid", issues_from_error(e)) from e


class TransactionValidator:
    """
    Validates transaction request bodies through a two-stage pipeline.

    Stage 1: Schema validation (pydantic)
    Stage 2: Semantic validation (needs the user's budget category names
             for the matching check; skipped when not given)
    """

    def __init__(self, max_amount: Optional[Decimal] = None):
        if max_amount is None:
            max_amount = get_settings().app.max_transaction_amount
        self._max_amount = Decimal(max_amount)

    def _validate_schema(
        self,
        payload: Any,
    ) -> tuple[Optional[TransactionCreate], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_request_or_None, list_of_issues)
        """
        try:
            return parse_request(TransactionCreate, payload), []
        except RequestRejectedError as e:
            return None, e.issues

    def _validate_semantic(
        self,
        request: TransactionCreate,
        known_categories: Optional[set[str]] = None,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if request.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({request.amount:,.2f}) is larger than the accepted maximum",
                severity="error",
                suggested_fix="Check the amount for extra digits",
            ))

        if (
            known_categories is not None
            and request.type == TransactionType.EXPENSE
            and request.category_id is None
            and request.category not in known_categories
        ):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unmatched_category",
                message=f"'{request.category}' does not match any budget category",
                severity="warning",
                suggested_fix="Use one of your budget category names to count this expense",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        payload: Any,
        known_categories: Optional[set[str]] = None,
    ) -> tuple[Optional[TransactionCreate], ValidationResult]:
        """
        Run full two-stage validation pipeline.

        Returns:
            (parsed request or None, ValidationResult with all issues found)
        """
        request, all_issues = self._validate_schema(payload)
        schema_valid = request is not None

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if request is not None:
            semantic_valid, semantic_issues = self._validate_semantic(request, known_categories)
            all_issues.extend(semantic_issues)

        return request, ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
        )
