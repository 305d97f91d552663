"""Validation package."""

from fintrack.validation.validator import (
    RequestRejectedError,
    TransactionValidator,
    issues_from_error,
    parse_request,
)

__all__ = [
    "RequestRejectedError",
    "TransactionValidator",
    "issues_from_error",
    "parse_request",
]
