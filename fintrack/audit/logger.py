"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A history of budget and goal changes per user

The audit logger:
- Gracefully handles failures (doesn't fail the request if logging fails)
- Supports correlation IDs to trace the events of one request
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from fintrack.models.finance import ValidationIssue
from fintrack.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit table (for persistence), when storage is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("fintrack.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_unauthorized(
        self,
        path: str,
        method: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.unauthorized_access(
            path=path,
            method=method,
            correlation_id=correlation_id,
        ))

    def log_transaction_created(
        self,
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_created(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transactions_listed(
        self,
        user_id: str,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_listed(
            user_id=user_id,
            result_count=result_count,
            correlation_id=correlation_id,
        ))

    def log_budget_change(
        self,
        event_type: AuditEventType,
        user_id: str,
        description: str,
        category_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.budget_changed(
            event_type=event_type,
            user_id=user_id,
            description=description,
            entity_id=category_id,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_goal_change(
        self,
        event_type: AuditEventType,
        user_id: str,
        goal_id: str,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.goal_changed(
            event_type=event_type,
            user_id=user_id,
            goal_id=goal_id,
            description=description,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_rejected(
        self,
        user_id: Optional[str],
        operation: str,
        issues: list[ValidationIssue],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation refused because of validation issues."""
        self.log(AuditEventBuilder.operation_rejected(
            user_id=user_id,
            operation=operation,
            issues=[issue.model_dump(mode="json") for issue in issues],
            correlation_id=correlation_id,
        ))

    def log_storage_failure(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_failed(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new request and pass it through
    all subsequent operations.
    """
    return uuid4()
