"""
HTTP client for the FinTrack API.

DESIGN DECISION: Only reads are retried. Listing transactions is safe to
repeat, so transport errors and timeouts are retried with exponential
backoff. Creating a transaction is NOT idempotent and is sent once.
A 401 is never retried: the session has to be fixed, not waited out.
"""

from decimal import Decimal
from typing import Optional

import httpx
import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.config import get_settings
from fintrack.models.finance import (
    BudgetSummary,
    Transaction,
    TransactionCreate,
    TransactionSummary,
    TransactionType,
)


logger = structlog.get_logger(__name__)


class ClientError(Exception):
    """The API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UnauthorizedError(ClientError):
    """The API rejected the session (401)."""

    def __init__(self, message: str = "Unauthorized - Please log in"):
        super().__init__(message, status_code=401)


class FinTrackClient:
    """
    Thin synchronous client over httpx.

    Pass the value of the session cookie issued by the server; pass
    `transport` to route requests somewhere other than the network.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session_cookie: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self._max_attempts = max_attempts or settings.client.max_attempts
        self._backoff = backoff

        cookies = {}
        if session_cookie:
            cookies[settings.auth.session_cookie_name] = session_cookie

        self.client = httpx.Client(
            base_url=base_url or settings.client.base_url,
            timeout=timeout if timeout is not None else settings.client.timeout_seconds,
            cookies=cookies,
            transport=transport,
        )

    def __enter__(self) -> "FinTrackClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close HTTP client"""
        self.client.close()

    def _check(self, response: httpx.Response):
        if response.status_code == 401:
            raise UnauthorizedError()
        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise ClientError(message or response.reason_phrase, status_code=response.status_code)
        return response.json()

    def _get_with_retry(self, path: str):
        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff, min=0, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self.client.get(path)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.warning(
                "api_unreachable",
                path=path,
                attempts=self._max_attempts,
                error=str(cause),
            )
            raise ClientError(f"GET {path} failed after {self._max_attempts} attempts: {cause}") from cause
        return self._check(response)

    def list_transactions(self) -> list[Transaction]:
        """The session user's transactions, newest first."""
        data = self._get_with_retry("/transactions")
        return [Transaction.model_validate(item) for item in data]

    def transaction_summary(self) -> TransactionSummary:
        return TransactionSummary.model_validate(self._get_with_retry("/transactions/summary"))

    def get_budget(self) -> BudgetSummary:
        return BudgetSummary.model_validate(self._get_with_retry("/budget"))

    def create_transaction(
        self,
        amount: Decimal,
        type: TransactionType,
        category: str,
        description: str = "",
        category_id: Optional[str] = None,
    ) -> Transaction:
        """Record a transaction. Sent exactly once."""
        request = TransactionCreate(
            amount=amount,
            type=type,
            category=category,
            description=description,
            category_id=category_id,
        )
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            response = self.client.post("/transactions", json=payload)
        except httpx.TransportError as e:
            raise ClientError(f"POST /transactions failed: {e}") from e
        return Transaction.model_validate(self._check(response))
