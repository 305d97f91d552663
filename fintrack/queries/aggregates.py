"""
Transaction Aggregates

DESIGN DECISION: Aggregation is DETERMINISTIC and runs over transactions
already loaded from storage. Nothing here touches the database, so the
same functions serve the HTTP summary and the tests.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from fintrack.models.finance import (
    MonthlyTotals,
    Transaction,
    TransactionSummary,
    TransactionType,
)


ZERO = Decimal("0")


def month_label(transaction: Transaction) -> str:
    """Month bucket of a transaction, e.g. '3/2024'."""
    return f"{transaction.date.month}/{transaction.date.year}"


def monthly_totals(transactions: Iterable[Transaction]) -> list[MonthlyTotals]:
    """
    Income and expenses per month, oldest month first.

    INCOME counts as income; every other type counts as expenses.
    """
    buckets: dict[tuple[int, int], MonthlyTotals] = {}
    for transaction in transactions:
        key = (transaction.date.year, transaction.date.month)
        if key not in buckets:
            buckets[key] = MonthlyTotals(month=month_label(transaction))
        bucket = buckets[key]
        if transaction.type == TransactionType.INCOME:
            bucket.income += transaction.amount
        else:
            bucket.expenses += transaction.amount
    return [buckets[key] for key in sorted(buckets)]


def expense_totals_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum of EXPENSE amounts per category label."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for transaction in transactions:
        if transaction.is_expense:
            totals[transaction.category] += transaction.amount
    return dict(totals)


def summarize(transactions: Iterable[Transaction]) -> TransactionSummary:
    """Everything the overview needs in one pass over the list."""
    transactions = list(transactions)
    income = sum(
        (t.amount for t in transactions if t.type == TransactionType.INCOME),
        ZERO,
    )
    expenses = sum(
        (t.amount for t in transactions if t.type == TransactionType.EXPENSE),
        ZERO,
    )
    return TransactionSummary(
        total_income=income,
        total_expenses=expenses,
        net=income - expenses,
        transaction_count=len(transactions),
        monthly=monthly_totals(transactions),
        expenses_by_category=expense_totals_by_category(transactions),
    )
