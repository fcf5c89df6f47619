"""
Aggregation Engine

DESIGN DECISION: Figures are DERIVED, never stored.
Every summary is recomputed from the transactions handed in, so a
status change or a delete is reflected on the very next read and
there is no cache to go stale.

Only "relevant" transactions count: APPROVED and not a Requisition.
Callers apply visibility scoping before calling in here.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from finvue.models.ledger import (
    LedgerSummary,
    PaymentChannel,
    Transaction,
    TransactionStatus,
    TransactionType,
)


ZERO = Decimal("0")


def is_relevant(transaction: Transaction) -> bool:
    return transaction.status == TransactionStatus.APPROVED and not transaction.is_requisition


def relevant(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if is_relevant(t)]


def _total(transactions: Iterable[Transaction], transaction_type: TransactionType) -> Decimal:
    return sum(
        (t.amount for t in relevant(transactions) if t.type == transaction_type),
        ZERO,
    )


def income(transactions: Iterable[Transaction]) -> Decimal:
    return _total(transactions, TransactionType.INCOME)


def expense(transactions: Iterable[Transaction]) -> Decimal:
    return _total(transactions, TransactionType.EXPENSE)


def balance(transactions: Iterable[Transaction]) -> Decimal:
    transactions = list(transactions)
    return income(transactions) - expense(transactions)


def channel_balance(transactions: Iterable[Transaction], channel: PaymentChannel) -> Decimal:
    """Net flow through one payment channel; zero when it saw no activity."""
    return balance(t for t in transactions if t.source == channel)


def channel_balances(transactions: Iterable[Transaction]) -> dict[PaymentChannel, Decimal]:
    """Every channel, always present. The values sum to `balance`."""
    transactions = list(transactions)
    return {channel: channel_balance(transactions, channel) for channel in PaymentChannel}


def count(transactions: Iterable[Transaction]) -> int:
    return len(relevant(transactions))


def summarize(transactions: Iterable[Transaction]) -> LedgerSummary:
    transactions = list(transactions)
    total_income = income(transactions)
    total_expense = expense(transactions)
    return LedgerSummary(
        income=total_income,
        expense=total_expense,
        balance=total_income - total_expense,
        count=count(transactions),
        channel_balances=channel_balances(transactions),
    )


def expense_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Relevant expense amounts grouped by category, largest first.

    Feeds the dashboard spending chart.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in relevant(transactions):
        if t.type == TransactionType.EXPENSE:
            totals[t.category] += t.amount
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))
