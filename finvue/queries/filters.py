"""
Query/Filter Engine

Every read path goes through `scope_to_actor` first, so a member who
is not a global viewer never receives someone else's entry, whichever
view is asked for.

All filters are conjunctive. Results are ordered by date, newest first.
There is no pagination.
"""

from typing import Iterable, Optional

from finvue.models.ledger import (
    LedgerSummary,
    Transaction,
    TransactionQuery,
    TransactionStatus,
    User,
)
from finvue.policy.authorization import can_view
from finvue.queries.aggregation import summarize


def scope_to_actor(transactions: Iterable[Transaction], actor: User) -> list[Transaction]:
    return [t for t in transactions if can_view(actor, t)]


def newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    # sorted() is stable: same-day entries keep their insertion order
    return sorted(transactions, key=lambda t: t.occurred_on, reverse=True)


def matches_search(transaction: Transaction, search: str) -> bool:
    """Case-insensitive substring over note, category and submitter name."""
    if not search:
        return True
    needle = search.lower()
    return (
        needle in transaction.note.lower()
        or needle in transaction.category.lower()
        or needle in transaction.created_by.lower()
    )


def matches_query(transaction: Transaction, query: TransactionQuery) -> bool:
    if not query.include_requisitions and transaction.is_requisition:
        return False
    if query.user_id is not None and transaction.user_id != query.user_id:
        return False
    if query.category is not None and transaction.category != query.category:
        return False
    if query.date_from is not None and transaction.occurred_on < query.date_from:
        return False
    if query.date_to is not None and transaction.occurred_on > query.date_to:
        return False
    return matches_search(transaction, query.search)


def ledger_view(
    transactions: Iterable[Transaction],
    actor: User,
    query: Optional[TransactionQuery] = None,
) -> list[Transaction]:
    """
    The main ledger listing.

    Rejected entries are left out (see `rejected_view`), as are
    Requisitions unless the query asks for them (see `requisition_view`).
    """
    query = query or TransactionQuery()
    return newest_first(
        t for t in scope_to_actor(transactions, actor)
        if t.status != TransactionStatus.REJECTED and matches_query(t, query)
    )


def requisition_view(transactions: Iterable[Transaction], actor: User) -> list[Transaction]:
    """Fund-transfer entries in any live status, audited on their own."""
    return newest_first(
        t for t in scope_to_actor(transactions, actor)
        if t.is_requisition and t.status != TransactionStatus.REJECTED
    )


def rejected_view(transactions: Iterable[Transaction], actor: User) -> list[Transaction]:
    return newest_first(
        t for t in scope_to_actor(transactions, actor)
        if t.status == TransactionStatus.REJECTED
    )


def filtered_summary(
    transactions: Iterable[Transaction],
    actor: User,
    query: Optional[TransactionQuery] = None,
) -> LedgerSummary:
    """Totals over exactly what the ledger view shows."""
    return summarize(ledger_view(transactions, actor, query))
