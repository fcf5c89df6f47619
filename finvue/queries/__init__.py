"""Aggregation and filtering over the transaction set."""

from finvue.queries.aggregation import (
    balance,
    channel_balance,
    channel_balances,
    count,
    expense,
    expense_by_category,
    income,
    is_relevant,
    relevant,
    summarize,
)
from finvue.queries.filters import (
    filtered_summary,
    ledger_view,
    matches_query,
    matches_search,
    newest_first,
    rejected_view,
    requisition_view,
    scope_to_actor,
)

__all__ = [
    # Aggregation
    "balance",
    "channel_balance",
    "channel_balances",
    "count",
    "expense",
    "expense_by_category",
    "income",
    "is_relevant",
    "relevant",
    "summarize",
    # Filters
    "filtered_summary",
    "ledger_view",
    "matches_query",
    "matches_search",
    "newest_first",
    "rejected_view",
    "requisition_view",
    "scope_to_actor",
]
