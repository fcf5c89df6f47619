"""Ledger store and the public ledger operations."""

from finvue.ledger.service import LedgerService
from finvue.ledger.store import LedgerStore, initial_state

__all__ = [
    "LedgerService",
    "LedgerStore",
    "initial_state",
]
