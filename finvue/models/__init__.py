"""
Data Models Package

This package contains all Pydantic models used in the FinVue ledger.
All data flowing through the system must conform to these schemas.
"""

from finvue.models.ledger import (
    REQUISITION_CATEGORY,
    AdvisoryTip,
    AppState,
    Category,
    LedgerSummary,
    PaymentChannel,
    TipType,
    Transaction,
    TransactionDraft,
    TransactionQuery,
    TransactionStatus,
    TransactionType,
    User,
    UserRole,
    ValidationIssue,
)
from finvue.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "REQUISITION_CATEGORY",
    "AdvisoryTip",
    "AppState",
    "Category",
    "LedgerSummary",
    "PaymentChannel",
    "TipType",
    "Transaction",
    "TransactionDraft",
    "TransactionQuery",
    "TransactionStatus",
    "TransactionType",
    "User",
    "UserRole",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
