"""
Core Data Models for FinVue Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the persisted ledger document (camelCase keys)
4. Stay immutable once created - changes produce new copies

DESIGN DECISION: Transactions, users and the app state are frozen.
The only way to "change" a record is to build a replacement through
the ledger store, which keeps every write in one place.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class UserRole(str, Enum):
    """
    Closed set of actor roles.

    No ranking is implied. The authorization policy names
    ADMIN and MANAGER explicitly wherever they get more rights.
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    BILLING_EXECUTIVE = "BILLING_EXECUTIVE"
    EMPLOYEE = "EMPLOYEE"


class TransactionType(str, Enum):
    """Direction of money."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(str, Enum):
    """
    Transaction lifecycle status.

    CRITICAL: Status only moves forward. Once a transaction leaves
    PENDING it never returns, and APPROVED/REJECTED are final.
    """
    PENDING = "PENDING"      # Submitted, awaiting manager verification
    VERIFIED = "VERIFIED"    # Manager checked it, awaiting admin approval
    APPROVED = "APPROVED"    # Counts towards balances
    REJECTED = "REJECTED"    # Kept for audit, never counted


class PaymentChannel(str, Enum):
    """Payment source/medium a transaction moved through."""
    CASH = "Cash"
    BANK = "Bank"
    BKASH = "Bkash"
    NAGAD = "Nagad"


class TipType(str, Enum):
    """Kind of advisory tip."""
    SAVING = "saving"
    WARNING = "warning"
    INFO = "info"


# Category that marks internal fund transfers
REQUISITION_CATEGORY = "Requisition"


class DocumentModel(BaseModel):
    """
    Base for everything stored in the ledger document.

    Attributes are snake_case in Python and camelCase on disk,
    matching the document layout older installs already have.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    def to_document(self) -> dict:
        """Serialize with the persisted (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# IDENTITY
# =============================================================================

class User(DocumentModel):
    """
    Identity record.

    NOTE: `password` is compared by plain equality. Hashing is an
    open gap of the credential check, not a feature of this model.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique user ID"
    )
    username: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Login name (unique, case-sensitive)"
    )
    # Kept verbatim: surrounding spaces are part of the secret
    password: Annotated[
        str,
        StringConstraints(strip_whitespace=False),
        Field(description="Credential secret"),
    ] = ""
    role: UserRole
    profile_pic: Optional[str] = Field(
        default=None,
        description="Avatar as a data URI"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Category(DocumentModel):
    """A selectable ledger category."""

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = "Plus"
    color: str = "#64748b"
    is_custom: Optional[bool] = None


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class TransactionDraft(BaseModel):
    """
    What a submitter fills in.

    The system adds id, owner, submitter name and initial status
    when the draft becomes a Transaction.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the organization's currency"
    )
    type: TransactionType
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name from the role-scoped catalog"
    )
    sub_category: Optional[str] = Field(
        default=None,
        max_length=100,
    )
    source: PaymentChannel
    occurred_on: date = Field(
        default_factory=date.today,
        alias="date",
        description="When the money moved"
    )
    note: str = Field(
        default="",
        max_length=1000,
    )

    @field_validator('sub_category')
    @classmethod
    def empty_sub_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class Transaction(DocumentModel):
    """
    A ledger entry.

    CRITICAL: `user_id` and `created_by` are a snapshot taken at
    creation. They do not follow later edits or deletion of the user.
    `type` and `amount` never change; only `status` does, and only
    through the lifecycle state machine.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique transaction ID"
    )
    amount: Decimal = Field(..., ge=0)
    type: TransactionType
    category: str = Field(..., min_length=1)
    sub_category: Optional[str] = None
    source: PaymentChannel
    occurred_on: date = Field(..., alias="date")
    note: str = ""
    user_id: str = Field(
        ...,
        description="ID of the submitting user"
    )
    created_by: str = Field(
        ...,
        description="Submitter username at creation time"
    )
    status: TransactionStatus

    @property
    def is_requisition(self) -> bool:
        return self.category == REQUISITION_CATEGORY

    @classmethod
    def from_draft(
        cls,
        draft: TransactionDraft,
        submitter: User,
        status: TransactionStatus,
    ) -> "Transaction":
        """Stamp a draft with identity, ownership and initial status."""
        return cls(
            amount=draft.amount,
            type=draft.type,
            category=draft.category,
            sub_category=draft.sub_category,
            source=draft.source,
            occurred_on=draft.occurred_on,
            note=draft.note,
            user_id=submitter.id,
            created_by=submitter.username,
            status=status,
        )


# =============================================================================
# APPLICATION STATE
# =============================================================================

class AppState(DocumentModel):
    """
    The whole ledger document.

    Loaded once at start and written back in full after every
    successful mutation (last writer wins).
    """

    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    current_user: Optional[User] = None
    company_name: Optional[str] = None
    company_logo: Optional[str] = Field(
        default=None,
        description="Logo as a data URI"
    )
    sheet_url: Optional[str] = Field(
        default=None,
        description="Remote sync endpoint"
    )
    last_synced: Optional[str] = Field(
        default=None,
        description="Human-readable time of the last successful sync"
    )

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def find_user(self, user_id: str) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def find_user_by_username(self, username: str) -> Optional[User]:
        for user in self.users:
            if user.username == username:
                return user
        return None


# =============================================================================
# DERIVED / QUERY MODELS
# =============================================================================

class TransactionQuery(BaseModel):
    """
    Filters for the ledger view. All given filters must match.

    "all" (what list pickers send) is treated as no filter.
    """

    search: str = Field(
        default="",
        description="Case-insensitive substring over note, category and submitter"
    )
    user_id: Optional[str] = None
    category: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    include_requisitions: bool = False

    @field_validator('user_id', 'category')
    @classmethod
    def all_means_unfiltered(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "" or v == "all":
            return None
        return v


class LedgerSummary(BaseModel):
    """Aggregated figures over the relevant transactions of a set."""

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    channel_balances: dict[PaymentChannel, Decimal] = Field(default_factory=dict)


class AdvisoryTip(BaseModel):
    """A short advisory string produced by the advisory engine."""

    tip: str = Field(..., min_length=1, max_length=500)
    type: TipType = TipType.INFO


class ValidationIssue(BaseModel):
    """A single validation issue found in a submission."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_allowed', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None
