"""
Tests for FinVue Ledger

Test strategy:
1. Unit tests for individual components (models, policy, queries)
2. Integration tests for flows (with mocked external services)
3. No real API calls in tests (use mocks)
"""

import json
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from finvue.models.ledger import (
    AdvisoryTip,
    AppState,
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


def _transaction(**overrides) -> Transaction:
    fields = dict(
        amount=Decimal("120.50"),
        type=TransactionType.EXPENSE,
        category="Food",
        source=PaymentChannel.CASH,
        occurred_on=date(2024, 5, 1),
        user_id="u1",
        created_by="alice",
        status=TransactionStatus.PENDING,
    )
    fields.update(overrides)
    return Transaction(**fields)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_user_creation(self):
        """Test User model creation with a generated id."""
        user = User(username="alice", password="secret", role=UserRole.EMPLOYEE)
        assert user.id
        assert user.username == "alice"
        assert not user.is_admin

    def test_user_strips_whitespace(self):
        """Test that whitespace is stripped from the username."""
        user = User(username="  alice  ", role=UserRole.MANAGER)
        assert user.username == "alice"

    def test_user_rejects_empty_username(self):
        """Test that an empty username is rejected."""
        with pytest.raises(ValueError):
            User(username="", role=UserRole.EMPLOYEE)

    def test_draft_accepts_document_keys(self):
        """Test that drafts parse the persisted camelCase keys."""
        draft = TransactionDraft.model_validate({
            "amount": "250",
            "type": "EXPENSE",
            "category": "Conveyance",
            "subCategory": "Bus",
            "source": "Bkash",
            "date": "2024-03-02",
        })
        assert draft.amount == Decimal("250")
        assert draft.sub_category == "Bus"
        assert draft.source == PaymentChannel.BKASH
        assert draft.occurred_on == date(2024, 3, 2)
        assert draft.note == ""

    def test_draft_empty_sub_category_is_none(self):
        """Test that an empty sub-category means none."""
        draft = TransactionDraft(
            amount=Decimal("1"),
            type=TransactionType.EXPENSE,
            category="Food",
            sub_category="",
            source=PaymentChannel.CASH,
        )
        assert draft.sub_category is None

    def test_draft_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            TransactionDraft(
                amount=Decimal("-1"),
                type=TransactionType.EXPENSE,
                category="Food",
                source=PaymentChannel.CASH,
            )

    def test_draft_rejects_unknown_channel(self):
        """Test that the payment channel set is closed."""
        with pytest.raises(ValueError):
            TransactionDraft.model_validate({
                "amount": "1",
                "type": "EXPENSE",
                "category": "Food",
                "source": "Paypal",
            })

    def test_transaction_is_frozen(self):
        """Test that a stored transaction cannot be edited in place."""
        transaction = _transaction()
        with pytest.raises(ValueError):
            transaction.amount = Decimal("1")

    def test_transaction_from_draft_snapshots_submitter(self):
        """Test that from_draft stamps owner, submitter name and status."""
        submitter = User(id="u9", username="zed", role=UserRole.EMPLOYEE)
        draft = TransactionDraft(
            amount=Decimal("40"),
            type=TransactionType.EXPENSE,
            category="Conveyance",
            source=PaymentChannel.NAGAD,
            occurred_on=date(2024, 1, 1),
        )
        transaction = Transaction.from_draft(draft, submitter, TransactionStatus.PENDING)
        assert transaction.user_id == "u9"
        assert transaction.created_by == "zed"
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.id

    def test_transaction_document_uses_camel_case(self):
        """Test the persisted key layout of a transaction."""
        document = _transaction(sub_category="Oil").to_document()
        assert document["userId"] == "u1"
        assert document["createdBy"] == "alice"
        assert document["subCategory"] == "Oil"
        assert document["date"] == "2024-05-01"
        assert document["amount"] == "120.50"
        json.dumps(document)

    def test_requisition_flag(self):
        """Test that the Requisition category is recognized."""
        assert _transaction(category="Requisition").is_requisition
        assert not _transaction(category="Rent").is_requisition

    def test_app_state_lookups(self):
        """Test finding records in the app state."""
        user = User(id="u1", username="alice", role=UserRole.EMPLOYEE)
        transaction = _transaction()
        state = AppState(users=[user], transactions=[transaction])
        assert state.find_user("u1") == user
        assert state.find_user_by_username("alice") == user
        assert state.find_user_by_username("Alice") is None
        assert state.find_transaction(transaction.id) == transaction
        assert state.find_transaction("missing") is None

    def test_app_state_document_keeps_null_current_user(self):
        """Test that currentUser is written even when nobody is logged in."""
        document = AppState().to_document()
        assert "currentUser" in document
        assert document["currentUser"] is None

    def test_query_treats_all_as_no_filter(self):
        """Test that 'all' from a picker disables the filter."""
        query = TransactionQuery(user_id="all", category="")
        assert query.user_id is None
        assert query.category is None

    def test_summary_defaults_to_zero(self):
        """Test an empty summary."""
        summary = LedgerSummary()
        assert summary.balance == Decimal("0")
        assert summary.count == 0

    def test_advisory_tip_default_type(self):
        """Test the default tip type."""
        assert AdvisoryTip(tip="Save more").type == TipType.INFO

    def test_validation_issue_severity_pattern(self):
        """Test that only known severities are accepted."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            description="Test event",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.STATUS_CHANGED,
            description="Test",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "status_changed"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_json_line_round_trip(self):
        """Test that a JSON line parses back into the same event."""
        event = AuditEventBuilder.login_failed("mallory")
        restored = AuditEvent.model_validate_json(event.to_json_line())
        assert restored.event_id == event.event_id
        assert restored.event_type == AuditEventType.LOGIN_FAILED
        assert restored.details == {"username": "mallory"}

    def test_builder_status_changed(self):
        """Test AuditEventBuilder.status_changed."""
        event = AuditEventBuilder.status_changed("t1", "PENDING", "VERIFIED", "u1", "MANAGER")
        assert event.event_type == AuditEventType.STATUS_CHANGED
        assert event.entity_id == "t1"
        assert event.details == {"from_status": "PENDING", "to_status": "VERIFIED"}
        assert event.is_user_action

    def test_builder_transaction_deleted_is_warning(self):
        """Test that permanent deletes stand out in the log."""
        event = AuditEventBuilder.transaction_deleted("t1", "APPROVED", "10", "Food", "u1", "ADMIN")
        assert event.severity == AuditSeverity.WARNING
        assert event.details["status_at_delete"] == "APPROVED"

    def test_builder_user_changed(self):
        """Test the user administration events."""
        event = AuditEventBuilder.user_changed(
            AuditEventType.USER_DELETED, "u2", "bob", "EMPLOYEE", "admin_1",
        )
        assert event.description == "User deleted: bob"
        assert event.details["role"] == "EMPLOYEE"
