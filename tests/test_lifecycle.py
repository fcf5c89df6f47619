"""Tests for the transaction lifecycle state machine."""

from datetime import date
from decimal import Decimal

import pytest

from finvue.exceptions import AuthorizationError
from finvue.lifecycle import (
    LIFECYCLE_TRANSITIONS,
    TERMINAL_STATUSES,
    advance,
    check_transition,
    initial_status,
    is_terminal,
)
from finvue.models.ledger import (
    PaymentChannel,
    Transaction,
    TransactionStatus,
    TransactionType,
    UserRole,
)


S = TransactionStatus


def _transaction(status=S.PENDING, tx_type=TransactionType.EXPENSE) -> Transaction:
    return Transaction(
        amount=Decimal("500"),
        type=tx_type,
        category="Rent",
        source=PaymentChannel.CASH,
        occurred_on=date(2024, 5, 1),
        user_id="u1",
        created_by="alice",
        status=status,
    )


class TestGraph:
    """Tests for the lifecycle graph."""

    def test_terminal_statuses(self):
        """Test that APPROVED and REJECTED are terminal."""
        assert TERMINAL_STATUSES == {S.APPROVED, S.REJECTED}
        assert is_terminal(S.APPROVED)
        assert not is_terminal(S.VERIFIED)

    def test_edges(self):
        """Test the forward-only edges."""
        assert LIFECYCLE_TRANSITIONS[S.PENDING] == {S.VERIFIED, S.APPROVED, S.REJECTED}
        assert LIFECYCLE_TRANSITIONS[S.VERIFIED] == {S.APPROVED, S.REJECTED}


class TestInitialStatus:
    """Tests for the status a new entry starts in."""

    @pytest.mark.parametrize("role", list(UserRole))
    def test_income_is_approved(self, role):
        """Test that income by any role is approved at once."""
        assert initial_status(TransactionType.INCOME, role) == S.APPROVED

    def test_admin_expense_is_approved(self):
        """Test that admin expenses skip review."""
        assert initial_status(TransactionType.EXPENSE, UserRole.ADMIN) == S.APPROVED

    @pytest.mark.parametrize("role", [UserRole.MANAGER, UserRole.EMPLOYEE, UserRole.BILLING_EXECUTIVE])
    def test_other_expenses_are_pending(self, role):
        """Test that other expenses wait for review."""
        assert initial_status(TransactionType.EXPENSE, role) == S.PENDING


class TestTransitions:
    """Tests for checked transitions."""

    def test_advance_changes_only_status(self):
        """Test that a transition leaves every other field alone."""
        original = _transaction()
        updated = advance(original, S.VERIFIED, UserRole.MANAGER)
        assert updated.status == S.VERIFIED
        assert updated.model_dump(exclude={"status"}) == original.model_dump(exclude={"status"})
        assert original.status == S.PENDING

    def test_full_review_path(self):
        """Test PENDING -> VERIFIED -> APPROVED."""
        verified = advance(_transaction(), S.VERIFIED, UserRole.MANAGER)
        approved = advance(verified, S.APPROVED, UserRole.ADMIN)
        assert approved.status == S.APPROVED

    @pytest.mark.parametrize("status", [S.APPROVED, S.REJECTED])
    @pytest.mark.parametrize("target", list(TransactionStatus))
    def test_terminal_statuses_are_absorbing(self, status, target):
        """Test that nothing leaves APPROVED or REJECTED."""
        with pytest.raises(AuthorizationError):
            check_transition(_transaction(status=status), target, UserRole.ADMIN)

    def test_employee_cannot_verify(self):
        """Test that a role outside the table is refused."""
        with pytest.raises(AuthorizationError) as exc_info:
            check_transition(_transaction(), S.VERIFIED, UserRole.EMPLOYEE)
        assert exc_info.value.role == "EMPLOYEE"

    def test_admin_cannot_fast_track_income(self):
        """Test that a pending income entry needs verification first."""
        with pytest.raises(AuthorizationError):
            check_transition(_transaction(tx_type=TransactionType.INCOME), S.APPROVED, UserRole.ADMIN)

    def test_verified_cannot_be_verified_again(self):
        """Test that a self-loop is not a transition."""
        with pytest.raises(AuthorizationError):
            check_transition(_transaction(status=S.VERIFIED), S.VERIFIED, UserRole.MANAGER)
