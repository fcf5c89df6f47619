"""
Transaction Lifecycle State Machine

    PENDING ──► VERIFIED ──► APPROVED
       │            │
       │            └──────► REJECTED
       ├──────────────────► APPROVED   (ADMIN, EXPENSE only)
       └──────────────────► REJECTED

APPROVED and REJECTED are terminal. There is no path back to PENDING.

The graph says which moves exist at all; the authorization policy says
which role may make them. A transition is legal only when both agree.
"""

from finvue.exceptions import AuthorizationError
from finvue.models.ledger import (
    Transaction,
    TransactionStatus,
    TransactionType,
    UserRole,
)
from finvue.policy.authorization import allowed_transitions


LIFECYCLE_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({
        TransactionStatus.VERIFIED,
        TransactionStatus.APPROVED,
        TransactionStatus.REJECTED,
    }),
    TransactionStatus.VERIFIED: frozenset({
        TransactionStatus.APPROVED,
        TransactionStatus.REJECTED,
    }),
    TransactionStatus.APPROVED: frozenset(),
    TransactionStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in LIFECYCLE_TRANSITIONS.items() if not targets
)


def is_terminal(status: TransactionStatus) -> bool:
    return status in TERMINAL_STATUSES


def initial_status(transaction_type: TransactionType, submitter_role: UserRole) -> TransactionStatus:
    """
    Status a new entry starts in.

    Income is recorded as approved straight away, as are expenses the
    admin enters. Every other expense waits for review.
    """
    if transaction_type == TransactionType.INCOME:
        return TransactionStatus.APPROVED
    if submitter_role == UserRole.ADMIN:
        return TransactionStatus.APPROVED
    return TransactionStatus.PENDING


def check_transition(
    transaction: Transaction,
    target: TransactionStatus,
    actor_role: UserRole,
) -> None:
    """
    Raise AuthorizationError unless `actor_role` may move `transaction` to `target`.
    """
    if target not in LIFECYCLE_TRANSITIONS[transaction.status]:
        raise AuthorizationError(
            f"No transition {transaction.status.value} -> {target.value}",
            role=actor_role.value,
            action=f"transition:{target.value}",
        )
    if target not in allowed_transitions(actor_role, transaction.type, transaction.status):
        raise AuthorizationError(
            f"{actor_role.value} may not move a {transaction.type.value} "
            f"from {transaction.status.value} to {target.value}",
            role=actor_role.value,
            action=f"transition:{target.value}",
        )


def advance(
    transaction: Transaction,
    target: TransactionStatus,
    actor_role: UserRole,
) -> Transaction:
    """Checked transition returning the replacement record. Only `status` differs."""
    check_transition(transaction, target, actor_role)
    return transaction.model_copy(update={"status": target})
