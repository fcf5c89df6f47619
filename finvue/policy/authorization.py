"""
Authorization Policy

DESIGN DECISION: One capability table decides every status transition.
The ledger service, the views and the tests all consult the same table,
so "who may move what where" is never duplicated in code.

All functions here are pure: they look only at roles, types and
statuses, never at stored state.
"""

from typing import Optional

from finvue.models.ledger import (
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
    UserRole,
)


# (role, current status, type or None for "any type") -> permitted targets
TRANSITION_CAPABILITIES: dict[
    tuple[UserRole, TransactionStatus, Optional[TransactionType]],
    frozenset[TransactionStatus],
] = {
    (UserRole.MANAGER, TransactionStatus.PENDING, None): frozenset({
        TransactionStatus.VERIFIED,
        TransactionStatus.REJECTED,
    }),
    (UserRole.ADMIN, TransactionStatus.VERIFIED, None): frozenset({
        TransactionStatus.APPROVED,
        TransactionStatus.REJECTED,
    }),
    # Admin may skip verification for expenses only
    (UserRole.ADMIN, TransactionStatus.PENDING, TransactionType.EXPENSE): frozenset({
        TransactionStatus.APPROVED,
        TransactionStatus.REJECTED,
    }),
}

GLOBAL_VIEWERS = frozenset({UserRole.ADMIN, UserRole.MANAGER})


def is_global_viewer(role: UserRole) -> bool:
    """ADMIN and MANAGER see every transaction."""
    return role in GLOBAL_VIEWERS


def can_view(actor: User, transaction: Transaction) -> bool:
    """Visibility predicate applied to every read path."""
    return is_global_viewer(actor.role) or transaction.user_id == actor.id


def allowed_transitions(
    role: UserRole,
    transaction_type: TransactionType,
    status: TransactionStatus,
) -> frozenset[TransactionStatus]:
    """
    Target statuses `role` may move a `transaction_type` entry to from `status`.

    Empty for terminal statuses and for roles without review rights.
    """
    return (
        TRANSITION_CAPABILITIES.get((role, status, None), frozenset())
        | TRANSITION_CAPABILITIES.get((role, status, transaction_type), frozenset())
    )


def can_delete_transaction(role: UserRole) -> bool:
    return role == UserRole.ADMIN


def can_manage_users(role: UserRole) -> bool:
    return role == UserRole.ADMIN


def can_manage_settings(role: UserRole) -> bool:
    return role == UserRole.ADMIN


def can_delete_user(actor_role: UserRole, target: User) -> bool:
    """ADMIN accounts are never removed through the delete path."""
    return actor_role == UserRole.ADMIN and target.role != UserRole.ADMIN
