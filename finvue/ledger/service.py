"""
Ledger Service

The public, synchronous entry points of the ledger:

- Session: login / logout
- Transactions: submit, review (verify / approve / reject), delete
- Users and organization settings (ADMIN only)
- Read views: dashboard, ledger, rejected, requisitions

DESIGN DECISION: Every write is checked against the LIVE state inside
`LedgerStore.apply`. Two reviewers acting on a stale screen cannot both
win: the second one sees the status the first one committed and is
rejected by the capability table. The same goes for the actor: the
role checked is the one stored now, so a demoted or deleted reviewer
loses their rights at once.

Every operation is all-or-nothing. A raised LedgerError means the state
is exactly what it was before the call.
"""

from typing import Any, Callable, Optional, Union

import structlog

from finvue.audit.logger import AuditLogger
from finvue.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from finvue.ledger.store import LedgerStore
from finvue.lifecycle.state_machine import advance, initial_status
from finvue.models.audit import AuditEventBuilder, AuditEventType
from finvue.models.ledger import (
    AppState,
    Category,
    LedgerSummary,
    Transaction,
    TransactionDraft,
    TransactionQuery,
    TransactionStatus,
    TransactionType,
    User,
    UserRole,
    ValidationIssue,
)
from finvue.policy.authorization import (
    can_delete_transaction,
    can_delete_user,
    can_manage_settings,
    can_manage_users,
)
from finvue.policy.catalog import allowed_transaction_types, available_categories
from finvue.queries import aggregation, filters
from finvue.validation.validator import TransactionValidator


logger = structlog.get_logger()

Confirm = Callable[[Any], bool]


class LedgerService:
    """
    Composes store, policy, lifecycle, validation and audit.

    Operations act as `actor` when one is given, otherwise as the
    logged-in user. With neither, they raise AuthorizationError.
    """

    def __init__(
        self,
        store: LedgerStore,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or TransactionValidator()
        self._audit = audit_logger or AuditLogger()

    @property
    def state(self) -> AppState:
        return self._store.state

    @property
    def current_user(self) -> Optional[User]:
        return self._store.state.current_user

    def _actor(self, actor: Optional[User], action: Optional[str] = None) -> User:
        actor = actor or self._store.state.current_user
        if actor is None:
            raise AuthorizationError("No user is logged in", action=action)
        try:
            return self._live_actor(self._store.state, actor, action)
        except AuthorizationError as e:
            raise self._deny(action or "access", actor, str(e)) from e

    @staticmethod
    def _live_actor(state: AppState, actor: User, action: Optional[str] = None) -> User:
        """
        The actor's record as stored in `state`.

        Permissions follow this record, never the caller's copy: a role
        change or deletion takes effect on the very next operation.
        """
        live = state.find_user(actor.id)
        if live is None:
            raise AuthorizationError(
                f"User {actor.username} no longer exists",
                role=actor.role.value,
                action=action,
            )
        return live

    def _deny(
        self,
        action: str,
        actor: Optional[User],
        reason: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AuthorizationError:
        """Audit a refusal and build the exception to raise."""
        role = actor.role.value if actor else None
        self._audit.log(AuditEventBuilder.authorization_denied(
            action=action,
            actor_id=actor.id if actor else None,
            actor_role=role,
            reason=reason,
            entity_type=entity_type,
            entity_id=entity_id,
        ))
        return AuthorizationError(reason, role=role, action=action)

    def _apply_as(
        self,
        action: str,
        actor: User,
        mutation: Callable[[AppState], AppState],
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AppState:
        """Run `mutation`, auditing a refusal raised from inside it."""
        try:
            return self._store.apply(mutation)
        except AuthorizationError as e:
            raise self._deny(action, actor, str(e), entity_type, entity_id) from e

    # =========================================================================
    # SESSION
    # =========================================================================

    def login(self, username: str, password: str) -> Optional[User]:
        """
        Credential check by plain equality.

        Returns the user and makes them current, or None on mismatch.
        """
        user = self._store.state.find_user_by_username(username)
        if user is None or user.password != password:
            self._audit.log(AuditEventBuilder.login_failed(username))
            return None

        self._store.apply(lambda state: state.model_copy(update={"current_user": user}))
        self._audit.log(AuditEventBuilder.login_succeeded(user.id, user.username, user.role.value))
        return user

    def logout(self) -> None:
        user = self._store.state.current_user
        if user is None:
            return
        self._store.apply(lambda state: state.model_copy(update={"current_user": None}))
        self._audit.log(AuditEventBuilder.logout(user.id, user.role.value))

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def submission_options(
        self,
        transaction_type: TransactionType,
        actor: Optional[User] = None,
    ) -> list[Category]:
        """Categories the actor may pick for a new entry of this type."""
        actor = self._actor(actor)
        if transaction_type not in allowed_transaction_types(actor.role):
            return []
        return available_categories(actor.role, transaction_type)

    def add_transaction(
        self,
        draft: Union[TransactionDraft, dict[str, Any]],
        actor: Optional[User] = None,
    ) -> Transaction:
        """
        Submit a new entry.

        The initial status follows the lifecycle rules: income and
        admin expenses are approved at once, other expenses start PENDING.

        Raises:
            ValidationError: malformed draft or category outside the actor's catalog
            AuthorizationError: nobody logged in, or the actor no longer exists
        """
        actor = self._actor(actor, "add_transaction")
        created: list[tuple[User, Transaction]] = []
        warnings: list[ValidationIssue] = []

        def mutation(state: AppState) -> AppState:
            # Catalog and initial status both follow the submitter's live role
            submitter = self._live_actor(state, actor, "add_transaction")
            parsed, issues = self._validator.validate(draft, submitter)
            transaction = Transaction.from_draft(
                parsed,
                submitter,
                initial_status(parsed.type, submitter.role),
            )
            created.append((submitter, transaction))
            warnings.extend(issues)
            return state.model_copy(update={"transactions": [*state.transactions, transaction]})

        try:
            self._apply_as("add_transaction", actor, mutation, "transaction")
        except ValidationError as e:
            self._audit.log(AuditEventBuilder.validation_failed(
                issues=[issue.model_dump() for issue in e.issues],
                actor_id=actor.id,
                actor_role=actor.role.value,
            ))
            raise

        for warning in warnings:
            logger.warning("submission_warning", field=warning.field, message=warning.message)

        actor, transaction = created[0]

        self._audit.log(AuditEventBuilder.transaction_created(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            category=transaction.category,
            amount=str(transaction.amount),
            status=transaction.status.value,
            actor_id=actor.id,
            actor_role=actor.role.value,
        ))
        return transaction

    def transition(
        self,
        transaction_id: str,
        target: TransactionStatus,
        actor: Optional[User] = None,
    ) -> Transaction:
        """
        Move a transaction to `target`.

        Checked against the live record, so a decision made on a stale
        view fails instead of overwriting someone else's.

        Raises:
            NotFoundError: the transaction does not exist (anymore)
            AuthorizationError: the move is not in the actor's capabilities
        """
        action = f"transition:{target.value}"
        actor = self._actor(actor, action)
        moved: list[tuple[User, TransactionStatus, Transaction]] = []

        def mutation(state: AppState) -> AppState:
            reviewer = self._live_actor(state, actor, action)
            current = state.find_transaction(transaction_id)
            if current is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")
            updated = advance(current, target, reviewer.role)
            moved.append((reviewer, current.status, updated))
            return state.model_copy(update={
                "transactions": [
                    updated if t.id == transaction_id else t
                    for t in state.transactions
                ],
            })

        self._apply_as(action, actor, mutation, "transaction", transaction_id)

        actor, from_status, updated = moved[0]
        self._audit.log(AuditEventBuilder.status_changed(
            transaction_id=transaction_id,
            from_status=from_status.value,
            to_status=updated.status.value,
            actor_id=actor.id,
            actor_role=actor.role.value,
        ))
        return updated

    def verify(self, transaction_id: str, actor: Optional[User] = None) -> Transaction:
        return self.transition(transaction_id, TransactionStatus.VERIFIED, actor)

    def approve(self, transaction_id: str, actor: Optional[User] = None) -> Transaction:
        return self.transition(transaction_id, TransactionStatus.APPROVED, actor)

    def reject(self, transaction_id: str, actor: Optional[User] = None) -> Transaction:
        return self.transition(transaction_id, TransactionStatus.REJECTED, actor)

    def delete_transaction(
        self,
        transaction_id: str,
        confirm: Confirm,
        actor: Optional[User] = None,
    ) -> bool:
        """
        Permanently remove one transaction, whatever its status.

        `confirm` is called with the record; a falsy answer cancels
        and returns False without touching the ledger.

        Raises:
            AuthorizationError: the actor is not ADMIN
            NotFoundError: the transaction does not exist (anymore)
        """
        actor = self._actor(actor, "delete_transaction")
        if not can_delete_transaction(actor.role):
            raise self._deny(
                "delete_transaction", actor,
                f"{actor.role.value} may not delete transactions",
                "transaction", transaction_id,
            )

        transaction = self._store.state.find_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        # Asked outside the lock: the answer may take a while
        if not confirm(transaction):
            self._audit.log(AuditEventBuilder.delete_cancelled(
                "transaction", transaction_id, actor.id, actor.role.value,
            ))
            return False

        def mutation(state: AppState) -> AppState:
            # The answer may have taken a while: re-check the deleter too
            if not can_delete_transaction(self._live_actor(state, actor, "delete_transaction").role):
                raise AuthorizationError(
                    f"{actor.username} may no longer delete transactions",
                    role=actor.role.value,
                    action="delete_transaction",
                )
            if state.find_transaction(transaction_id) is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")
            return state.model_copy(update={
                "transactions": [t for t in state.transactions if t.id != transaction_id],
            })

        self._apply_as("delete_transaction", actor, mutation, "transaction", transaction_id)
        self._audit.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            status=transaction.status.value,
            amount=str(transaction.amount),
            category=transaction.category,
            actor_id=actor.id,
            actor_role=actor.role.value,
        ))
        return True

    # =========================================================================
    # USERS
    # =========================================================================

    def _require_user_admin(self, action: str, actor: Optional[User]) -> User:
        actor = self._actor(actor, action)
        if not can_manage_users(actor.role):
            raise self._deny(action, actor, f"{actor.role.value} may not manage users", "user")
        return actor

    def _live_user_admin(self, state: AppState, actor: User, action: str) -> User:
        """Re-check user administration rights inside a mutation."""
        live = self._live_actor(state, actor, action)
        if not can_manage_users(live.role):
            raise AuthorizationError(
                f"{live.role.value} may not manage users", role=live.role.value, action=action,
            )
        return live

    @staticmethod
    def _username_taken(state: AppState, username: str, except_id: Optional[str] = None) -> None:
        existing = state.find_user_by_username(username)
        if existing is not None and existing.id != except_id:
            raise ValidationError(
                f"Username already exists: {username}",
                issues=[ValidationIssue(
                    field="username",
                    issue_type="duplicate",
                    message=f"Username '{username}' is already taken",
                )],
            )

    def create_user(
        self,
        username: str,
        password: str,
        role: UserRole,
        profile_pic: Optional[str] = None,
        actor: Optional[User] = None,
    ) -> User:
        actor = self._require_user_admin("create_user", actor)
        user = User(username=username, password=password, role=role, profile_pic=profile_pic)

        def mutation(state: AppState) -> AppState:
            self._live_user_admin(state, actor, "create_user")
            self._username_taken(state, user.username)
            return state.model_copy(update={"users": [*state.users, user]})

        self._apply_as("create_user", actor, mutation, "user", user.id)
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.USER_CREATED, user.id, user.username, user.role.value, actor.id,
        ))
        return user

    def update_user(
        self,
        user_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[UserRole] = None,
        profile_pic: Optional[str] = None,
        actor: Optional[User] = None,
    ) -> User:
        """
        Edit a user. Arguments left as None keep their value.

        Transactions keep the submitter name they were created with.
        A role change applies to the user's very next operation.
        """
        actor = self._require_user_admin("update_user", actor)
        changes = {
            key: value for key, value in (
                ("username", username),
                ("password", password),
                ("role", role),
                ("profile_pic", profile_pic),
            ) if value is not None
        }
        updated: list[User] = []

        def mutation(state: AppState) -> AppState:
            self._live_user_admin(state, actor, "update_user")
            current = state.find_user(user_id)
            if current is None:
                raise NotFoundError(f"User not found: {user_id}")
            user = User.model_validate({**current.model_dump(), **changes})
            self._username_taken(state, user.username, except_id=user_id)
            updated.append(user)
            update: dict[str, Any] = {
                "users": [user if u.id == user_id else u for u in state.users],
            }
            if state.current_user is not None and state.current_user.id == user_id:
                update["current_user"] = user
            return state.model_copy(update=update)

        self._apply_as("update_user", actor, mutation, "user", user_id)
        user = updated[0]
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.USER_UPDATED, user.id, user.username, user.role.value, actor.id,
        ))
        return user

    def delete_user(
        self,
        user_id: str,
        confirm: Confirm,
        actor: Optional[User] = None,
    ) -> bool:
        """
        Remove a non-ADMIN user. Their transactions stay in the ledger.

        A deleted user who is logged in is logged out.
        Returns False when `confirm` declines.
        """
        actor = self._actor(actor, "delete_user")
        target = self._store.state.find_user(user_id)
        if target is None:
            raise NotFoundError(f"User not found: {user_id}")
        if not can_delete_user(actor.role, target):
            raise self._deny(
                "delete_user", actor,
                f"{actor.role.value} may not delete {target.role.value} user {target.username}",
                "user", user_id,
            )

        if not confirm(target):
            self._audit.log(AuditEventBuilder.delete_cancelled(
                "user", user_id, actor.id, actor.role.value,
            ))
            return False

        def mutation(state: AppState) -> AppState:
            deleter = self._live_actor(state, actor, "delete_user")
            current = state.find_user(user_id)
            if current is None:
                raise NotFoundError(f"User not found: {user_id}")
            if not can_delete_user(deleter.role, current):
                raise AuthorizationError(
                    f"{deleter.role.value} may not delete {current.role.value} user {current.username}",
                    role=deleter.role.value,
                    action="delete_user",
                )
            update: dict[str, Any] = {
                "users": [u for u in state.users if u.id != user_id],
            }
            if state.current_user is not None and state.current_user.id == user_id:
                update["current_user"] = None
            return state.model_copy(update=update)

        self._apply_as("delete_user", actor, mutation, "user", user_id)
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.USER_DELETED, target.id, target.username, target.role.value, actor.id,
        ))
        return True

    def set_avatar(
        self,
        user_id: str,
        data_uri: str,
        actor: Optional[User] = None,
    ) -> User:
        """Users may change their own picture; ADMIN may change anyone's."""
        actor = self._actor(actor, "set_avatar")
        if actor.id != user_id and not can_manage_users(actor.role):
            raise self._deny(
                "set_avatar", actor, "Only ADMIN may change another user's picture", "user", user_id,
            )
        updated: list[User] = []

        def mutation(state: AppState) -> AppState:
            if actor.id != user_id:
                self._live_user_admin(state, actor, "set_avatar")
            current = state.find_user(user_id)
            if current is None:
                raise NotFoundError(f"User not found: {user_id}")
            user = current.model_copy(update={"profile_pic": data_uri})
            updated.append(user)
            update: dict[str, Any] = {
                "users": [user if u.id == user_id else u for u in state.users],
            }
            if state.current_user is not None and state.current_user.id == user_id:
                update["current_user"] = user
            return state.model_copy(update=update)

        self._apply_as("set_avatar", actor, mutation, "user", user_id)
        user = updated[0]
        self._audit.log(AuditEventBuilder.user_changed(
            AuditEventType.USER_UPDATED, user.id, user.username, user.role.value, actor.id,
        ))
        return user

    # =========================================================================
    # ORGANIZATION SETTINGS
    # =========================================================================

    def update_settings(
        self,
        company_name: Optional[str] = None,
        company_logo: Optional[str] = None,
        sheet_url: Optional[str] = None,
        actor: Optional[User] = None,
    ) -> AppState:
        """
        Change organization settings. Arguments left as None keep their value;
        an empty string clears the setting.
        """
        actor = self._actor(actor, "update_settings")
        if not can_manage_settings(actor.role):
            raise self._deny(
                "update_settings", actor, f"{actor.role.value} may not change settings", "settings",
            )
        changes = {
            key: (value.strip() or None)
            for key, value in (
                ("company_name", company_name),
                ("company_logo", company_logo),
                ("sheet_url", sheet_url),
            ) if value is not None
        }
        if not changes:
            return self._store.state

        def mutation(state: AppState) -> AppState:
            live = self._live_actor(state, actor, "update_settings")
            if not can_manage_settings(live.role):
                raise AuthorizationError(
                    f"{live.role.value} may not change settings",
                    role=live.role.value,
                    action="update_settings",
                )
            return state.model_copy(update=changes)

        state = self._apply_as("update_settings", actor, mutation, "settings")
        self._audit.log(AuditEventBuilder.settings_updated(
            sorted(changes), actor.id, actor.role.value,
        ))
        return state

    def record_sync(self, synced_at: str) -> AppState:
        """Stamp a successful remote sync. Called by the sync flow only."""
        return self._store.apply(lambda s: s.model_copy(update={"last_synced": synced_at}))

    # =========================================================================
    # READ VIEWS
    # =========================================================================

    def visible_transactions(self, actor: Optional[User] = None) -> list[Transaction]:
        return filters.scope_to_actor(self._store.state.transactions, self._actor(actor))

    def dashboard_summary(self, actor: Optional[User] = None) -> LedgerSummary:
        return aggregation.summarize(self.visible_transactions(actor))

    def expense_breakdown(self, actor: Optional[User] = None) -> dict:
        return aggregation.expense_by_category(self.visible_transactions(actor))

    def advisory_input(self, actor: Optional[User] = None) -> list[Transaction]:
        """What the advisory engine is allowed to see."""
        return aggregation.relevant(self.visible_transactions(actor))

    def ledger_view(
        self,
        query: Optional[TransactionQuery] = None,
        actor: Optional[User] = None,
    ) -> list[Transaction]:
        return filters.ledger_view(self._store.state.transactions, self._actor(actor), query)

    def filtered_summary(
        self,
        query: Optional[TransactionQuery] = None,
        actor: Optional[User] = None,
    ) -> LedgerSummary:
        return filters.filtered_summary(self._store.state.transactions, self._actor(actor), query)

    def rejected_view(self, actor: Optional[User] = None) -> list[Transaction]:
        return filters.rejected_view(self._store.state.transactions, self._actor(actor))

    def requisition_view(self, actor: Optional[User] = None) -> list[Transaction]:
        return filters.requisition_view(self._store.state.transactions, self._actor(actor))
