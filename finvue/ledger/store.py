"""
Ledger Store

DESIGN DECISION: Single writer, whole-document persistence.

Every change goes through `apply(mutation)`, where a mutation is a pure
function from the current AppState to the next one. Under one lock the
store:
1. Builds the next state from the live one
2. Hands the full document to the storage adapter
3. Only then swaps the next state in

If the mutation raises, or the save fails, nothing changes. Readers
take `store.state` without the lock: the reference swap is atomic and
states are frozen, so a reader always sees one whole state.
"""

import threading
from typing import Callable, Optional

import structlog
from pydantic import ValidationError as SchemaError

from finvue.config import LedgerSettings, get_settings
from finvue.models.ledger import AppState, User, UserRole
from finvue.policy.catalog import DEFAULT_CATEGORIES
from finvue.services.storage import (
    CorruptDocumentError,
    StateStorageInterface,
)


logger = structlog.get_logger()

Mutation = Callable[[AppState], AppState]


def initial_state(settings: LedgerSettings) -> AppState:
    """First-run document: one ADMIN, the default catalog, no transactions."""
    admin = User(
        id=settings.bootstrap_admin_id,
        username=settings.bootstrap_admin_username,
        password=settings.bootstrap_admin_password,
        role=UserRole.ADMIN,
    )
    return AppState(
        transactions=[],
        categories=list(DEFAULT_CATEGORIES),
        users=[admin],
        current_user=None,
        company_name=settings.default_company_name,
    )


class LedgerStore:
    """
    Holds the one AppState and serializes every write to it.
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().ledger
        self._lock = threading.Lock()
        self._state = self._load()

    def _load(self) -> AppState:
        document = self._storage.load()
        if document is None:
            state = initial_state(self._settings)
            self._storage.save(state.to_document())
            logger.info(
                "ledger_bootstrapped",
                admin_username=self._settings.bootstrap_admin_username,
            )
            return state

        try:
            state = AppState.model_validate(document)
        except SchemaError as e:
            raise CorruptDocumentError(f"Stored ledger document failed validation: {e}")

        logger.info(
            "ledger_loaded",
            transactions=len(state.transactions),
            users=len(state.users),
        )
        return state

    @property
    def state(self) -> AppState:
        return self._state

    def apply(self, mutation: Mutation) -> AppState:
        """
        Atomically replace the state with `mutation(state)`.

        Raises whatever the mutation or the storage adapter raises,
        leaving the state untouched.
        """
        with self._lock:
            next_state = mutation(self._state)
            self._storage.save(next_state.to_document())
            self._state = next_state
            return next_state

    def reset(self) -> AppState:
        """Wipe the stored document and start over from the bootstrap state."""
        with self._lock:
            self._storage.clear()
            self._state = self._load()
            return self._state
