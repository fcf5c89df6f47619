"""
Shared fixtures.

Every test gets a fresh ledger backed by in-memory storage, with the
bootstrap ADMIN plus one user per other role.
"""

import pytest

from finvue.audit import AuditLogger
from finvue.config import LedgerSettings
from finvue.ledger import LedgerService, LedgerStore
from finvue.models.ledger import UserRole
from finvue.services.storage import InMemoryAuditStorage, InMemoryStateStorage


@pytest.fixture
def ledger_settings(tmp_path):
    return LedgerSettings(data_dir=str(tmp_path))


@pytest.fixture
def state_storage():
    return InMemoryStateStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def store(state_storage, ledger_settings):
    return LedgerStore(state_storage, ledger_settings)


@pytest.fixture
def service(store, audit_storage):
    return LedgerService(store, audit_logger=AuditLogger(audit_storage))


@pytest.fixture
def admin(service):
    return service.state.find_user("admin_1")


@pytest.fixture
def manager(service, admin):
    return service.create_user("maria", "m-pass", UserRole.MANAGER, actor=admin)


@pytest.fixture
def employee(service, admin):
    return service.create_user("emil", "e-pass", UserRole.EMPLOYEE, actor=admin)


@pytest.fixture
def billing(service, admin):
    return service.create_user("bill", "b-pass", UserRole.BILLING_EXECUTIVE, actor=admin)


@pytest.fixture
def make_draft():
    """Build a raw submission dict with sensible defaults."""

    def _make(
        amount="500",
        type="EXPENSE",
        category="Conveyance",
        source="Cash",
        on="2024-05-01",
        note="",
        **extra,
    ) -> dict:
        draft = {
            "amount": amount,
            "type": type,
            "category": category,
            "source": source,
            "date": on,
            "note": note,
        }
        draft.update(extra)
        return draft

    return _make
