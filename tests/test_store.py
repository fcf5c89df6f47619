"""Tests for the ledger store, persistence and the audit trail backends."""

import json

import pytest

from finvue.audit import AuditLogger
from finvue.config import LedgerSettings
from finvue.ledger import LedgerService, LedgerStore
from finvue.models.audit import AuditEventBuilder, AuditEventType
from finvue.models.ledger import TransactionStatus, UserRole
from finvue.services.storage import (
    CorruptDocumentError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    JsonLinesAuditStorage,
    StorageError,
)


class TestBootstrap:
    """Tests for first-run state."""

    def test_bootstrap_document(self, store, state_storage):
        """Test the document written on first start."""
        document = state_storage.load()
        assert document["transactions"] == []
        assert document["currentUser"] is None
        assert document["companyName"] == "FinVue Enterprise"
        assert document["users"] == [{
            "id": "admin_1",
            "username": "admin",
            "password": "admin",
            "role": "ADMIN",
            "profilePic": None,
        }]
        assert [c["name"] for c in document["categories"]][:3] == [
            "Requisition", "UPSTREAM BILL", "Conveyance",
        ]

    def test_bootstrap_admin_is_configurable(self, tmp_path):
        """Test that the first admin comes from settings."""
        settings = LedgerSettings(
            data_dir=str(tmp_path),
            bootstrap_admin_username="owner",
            bootstrap_admin_password="s3cret",
        )
        store = LedgerStore(InMemoryStateStorage(), settings)
        assert store.state.users[0].username == "owner"
        assert store.state.users[0].password == "s3cret"

    def test_existing_document_is_not_overwritten(self, ledger_settings):
        """Test that bootstrap only happens when nothing is stored."""
        storage = InMemoryStateStorage()
        LedgerStore(storage, ledger_settings)
        saves = storage.save_count
        LedgerStore(storage, ledger_settings)
        assert storage.save_count == saves

    def test_reset(self, service, store, admin, make_draft):
        """Test that reset returns to the bootstrap state."""
        service.add_transaction(make_draft(category="Rent"), actor=admin)
        assert store.reset().transactions == []


class TestJsonFilePersistence:
    """Tests for the JSON document backend."""

    def test_document_path_uses_storage_key(self, ledger_settings, tmp_path):
        """Test the file name derived from settings."""
        assert ledger_settings.document_path == tmp_path / "finvue_data_v2.json"

    def test_missing_file_loads_none(self, tmp_path):
        """Test loading before anything was saved."""
        assert JsonFileStateStorage(tmp_path / "ledger.json").load() is None

    def test_state_survives_restart(self, tmp_path, ledger_settings, make_draft):
        """Test that a second store sees what the first one wrote."""
        path = tmp_path / "ledger.json"
        first = LedgerService(LedgerStore(JsonFileStateStorage(path), ledger_settings))
        admin = first.login("admin", "admin")
        employee = first.create_user("emil", "pw", UserRole.EMPLOYEE, actor=admin)
        pending = first.add_transaction(make_draft(subCategory="Oil", note="fuel"), actor=employee)
        first.approve(pending.id, actor=admin)

        second = LedgerStore(JsonFileStateStorage(path), ledger_settings)
        assert second.state.to_document() == first.state.to_document()
        restored = second.state.find_transaction(pending.id)
        assert restored.status == TransactionStatus.APPROVED
        assert restored.sub_category == "Oil"
        assert second.state.current_user.username == "admin"

    def test_written_file_uses_document_keys(self, tmp_path, ledger_settings, make_draft):
        """Test the on-disk key layout."""
        path = tmp_path / "ledger.json"
        service = LedgerService(LedgerStore(JsonFileStateStorage(path), ledger_settings))
        admin = service.login("admin", "admin")
        service.add_transaction(make_draft(category="Rent", amount="12.5"), actor=admin)

        document = json.loads(path.read_text(encoding="utf-8"))
        stored = document["transactions"][0]
        assert stored["amount"] == "12.5"
        assert stored["userId"] == "admin_1"
        assert stored["createdBy"] == "admin"
        assert stored["date"] == "2024-05-01"

    def test_corrupt_file(self, tmp_path, ledger_settings):
        """Test that unreadable JSON is reported, not silently replaced."""
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptDocumentError):
            LedgerStore(JsonFileStateStorage(path), ledger_settings)

    def test_invalid_document(self, ledger_settings):
        """Test that a document failing the schema is reported."""
        storage = InMemoryStateStorage({"transactions": [{"amount": "x"}]})
        with pytest.raises(CorruptDocumentError):
            LedgerStore(storage, ledger_settings)

    def test_clear(self, tmp_path):
        """Test removing the document."""
        storage = JsonFileStateStorage(tmp_path / "ledger.json")
        storage.save({"transactions": []})
        storage.clear()
        assert storage.load() is None

    def test_unwritable_location(self, tmp_path):
        """Test that write failures surface as StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        storage = JsonFileStateStorage(blocker / "ledger.json")
        with pytest.raises(StorageError):
            storage.save({"transactions": []})


class TestAuditTrail:
    """Tests for the audit logger and its backends."""

    def test_json_lines_backend(self, tmp_path):
        """Test append and lookups on the JSON-lines file."""
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        first = AuditEventBuilder.status_changed("t1", "PENDING", "VERIFIED", "m1", "MANAGER")
        second = AuditEventBuilder.login_failed("mallory")
        storage.append_event(first)
        storage.append_event(second)

        assert [e.event_id for e in storage.get_events_by_entity("transaction", "t1")] == [first.event_id]
        assert storage.get_recent_events(limit=1)[0].event_id == second.event_id
        assert len((tmp_path / "audit.jsonl").read_text(encoding="utf-8").splitlines()) == 2

    def test_service_writes_trail(self, service, audit_storage, admin, make_draft):
        """Test that ledger operations are audited with the actor."""
        transaction = service.add_transaction(make_draft(category="Rent"), actor=admin)
        events = audit_storage.get_events_by_entity("transaction", transaction.id)
        assert [e.event_type for e in events] == [AuditEventType.TRANSACTION_CREATED]
        assert events[0].actor_id == "admin_1"

    def test_storage_failure_never_breaks_the_flow(self, store, admin, make_draft):
        """Test that a broken audit backend does not fail the operation."""

        class BrokenAuditStorage(JsonLinesAuditStorage):
            def append_event(self, event):
                raise StorageError("audit disk full")

        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.login_failed("x")) is False

        service = LedgerService(store, audit_logger=logger)
        transaction = service.add_transaction(make_draft(category="Rent"), actor=admin)
        assert store.state.find_transaction(transaction.id) is not None
