"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as ONE opaque document.
The store hands the adapter a fully validated document after every
successful mutation; the adapter never decides what is valid.
This allows us to:
1. Keep the JSON file backend simple
2. Use in-memory storage for testing
3. Swap in a database later without touching business logic

Audit storage is a separate, append-only interface.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finvue.models.audit import AuditEvent


class StateStorageInterface(ABC):
    """
    Abstract interface for the ledger document.

    Any storage implementation (JSON file, key-value store, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[dict]:
        """
        Load the persisted document.

        Returns:
            The document, or None when nothing has been saved yet

        Raises:
            StorageError: If a document exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, document: dict) -> None:
        """
        Replace the persisted document in full.

        Args:
            document: JSON-compatible ledger document

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the persisted document."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """Get all events for a correlation ID in chronological order."""
        pass

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        """Get all events for a specific entity in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDocumentError(StorageError):
    """The persisted document exists but is not valid JSON."""
    pass
