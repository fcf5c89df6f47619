"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the
ledger document and the audit trail.
"""

from finvue.services.storage.interface import (
    AuditStorageInterface,
    CorruptDocumentError,
    StateStorageInterface,
    StorageError,
)
from finvue.services.storage.json_file import (
    JsonFileStateStorage,
    JsonLinesAuditStorage,
)
from finvue.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStateStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "StateStorageInterface",
    # Exceptions
    "CorruptDocumentError",
    "StorageError",
    # JSON file implementation
    "JsonFileStateStorage",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryStateStorage",
]
