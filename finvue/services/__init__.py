"""Services package."""

from finvue.services.export import ExportResult, export_transactions
from finvue.services.media import ImageEncoder, ImageEncodingError
from finvue.services.storage import (
    AuditStorageInterface,
    CorruptDocumentError,
    InMemoryAuditStorage,
    InMemoryStateStorage,
    JsonFileStateStorage,
    JsonLinesAuditStorage,
    StateStorageInterface,
    StorageError,
)
from finvue.services.sync import (
    GoogleSheetsSyncService,
    RemoteSyncInterface,
    WebhookSyncService,
    sync_service_for,
)

__all__ = [
    # Export
    "ExportResult",
    "export_transactions",
    # Media
    "ImageEncoder",
    "ImageEncodingError",
    # Storage
    "AuditStorageInterface",
    "CorruptDocumentError",
    "InMemoryAuditStorage",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "JsonLinesAuditStorage",
    "StateStorageInterface",
    "StorageError",
    # Sync
    "GoogleSheetsSyncService",
    "RemoteSyncInterface",
    "WebhookSyncService",
    "sync_service_for",
]
