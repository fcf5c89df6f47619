"""
JSON File Storage Implementation

One JSON file per storage key inside the data directory. Writes go to a
temporary sibling first and are renamed over the target, so a crash
mid-write leaves the previous document intact.

Audit events go to a JSON-lines file next to it.
"""

import json
import os
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog

from finvue.config import get_settings
from finvue.models.audit import AuditEvent
from finvue.services.storage.interface import (
    AuditStorageInterface,
    CorruptDocumentError,
    StateStorageInterface,
    StorageError,
)


logger = structlog.get_logger()


class JsonFileStateStorage(StateStorageInterface):
    """Ledger document stored as `<data_dir>/<storage_key>.json`."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().ledger.document_path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[dict]:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Ledger document is not valid JSON: {self._path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read ledger document {self._path}: {e}")

    def save(self, document: dict) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError) as e:
            raise StorageError(f"Failed to write ledger document {self._path}: {e}")
        logger.debug("ledger_document_saved", path=str(self._path))

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove ledger document {self._path}: {e}")


class JsonLinesAuditStorage(AuditStorageInterface):
    """Append-only audit trail, one JSON object per line."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path(get_settings().ledger.data_dir) / "audit.jsonl"
        self._path = Path(path)

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.to_json_line() + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")
        return True

    def _read_all(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        events = []
        with self._path.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    events.append(AuditEvent.model_validate_json(line))
        return events

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._read_all() if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._read_all()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._read_all()))[:limit]
