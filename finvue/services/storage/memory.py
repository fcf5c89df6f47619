"""In-memory storage, used by tests and throwaway sessions."""

import copy
from typing import Optional
from uuid import UUID

from finvue.models.audit import AuditEvent
from finvue.services.storage.interface import (
    AuditStorageInterface,
    StateStorageInterface,
)


class InMemoryStateStorage(StateStorageInterface):

    def __init__(self, document: Optional[dict] = None):
        self._document = copy.deepcopy(document)
        self.save_count = 0

    def load(self) -> Optional[dict]:
        return copy.deepcopy(self._document)

    def save(self, document: dict) -> None:
        self._document = copy.deepcopy(document)
        self.save_count += 1

    def clear(self) -> None:
        self._document = None


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
