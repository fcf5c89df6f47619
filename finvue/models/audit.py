"""
Audit Models for FinVue Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of who submitted, verified, approved or deleted what
2. Debugging information when things go wrong
3. Accountability between the roles
4. Ability to reconstruct history after a permanent delete

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every entry point of the ledger has its own event type.
    """
    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Transaction lifecycle
    TRANSACTION_CREATED = "transaction_created"
    STATUS_CHANGED = "status_changed"
    TRANSACTION_DELETED = "transaction_deleted"
    DELETE_CANCELLED = "delete_cancelled"

    # Rejections before mutation
    AUTHORIZATION_DENIED = "authorization_denied"
    VALIDATION_FAILED = "validation_failed"

    # User administration
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"

    # Organization settings
    SETTINGS_UPDATED = "settings_updated"

    # Collaborators
    SYNC_COMPLETED = "sync_completed"
    SYNC_FAILED = "sync_failed"
    ADVISORY_FALLBACK_USED = "advisory_fallback_used"
    EXPORT_GENERATED = "export_generated"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'user', 'settings')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Who did it
    actor_id: Optional[str] = None
    actor_role: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one sync attempt)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of a JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_failed(username)
        event = AuditEventBuilder.status_changed(tx_id, "PENDING", "VERIFIED", actor_id, "MANAGER")
    """

    @staticmethod
    def login_succeeded(user_id: str, username: str, role: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            actor_role=role,
            description=f"User logged in: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"Failed login attempt for: {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def logout(user_id: str, role: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            actor_role=role,
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def transaction_created(
        transaction_id: str,
        transaction_type: str,
        category: str,
        amount: str,
        status: str,
        actor_id: str,
        actor_role: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=transaction_id,
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"{transaction_type} submitted: {category} - {amount}",
            details={
                "type": transaction_type,
                "category": category,
                "amount": amount,
                "initial_status": status,
            },
            is_user_action=True,
        )

    @staticmethod
    def status_changed(
        transaction_id: str,
        from_status: str,
        to_status: str,
        actor_id: Optional[str],
        actor_role: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_CHANGED,
            entity_type="transaction",
            entity_id=transaction_id,
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Status changed: {from_status} -> {to_status}",
            details={
                "from_status": from_status,
                "to_status": to_status,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        status: str,
        amount: str,
        category: str,
        actor_id: Optional[str],
        actor_role: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Transaction permanently deleted: {category} - {amount}",
            details={
                "status_at_delete": status,
                "amount": amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def delete_cancelled(
        entity_type: str,
        entity_id: str,
        actor_id: Optional[str],
        actor_role: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_CANCELLED,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Delete of {entity_type} not confirmed",
            is_user_action=True,
        )

    @staticmethod
    def authorization_denied(
        action: str,
        actor_id: Optional[str],
        actor_role: Optional[str],
        reason: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTHORIZATION_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Denied: {action}",
            error_message=reason,
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        actor_id: Optional[str],
        actor_role: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Submission rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def user_changed(
        event_type: AuditEventType,
        user_id: str,
        username: str,
        role: str,
        actor_id: Optional[str],
    ) -> AuditEvent:
        verb = {
            AuditEventType.USER_CREATED: "created",
            AuditEventType.USER_UPDATED: "updated",
            AuditEventType.USER_DELETED: "deleted",
        }[event_type]
        return AuditEvent(
            event_type=event_type,
            entity_type="user",
            entity_id=user_id,
            actor_id=actor_id,
            actor_role="ADMIN",
            description=f"User {verb}: {username}",
            details={"username": username, "role": role},
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        fields: list[str],
        actor_id: Optional[str],
        actor_role: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            actor_id=actor_id,
            actor_role=actor_role,
            description=f"Settings updated: {', '.join(fields)}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def sync_completed(
        endpoint: str,
        transaction_count: int,
        synced_at: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            entity_type="sync",
            correlation_id=correlation_id,
            description=f"Pushed {transaction_count} transactions to remote sheet",
            details={
                "endpoint": endpoint,
                "transaction_count": transaction_count,
                "synced_at": synced_at,
            },
        )

    @staticmethod
    def sync_failed(
        endpoint: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="sync",
            correlation_id=correlation_id,
            description="Remote sync failed",
            error_message=error_message,
            details={"endpoint": endpoint},
        )

    @staticmethod
    def advisory_fallback_used(reason: str, correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISORY_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="advisory",
            correlation_id=correlation_id,
            description="Advisory engine unavailable, fallback tips served",
            error_message=reason,
        )

    @staticmethod
    def export_generated(
        filename: str,
        row_count: int,
        actor_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            entity_type="export",
            actor_id=actor_id,
            description=f"Spreadsheet export generated: {filename}",
            details={"filename": filename, "row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
