"""Audit logging package."""

from finvue.audit.logger import AuditLogger, configure_logging, create_correlation_id

__all__ = [
    "AuditLogger",
    "configure_logging",
    "create_correlation_id",
]
