"""
Core Exceptions for FinVue Ledger

Every core operation is all-or-nothing: when one of these is raised,
the ledger state is exactly what it was before the call.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class AuthorizationError(LedgerError):
    """Actor lacks permission for the requested transition or action."""

    def __init__(self, message: str, role: Optional[str] = None, action: Optional[str] = None):
        super().__init__(message)
        self.role = role
        self.action = action


class ValidationError(LedgerError):
    """
    Malformed input rejected before any state mutation.

    Carries the individual issues so callers can show each one.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


class NotFoundError(LedgerError):
    """Operation referenced a transaction or user that no longer exists."""
    pass


class ExternalServiceError(LedgerError):
    """An external collaborator (advisory engine, remote sync) failed."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
