"""
Remote Sync Interface

DESIGN DECISION: Sync is a one-way PUSH of a snapshot.
The remote side never writes back into the ledger, and a failed
push changes nothing locally. Credentials never leave the process:
users are reduced to id, username and role.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from finvue.models.ledger import AppState


def build_sync_payload(state: AppState, timestamp: Optional[datetime] = None) -> dict:
    """Snapshot sent to the remote sheet."""
    timestamp = timestamp or datetime.now()
    return {
        "transactions": [t.to_document() for t in state.transactions],
        "users": [
            {"id": u.id, "username": u.username, "role": u.role.value}
            for u in state.users
        ],
        "timestamp": timestamp.isoformat(),
    }


class RemoteSyncInterface(ABC):
    """
    Abstract interface for pushing the ledger to a remote sheet.
    """

    name: str = "remote_sync"

    @abstractmethod
    async def push(self, url: str, state: AppState) -> bool:
        """
        Push a snapshot of `state` to `url`.

        Returns:
            True if the remote side accepted it, False otherwise.
            Transport failures are reported as False, not raised.
        """
        pass
