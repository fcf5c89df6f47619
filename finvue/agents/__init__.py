"""AI agents package."""

from finvue.agents.advisor import (
    EMPTY_LEDGER_TIPS,
    FALLBACK_TIPS,
    AdvisoryAgent,
)

__all__ = [
    "EMPTY_LEDGER_TIPS",
    "FALLBACK_TIPS",
    "AdvisoryAgent",
]
