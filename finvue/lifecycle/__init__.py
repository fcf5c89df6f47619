"""Transaction lifecycle state machine."""

from finvue.lifecycle.state_machine import (
    LIFECYCLE_TRANSITIONS,
    TERMINAL_STATUSES,
    advance,
    check_transition,
    initial_status,
    is_terminal,
)

__all__ = [
    "LIFECYCLE_TRANSITIONS",
    "TERMINAL_STATUSES",
    "advance",
    "check_transition",
    "initial_status",
    "is_terminal",
]
