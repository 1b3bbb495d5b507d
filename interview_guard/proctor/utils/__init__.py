"""Utility modules"""

from .logging import (
    log_proctor_event,
    log_session_start,
    log_session_end,
    log_tick_error,
    log_violation,
)

__all__ = [
    "log_proctor_event",
    "log_session_start",
    "log_session_end",
    "log_tick_error",
    "log_violation"
]
