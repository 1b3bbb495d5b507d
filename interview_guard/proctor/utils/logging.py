"""
Proctoring Logger - Logs proctoring events and results
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def log_proctor_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a proctoring event.

    Args:
        session_id: Interview session ID
        event_type: Type of event (session_start, violation, tick_error, ...)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[PROCTOR] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, candidate_name: str):
    """Log session start event"""
    log_proctor_event(
        session_id=session_id,
        event_type="session_start",
        details={"candidate": candidate_name}
    )


def log_session_end(session_id: str, integrity_score: int, counters: Dict[str, int], events: int):
    """Log session end event"""
    violations = ",".join(f"{k}:{v}" for k, v in counters.items() if v) or "none"
    log_proctor_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "integrity_score": integrity_score,
            "violations": violations,
            "events": events
        }
    )


def log_violation(session_id: str, counter: str, value: int, integrity_score: int):
    """Log when a violation is counted"""
    log_proctor_event(
        session_id=session_id,
        event_type="violation",
        details={
            "counter": counter,
            "value": value,
            "integrity_score": integrity_score
        },
        level="warning"
    )


def log_tick_error(session_id: str, channel: str, error: Exception):
    """Log a failed detection tick"""
    log_proctor_event(
        session_id=session_id,
        event_type="tick_error",
        details={
            "channel": channel,
            "error": repr(error)
        },
        level="error"
    )
