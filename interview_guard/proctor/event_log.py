"""
Event Log - Append-only interview event log

Entries keep insertion order and are copied verbatim into reports.
Appends are serialized with a lock because the face and object
channels may interleave.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List

from .exceptions import SessionFrozenError
from .types import EventLogEntry, Severity

logger = logging.getLogger(__name__)

EventListener = Callable[[EventLogEntry], None]

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class EventLog:
    """Thread-safe, append-only list of EventLogEntry"""

    def __init__(self, wall_clock: Callable[[], datetime] = datetime.now):
        self._wall_clock = wall_clock
        self._entries: List[EventLogEntry] = []
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()
        self._frozen = False

    def append(self, message: str, severity: Severity = Severity.INFO) -> EventLogEntry:
        """
        Append an event stamped with the current wall-clock time.

        Args:
            message: Human-readable event text
            severity: info, success, warning or error

        Returns:
            The stored entry
        """
        with self._lock:
            if self._frozen:
                raise SessionFrozenError("Event log is closed")
            entry = EventLogEntry(
                timestamp=self._wall_clock().strftime("%H:%M:%S"),
                message=message,
                severity=Severity(severity)
            )
            self._entries.append(entry)
            listeners = list(self._listeners)

        logger.log(_LEVELS[entry.severity], f"[{entry.timestamp}] {message}")

        for listener in listeners:
            try:
                listener(entry)
            except Exception as e:
                logger.warning(f"Event listener failed: {e}")

        return entry

    def add_listener(self, listener: EventListener):
        with self._lock:
            self._listeners.append(listener)

    def entries(self) -> List[EventLogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries = []
            self._frozen = False

    def freeze(self):
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._entries)
