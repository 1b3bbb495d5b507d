"""
Violation Counters - The six per-session violation tallies
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict

from ..exceptions import SessionFrozenError

logger = logging.getLogger(__name__)


COUNTER_NAMES = (
    "look_away",
    "no_face",
    "multiple_faces",
    "phone",
    "book",
    "device",
)


@dataclass
class ViolationCounters:
    """
    Aggregates violation counts for an interview session.

    Counts only ever grow while the session runs; reset() is called once
    at session start and freeze() once at stop.
    """

    look_away: int = 0
    no_face: int = 0
    multiple_faces: int = 0
    phone: int = 0
    book: int = 0
    device: int = 0

    _frozen: bool = field(default=False, repr=False, compare=False)

    def increment(self, name: str) -> int:
        """
        Add one to a counter.

        Args:
            name: One of COUNTER_NAMES

        Returns:
            The new value
        """
        if self._frozen:
            raise SessionFrozenError(f"Cannot increment '{name}' after the session stopped")
        if name not in COUNTER_NAMES:
            raise KeyError(f"Unknown violation counter: {name}")

        value = getattr(self, name) + 1
        setattr(self, name, value)
        logger.debug(f"Counter {name} -> {value}")
        return value

    def reset(self):
        """Reset all counters"""
        for f in fields(self):
            if f.name in COUNTER_NAMES:
                setattr(self, f.name, 0)
        self._frozen = False

    def freeze(self):
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def total(self) -> int:
        return sum(getattr(self, name) for name in COUNTER_NAMES)

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_NAMES}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "ViolationCounters":
        return cls(**{name: int(data.get(name, 0)) for name in COUNTER_NAMES})
