"""
Object Violation Tracker - Counts prohibited items seen by the object model

Every qualifying detection in every detection cycle is counted: a phone
left in view keeps adding to the phone count each cycle.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Set

from ..event_log import EventLog
from ..metrics import ViolationCounters
from ..types import ObjectDetection, Severity
from .debouncer import RatePolicy

logger = logging.getLogger(__name__)


class ObjectViolationTracker:
    """
    Filters raw detections to the prohibited classes and counts them.

    Counted classes:
    - cell phone -> phone
    - book -> book
    - laptop, keyboard, mouse, remote -> device
    """

    PROHIBITED_ITEMS: Set[str] = {
        'cell phone',
        'book',
        'laptop',
        'keyboard',
        'mouse',
        'remote'
    }

    COUNTER_FOR_ITEM: Dict[str, str] = {
        'cell phone': 'phone',
        'book': 'book',
        'laptop': 'device',
        'keyboard': 'device',
        'mouse': 'device',
        'remote': 'device'
    }

    CONFIDENCE_THRESHOLD = 0.6

    def __init__(
        self,
        counters: ViolationCounters,
        events: EventLog,
        confidence: float = CONFIDENCE_THRESHOLD,
        on_violation: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize object tracker.

        Args:
            counters: Session counters (phone, book, device are written)
            events: Session event log
            confidence: Detections must score strictly above this
            on_violation: Called with the counter name after every increment
        """
        self.counters = counters
        self.events = events
        self.confidence = confidence
        self.policy = RatePolicy.none()
        self._on_violation = on_violation

    def filter(self, detections: List[ObjectDetection]) -> List[ObjectDetection]:
        """Keep prohibited classes above the confidence threshold"""
        return [
            d for d in detections
            if d.label in self.PROHIBITED_ITEMS and d.confidence > self.confidence
        ]

    def process(self, detections: List[ObjectDetection]) -> List[ObjectDetection]:
        """
        Count every qualifying detection in this cycle.

        Returns:
            The detections that were counted
        """
        prohibited = self.filter(detections)

        for detection in prohibited:
            counter = self.COUNTER_FOR_ITEM[detection.label]
            if not self.policy.permits(getattr(self.counters, counter)):
                continue
            self.counters.increment(counter)
            self.events.append(self._message(detection), Severity.ERROR)
            if self._on_violation is not None:
                self._on_violation(counter)

        return prohibited

    def _message(self, detection: ObjectDetection) -> str:
        percent = math.floor(detection.confidence * 100 + 0.5)
        if detection.label == 'cell phone':
            return f"Mobile phone detected! ({percent}% confidence)"
        if detection.label == 'book':
            return f"Book detected! ({percent}% confidence)"
        return f"Electronic device ({detection.label}) detected! ({percent}% confidence)"
