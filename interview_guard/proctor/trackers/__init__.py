"""Temporal trackers that turn detections into violations"""

from .debouncer import Episode, GazeHistory, RateKind, RatePolicy
from .attention import AttentionTracker
from .objects import ObjectViolationTracker

__all__ = [
    "AttentionTracker",
    "Episode",
    "GazeHistory",
    "ObjectViolationTracker",
    "RateKind",
    "RatePolicy"
]
