"""Metrics modules"""

from .counters import ViolationCounters, COUNTER_NAMES

__all__ = ["ViolationCounters", "COUNTER_NAMES"]
