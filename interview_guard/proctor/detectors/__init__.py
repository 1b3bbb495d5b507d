"""Detector modules for proctoring"""

from .gaze_classifier import GazeClassifier, GazeMeasurement

__all__ = [
    "GazeClassifier",
    "GazeMeasurement"
]
