"""
Frame Sources - Where detection results come from

A frame source wraps the camera and the two detection models. The
session polls faces and objects on separate schedules; a poll may be
a plain function (run in a worker thread) or a coroutine.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from .exceptions import CaptureUnavailableError
from .types import FaceObservation, ObjectDetection

logger = logging.getLogger(__name__)


class FrameSource(ABC):
    """
    Abstract capture + inference collaborator.

    poll_faces / poll_objects return None when no new frame is available;
    that tick is then skipped. Subclasses may implement any method as a
    coroutine.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the camera. Raises CaptureUnavailableError."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the camera."""
        pass

    @abstractmethod
    def poll_faces(self) -> Optional[List[FaceObservation]]:
        """Latest face-landmark result"""
        pass

    @abstractmethod
    def poll_objects(self) -> Optional[List[ObjectDetection]]:
        """Latest object-detection result"""
        pass


class PushFrameSource(FrameSource):
    """
    Frame source fed from outside, e.g. by a browser that runs the
    models itself and posts results.

    Each poll takes the most recent pushed result; older unpolled
    results are replaced rather than queued.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self._faces: Optional[List[FaceObservation]] = None
        self._objects: Optional[List[ObjectDetection]] = None
        self._lock = threading.Lock()
        self.is_open = False

    def open(self):
        if not self._available:
            raise CaptureUnavailableError("Camera access denied. Please allow camera permissions.")
        self.is_open = True

    def close(self):
        self.is_open = False
        with self._lock:
            self._faces = None
            self._objects = None

    def push_faces(self, faces: List[FaceObservation]):
        with self._lock:
            if self._faces is not None:
                logger.debug("Dropping unpolled face result")
            self._faces = list(faces)

    def push_objects(self, detections: List[ObjectDetection]):
        with self._lock:
            if self._objects is not None:
                logger.debug("Dropping unpolled object result")
            self._objects = list(detections)

    def poll_faces(self) -> Optional[List[FaceObservation]]:
        with self._lock:
            faces, self._faces = self._faces, None
        return faces

    def poll_objects(self) -> Optional[List[ObjectDetection]]:
        with self._lock:
            objects, self._objects = self._objects, None
        return objects
