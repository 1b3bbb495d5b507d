"""
Wire formats for detector output

Accepts both snake_case and the camelCase keys browser detectors emit
(topLeft/bottomRight for faces, class/score for objects).
"""

from typing import List

from pydantic import AliasChoices, BaseModel, Field

from .types import FaceObservation, ObjectDetection


class FaceIn(BaseModel):
    """One face from the landmark model"""
    top_left: List[float] = Field(..., validation_alias=AliasChoices("top_left", "topLeft"))
    bottom_right: List[float] = Field(..., validation_alias=AliasChoices("bottom_right", "bottomRight"))
    landmarks: List[List[float]] = Field(..., description="Right eye, left eye, nose (flat x/y lists)")

    def to_observation(self) -> FaceObservation:
        return FaceObservation.from_landmarks(self.top_left, self.bottom_right, self.landmarks)


class ObjectIn(BaseModel):
    """One detection from the object model"""
    label: str = Field(..., validation_alias=AliasChoices("label", "class"))
    confidence: float = Field(..., ge=0.0, le=1.0, validation_alias=AliasChoices("confidence", "score"))
    bbox: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])

    def to_detection(self) -> ObjectDetection:
        x, y, w, h = (list(self.bbox) + [0.0] * 4)[:4]
        return ObjectDetection(self.label, self.confidence, (x, y, w, h))
