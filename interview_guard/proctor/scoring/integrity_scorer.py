"""
Integrity Scorer - Computes integrity score from violation counters
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..metrics import ViolationCounters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityAssessment:
    """Score with its qualitative label and hiring recommendation"""
    score: int
    label: str
    recommendation: str


class IntegrityScorer:
    """
    Computes integrity score from violation counters.

    Formula:
        integrity_score = max(0, 100
            - 2 * look_away
            - 5 * no_face
            - 10 * multiple_faces
            - 10 * phone
            - 8 * book
            - 7 * device)

    Counters only grow during a session, so the score never rises.
    """

    # Points deducted per counted violation
    WEIGHTS: Dict[str, int] = {
        "look_away": 2,
        "no_face": 5,
        "multiple_faces": 10,
        "phone": 10,
        "book": 8,
        "device": 7
    }

    FOCUS_METRICS = ("look_away", "no_face", "multiple_faces")
    OBJECT_METRICS = ("phone", "book", "device")

    LABELS = (
        (90, "Excellent"),
        (70, "Good"),
        (50, "Fair"),
    )

    RECOMMENDATIONS = (
        (80, "Recommended"),
        (60, "Conditionally recommended"),
    )

    DESCRIPTIONS = {
        "Excellent": "EXCELLENT - No significant issues detected",
        "Good": "GOOD - Minor focus issues observed",
        "Fair": "FAIR - Several focus and integrity concerns",
        "Poor": "POOR - Significant integrity issues detected",
    }

    EXPLANATIONS = {
        "Recommended": (
            "RECOMMENDED - Candidate maintained good focus and integrity "
            "throughout the interview."
        ),
        "Conditionally recommended": (
            "CONDITIONALLY RECOMMENDED - Some focus issues were observed "
            "but may not disqualify the candidate."
        ),
        "Not recommended": (
            "NOT RECOMMENDED - Significant integrity issues suggest the interview "
            "may not reflect the candidate's authentic abilities."
        ),
    }

    def __init__(self, weights: Optional[Dict[str, int]] = None):
        """
        Initialize scorer with optional custom weights.

        Args:
            weights: Optional dict overriding default deductions
        """
        self.weights = self.WEIGHTS.copy()
        if weights:
            self.weights.update(weights)

        negative = [k for k, v in self.weights.items() if v < 0]
        if negative:
            raise ValueError(f"Deductions must be non-negative: {negative}")

    def deductions(self, counters: ViolationCounters) -> int:
        values = counters.as_dict()
        return sum(weight * values.get(metric, 0) for metric, weight in self.weights.items())

    def compute(self, counters: ViolationCounters) -> int:
        """
        Compute integrity score from counters.

        Returns:
            Integrity score (0-100, higher is better)
        """
        score = max(0, 100 - self.deductions(counters))
        logger.debug(f"Computed integrity score: {score}")
        return score

    def compute_breakdown(self, counters: ViolationCounters) -> Dict[str, Any]:
        """
        Compute integrity score with detailed breakdown.

        Returns:
            Dict with score, per-metric penalties and the focus/object sub-scores
        """
        values = counters.as_dict()
        penalties = {}

        for metric, weight in self.weights.items():
            count = values.get(metric, 0)
            penalties[metric] = {
                "count": count,
                "weight": weight,
                "penalty": weight * count
            }

        focus_penalty = sum(penalties[m]["penalty"] for m in self.FOCUS_METRICS)
        object_penalty = sum(penalties[m]["penalty"] for m in self.OBJECT_METRICS)
        total = focus_penalty + object_penalty

        return {
            "integrity_score": max(0, 100 - total),
            "penalties": penalties,
            "total_penalty": total,
            "focus_score": max(0, 100 - focus_penalty),
            "object_score": max(0, 100 - object_penalty)
        }

    def get_label(self, score: int) -> str:
        """Excellent (>=90), Good (>=70), Fair (>=50) or Poor"""
        for threshold, label in self.LABELS:
            if score >= threshold:
                return label
        return "Poor"

    def get_recommendation(self, score: int) -> str:
        """Recommended (>=80), Conditionally recommended (>=60) or Not recommended"""
        for threshold, recommendation in self.RECOMMENDATIONS:
            if score >= threshold:
                return recommendation
        return "Not recommended"

    def describe(self, score: int) -> str:
        return self.DESCRIPTIONS[self.get_label(score)]

    def explain_recommendation(self, score: int) -> str:
        return self.EXPLANATIONS[self.get_recommendation(score)]

    def assess(self, counters: ViolationCounters) -> IntegrityAssessment:
        score = self.compute(counters)
        return IntegrityAssessment(
            score=score,
            label=self.get_label(score),
            recommendation=self.get_recommendation(score)
        )
