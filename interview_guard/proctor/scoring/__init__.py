"""Scoring modules"""

from .integrity_scorer import IntegrityAssessment, IntegrityScorer

__all__ = ["IntegrityAssessment", "IntegrityScorer"]
