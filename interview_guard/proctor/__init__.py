"""
InterviewGuard Proctoring Module

Monitors a candidate during a video interview by tracking:
- Face absence
- Multiple faces in frame
- Gaze diversion (debounced, counted every 2 seconds of looking away)
- Prohibited objects (phones, books, other devices)

Produces an Integrity Score (0-100) and an event log for each session.
"""

from .api import router

__all__ = ["router"]
