"""
InterviewGuard - AI proctoring for remote video interviews
"""

__version__ = "1.0.0"
