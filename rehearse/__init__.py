"""
Rehearse: simulated panel interviews with graded feedback.

Synthetic interviewer personas take turns asking questions, probe short or
interesting answers, close the session on time, and turn per-answer grades
into a session report.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import InterviewOrchestrator
from .interview.models import InterviewConfig, Persona, TurnResult, SessionAnalytics
from .interview.state import SessionState

__all__ = ["InterviewOrchestrator", "InterviewConfig", "Persona", "TurnResult", "SessionAnalytics", "SessionState"]
