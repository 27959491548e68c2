"""Interview system components.

This module contains the business logic for running simulated interview sessions,
including orchestration, turn generation, follow-up decisions and scoring.
"""

# Core orchestrator class
from .orchestrator import InterviewOrchestrator

# Data models
from .models import (
    Persona, QuestioningStyle, InterviewConfig, InterviewMode, Stage, TurnType,
    ConversationalTurn, FollowUpDecision, FollowUpReason, TurnResult,
    Grade, SessionAnalytics, Transcription
)

# Session state and transitions
from .state import SessionState, ConversationEntry, start_session, record_turn, record_response

# Errors
from .errors import (
    RehearseError, ConfigurationError, TextGenerationUnavailable, SynthesisFailed,
    TranscriptionFailed, GradingParseError, SessionStoreError
)

# Policies
from .stages import classify_stage, max_questions_for
from .decision_engine import FollowUpHeuristic, select_persona, should_end_session
from .scoring import summarize
from .generation import TurnGenerator
from .schemas import GradingPayload, parse_grading_response

# Service classes
from .services import SpeechService, GradingService

# Event system
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    EventType, InterviewEvent, SessionStartedEvent, TurnGeneratedEvent,
    FollowUpDecidedEvent, DecorativeTurnDroppedEvent, SynthesisFailedEvent,
    ResponseEvaluatedEvent, SessionSummarizedEvent, ErrorOccurredEvent
)

# Console driver
from .runner import ConsoleInterviewRunner

__all__ = [
    # Orchestrator
    "InterviewOrchestrator",

    # Data models
    "Persona", "QuestioningStyle", "InterviewConfig", "InterviewMode", "Stage", "TurnType",
    "ConversationalTurn", "FollowUpDecision", "FollowUpReason", "TurnResult",
    "Grade", "SessionAnalytics", "Transcription",

    # State
    "SessionState", "ConversationEntry", "start_session", "record_turn", "record_response",

    # Errors
    "RehearseError", "ConfigurationError", "TextGenerationUnavailable", "SynthesisFailed",
    "TranscriptionFailed", "GradingParseError", "SessionStoreError",

    # Policies
    "classify_stage", "max_questions_for", "FollowUpHeuristic", "select_persona",
    "should_end_session", "summarize", "TurnGenerator", "GradingPayload", "parse_grading_response",

    # Services
    "SpeechService", "GradingService",

    # Events
    "InterviewEventBus", "EventLogger", "InterviewMetrics",
    "EventType", "InterviewEvent", "SessionStartedEvent", "TurnGeneratedEvent",
    "FollowUpDecidedEvent", "DecorativeTurnDroppedEvent", "SynthesisFailedEvent",
    "ResponseEvaluatedEvent", "SessionSummarizedEvent", "ErrorOccurredEvent",

    # Console driver
    "ConsoleInterviewRunner",
]
