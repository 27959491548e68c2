"""
Interview session orchestrator.

The orchestrator holds collaborators and policy, never session data. Every
call takes the caller's SessionState and returns new values, so the caller
can persist state between calls and replay a failed call safely.
"""
import logging
import random
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from .decision_engine import FollowUpHeuristic, should_end_session
from .errors import ConfigurationError, TextGenerationUnavailable
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    SessionStartedEvent, TurnGeneratedEvent, SessionSummarizedEvent,
    ResponseEvaluatedEvent, ErrorOccurredEvent,
)
from .generation import TurnGenerator
from .models import InterviewConfig, Persona, Grade, InterviewMode, TurnResult, SessionAnalytics
from .scoring import summarize
from .services import SpeechService, GradingService
from .state import SessionState, start_session, record_turn, record_response
from ..config import Config, FollowUpConfig, validate_interview_config
from ..infrastructure.llm import TextGenerationClient, VertexRestClient
from ..infrastructure.speech import SpeechSynthesizer, create_synthesizer

logger = logging.getLogger("orchestrator")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InterviewOrchestrator:
    """
    Drives synthetic interviewer personas through a bounded session.

    Call sequence per round trip: generate_turn, apply_turn, then after the
    candidate answers apply_response and (graded sessions) evaluate. Poll
    should_end_session after each answer and call summarize at the end.
    """

    def __init__(self,
                 text_client: TextGenerationClient,
                 synthesizer: Optional[SpeechSynthesizer] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Clock] = None,
                 follow_up_config: Optional[FollowUpConfig] = None,
                 event_bus: Optional[InterviewEventBus] = None):
        self.clock = clock or utc_now

        # Initialize event system
        self.event_bus = event_bus or InterviewEventBus()
        self.event_logger = EventLogger()
        self.metrics = InterviewMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self.speech_service = SpeechService(synthesizer, self.event_bus)
        self.follow_up_heuristic = FollowUpHeuristic(follow_up_config, rng)
        self.turn_generator = TurnGenerator(text_client, self.speech_service, self.follow_up_heuristic, self.event_bus)
        self.grading_service = GradingService(text_client, self.event_bus)

    @classmethod
    def from_config(cls, config: Config, use_tts: bool = True, rng: Optional[random.Random] = None) -> "InterviewOrchestrator":
        """Build an orchestrator backed by Vertex AI and the configured speech provider."""
        if not config.google_cloud_project:
            raise ConfigurationError("GOOGLE_CLOUD_PROJECT is required for question generation")

        text_client = VertexRestClient(
            project=config.google_cloud_project,
            location=config.vertex_location,
            model=config.model_name,
            credentials_json=config.google_application_credentials,
            timeout=config.llm_timeout,
        )
        try:
            synthesizer = create_synthesizer(config.tts_provider if use_tts else "none",
                                             config.elevenlabs_api_key, config.tts_timeout)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return cls(text_client, synthesizer, rng=rng, follow_up_config=config.follow_up)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(self, config: InterviewConfig, session_id: int, memory_session_id: str = "") -> SessionState:
        """
        Validate the interview config and create the initial session state.

        Raises:
            ConfigurationError: no personas, non-positive duration, unknown mode or style
        """
        validate_interview_config(config)
        state = start_session(config, session_id, memory_session_id, now=self.clock())
        logger.info(f"Session {session_id} started: {len(config.personas)} personas, "
                    f"{config.duration_minutes} minutes, {config.mode.value}")
        self.event_bus.emit(SessionStartedEvent(
            session_id, time.time(), config.interview_id, len(config.personas),
            config.duration_minutes, config.mode.value,
        ))
        return state

    def generate_turn(self, config: InterviewConfig, state: SessionState) -> TurnResult:
        """
        Produce the next interviewer turn. The state is not modified.

        Raises:
            TextGenerationUnavailable: no question or follow-up could be produced
        """
        try:
            result = self.turn_generator.generate(config, state, self.clock())
        except TextGenerationUnavailable as e:
            logger.error(f"Turn generation failed for session {state.session_id}: {e}")
            self.event_bus.emit(ErrorOccurredEvent(
                state.session_id, time.time(), type(e).__name__, str(e), "turn_generator"
            ))
            raise

        logger.info(f"Session {state.session_id} {result.turn.turn_type.value} "
                    f"#{result.question_number} by {result.persona.name}: {result.turn.text}")
        self.event_bus.emit(TurnGeneratedEvent(
            state.session_id, time.time(), result.turn.turn_type.value, result.stage.value,
            result.persona.name, result.question_number, result.lead_in is not None, result.turn.has_audio,
        ))
        return result

    def apply_turn(self, state: SessionState, result: TurnResult) -> SessionState:
        """New state with a delivered turn recorded."""
        return record_turn(state, result, now=self.clock())

    def apply_response(self, state: SessionState, answer: str) -> SessionState:
        """New state with the candidate's transcribed answer recorded."""
        return record_response(state, answer, now=self.clock())

    def evaluate(self,
                 config: InterviewConfig,
                 question: str,
                 answer: str,
                 persona: Persona,
                 category: Optional[str] = None,
                 session_id: Optional[int] = None) -> Grade:
        """Grade one answer; practice sessions get the zero grade without any LLM call."""
        grade = self.grading_service.evaluate(config.mode, question, answer, persona, category, session_id)
        if config.mode == InterviewMode.PRACTICE:
            self.event_bus.emit(ResponseEvaluatedEvent(session_id, time.time(), grade.overall, graded=False))
        return grade

    def summarize(self, session_id: Optional[int], mode: InterviewMode, grades: Sequence[Grade]) -> SessionAnalytics:
        analytics = summarize(session_id, mode, grades)
        logger.info(f"Session {session_id} summarized: {analytics.overall_grade} over {analytics.response_count} responses")
        self.event_bus.emit(SessionSummarizedEvent(
            session_id, time.time(), analytics.overall_grade, analytics.response_count
        ))
        return analytics

    def should_end_session(self, state: SessionState, config: InterviewConfig) -> bool:
        return should_end_session(state, config, self.clock())

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()

    def reset_metrics(self):
        """Reset session metrics."""
        self.metrics.reset()
