"""
Service classes for the interview system.
"""
import time
import logging
from typing import Optional, Sequence, Tuple

from .models import Persona, Grade, InterviewMode, QuestioningStyle, PRACTICE_GRADE
from .errors import SynthesisFailed
from .events import InterviewEventBus, SynthesisFailedEvent, ResponseEvaluatedEvent
from .prompts import InterviewPrompts, PromptFormatter
from .schemas import parse_grading_response
from ..config import (
    TTS_STABILITY, TTS_STABILITY_TOUGH, TTS_SIMILARITY_BOOST,
    GRADING_MAX_TOKENS, GRADING_TEMPERATURE,
)
from ..infrastructure.llm import TextGenerationClient
from ..infrastructure.speech import SpeechSynthesizer, NullSynthesizer

logger = logging.getLogger("services")


class SpeechService:
    """Voices interviewer turns. Never fails a turn."""

    def __init__(self,
                 synthesizer: Optional[SpeechSynthesizer] = None,
                 event_bus: Optional[InterviewEventBus] = None):
        self.synthesizer = synthesizer or NullSynthesizer()
        self.event_bus = event_bus

    @staticmethod
    def voice_settings(persona: Persona) -> Tuple[float, float]:
        """(stability, similarity_boost) for a persona's voice."""
        stability = TTS_STABILITY_TOUGH if persona.questioning_style == QuestioningStyle.TOUGH else TTS_STABILITY
        return stability, TTS_SIMILARITY_BOOST

    def synthesize_turn(self, text: str, persona: Persona, session_id: Optional[int] = None) -> Optional[bytes]:
        """
        Render one utterance in the persona's voice.

        Returns None when the persona has no voice, nothing is configured, or
        the backend fails.
        """
        if not persona.voice_id or not text.strip():
            return None

        stability, similarity = self.voice_settings(persona)
        try:
            audio = self.synthesizer.synthesize(text, persona.voice_id, stability, similarity)
        except SynthesisFailed as e:
            logger.warning(f"Synthesis failed for {persona.name}, returning text only: {e}")
            if self.event_bus:
                self.event_bus.emit(SynthesisFailedEvent(session_id, time.time(), persona.voice_id, str(e)))
            return None

        return audio or None


class GradingService:
    """Scores candidate answers in graded sessions."""

    def __init__(self,
                 text_client: TextGenerationClient,
                 event_bus: Optional[InterviewEventBus] = None):
        self.text_client = text_client
        self.event_bus = event_bus

    def evaluate(self,
                 mode: InterviewMode,
                 question: str,
                 answer: str,
                 persona: Persona,
                 category: Optional[str] = None,
                 session_id: Optional[int] = None) -> Grade:
        """
        Grade one answer.

        Practice sessions are never graded: the zero grade comes back without
        touching the LLM.

        Raises:
            TextGenerationUnavailable: the LLM could not be reached
            GradingParseError: the LLM answered with malformed JSON
        """
        if mode == InterviewMode.PRACTICE:
            return PRACTICE_GRADE

        category = category or PromptFormatter.categorize_question(question, persona.focus_areas)
        system, user = InterviewPrompts.grading(question, answer, category, self._expected_areas(persona))
        raw = self.text_client.generate(system, user, GRADING_MAX_TOKENS, GRADING_TEMPERATURE)
        grade = parse_grading_response(raw)

        logger.info(f"Graded answer to '{question[:60]}': {grade.overall}")
        if self.event_bus:
            self.event_bus.emit(ResponseEvaluatedEvent(session_id, time.time(), grade.overall, graded=True))
        return grade

    @staticmethod
    def _expected_areas(persona: Persona) -> Sequence[str]:
        return persona.focus_areas or ("general",)
