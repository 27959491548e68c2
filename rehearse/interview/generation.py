"""
Turn generation engine.

Produces the text (and optional audio) of one interviewer turn from a config
and a session state. Nothing here mutates the state; the caller applies the
returned TurnResult with state.record_turn once it has been delivered.
"""
import dataclasses
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional, Tuple

from .decision_engine import FollowUpHeuristic, persona_at, select_persona, next_persona_index
from .errors import TextGenerationUnavailable
from .events import InterviewEventBus, DecorativeTurnDroppedEvent, FollowUpDecidedEvent
from .models import (
    InterviewConfig, Persona, Stage, TurnType, ConversationalTurn, TurnResult,
    FollowUpDecision, NO_FOLLOW_UP,
)
from .prompts import InterviewPrompts, PromptFormatter, PromptPair
from .services import SpeechService
from .stages import classify_stage, max_questions_for
from .state import SessionState, PendingExchange
from ..config import (
    QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE,
    ACKNOWLEDGMENT_MAX_TOKENS, ACKNOWLEDGMENT_TEMPERATURE,
    TURN_GENERATION_WORKERS,
)
from ..infrastructure.llm import TextGenerationClient

logger = logging.getLogger("turn_generator")

TextCall = Callable[[], str]


def _normalized(text: str) -> str:
    return " ".join(text.lower().split()).rstrip("?.! ")


class TurnGenerator:
    """Builds greeting, question, follow-up and closing turns."""

    def __init__(self,
                 text_client: TextGenerationClient,
                 speech: Optional[SpeechService] = None,
                 heuristic: Optional[FollowUpHeuristic] = None,
                 event_bus: Optional[InterviewEventBus] = None,
                 workers: int = TURN_GENERATION_WORKERS):
        self.text_client = text_client
        self.speech = speech or SpeechService()
        self.heuristic = heuristic or FollowUpHeuristic()
        self.event_bus = event_bus
        self.workers = workers

    def generate(self, config: InterviewConfig, state: SessionState, now: datetime) -> TurnResult:
        """
        Produce the next turn for the session.

        Raises:
            TextGenerationUnavailable: no question or follow-up could be produced
        """
        stage = classify_stage(
            state.question_count,
            max_questions_for(config.duration_minutes),
            state.elapsed_minutes(now),
            config.duration_minutes,
        )
        logger.debug(f"Session {state.session_id}: stage {stage.value} after {state.question_count} questions")

        if stage == Stage.OPENING:
            result = self._greeting(config, state)
        elif stage == Stage.CLOSING:
            result = self._closing(config, state)
        else:
            result = self._main_turn(config, state)

        audio = self.speech.synthesize_turn(result.spoken_text, result.persona, state.session_id)
        if audio:
            result = dataclasses.replace(result, turn=dataclasses.replace(result.turn, audio=audio))
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _greeting(self, config: InterviewConfig, state: SessionState) -> TurnResult:
        index = state.current_persona_index
        persona = persona_at(index, config.personas)
        co_interviewers = [p for i, p in enumerate(config.personas) if i != index % len(config.personas)]

        try:
            opening = self._speak(InterviewPrompts.greeting(persona, co_interviewers, config.position),
                                  ACKNOWLEDGMENT_MAX_TOKENS, QUESTION_TEMPERATURE, "greeting")
        except TextGenerationUnavailable as e:
            logger.warning(f"Greeting generation failed, using template: {e}")
            opening = PromptFormatter.fallback_greeting(persona, co_interviewers, config.position)

        text = f"{opening} {PromptFormatter.opening_question(len(config.personas))}"
        return TurnResult(
            turn=ConversationalTurn(text, TurnType.GREETING, should_wait_for_response=True),
            persona=persona,
            persona_index=index,
            stage=Stage.OPENING,
            question_number=state.question_count + 1,
            category="introduction",
        )

    def _closing(self, config: InterviewConfig, state: SessionState) -> TurnResult:
        persona = select_persona(state, config.personas)
        try:
            text = self._speak(InterviewPrompts.closing(persona),
                               ACKNOWLEDGMENT_MAX_TOKENS, ACKNOWLEDGMENT_TEMPERATURE, "closing")
        except TextGenerationUnavailable as e:
            logger.warning(f"Closing generation failed, using template: {e}")
            text = PromptFormatter.fallback_closing(persona)

        return TurnResult(
            turn=ConversationalTurn(text, TurnType.CLOSING, should_wait_for_response=False),
            persona=persona,
            persona_index=state.current_persona_index,
            stage=Stage.CLOSING,
            question_number=state.question_count,
            category="closing",
        )

    def _main_turn(self, config: InterviewConfig, state: SessionState) -> TurnResult:
        personas = config.personas
        pending = state.pending_exchange()
        decision = self._decide_follow_up(state, personas, pending)

        if decision.should_follow_up:
            # Follow-ups stay with whoever asked the question being probed.
            index = pending.asker_index
            persona = persona_at(index, personas)
            main_type = TurnType.FOLLOWUP
            main_call = self._text_call(
                InterviewPrompts.follow_up(persona, pending.question, pending.answer, decision.reason),
                QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE, "follow-up")
        else:
            index = next_persona_index(state)
            persona = persona_at(index, personas)
            main_type = TurnType.QUESTION
            main_call = lambda: self._new_question(persona, state, config.document_context)

        lead_call = self._acknowledgment_call(personas, persona, pending)
        main_text, lead_text = self._run(main_call, lead_call, TurnType.ACKNOWLEDGMENT, state.session_id)

        lead_in = None
        if lead_text:
            lead_in = ConversationalTurn(lead_text, TurnType.ACKNOWLEDGMENT, should_wait_for_response=False)

        return TurnResult(
            turn=ConversationalTurn(main_text, main_type, should_wait_for_response=True),
            persona=persona,
            persona_index=index,
            stage=Stage.MAIN,
            question_number=state.question_count + 1,
            category=PromptFormatter.categorize_question(main_text, persona.focus_areas),
            lead_in=lead_in,
            is_follow_up=decision.should_follow_up,
            follow_up=decision,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _decide_follow_up(self, state: SessionState, personas, pending: Optional[PendingExchange]) -> FollowUpDecision:
        if pending is None:
            return NO_FOLLOW_UP

        asker = persona_at(pending.asker_index, personas)
        decision = self.heuristic.should_follow_up(pending.question, pending.answer, asker.questioning_style)
        reason = decision.reason.value if decision.reason else None
        logger.info(f"Follow-up decision for {asker.name}: {decision.should_follow_up} ({reason})")
        if self.event_bus:
            self.event_bus.emit(FollowUpDecidedEvent(
                state.session_id, time.time(), decision.should_follow_up, reason, asker.name))
        return decision

    def _acknowledgment_call(self, personas, persona: Persona,
                             pending: Optional[PendingExchange]) -> Optional[TextCall]:
        """Reaction to the last answer, handing over the floor when the speaker changes."""
        if pending is None:
            return None
        asked_by = persona_at(pending.asker_index, personas)
        return self._text_call(
            InterviewPrompts.acknowledgment(persona, pending.question, pending.answer, asked_by),
            ACKNOWLEDGMENT_MAX_TOKENS, ACKNOWLEDGMENT_TEMPERATURE, "acknowledgment")

    def _new_question(self, persona: Persona, state: SessionState, document_context: Optional[str]) -> str:
        prompt = InterviewPrompts.question(persona, state.questions_asked, document_context)
        asked = {_normalized(q) for q in state.questions_asked}

        question = self._speak(prompt, QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE, "question")
        if _normalized(question) not in asked:
            return question

        logger.warning(f"{persona.name} repeated an earlier question, retrying once")
        question = self._speak(prompt, QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE, "question")
        if _normalized(question) in asked:
            raise TextGenerationUnavailable("Text generation repeated an earlier question")
        return question

    def _text_call(self, prompt: PromptPair, max_tokens: int, temperature: float, what: str) -> TextCall:
        return lambda: self._speak(prompt, max_tokens, temperature, what)

    def _speak(self, prompt: PromptPair, max_tokens: int, temperature: float, what: str) -> str:
        system, user = prompt
        raw = self.text_client.generate(system, user, max_tokens, temperature)
        text = PromptFormatter.clean_spoken_text(raw)
        if not text:
            raise TextGenerationUnavailable(f"Text generation returned an empty {what}")
        return text

    def _run(self, main_call: TextCall, lead_call: Optional[TextCall],
             lead_type: TurnType, session_id: int) -> Tuple[str, Optional[str]]:
        """
        Run the main and lead-in generations side by side.

        A main failure propagates. A lead-in failure only drops the lead-in.
        """
        if lead_call is None:
            return main_call(), None

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="turn") as pool:
            main_future = pool.submit(main_call)
            lead_future = pool.submit(lead_call)

            try:
                main_text = main_future.result()
            except TextGenerationUnavailable as e:
                logger.error(f"Session {session_id}: main turn generation failed: {e}")
                raise

            try:
                lead_text = lead_future.result()
            except TextGenerationUnavailable as e:
                logger.warning(f"Dropping {lead_type.value} for session {session_id}: {e}")
                if self.event_bus:
                    self.event_bus.emit(DecorativeTurnDroppedEvent(session_id, time.time(), lead_type.value, str(e)))
                lead_text = None

        return main_text, lead_text
