"""
Interview decision engine: who speaks next, whether to probe the last answer,
and when the session has run out of time or questions.
"""
import logging
import random
from datetime import datetime
from typing import Sequence, Optional

from .models import Persona, QuestioningStyle, FollowUpDecision, FollowUpReason, InterviewConfig, NO_FOLLOW_UP
from .stages import max_questions_for
from .state import SessionState
from ..config import FollowUpConfig

logger = logging.getLogger("decision_engine")


def persona_at(index: int, personas: Sequence[Persona]) -> Persona:
    """Resolve any non-negative index to a persona, wrapping round-robin."""
    return personas[index % len(personas)]


def select_persona(state: SessionState, personas: Sequence[Persona]) -> Persona:
    """The persona currently holding the floor."""
    return persona_at(state.current_persona_index, personas)


def next_persona_index(state: SessionState) -> int:
    """
    Index of the persona that asks the next new question.

    Before anything has been asked the first persona opens the session.
    Afterwards every new question moves one seat along the panel.
    """
    if state.question_count == 0:
        return state.current_persona_index
    return state.current_persona_index + 1


def word_count(text: str) -> int:
    return len(text.split())


class FollowUpHeuristic:
    """
    Decides whether the most recent answer deserves a follow-up.

    Rules, first match wins:
      1. a brief answer always gets a follow-up
      2. tough interviewers probe with some probability
      3. answers mentioning a trigger keyword get probed with some probability

    All randomness comes from the injected generator so tests can seed it.
    """

    def __init__(self, config: Optional[FollowUpConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or FollowUpConfig()
        self.rng = rng or random.Random()
        self._keywords = tuple(k.lower() for k in self.config.keywords)

    def should_follow_up(self, question: str, answer: str, style: QuestioningStyle) -> FollowUpDecision:
        words = word_count(answer)
        if words < self.config.brief_answer_words:
            logger.debug(f"Answer has {words} words, following up")
            return FollowUpDecision(True, FollowUpReason.RESPONSE_TOO_BRIEF)

        if style == QuestioningStyle.TOUGH and self.rng.random() < self.config.tough_probability:
            return FollowUpDecision(True, FollowUpReason.PROBING_DEEPER)

        lowered = answer.lower()
        if any(keyword in lowered for keyword in self._keywords):
            if self.rng.random() < self.config.keyword_probability:
                return FollowUpDecision(True, FollowUpReason.INTERESTING_CONTENT)

        return NO_FOLLOW_UP


def should_end_session(state: SessionState, config: InterviewConfig, now: datetime) -> bool:
    """
    Advisory termination check.

    True once the duration budget is spent or the question budget is used up.
    The caller decides what to do with it.
    """
    if state.elapsed_minutes(now) >= config.duration_minutes:
        logger.info(f"Session {state.session_id} reached its {config.duration_minutes} minute budget")
        return True
    if state.question_count >= max_questions_for(config.duration_minutes):
        logger.info(f"Session {state.session_id} asked {state.question_count} questions, budget exhausted")
        return True
    return False
