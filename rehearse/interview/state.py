"""
Session state model and its transition functions.

SessionState values are never mutated. Every change goes through a transition
that returns a new state, so a failed turn leaves the caller's copy untouched
and a retry starts from exactly the same place.
"""
import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple, Dict, Any, NamedTuple

from .models import InterviewConfig, TurnResult, TurnType
from .errors import ConfigurationError


INTERVIEWER = "interviewer"
CANDIDATE = "candidate"

# Turns that ask the candidate something and count against the question budget.
QUESTION_TURN_TYPES = frozenset({TurnType.GREETING, TurnType.QUESTION, TurnType.FOLLOWUP})


@dataclass(frozen=True)
class ConversationEntry:
    """One line of conversation history, tagged when it is created."""
    speaker: str
    text: str
    turn_type: TurnType
    timestamp: datetime
    persona_index: Optional[int] = None
    persona_name: Optional[str] = None

    @property
    def is_candidate(self) -> bool:
        return self.speaker == CANDIDATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speaker": self.speaker,
            "text": self.text,
            "turn_type": self.turn_type.value,
            "timestamp": self.timestamp.isoformat(),
            "persona_index": self.persona_index,
            "persona_name": self.persona_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationEntry":
        return cls(
            speaker=data["speaker"],
            text=data["text"],
            turn_type=TurnType(data["turn_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            persona_index=data.get("persona_index"),
            persona_name=data.get("persona_name"),
        )


class PendingExchange(NamedTuple):
    """The last question and the answer the candidate gave to it."""
    question: str
    answer: str
    asker_index: int


@dataclass(frozen=True)
class SessionState:
    """Conversation cursor for one interview session."""
    interview_id: int
    session_id: int
    memory_session_id: str
    start_time: datetime
    current_persona_index: int = 0
    question_count: int = 0
    history: Tuple[ConversationEntry, ...] = ()
    questions_asked: Tuple[str, ...] = ()
    user_responses: Tuple[str, ...] = ()

    def elapsed_minutes(self, now: datetime) -> float:
        return (now - self.start_time).total_seconds() / 60.0

    def last_question_entry(self) -> Optional[ConversationEntry]:
        for entry in reversed(self.history):
            if entry.turn_type in QUESTION_TURN_TYPES:
                return entry
        return None

    def pending_exchange(self) -> Optional[PendingExchange]:
        """
        The (question, answer) pair to react to, if the candidate answered
        the most recent question.
        """
        if not self.history or not self.history[-1].is_candidate:
            return None
        question = self.last_question_entry()
        if question is None:
            return None
        asker = question.persona_index if question.persona_index is not None else self.current_persona_index
        return PendingExchange(question.text, self.history[-1].text, asker)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interview_id": self.interview_id,
            "session_id": self.session_id,
            "memory_session_id": self.memory_session_id,
            "start_time": self.start_time.isoformat(),
            "current_persona_index": self.current_persona_index,
            "question_count": self.question_count,
            "history": [entry.to_dict() for entry in self.history],
            "questions_asked": list(self.questions_asked),
            "user_responses": list(self.user_responses),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        return cls(
            interview_id=data["interview_id"],
            session_id=data["session_id"],
            memory_session_id=data.get("memory_session_id", ""),
            start_time=datetime.fromisoformat(data["start_time"]),
            current_persona_index=data.get("current_persona_index", 0),
            question_count=data.get("question_count", 0),
            history=tuple(ConversationEntry.from_dict(e) for e in data.get("history", [])),
            questions_asked=tuple(data.get("questions_asked", [])),
            user_responses=tuple(data.get("user_responses", [])),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_session(config: InterviewConfig,
                  session_id: int,
                  memory_session_id: str = "",
                  now: Optional[datetime] = None) -> SessionState:
    """Create the initial state for a validated interview config."""
    if not config.personas:
        raise ConfigurationError("At least one persona is required to start a session")
    if config.duration_minutes <= 0:
        raise ConfigurationError(f"Duration must be positive, got {config.duration_minutes}")

    return SessionState(
        interview_id=config.interview_id,
        session_id=session_id,
        memory_session_id=memory_session_id,
        start_time=now or _utcnow(),
    )


def record_turn(state: SessionState, result: TurnResult, now: Optional[datetime] = None) -> SessionState:
    """
    Apply a delivered turn.

    The lead-in and main turn are appended to history. A turn that waits for
    an answer is also a question asked and hands the floor to its persona.
    """
    now = now or _utcnow()
    entries = list(state.history)
    persona = result.persona

    if result.lead_in is not None:
        entries.append(ConversationEntry(
            INTERVIEWER, result.lead_in.text, result.lead_in.turn_type, now,
            result.persona_index, persona.name,
        ))
    entries.append(ConversationEntry(
        INTERVIEWER, result.turn.text, result.turn.turn_type, now,
        result.persona_index, persona.name,
    ))

    changes: Dict[str, Any] = {"history": tuple(entries)}
    if result.turn.turn_type in QUESTION_TURN_TYPES:
        changes["questions_asked"] = state.questions_asked + (result.turn.text,)
        changes["question_count"] = state.question_count + 1
        changes["current_persona_index"] = result.persona_index

    return dataclasses.replace(state, **changes)


def record_response(state: SessionState, answer: str, now: Optional[datetime] = None) -> SessionState:
    """Apply the candidate's (already transcribed) answer."""
    entry = ConversationEntry(CANDIDATE, answer, TurnType.RESPONSE, now or _utcnow())
    return dataclasses.replace(
        state,
        history=state.history + (entry,),
        user_responses=state.user_responses + (answer,),
    )
