"""
Data models for the interview system.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple


class QuestioningStyle(str, Enum):
    """How hard a persona pushes the candidate."""
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    TOUGH = "tough"


class InterviewMode(str, Enum):
    """Practice sessions are never graded."""
    PRACTICE = "practice"
    GRADED = "graded"


class Stage(str, Enum):
    """Coarse session phase."""
    OPENING = "opening"
    MAIN = "main"
    CLOSING = "closing"


class TurnType(str, Enum):
    """Explicit tag carried by every produced turn and history entry."""
    GREETING = "greeting"
    QUESTION = "question"
    ACKNOWLEDGMENT = "acknowledgment"
    FOLLOWUP = "followup"
    TRANSITION = "transition"
    CLOSING = "closing"
    RESPONSE = "response"


class FollowUpReason(str, Enum):
    """Why the heuristic decided to probe the last answer."""
    RESPONSE_TOO_BRIEF = "response_too_brief"
    PROBING_DEEPER = "probing_deeper"
    INTERESTING_CONTENT = "interesting_content"


@dataclass(frozen=True)
class Persona:
    """One synthetic interviewer."""
    id: int
    name: str
    role: str
    questioning_style: QuestioningStyle = QuestioningStyle.NEUTRAL
    focus_areas: Tuple[str, ...] = ()
    voice_id: Optional[str] = None
    voice_name: Optional[str] = None
    gender: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.role})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "questioning_style": self.questioning_style.value,
            "focus_areas": list(self.focus_areas),
            "voice_id": self.voice_id,
            "voice_name": self.voice_name,
            "gender": self.gender,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Persona":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            role=data["role"],
            questioning_style=QuestioningStyle(data.get("questioning_style", "neutral")),
            focus_areas=tuple(data.get("focus_areas") or ()),
            voice_id=data.get("voice_id") or None,
            voice_name=data.get("voice_name"),
            gender=data.get("gender"),
        )


@dataclass(frozen=True)
class InterviewConfig:
    """Static parameters for one scheduled interview."""
    interview_id: int
    user_id: int
    personas: Tuple[Persona, ...]
    duration_minutes: int
    mode: InterviewMode = InterviewMode.PRACTICE
    scenario_type: str = "interview"
    scenario_description: Optional[str] = None
    document_context: Optional[str] = None

    @property
    def position(self) -> Optional[str]:
        """Position named in the greeting."""
        return self.scenario_description

    @property
    def is_graded(self) -> bool:
        return self.mode == InterviewMode.GRADED


@dataclass(frozen=True)
class ConversationalTurn:
    """One artifact delivered to the candidate."""
    text: str
    turn_type: TurnType
    should_wait_for_response: bool
    audio: Optional[bytes] = None

    @property
    def has_audio(self) -> bool:
        return bool(self.audio)


@dataclass(frozen=True)
class FollowUpDecision:
    """Outcome of the follow-up heuristic for the latest answer."""
    should_follow_up: bool
    reason: Optional[FollowUpReason] = None


NO_FOLLOW_UP = FollowUpDecision(False)


@dataclass(frozen=True)
class TurnResult:
    """Everything produced by one generate_turn call."""
    turn: ConversationalTurn
    persona: Persona
    persona_index: int
    stage: Stage
    question_number: int
    category: str = "general"
    lead_in: Optional[ConversationalTurn] = None
    is_follow_up: bool = False
    follow_up: FollowUpDecision = NO_FOLLOW_UP

    @property
    def acknowledgment(self) -> Optional[str]:
        """Text of the acknowledgment spoken before the main turn."""
        return self.lead_in.text if self.lead_in else None

    @property
    def spoken_text(self) -> str:
        """Lead-in and main turn as one continuous utterance."""
        if self.lead_in:
            return f"{self.lead_in.text} {self.turn.text}"
        return self.turn.text


@dataclass(frozen=True)
class Grade:
    """Evaluation of one candidate response on a 0-100 scale."""
    overall: int = 0
    confidence: int = 0
    clarity: int = 0
    relevance: int = 0
    strengths: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()
    feedback: str = ""
    suggestions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "confidence": self.confidence,
            "clarity": self.clarity,
            "relevance": self.relevance,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "feedback": self.feedback,
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Grade":
        return cls(
            overall=int(data.get("overall", 0)),
            confidence=int(data.get("confidence", 0)),
            clarity=int(data.get("clarity", 0)),
            relevance=int(data.get("relevance", 0)),
            strengths=tuple(data.get("strengths") or ()),
            improvements=tuple(data.get("improvements") or ()),
            feedback=data.get("feedback", ""),
            suggestions=tuple(data.get("suggestions") or ()),
        )


PRACTICE_GRADE = Grade(feedback="Response recorded (practice mode)")


@dataclass(frozen=True)
class SessionAnalytics:
    """Session-level aggregate written once at session end."""
    session_id: Optional[int]
    overall_grade: int
    confidence_score: int
    clarity_score: int
    relevance_score: int
    key_strengths: Tuple[str, ...] = ()
    key_improvements: Tuple[str, ...] = ()
    overall_performance: str = ""
    response_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "overall_grade": self.overall_grade,
            "confidence_score": self.confidence_score,
            "clarity_score": self.clarity_score,
            "relevance_score": self.relevance_score,
            "key_strengths": list(self.key_strengths),
            "key_improvements": list(self.key_improvements),
            "overall_performance": self.overall_performance,
            "response_count": self.response_count,
        }


@dataclass
class Transcription:
    """Speech-to-text output for one candidate recording."""
    text: str
    language_code: str
    confidence: float = 0.0
    alternatives: List[str] = field(default_factory=list)
