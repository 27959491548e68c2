"""
Session records for interview sessions.
Handles question/response records, session metadata and the analytics record.
One JSON document per session lives under the store's directory.
"""
import os
import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...interview.errors import SessionStoreError
from ...interview.models import Grade, InterviewConfig, SessionAnalytics, TurnResult
from ...interview.state import SessionState

logger = logging.getLogger("session_store")

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


@dataclass
class QuestionRecord:
    """One question-bearing interviewer turn."""
    number: int
    text: str
    category: str
    turn_type: str
    persona_name: str
    persona_index: int
    asked_at: str  # ISO format timestamp
    lead_in: Optional[str] = None


@dataclass
class ResponseRecord:
    """A candidate answer and its grade."""
    question_number: int
    text: str
    submitted_at: str
    grade: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionRecord:
    """Complete record of a single interview session."""
    session_id: int
    interview_id: int
    user_id: int
    mode: str
    start_time: str
    status: str = STATUS_IN_PROGRESS
    end_time: Optional[str] = None
    memory_session_id: str = ""
    state: Dict[str, Any] = field(default_factory=dict)
    questions: List[QuestionRecord] = field(default_factory=list)
    responses: List[ResponseRecord] = field(default_factory=list)
    analytics: Optional[Dict[str, Any]] = None
    audio_files: List[str] = field(default_factory=list)

    @property
    def grades(self) -> List[Grade]:
        return [Grade.from_dict(r.grade) for r in self.responses if r.grade]

    def session_state(self) -> SessionState:
        return SessionState.from_dict(self.state)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        data = dict(data)
        data["questions"] = [QuestionRecord(**q) for q in data.get("questions", [])]
        data["responses"] = [ResponseRecord(**r) for r in data.get("responses", [])]
        return cls(**data)


class SessionStore:
    """Persists session records as JSON files."""

    def __init__(self, sessions_dir: str = "./_sessions"):
        self.sessions_dir = sessions_dir
        os.makedirs(self.sessions_dir, exist_ok=True)

    def _get_record_path(self, session_id: int) -> str:
        return os.path.join(self.sessions_dir, f"session_{session_id}.json")

    def next_session_id(self) -> int:
        ids = []
        for filename in os.listdir(self.sessions_dir):
            if filename.startswith("session_") and filename.endswith(".json"):
                try:
                    ids.append(int(filename[len("session_"):-len(".json")]))
                except ValueError:
                    continue
        return max(ids, default=0) + 1

    def create(self, config: InterviewConfig, state: SessionState) -> SessionRecord:
        """Create the session record for a freshly started state."""
        if os.path.exists(self._get_record_path(state.session_id)):
            raise SessionStoreError(f"Session {state.session_id} already exists")

        record = SessionRecord(
            session_id=state.session_id,
            interview_id=config.interview_id,
            user_id=config.user_id,
            mode=config.mode.value,
            start_time=state.start_time.isoformat(),
            memory_session_id=state.memory_session_id,
            state=state.to_dict(),
        )
        self.save(record)
        return record

    def load(self, session_id: int) -> SessionRecord:
        path = self._get_record_path(session_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return SessionRecord.from_dict(json.load(f))
        except FileNotFoundError:
            raise SessionStoreError(f"No session record for session {session_id}")
        except (OSError, json.JSONDecodeError, TypeError) as e:
            raise SessionStoreError(f"Could not read session {session_id}: {e}") from e

    def save(self, record: SessionRecord) -> None:
        """Write the record atomically."""
        path = self._get_record_path(record.session_id)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(record), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            raise SessionStoreError(f"Could not write session {record.session_id}: {e}") from e
        logger.debug(f"Saved session record: {path}")

    def record_turn(self, state: SessionState, result: TurnResult) -> SessionRecord:
        """
        Persist a delivered turn together with the state it produced.

        Question-bearing turns also get a question record; audio, if any, is
        written next to the session file.
        """
        record = self.load(state.session_id)
        record.state = state.to_dict()

        if result.turn.should_wait_for_response:
            record.questions.append(QuestionRecord(
                number=result.question_number,
                text=result.turn.text,
                category=result.category,
                turn_type=result.turn.turn_type.value,
                persona_name=result.persona.name,
                persona_index=result.persona_index,
                asked_at=_timestamp(state),
                lead_in=result.acknowledgment,
            ))

        if result.turn.audio:
            audio_path = os.path.join(
                self.sessions_dir,
                f"session_{state.session_id}_turn_{len(record.state.get('history', []))}.audio",
            )
            with open(audio_path, 'wb') as f:
                f.write(result.turn.audio)
            record.audio_files.append(audio_path)

        self.save(record)
        return record

    def record_response(self, state: SessionState, answer: str, grade: Optional[Grade] = None) -> SessionRecord:
        record = self.load(state.session_id)
        record.state = state.to_dict()
        record.responses.append(ResponseRecord(
            question_number=state.question_count,
            text=answer,
            submitted_at=_timestamp(state),
            grade=grade.to_dict() if grade else {},
        ))
        self.save(record)
        return record

    def complete(self, session_id: int, analytics: SessionAnalytics, end_time: datetime) -> SessionRecord:
        """Write the analytics record. It can only be written once."""
        record = self.load(session_id)
        if record.analytics is not None:
            raise SessionStoreError(f"Analytics for session {session_id} were already written")

        record.analytics = analytics.to_dict()
        record.status = STATUS_COMPLETED
        record.end_time = end_time.isoformat()
        self.save(record)
        logger.info(f"Session {session_id} completed with overall grade {analytics.overall_grade}")
        return record


def _timestamp(state: SessionState) -> str:
    if state.history:
        return state.history[-1].timestamp.isoformat()
    return state.start_time.isoformat()
