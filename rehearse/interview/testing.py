"""
Testing infrastructure with mock collaborators for the interview system.
"""
import json
import random
import threading
from datetime import timedelta
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .errors import TextGenerationUnavailable, SynthesisFailed
from .models import Persona, QuestioningStyle, InterviewConfig, InterviewMode
from ..infrastructure.llm import TextGenerationClient
from ..infrastructure.speech import SpeechSynthesizer

# Markers that identify which prompt template produced a request.
REQUEST_MARKERS = (
    ("greeting", "Return ONLY your spoken greeting"),
    ("closing", "Return ONLY your spoken closing"),
    ("acknowledgment", "Return ONLY the acknowledgment text"),
    ("followup", "Return ONLY the follow-up question text"),
    ("question", "Generate your next interview question"),
    ("grading", '"overall_grade"'),
)


def classify_request(user_prompt: str) -> str:
    for kind, marker in REQUEST_MARKERS:
        if marker in user_prompt:
            return kind
    return "unknown"


@dataclass
class GenerationRequest:
    """One recorded call to a mock text client."""
    kind: str
    system_prompt: str
    user_prompt: str
    max_tokens: int
    temperature: float


DEFAULT_GRADE_JSON = json.dumps({
    "overall_grade": 80,
    "confidence_score": 75,
    "clarity_score": 85,
    "relevance_score": 80,
    "strengths": ["Clear structure"],
    "improvements": ["More concrete examples"],
    "detailed_feedback": "A solid, well organised answer.",
    "suggestions": ["Quantify your impact"],
})


class MockTextClient(TextGenerationClient):
    """
    Scripted text generation.

    Responses are chosen by request kind so concurrent calls stay
    deterministic. Questions are numbered so they never repeat unless a
    fixed question is scripted.
    """

    def __init__(self, responses: Optional[Dict[str, str]] = None):
        self.responses = {
            "greeting": "Hi, I'm your interviewer. Thanks for joining us today. Let's get started.",
            "closing": "Thank you for your time today. We'll be in touch with next steps. Have a great day!",
            "acknowledgment": "Thanks, that's a helpful answer.",
            "followup": "Could you walk me through a specific example of that?",
            "grading": DEFAULT_GRADE_JSON,
        }
        self.responses.update(responses or {})
        self.requests: List[GenerationRequest] = []
        self._question_count = 0
        self._lock = threading.Lock()

    def generate(self, system_prompt, user_prompt, max_tokens=512, temperature=0.7):
        kind = classify_request(user_prompt)
        with self._lock:
            self.requests.append(GenerationRequest(kind, system_prompt, user_prompt, max_tokens, temperature))
            if kind == "question" and "question" not in self.responses:
                self._question_count += 1
                return f"Question {self._question_count}: how would you approach a new system design?"
        return self.responses.get(kind, "Okay.")

    def requests_of(self, kind: str) -> List[GenerationRequest]:
        with self._lock:
            return [r for r in self.requests if r.kind == kind]


class FailingTextClient(MockTextClient):
    """Mock client that is unavailable for the given request kinds."""

    def __init__(self, fail_kinds: Iterable[str], responses: Optional[Dict[str, str]] = None):
        super().__init__(responses)
        self.fail_kinds = set(fail_kinds)

    def generate(self, system_prompt, user_prompt, max_tokens=512, temperature=0.7):
        kind = classify_request(user_prompt)
        if kind in self.fail_kinds or "all" in self.fail_kinds:
            with self._lock:
                self.requests.append(GenerationRequest(kind, system_prompt, user_prompt, max_tokens, temperature))
            raise TextGenerationUnavailable(f"Mock text generation down for {kind}")
        return super().generate(system_prompt, user_prompt, max_tokens, temperature)


class MockSynthesizer(SpeechSynthesizer):
    """Records synthesis calls and returns fake audio."""

    def __init__(self):
        self.calls: List[Dict[str, object]] = []

    def synthesize(self, text, voice_id, stability=0.5, similarity_boost=0.75):
        self.calls.append({
            "text": text, "voice_id": voice_id,
            "stability": stability, "similarity_boost": similarity_boost,
        })
        return b"AUDIO:" + text.encode("utf-8")


class FailingSynthesizer(SpeechSynthesizer):
    """Synthesizer whose backend is always down."""

    def __init__(self):
        self.attempts = 0

    def synthesize(self, text, voice_id, stability=0.5, similarity_boost=0.75):
        self.attempts += 1
        raise SynthesisFailed("Mock synthesis backend unavailable")


def create_test_personas(count: int = 3) -> List[Persona]:
    """A small panel with one persona of each questioning style."""
    panel = [
        Persona(1, "Marcus", "Technical Manager", QuestioningStyle.NEUTRAL,
                ("technical", "architecture"), "voice-marcus", "Clyde", "male"),
        Persona(2, "Jennifer", "HR Director", QuestioningStyle.FRIENDLY,
                ("behavioral", "culture-fit"), "voice-jennifer", "Sarah", "female"),
        Persona(3, "Robert", "VP of Engineering", QuestioningStyle.TOUGH,
                ("leadership", "strategic"), "voice-robert", "Charlie", "male"),
    ]
    return panel[:count]


def create_test_config(personas: Optional[List[Persona]] = None,
                       duration_minutes: int = 30,
                       mode: InterviewMode = InterviewMode.GRADED,
                       position: Optional[str] = "Software Engineer") -> InterviewConfig:
    return InterviewConfig(
        interview_id=1,
        user_id=1,
        personas=tuple(personas if personas is not None else create_test_personas()),
        duration_minutes=duration_minutes,
        mode=mode,
        scenario_description=position,
    )


class FixedRandom(random.Random):
    """Random source whose draws always return the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class FixedClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now

