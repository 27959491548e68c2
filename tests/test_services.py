import pytest

from rehearse.interview import (
    EventType, GradingParseError, GradingService, InterviewEventBus, InterviewMode, SpeechService,
    TextGenerationUnavailable,
)
from rehearse.interview.models import PRACTICE_GRADE
from rehearse.interview.testing import (
    FailingSynthesizer, FailingTextClient, MockSynthesizer, MockTextClient,
)


@pytest.fixture
def events():
    bus = InterviewEventBus()
    seen = []
    bus.subscribe_all(seen.append)
    return bus, seen


def test_voice_settings_by_style(personas):
    assert SpeechService.voice_settings(personas[0]) == (0.5, 0.75)
    assert SpeechService.voice_settings(personas[1]) == (0.5, 0.75)
    assert SpeechService.voice_settings(personas[2]) == (0.6, 0.75)


def test_speech_without_synthesizer_is_silent(personas):
    assert SpeechService().synthesize_turn("Hello there.", personas[0]) is None


def test_speech_uses_persona_voice(personas):
    synthesizer = MockSynthesizer()
    audio = SpeechService(synthesizer).synthesize_turn("Hello there.", personas[2])
    assert audio == b"AUDIO:Hello there."
    assert synthesizer.calls == [{
        "text": "Hello there.", "voice_id": "voice-robert", "stability": 0.6, "similarity_boost": 0.75,
    }]


def test_speech_failure_is_reported_not_raised(personas, events):
    bus, seen = events
    synthesizer = FailingSynthesizer()
    assert SpeechService(synthesizer, bus).synthesize_turn("Hello.", personas[0], session_id=3) is None
    assert synthesizer.attempts == 1
    assert seen[0].event_type == EventType.SYNTHESIS_FAILED
    assert seen[0].session_id == 3


def test_practice_grading_never_calls_the_model(personas):
    client = MockTextClient()
    grade = GradingService(client).evaluate(InterviewMode.PRACTICE, "Q?", "An answer.", personas[0])
    assert grade == PRACTICE_GRADE
    assert grade.feedback == "Response recorded (practice mode)"
    assert client.requests == []


def test_graded_grading_uses_persona_focus_areas(personas, events):
    bus, seen = events
    client = MockTextClient()
    grade = GradingService(client, bus).evaluate(InterviewMode.GRADED, "Q?", "An answer.", personas[1], session_id=2)

    assert grade.overall == 80
    prompt = client.requests_of("grading")[0].user_prompt
    assert "Expected areas to cover: behavioral, culture-fit" in prompt
    assert seen[0].event_type == EventType.RESPONSE_EVALUATED
    assert seen[0].data == {"overall": 80, "graded": True}


def test_grading_categorizes_when_no_category_given(personas):
    client = MockTextClient()
    GradingService(client).evaluate(InterviewMode.GRADED, "How does your team handle reviews?", "Well.", personas[0])
    assert "Category: behavioral" in client.requests_of("grading")[0].user_prompt


def test_grading_propagates_unavailable_model(personas):
    service = GradingService(FailingTextClient(["grading"]))
    with pytest.raises(TextGenerationUnavailable):
        service.evaluate(InterviewMode.GRADED, "Q?", "An answer.", personas[0])


def test_grading_propagates_malformed_json(personas):
    service = GradingService(MockTextClient({"grading": "{not json}"}))
    with pytest.raises(GradingParseError):
        service.evaluate(InterviewMode.GRADED, "Q?", "An answer.", personas[0])
