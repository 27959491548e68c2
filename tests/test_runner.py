from unittest.mock import Mock

import pytest

from rehearse.infrastructure.data import SessionStore
from rehearse.interview import ConsoleInterviewRunner, InterviewMode, Transcription, TranscriptionFailed
from rehearse.interview.scoring import NO_RESPONSES_SUMMARY, PRACTICE_SUMMARY
from rehearse.interview.testing import FailingTextClient, create_test_config

from helpers import LONG_ANSWER


class ScriptedConsole:
    """Feeds canned answers to the runner and captures what it prints."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.lines = []

    def input(self, prompt):
        return self.answers.pop(0)

    def output(self, text):
        self.lines.append(text)

    @property
    def text(self):
        return "\n".join(self.lines)


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path))


def _runner(orchestrator, store, console, transcriber=None):
    return ConsoleInterviewRunner(orchestrator, store, transcriber, console.input, console.output)


def test_graded_session_runs_to_closing(orchestrator, personas, store):
    config = create_test_config(personas, duration_minutes=10)
    console = ScriptedConsole([LONG_ANSWER] * 3)
    analytics = _runner(orchestrator, store, console).run(config)

    assert console.answers == []
    assert analytics.response_count == 3
    assert analytics.overall_grade == 80
    assert "INTERVIEW COMPLETE" in console.text

    record = store.load(1)
    assert record.status == "completed"
    assert [q.turn_type for q in record.questions] == ["greeting", "question", "question"]
    assert len(record.responses) == 3
    assert record.analytics["overall_grade"] == 80


def test_practice_session_is_not_graded(orchestrator, personas, store, text_client):
    config = create_test_config(personas, duration_minutes=10, mode=InterviewMode.PRACTICE)
    analytics = _runner(orchestrator, store, ScriptedConsole([LONG_ANSWER] * 3)).run(config)

    assert analytics.overall_performance == PRACTICE_SUMMARY
    assert analytics.overall_grade == 0
    assert text_client.requests_of("grading") == []
    assert all(r.grade == {} for r in store.load(1).responses)


def test_candidate_can_end_early(orchestrator, config, store):
    console = ScriptedConsole(["", "/end"])
    analytics = _runner(orchestrator, store, console).run(config)

    assert analytics.response_count == 0
    assert analytics.overall_performance == NO_RESPONSES_SUMMARY
    assert "Please type an answer" in console.text
    assert store.load(1).status == "completed"


def test_unavailable_interviewers_end_the_session(make_orchestrator, config, store):
    client = FailingTextClient(["all"])
    console = ScriptedConsole([LONG_ANSWER])
    analytics = _runner(make_orchestrator(client), store, console).run(config)

    assert len(client.requests_of("question")) == 3
    assert "could not be graded" in console.text
    assert "interviewers are unavailable" in console.text
    assert analytics.response_count == 0


def test_recorded_answers_are_transcribed(orchestrator, personas, store, tmp_path):
    recording = tmp_path / "answer.wav"
    recording.write_bytes(b"\x00\x01")
    transcriber = Mock()
    transcriber.transcribe.return_value = Transcription(LONG_ANSWER, "en-US", 0.9)
    config = create_test_config(personas, duration_minutes=10)
    console = ScriptedConsole([f"@{recording}", "/end"])

    _runner(orchestrator, store, console, transcriber).run(config)

    transcriber.transcribe.assert_called_once_with(b"\x00\x01")
    assert store.load(1).responses[0].text == LONG_ANSWER


def test_failed_transcription_asks_again(orchestrator, personas, store, tmp_path):
    recording = tmp_path / "answer.wav"
    recording.write_bytes(b"\x00")
    transcriber = Mock()
    transcriber.transcribe.side_effect = TranscriptionFailed("no speech service")
    console = ScriptedConsole([f"@{recording}", "/quit"])

    _runner(orchestrator, store, console, transcriber).run(create_test_config(personas))

    assert "Could not transcribe" in console.text
    assert store.load(1).responses == []
