import pytest

from rehearse.config import Config
from rehearse.interview import (
    ConfigurationError, InterviewMode, InterviewOrchestrator, Stage, TurnType,
)
from rehearse.interview.models import PRACTICE_GRADE
from rehearse.interview.testing import MockTextClient, create_test_config

from helpers import LONG_ANSWER, run_session


def test_full_session_walks_greeting_questions_and_closing(orchestrator, config):
    results, state = run_session(orchestrator, config)
    types = [r.turn.turn_type for r in results]

    assert types[0] == TurnType.GREETING
    assert types[-1] == TurnType.CLOSING
    assert types[1:-1] == [TurnType.QUESTION] * 12
    assert state.question_count == 13
    assert results[-1].stage == Stage.CLOSING


def test_full_session_shares_questions_evenly(orchestrator, config):
    results, _ = run_session(orchestrator, config)
    questions = [r for r in results if r.turn.turn_type == TurnType.QUESTION]

    per_persona = {p.name: sum(1 for r in questions if r.persona.name == p.name) for p in config.personas}
    assert per_persona == {"Marcus": 4, "Jennifer": 4, "Robert": 4}


def test_full_session_never_repeats_a_question(orchestrator, config):
    _, state = run_session(orchestrator, config)
    assert len(set(state.questions_asked)) == len(state.questions_asked)


def test_full_session_metrics(orchestrator, config):
    results, _ = run_session(orchestrator, config)
    metrics = orchestrator.get_metrics()
    assert metrics["sessions_started"] == 1
    assert metrics["turns_generated"] == len(results)
    assert metrics["follow_ups"] == 0
    assert metrics["errors_occurred"] == 0

    orchestrator.reset_metrics()
    assert orchestrator.get_metrics()["turns_generated"] == 0


def test_every_main_question_is_led_by_an_acknowledgment(orchestrator, config):
    results, _ = run_session(orchestrator, config)
    questions = [r for r in results if r.turn.turn_type == TurnType.QUESTION]
    assert questions
    for result in questions:
        assert result.lead_in.turn_type == TurnType.ACKNOWLEDGMENT


def test_should_end_session_tracks_the_clock(orchestrator, config, clock):
    state = orchestrator.start_session(config, 1)
    assert not orchestrator.should_end_session(state, config)
    clock.advance(minutes=30)
    assert orchestrator.should_end_session(state, config)


def test_apply_turn_and_response_use_the_clock(orchestrator, config, clock):
    state = orchestrator.start_session(config, 1)
    result = orchestrator.generate_turn(config, state)
    clock.advance(minutes=1)
    state = orchestrator.apply_turn(state, result)
    clock.advance(minutes=1)
    state = orchestrator.apply_response(state, LONG_ANSWER)

    assert state.history[0].timestamp == state.start_time.replace(minute=1)
    assert state.history[-1].timestamp == state.start_time.replace(minute=2)


def test_start_session_rejects_empty_panel(orchestrator):
    with pytest.raises(ConfigurationError):
        orchestrator.start_session(create_test_config(personas=[]), 1)


def test_start_session_rejects_bad_duration(orchestrator, personas):
    with pytest.raises(ConfigurationError):
        orchestrator.start_session(create_test_config(personas, duration_minutes=-5), 1)


def test_practice_evaluation_makes_no_model_call(orchestrator, personas, text_client):
    config = create_test_config(personas, mode=InterviewMode.PRACTICE)
    grade = orchestrator.evaluate(config, "Why this role?", LONG_ANSWER, personas[0], session_id=1)

    assert grade == PRACTICE_GRADE
    assert grade.overall == 0
    assert text_client.requests_of("grading") == []
    assert orchestrator.get_metrics()["responses_evaluated"] == 1


def test_graded_evaluation_parses_the_model_grade(orchestrator, config, personas, text_client):
    grade = orchestrator.evaluate(config, "Why this role?", LONG_ANSWER, personas[0], "technical", 1)

    assert grade.overall == 80
    assert grade.clarity == 85
    assert grade.strengths == ("Clear structure",)
    request = text_client.requests_of("grading")[0]
    assert "Category: technical" in request.user_prompt
    assert request.temperature == 0.3


def test_summarize_emits_a_summary_event(orchestrator, config, personas):
    grade = orchestrator.evaluate(config, "Why this role?", LONG_ANSWER, personas[0])
    analytics = orchestrator.summarize(1, config.mode, [grade, grade])

    assert analytics.overall_grade == 80
    assert analytics.response_count == 2
    assert orchestrator.get_metrics()["sessions_summarized"] == 1


def test_from_config_requires_a_project():
    with pytest.raises(ConfigurationError):
        InterviewOrchestrator.from_config(Config(google_cloud_project=None))


def test_from_config_rejects_unknown_speech_provider():
    with pytest.raises(ConfigurationError):
        InterviewOrchestrator.from_config(Config(google_cloud_project="proj", tts_provider="bogus"))


def test_from_config_text_only():
    orchestrator = InterviewOrchestrator.from_config(Config(google_cloud_project="proj"), use_tts=False)
    assert orchestrator.turn_generator.text_client.project == "proj"


def test_orchestrator_holds_no_session_data(orchestrator, config):
    first = orchestrator.start_session(config, 1)
    second = orchestrator.start_session(config, 2)
    result = orchestrator.generate_turn(config, first)
    orchestrator.apply_turn(first, result)

    assert orchestrator.generate_turn(config, second).turn.turn_type == TurnType.GREETING
    assert isinstance(orchestrator.turn_generator.text_client, MockTextClient)
