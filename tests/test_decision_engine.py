import dataclasses
import random
from datetime import timedelta

import pytest

from rehearse.config import FollowUpConfig
from rehearse.interview import FollowUpHeuristic, FollowUpReason, QuestioningStyle, Persona
from rehearse.interview.decision_engine import next_persona_index, persona_at, should_end_session
from rehearse.interview.state import start_session
from rehearse.interview.testing import FixedRandom, create_test_config

from helpers import START, LONG_ANSWER, BRIEF_ANSWER, run_session

QUESTION = "Tell me about a system you designed."
TEAM_ANSWER = (
    "Our team rebuilt the billing pipeline over two quarters and I owned the data model, "
    "the migration plan and the rollout to every region we serve."
)


def test_brief_answer_always_gets_a_follow_up():
    heuristic = FollowUpHeuristic(rng=FixedRandom(0.99))
    for style in QuestioningStyle:
        decision = heuristic.should_follow_up(QUESTION, BRIEF_ANSWER, style)
        assert decision.should_follow_up
        assert decision.reason == FollowUpReason.RESPONSE_TOO_BRIEF


def test_long_friendly_answer_without_keywords_gets_none():
    answer = " ".join(["word"] * 40)
    decision = FollowUpHeuristic(rng=FixedRandom(0.0)).should_follow_up(QUESTION, answer, QuestioningStyle.FRIENDLY)
    assert not decision.should_follow_up
    assert decision.reason is None


def test_tough_interviewer_probes_when_the_roll_succeeds():
    decision = FollowUpHeuristic(rng=FixedRandom(0.1)).should_follow_up(QUESTION, LONG_ANSWER, QuestioningStyle.TOUGH)
    assert decision.should_follow_up
    assert decision.reason == FollowUpReason.PROBING_DEEPER


def test_tough_roll_failure_falls_through_to_keywords():
    config = FollowUpConfig(tough_probability=0.5, keyword_probability=1.0)
    heuristic = FollowUpHeuristic(config, rng=FixedRandom(0.7))
    decision = heuristic.should_follow_up(QUESTION, TEAM_ANSWER, QuestioningStyle.TOUGH)
    assert decision.reason == FollowUpReason.INTERESTING_CONTENT


def test_keyword_answer_is_probed_with_probability():
    hit = FollowUpHeuristic(rng=FixedRandom(0.3)).should_follow_up(QUESTION, TEAM_ANSWER, QuestioningStyle.NEUTRAL)
    miss = FollowUpHeuristic(rng=FixedRandom(0.5)).should_follow_up(QUESTION, TEAM_ANSWER, QuestioningStyle.NEUTRAL)
    assert hit.reason == FollowUpReason.INTERESTING_CONTENT
    assert not miss.should_follow_up


def test_keyword_match_is_case_insensitive():
    config = FollowUpConfig(keyword_probability=1.0)
    answer = TEAM_ANSWER.replace("team", "TEAM")
    decision = FollowUpHeuristic(config, rng=FixedRandom(0.0)).should_follow_up(QUESTION, answer, QuestioningStyle.FRIENDLY)
    assert decision.should_follow_up


def test_seeded_generators_make_identical_decisions():
    def decisions(seed):
        heuristic = FollowUpHeuristic(rng=random.Random(seed))
        return [heuristic.should_follow_up(QUESTION, TEAM_ANSWER, QuestioningStyle.TOUGH) for _ in range(20)]

    assert decisions(42) == decisions(42)


def test_never_random_preset_only_probes_brief_answers():
    heuristic = FollowUpHeuristic(FollowUpConfig.from_preset("never_random"), rng=FixedRandom(0.0))
    assert not heuristic.should_follow_up(QUESTION, TEAM_ANSWER, QuestioningStyle.TOUGH).should_follow_up
    assert heuristic.should_follow_up(QUESTION, BRIEF_ANSWER, QuestioningStyle.TOUGH).should_follow_up


def test_persona_index_wraps_round_robin(personas):
    assert persona_at(0, personas).name == "Marcus"
    assert persona_at(4, personas).name == "Jennifer"


def test_next_persona_moves_one_seat_after_the_greeting(config):
    state = start_session(config, 1, now=START)
    assert next_persona_index(state) == 0

    state = dataclasses.replace(state, question_count=1, current_persona_index=0)
    assert next_persona_index(state) == 1

    state = dataclasses.replace(state, question_count=5, current_persona_index=2)
    assert next_persona_index(state) == 3


def test_questions_spread_evenly_across_the_panel(make_orchestrator, personas):
    panel = list(personas) + [
        Persona(4, "Emily", "Recruiter", QuestioningStyle.FRIENDLY, ("motivation",)),
        Persona(5, "James", "Product Manager", QuestioningStyle.NEUTRAL, ("product",)),
    ]
    config = create_test_config(panel)
    results, _ = run_session(make_orchestrator(), config)

    questions = [r for r in results if r.turn.turn_type.value == "question"]
    counts = [sum(1 for r in questions if r.persona.name == p.name) for p in panel]
    floor = len(questions) // len(panel)
    assert all(floor <= c <= floor + 1 for c in counts)


def test_session_ends_when_time_runs_out(config):
    state = start_session(config, 1, now=START)
    assert not should_end_session(state, config, START + timedelta(minutes=29))
    assert should_end_session(state, config, START + timedelta(minutes=30))


def test_session_ends_when_question_budget_is_used(config):
    state = dataclasses.replace(start_session(config, 1, now=START), question_count=15)
    assert should_end_session(state, config, START)


@pytest.mark.parametrize("count", [0, 14])
def test_session_continues_under_budget(config, count):
    state = dataclasses.replace(start_session(config, 1, now=START), question_count=count)
    assert not should_end_session(state, config, START)
