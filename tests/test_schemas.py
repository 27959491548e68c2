import json

import pytest

from rehearse.interview import GradingParseError, parse_grading_response
from rehearse.interview.schemas import FALLBACK_GRADE


def _payload(**overrides):
    data = {
        "overall_grade": 82,
        "confidence_score": 78,
        "clarity_score": 88,
        "relevance_score": 80,
        "strengths": ["Structured answer", "Good example"],
        "improvements": ["Quantify results"],
        "detailed_feedback": "Well argued.",
        "suggestions": ["Use STAR"],
    }
    data.update(overrides)
    return json.dumps(data)


def test_parses_json_wrapped_in_code_fence():
    grade = parse_grading_response(f"Here is the evaluation:\n```json\n{_payload()}\n```")
    assert grade.overall == 82
    assert grade.strengths == ("Structured answer", "Good example")
    assert grade.feedback == "Well argued."
    assert grade.suggestions == ("Use STAR",)



def test_prose_after_the_json_is_ignored():
    grade = parse_grading_response(_payload() + "\nLet me know {if} you need more detail.")
    assert grade.overall == 82
    assert grade.relevance == 80


def test_scores_are_clamped():
    grade = parse_grading_response(_payload(overall_grade=140, confidence_score=-10, clarity_score="91.6"))
    assert grade.overall == 100
    assert grade.confidence == 0
    assert grade.clarity == 92


def test_missing_fields_default_to_empty():
    grade = parse_grading_response('{"overall_grade": 50}')
    assert grade.overall == 50
    assert grade.relevance == 0
    assert grade.strengths == ()
    assert grade.feedback == ""


def test_single_string_is_listified():
    grade = parse_grading_response(_payload(strengths="Confident delivery", improvements=None))
    assert grade.strengths == ("Confident delivery",)
    assert grade.improvements == ()


def test_response_without_json_uses_fallback_grade():
    assert parse_grading_response("I cannot grade this answer.") == FALLBACK_GRADE
    assert parse_grading_response(None) == FALLBACK_GRADE


def test_malformed_json_raises():
    with pytest.raises(GradingParseError):
        parse_grading_response('{"overall_grade": 80,,}')


def test_non_numeric_score_raises():
    with pytest.raises(GradingParseError):
        parse_grading_response(_payload(overall_grade="excellent"))
