"""
Structured schemas for data coming back from the LLM.
"""
import json
import logging
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import Grade
from .errors import GradingParseError

logger = logging.getLogger("schemas")

_decoder = json.JSONDecoder()

# Neutral grade used when the model answers without any JSON object.
FALLBACK_GRADE = Grade(
    overall=70,
    confidence=70,
    clarity=70,
    relevance=70,
    strengths=("Response provided",),
    improvements=("Could be more detailed",),
    feedback="Unable to generate detailed feedback. Please try again.",
    suggestions=("Practice answering with more specific examples",),
)


def _clamp_score(value: Union[int, float, str, None]) -> int:
    if value is None or value == "":
        return 0
    score = float(value)
    return int(min(100.0, max(0.0, score)) + 0.5)


class GradingPayload(BaseModel):
    """Grading JSON as requested from the model."""
    overall_grade: int = 0
    confidence_score: int = 0
    clarity_score: int = 0
    relevance_score: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    detailed_feedback: str = ""
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("overall_grade", "confidence_score", "clarity_score", "relevance_score", mode="before")
    @classmethod
    def clamp_scores(cls, value):
        return _clamp_score(value)

    @field_validator("strengths", "improvements", "suggestions", mode="before")
    @classmethod
    def listify(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("detailed_feedback", mode="before")
    @classmethod
    def stringify(cls, value):
        return "" if value is None else str(value)

    def to_grade(self) -> Grade:
        return Grade(
            overall=self.overall_grade,
            confidence=self.confidence_score,
            clarity=self.clarity_score,
            relevance=self.relevance_score,
            strengths=tuple(self.strengths),
            improvements=tuple(self.improvements),
            feedback=self.detailed_feedback,
            suggestions=tuple(self.suggestions),
        )


def parse_grading_response(raw_response: Optional[str]) -> Grade:
    """
    Parse the grading LLM response into a Grade.

    Args:
        raw_response: Raw text from the LLM, possibly wrapped in prose or code fences

    Returns:
        Grade with scores clamped to 0-100

    Raises:
        GradingParseError: If a JSON object is present but cannot be parsed or validated
    """
    text = raw_response or ""
    start = text.find("{")
    if start < 0:
        logger.warning(f"No JSON in grading response, using fallback grade: {text[:200]!r}")
        return FALLBACK_GRADE

    try:
        # The first complete object wins; prose after it is ignored.
        data, _ = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise GradingParseError(f"Could not parse grading JSON: {e}") from e

    if not isinstance(data, dict):
        raise GradingParseError(f"Grading JSON is not an object: {data!r}")

    try:
        return GradingPayload.model_validate(data).to_grade()
    except (ValidationError, ValueError, TypeError) as e:
        raise GradingParseError(f"Invalid grading structure: {e}") from e
