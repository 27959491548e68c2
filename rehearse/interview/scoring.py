"""
Session-level score aggregation.

Pure functions of the grades passed in: no I/O, no randomness, and the input
grades are never modified.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Grade, InterviewMode, SessionAnalytics

MAX_KEY_POINTS = 5

PRACTICE_SUMMARY = "Practice session completed"
NO_RESPONSES_SUMMARY = "No responses recorded yet. Please submit at least one response to see analytics."

# (minimum overall grade, summary sentence), checked top down.
PERFORMANCE_BANDS: Tuple[Tuple[int, str], ...] = (
    (90, "Excellent performance! You demonstrated strong skills across all areas."),
    (80, "Good performance with room for improvement in some areas."),
    (70, "Solid effort. Focus on the improvement areas to enhance your skills."),
    (60, "Fair performance. Continue practicing to build confidence and clarity."),
)
ENCOURAGEMENT = "Keep practicing! Review the feedback to improve your interview skills."
SESSION_COMPLETED = "Session completed."


def round_half_up_mean(values: Sequence[int]) -> int:
    """Integer mean of non-negative scores, .5 rounds up."""
    n = len(values)
    if n == 0:
        return 0
    return (2 * sum(values) + n) // (2 * n)


def merge_points(groups: Iterable[Sequence[str]], limit: int = MAX_KEY_POINTS) -> Tuple[str, ...]:
    """First `limit` distinct entries across all groups, in order."""
    seen: List[str] = []
    for group in groups:
        for point in group:
            if point not in seen:
                seen.append(point)
                if len(seen) == limit:
                    return tuple(seen)
    return tuple(seen)


def performance_summary(overall: int, strengths: Sequence[str], improvements: Sequence[str]) -> str:
    sentence = ENCOURAGEMENT if overall > 0 else SESSION_COMPLETED
    for threshold, text in PERFORMANCE_BANDS:
        if overall >= threshold:
            sentence = text
            break

    parts = [sentence]
    if strengths:
        parts.append(f"Strong performance in {strengths[0]}.")
    if improvements:
        parts.append(f"Consider focusing on {improvements[0]}.")
    return " ".join(parts)


def summarize(session_id: Optional[int], mode: InterviewMode, grades: Sequence[Grade]) -> SessionAnalytics:
    """Aggregate per-response grades into the session report."""
    if mode == InterviewMode.PRACTICE:
        return SessionAnalytics(session_id, 0, 0, 0, 0,
                                overall_performance=PRACTICE_SUMMARY,
                                response_count=len(grades))

    if not grades:
        return SessionAnalytics(session_id, 0, 0, 0, 0,
                                overall_performance=NO_RESPONSES_SUMMARY,
                                response_count=0)

    overall = round_half_up_mean([g.overall for g in grades])
    strengths = merge_points(g.strengths for g in grades)
    improvements = merge_points(g.improvements for g in grades)

    return SessionAnalytics(
        session_id=session_id,
        overall_grade=overall,
        confidence_score=round_half_up_mean([g.confidence for g in grades]),
        clarity_score=round_half_up_mean([g.clarity for g in grades]),
        relevance_score=round_half_up_mean([g.relevance for g in grades]),
        key_strengths=strengths,
        key_improvements=improvements,
        overall_performance=performance_summary(overall, strengths, improvements),
        response_count=len(grades),
    )
