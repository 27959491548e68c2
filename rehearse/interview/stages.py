"""
Stage classification for an interview session.
"""
import math

from .models import Stage

# Questions or minutes left at which the session moves into closing.
CLOSING_MARGIN = 2
MINUTES_PER_QUESTION = 2


def max_questions_for(total_minutes: float) -> int:
    """One question slot per two minutes of budget."""
    return math.ceil(total_minutes / MINUTES_PER_QUESTION)


def classify_stage(question_count: int,
                   max_questions: int,
                   elapsed_minutes: float,
                   total_minutes: float) -> Stage:
    """Map session progress to opening, main or closing."""
    if question_count == 0:
        return Stage.OPENING

    questions_remaining = max_questions - question_count
    minutes_remaining = total_minutes - elapsed_minutes
    if questions_remaining <= CLOSING_MARGIN or minutes_remaining <= CLOSING_MARGIN:
        return Stage.CLOSING

    return Stage.MAIN
