from datetime import datetime, timezone

START = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

LONG_ANSWER = (
    "I enjoy building reliable software for customers and I like learning new things "
    "every single day at work with great people around me always."
)
BRIEF_ANSWER = "I mostly wrote backend services in Python."


def answered(orchestrator, config, state, answer):
    """Generate a turn, record it and record the candidate's answer."""
    result = orchestrator.generate_turn(config, state)
    state = orchestrator.apply_turn(state, result)
    return result, orchestrator.apply_response(state, answer)


def run_session(orchestrator, config, answer=LONG_ANSWER, session_id=1):
    """Drive a whole session, answering every question the same way."""
    state = orchestrator.start_session(config, session_id)
    results = []
    while True:
        result = orchestrator.generate_turn(config, state)
        state = orchestrator.apply_turn(state, result)
        results.append(result)
        if not result.turn.should_wait_for_response:
            return results, state
        state = orchestrator.apply_response(state, answer)
