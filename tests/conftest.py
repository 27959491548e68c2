import pytest

from rehearse.interview import InterviewOrchestrator
from rehearse.interview.testing import (
    FixedClock, FixedRandom, MockTextClient, create_test_config, create_test_personas,
)

from helpers import START


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def text_client():
    return MockTextClient()


@pytest.fixture
def personas():
    return create_test_personas()


@pytest.fixture
def config(personas):
    return create_test_config(personas)


@pytest.fixture
def make_orchestrator(clock):
    """Factory so tests can swap collaborators; follow-ups never fire by chance."""
    def factory(text_client=None, synthesizer=None, rng=None, **kwargs):
        return InterviewOrchestrator(
            text_client or MockTextClient(),
            synthesizer=synthesizer,
            rng=rng or FixedRandom(0.99),
            clock=clock,
            **kwargs,
        )
    return factory


@pytest.fixture
def orchestrator(make_orchestrator, text_client):
    return make_orchestrator(text_client)

