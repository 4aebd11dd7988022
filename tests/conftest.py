import pytest

from app_types import Match
from match_service import WinnerConfirmationService
from tests.helpers import ALICE, BOB, MATCH_ID, InMemoryStore, RecordingEvaluator


@pytest.fixture
def sample_match():
    """An unfinished match between Alice and Bob."""
    return Match(id=MATCH_ID, player1_id=ALICE, player2_id=BOB)


@pytest.fixture
def store(sample_match):
    """In-memory store holding the sample match."""
    return InMemoryStore([sample_match])


@pytest.fixture
def evaluator():
    return RecordingEvaluator()


@pytest.fixture
def confirmation(store, evaluator):
    """Confirmation service wired to the in-memory store and a recording evaluator."""
    return WinnerConfirmationService(store, store, evaluator)
