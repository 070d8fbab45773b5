"""Shared pytest fixtures for HPMA tests."""
import pytest
import structlog

from hpma.data.questions import BASELINE_QUESTIONS

# Validity answers that raise no flag: low idealizing, attentive, not random.
CLEAN_VALIDITY = {107: 2, 108: 5, 109: 2, 110: 5, 111: 7, 112: 1}


def _neutral():
    responses = {q.id: 4 for q in BASELINE_QUESTIONS}
    responses.update(CLEAN_VALIDITY)
    return responses


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any configure_logging() call so later tests never log to a closed capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def neutral_responses():
    """Every baseline item answered at the midpoint, clean validity items."""
    return _neutral()


@pytest.fixture
def hexaco_all_fours():
    """Only the 48 HEXACO items, all answered 4."""
    return {qid: 4 for qid in range(1, 49)}


@pytest.fixture
def explorer_responses():
    """Openness, autonomy and seeking maxed; everything else neutral.

    O facets score 7 (forward items 7, reversed items 1), so every O facet,
    the O domain, autonomy and seeking all sit at z = +2.
    """
    responses = _neutral()
    for qid in range(41, 49):
        responses[qid] = 7 if qid % 2 == 1 else 1
    for qid in range(69, 74):  # autonomy
        responses[qid] = 7
    for qid in range(79, 83):  # seeking
        responses[qid] = 7
    return responses


@pytest.fixture
def secure_attachment_responses():
    """Every attachment item answered 2."""
    return {qid: 2 for qid in range(201, 213)}


@pytest.fixture
def antagonism_six_responses():
    """Every antagonism item answered 6."""
    return {qid: 6 for qid in range(301, 317)}


@pytest.fixture
def duet_probabilities():
    """p1=0.40, p2=0.38, p3=0.07: a Twin-Helix Seeker-Sage duet."""
    return {
        "explorer": 0.40,
        "philosopher": 0.38,
        "connector": 0.07,
        "protector": 0.07,
        "performer": 0.06,
        "organizer": 0.02,
    }


@pytest.fixture
def uniform_probabilities():
    return {
        name: 1 / 6
        for name in ("explorer", "organizer", "connector", "protector", "performer", "philosopher")
    }
