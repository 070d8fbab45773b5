"""Unit tests for ArchetypeService — weighted projection and softmax."""
import math

import pytest

from hpma.services.archetype_service import ARCHETYPES, ArchetypeService
from hpma.services.scoring_service import ScoringService


@pytest.fixture
def archetype_service():
    return ArchetypeService()


@pytest.fixture
def scoring_service():
    return ScoringService()


class TestRawScores:
    """Tests for the linear projection."""

    def test_openness_feeds_explorer_and_philosopher(self, archetype_service):
        raw = archetype_service.raw_scores({"O": 1.0}, {}, {})
        assert abs(raw["explorer"] - 1.2) < 1e-9
        assert abs(raw["philosopher"] - 1.0) < 1e-9
        assert raw["connector"] == 0.0

    def test_negative_weight(self, archetype_service):
        """Seeking pulls organizer down."""
        raw = archetype_service.raw_scores({}, {}, {"seeking": 2.0})
        assert abs(raw["organizer"] + 1.0) < 1e-9

    def test_missing_dimensions_count_as_zero(self, archetype_service):
        raw = archetype_service.raw_scores({}, {}, {})
        assert all(v == 0.0 for v in raw.values())
        assert list(raw) == list(ARCHETYPES)


class TestSoftmax:
    """Tests for the temperature-scaled softmax."""

    def test_probabilities_sum_to_one(self, archetype_service):
        probs = archetype_service.softmax({"explorer": 2.0, "organizer": -1.0, "connector": 0.3})
        assert abs(sum(probs.values()) - 1.0) < 1e-9
        assert all(p > 0 for p in probs.values())

    def test_equal_scores_are_uniform(self, archetype_service):
        probs = archetype_service.softmax({name: 0.5 for name in ARCHETYPES})
        assert all(abs(p - 1 / 6) < 1e-9 for p in probs.values())

    def test_large_scores_do_not_overflow(self, archetype_service):
        probs = archetype_service.softmax({"explorer": 1000.0, "organizer": 0.0})
        assert math.isfinite(probs["explorer"])
        assert abs(probs["explorer"] - 1.0) < 1e-9

    def test_temperature_sharpens(self, archetype_service):
        """With T = 0.8 a raw gap of 0.8 becomes an odds ratio of e."""
        probs = archetype_service.softmax({"explorer": 0.8, "organizer": 0.0})
        assert abs(probs["explorer"] / probs["organizer"] - math.e) < 1e-9


class TestInference:
    """Tests for full-profile inference."""

    def test_neutral_profile_is_uniform(self, archetype_service, scoring_service, neutral_responses):
        profile = scoring_service.build_profile(neutral_responses)
        result = archetype_service.infer(profile)
        assert all(abs(p - 1 / 6) < 1e-9 for p in result.probabilities.values())
        assert abs(result.uncertainty - 1.0) < 1e-9

    def test_explorer_profile(self, archetype_service, scoring_service, explorer_responses):
        """O, autonomy and seeking at z = +2 give explorer about 0.97."""
        profile = scoring_service.build_profile(explorer_responses)
        result = archetype_service.infer(profile)
        assert abs(result.raw_scores["explorer"] - 6.0) < 1e-9
        assert abs(result.raw_scores["philosopher"] - 3.2) < 1e-9
        assert abs(result.probabilities["explorer"] - 0.969) < 0.01
        assert abs(sum(result.probabilities.values()) - 1.0) < 1e-9
        assert result.uncertainty < 0.1

    def test_top_archetypes_ties_keep_canonical_order(self, archetype_service, uniform_probabilities):
        top = archetype_service.top_archetypes(uniform_probabilities, 3)
        assert [name for name, _ in top] == ["explorer", "organizer", "connector"]
