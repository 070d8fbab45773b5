"""Unit tests for ScoringService — item, facet, domain and context scoring."""
import pytest

from hpma.data.questions import CONTEXT_START, HEXACO_DOMAINS, HEXACO_FACETS_ORDERED
from hpma.services.scoring_service import ScoringService


@pytest.fixture
def scoring_service():
    return ScoringService()


class TestItemScoring:
    """Tests for reverse keying and standardization."""

    def test_reverse_is_involution(self, scoring_service):
        """Reversing twice returns the original rating."""
        for value in range(1, 8):
            assert scoring_service.reverse_score(scoring_service.reverse_score(value)) == value

    def test_reverse_maps_extremes(self, scoring_service):
        assert scoring_service.reverse_score(1) == 7
        assert scoring_service.reverse_score(7) == 1
        assert scoring_service.reverse_score(4) == 4

    def test_z_score_uses_fixed_norms(self, scoring_service):
        """z = (raw - 4.0) / 1.5."""
        assert scoring_service.z_score(4.0) == 0.0
        assert abs(scoring_service.z_score(7.0) - 2.0) < 1e-9
        assert abs(scoring_service.z_score(1.0) + 2.0) < 1e-9

    def test_reversed_item_contributes_reversed_value(self, scoring_service):
        """Item 2 is reverse-keyed: answering 2 scores 6 for sincerity."""
        facets = scoring_service.compute_facet_scores({2: 2})
        assert facets["sincerity"] == 6.0


class TestFacetAndDomainScoring:
    """Tests for HEXACO aggregation."""

    def test_all_fours_gives_neutral_profile(self, scoring_service, hexaco_all_fours):
        """48 HEXACO items answered 4: every facet, domain and z is neutral."""
        profile = scoring_service.build_profile(hexaco_all_fours)
        assert all(score == 4.0 for score in profile.facets.scores.values())
        assert all(score == 4.0 for score in profile.hexaco.values())
        assert all(z == 0.0 for z in profile.facets.z_scores.values())
        assert all(z == 0.0 for z in profile.hexaco_z.values())

    def test_every_facet_and_domain_present(self, scoring_service):
        """Even an empty response set yields all 24 facets and 6 domains."""
        profile = scoring_service.build_profile({})
        assert list(profile.facets.scores) == list(HEXACO_FACETS_ORDERED)
        assert list(profile.hexaco) == list(HEXACO_DOMAINS)

    def test_unanswered_items_are_excluded(self, scoring_service):
        """A facet mean uses only answered items; unanswered facets fall back to 4."""
        facets = scoring_service.compute_facet_scores({1: 6})
        assert facets["sincerity"] == 6.0
        assert facets["fairness"] == 4.0

    def test_domain_is_unweighted_facet_mean(self, scoring_service):
        facets = scoring_service.compute_facet_scores({1: 6})
        hexaco = scoring_service.compute_hexaco(facets)
        assert abs(hexaco["H"] - 4.5) < 1e-9
        assert hexaco["E"] == 4.0

    def test_motives_and_affects_cover_all_subdomains(self, scoring_service, neutral_responses):
        profile = scoring_service.build_profile(neutral_responses)
        assert set(profile.motives) == {"security", "belonging", "status", "mastery", "autonomy", "purpose"}
        assert set(profile.affects) == {"seeking", "fear", "anger", "care", "grief", "play", "desire"}
        assert all(v == 4.0 for v in profile.motives.values())

    def test_reversed_affect_item(self, scoring_service):
        """Item 86 ('I can tolerate risk...') is reverse-keyed within fear."""
        affects = scoring_service.compute_affects({83: 6, 84: 6, 85: 6, 86: 2})
        assert affects["fear"] == 6.0


class TestAttachment:
    """Tests for the anxiety x avoidance quadrant classification."""

    def test_secure_scenario(self, scoring_service, secure_attachment_responses):
        """All attachment items at 2: SECURE with positive confidence."""
        result = scoring_service.compute_attachment(secure_attachment_responses)
        assert result.style == "SECURE"
        assert abs(result.anxiety - 2.0) < 0.01
        assert abs(result.avoidance - 2.0) < 0.01
        assert result.confidence > 0
        assert abs(result.confidence - 0.5) < 0.01

    def test_preoccupied(self, scoring_service):
        responses = {qid: 6 for qid in range(201, 207)}
        responses.update({qid: 2 for qid in range(207, 213)})
        result = scoring_service.compute_attachment(responses)
        assert result.style == "PREOCCUPIED"
        assert abs(result.confidence - 2 / 3) < 0.01

    def test_dismissive(self, scoring_service):
        responses = {qid: 2 for qid in range(201, 207)}
        responses.update({qid: 7 for qid in range(207, 213)})
        result = scoring_service.compute_attachment(responses)
        assert result.style == "DISMISSIVE"
        assert abs(result.confidence - 2 / 3) < 0.01

    def test_midpoint_counts_as_high(self, scoring_service):
        """Anxiety and avoidance exactly 4 fall into FEARFUL with zero confidence."""
        result = scoring_service.compute_attachment({qid: 4 for qid in range(201, 213)})
        assert result.style == "FEARFUL"
        assert result.confidence == 0.0

    def test_confidence_is_clamped(self, scoring_service):
        result = scoring_service.compute_attachment({qid: 7 for qid in range(201, 213)})
        assert 0.0 <= result.confidence <= 1.0


class TestAntagonism:
    """Tests for the antagonism composite."""

    def test_all_sixes_is_elevated(self, scoring_service, antagonism_six_responses):
        result = scoring_service.compute_antagonism(antagonism_six_responses)
        assert result.composite == 6.0
        assert result.elevated is True

    def test_neutral_is_not_elevated(self, scoring_service):
        result = scoring_service.compute_antagonism({qid: 4 for qid in range(301, 317)})
        assert result.composite == 4.0
        assert result.elevated is False

    def test_threshold_is_inclusive(self, scoring_service):
        result = scoring_service.compute_antagonism({qid: 5 for qid in range(301, 317)})
        assert result.elevated is True


class TestContextDependence:
    """Tests for sentinel drift across contexts."""

    def test_no_contexts_means_no_dependence(self, scoring_service, neutral_responses):
        profile = scoring_service.build_profile(neutral_responses)
        assert profile.context_dependence is None

    def test_work_shift_is_volatile(self, scoring_service, neutral_responses):
        """WORK sentinels all 6 against a baseline of 4: delta +2 everywhere."""
        work = {CONTEXT_START["WORK"] + i: 6 for i in range(24)}
        profile = scoring_service.build_profile(neutral_responses, {"WORK": work})
        dependence = profile.context_dependence

        assert dependence is not None
        assert set(dependence.contexts) == {"WORK", "STRESS", "INTIMACY", "PUBLIC"}
        work_result = dependence.contexts["WORK"]
        assert all(delta == 2.0 for delta in work_result.deltas.values())
        assert work_result.mean_abs_delta == 2.0
        assert work_result.shift_pattern == "VOLATILE"
        assert len(work_result.top_shifts) == 3
        assert dependence.contexts["STRESS"].shift_pattern == "STABLE"
        assert abs(dependence.overall_volatility - 0.5) < 1e-9

    def test_moderate_shift(self, scoring_service, neutral_responses):
        stress = {CONTEXT_START["STRESS"] + i: 5 for i in range(24)}
        profile = scoring_service.build_profile(neutral_responses, {"STRESS": stress})
        assert profile.context_dependence.contexts["STRESS"].shift_pattern == "MODERATE"

    def test_unanswered_baseline_sentinel_uses_midpoint(self, scoring_service):
        dependence = scoring_service.compute_context_dependence({}, {"WORK": {401: 6}})
        assert dependence.contexts["WORK"].deltas["sincerity"] == 2.0
        assert dependence.contexts["WORK"].deltas["fairness"] == 0.0
        assert dependence.most_context_dependent[0] == "sincerity"

    def test_shift_bands(self, scoring_service):
        assert scoring_service.classify_shift(0.49) == "STABLE"
        assert scoring_service.classify_shift(0.5) == "MODERATE"
        assert scoring_service.classify_shift(1.49) == "MODERATE"
        assert scoring_service.classify_shift(1.5) == "VOLATILE"


class TestMalformedInput:
    """Partial or foreign response sets never raise."""

    def test_unknown_ids_are_ignored(self, scoring_service):
        profile = scoring_service.build_profile({9999: 7, 0: 3, 150: 6})
        assert all(score == 4.0 for score in profile.hexaco.values())
        assert profile.attachment.style == "FEARFUL"
