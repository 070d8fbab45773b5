"""Unit tests for ClassNameService — epithet selection and class-name templates."""
import pytest

from hpma.services.archetype_service import ArchetypeService
from hpma.services.class_name_service import ClassNameService
from hpma.services.roster_service import RosterService
from hpma.services.scoring_service import ScoringService


@pytest.fixture
def class_name_service():
    return ClassNameService()


@pytest.fixture
def scoring_service():
    return ScoringService()


def _roster(profile):
    probabilities = ArchetypeService().infer(profile).probabilities
    return RosterService().classify(probabilities)


class TestEpithets:
    """Tests for salience-ranked epithet extraction."""

    def test_neutral_profile_has_no_epithets(self, class_name_service, scoring_service, neutral_responses):
        profile = scoring_service.build_profile(neutral_responses)
        assert class_name_service.compute_epithets(profile) == []

    def test_explorer_epithets_ranked_by_salience(self, class_name_service, scoring_service, explorer_responses):
        profile = scoring_service.build_profile(explorer_responses)
        epithets = class_name_service.compute_epithets(profile)
        keys = [e.source_key for e in epithets]
        assert keys[:3] == ["facet.inquisitiveness", "facet.creativity", "motive.autonomy"]
        assert abs(epithets[0].salience - 2.4) < 1e-9
        assert all(e.direction == "high" for e in epithets)

    def test_low_z_uses_negative_word(self, class_name_service, scoring_service):
        """Sincerity at 1 (z = -2) reads as 'Tactical'."""
        profile = scoring_service.build_profile({1: 1, 2: 7})
        epithets = class_name_service.compute_epithets(profile)
        sincerity = next(e for e in epithets if e.source_key == "facet.sincerity")
        assert sincerity.direction == "low"
        assert sincerity.word == "Tactical"

    def test_confident_dismissive_attachment(self, class_name_service, scoring_service):
        responses = {qid: 2 for qid in range(201, 207)}
        responses.update({qid: 7 for qid in range(207, 213)})
        profile = scoring_service.build_profile(responses)
        epithets = class_name_service.compute_epithets(profile)
        attachment = next(e for e in epithets if e.category == "attachment")
        assert attachment.word == "Self-Contained"

    def test_elevated_antagonism_adds_named_epithets(
        self, class_name_service, scoring_service, antagonism_six_responses
    ):
        profile = scoring_service.build_profile(antagonism_six_responses)
        words = {e.word for e in class_name_service.compute_epithets(profile) if e.category == "antagonism"}
        assert words == {"Game-Playing", "Stone-Hearted", "Fight-Ready", "Mirror-Watching"}


class TestClassNames:
    """Tests for name assembly and templates."""

    def test_fallback_is_balanced(self, class_name_service, scoring_service, neutral_responses):
        profile = scoring_service.build_profile(neutral_responses)
        name = class_name_service.generate(_roster(profile), [])
        assert name.short == "Balanced"
        assert name.standard == "Balanced"
        assert name.full == "Balanced"
        assert name.template_used == "Diffuse: Balanced"

    def test_explorer_class_name(self, class_name_service, scoring_service, explorer_responses):
        profile = scoring_service.build_profile(explorer_responses)
        epithets = class_name_service.compute_epithets(profile)
        name = class_name_service.generate(_roster(profile), epithets)
        assert name.short == "Cipher-Sighted"
        assert name.standard == "Cipher-Sighted Pattern-Breaking"
        assert name.full == "Cipher-Sighted Pattern-Breaking Unshackled"
        assert len(name.epithets) == 3
        assert name.template_used == "Solo: Explorer Dominant: Cipher-Sighted Pattern-Breaking Unshackled"

    def test_duet_template_uses_identity(self, class_name_service, duet_probabilities):
        roster = RosterService().classify(duet_probabilities)
        name = class_name_service.generate(roster, [])
        assert name.template_used == "Seeker-Sage: Balanced"

    def test_faulted_template_uses_would_be_structure(self, class_name_service, duet_probabilities):
        roster = RosterService().classify(duet_probabilities, faulted=True)
        assert class_name_service.generate(roster, []).template_used == "Seeker-Sage: Balanced"
