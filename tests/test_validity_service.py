"""Unit tests for ValidityService — response validity flags."""
import pytest

from hpma.schemas.profile import ValidityFlags
from hpma.services.validity_service import ValidityService


@pytest.fixture
def validity_service():
    return ValidityService()


class TestValidityFlags:
    """Tests for the three advisory checks."""

    def test_clean_responses(self, validity_service, neutral_responses):
        flags = validity_service.check(neutral_responses)
        assert not flags.has_issues
        assert validity_service.message(flags) == ""

    @pytest.mark.parametrize("qid", [107, 109])
    def test_idealized(self, validity_service, qid):
        assert validity_service.check({qid: 6}).idealized is True
        assert validity_service.check({qid: 5}).idealized is False

    def test_random(self, validity_service):
        assert validity_service.check({112: 4}).random is True
        assert validity_service.check({112: 3}).random is False

    def test_inattentive(self, validity_service):
        assert validity_service.check({111: 3}).inattentive is True
        assert validity_service.check({111: 4}).inattentive is False

    def test_unanswered_items_never_flag(self, validity_service):
        assert validity_service.check({}) == ValidityFlags()


class TestValidityMessages:
    """Tests for explanations and fault decisions."""

    def test_messages_follow_flag_order(self, validity_service):
        flags = ValidityFlags(idealized=True, inattentive=True)
        messages = validity_service.messages(flags)
        assert len(messages) == 2
        assert messages[0].startswith("Some responses suggest idealized")
        assert messages[1].startswith("Low attention")
        assert validity_service.message(flags) == " ".join(messages)

    def test_idealizing_alone_does_not_fault(self, validity_service):
        assert validity_service.should_fault(ValidityFlags(idealized=True)) is False

    @pytest.mark.parametrize("flag", ["random", "inattentive"])
    def test_random_or_inattentive_faults(self, validity_service, flag):
        assert validity_service.should_fault(ValidityFlags(**{flag: True})) is True
