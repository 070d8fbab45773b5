"""HPMA — response validity checks (idealized, random and inattentive responding)."""

from __future__ import annotations

from typing import Mapping

import structlog

from hpma.schemas.profile import ValidityFlags

logger = structlog.get_logger("hpma.validity_service")


class ValidityService:
    """Advisory checks on three fixed validity items; never blocks scoring."""

    IDEALIZED_ITEMS: tuple[int, ...] = (107, 109)
    IDEALIZED_MIN: int = 6
    RANDOM_ITEM: int = 112
    RANDOM_MIN: int = 4
    ATTENTION_ITEM: int = 111
    ATTENTION_MAX: int = 3

    MESSAGES: dict[str, str] = {
        "idealized": (
            "Some responses suggest idealized self-presentation. Results may "
            "reflect aspirational rather than typical behavior."
        ),
        "random": (
            "You indicated some responses may have been random. Results should "
            "be interpreted with caution."
        ),
        "inattentive": (
            "Low attention to items detected. Consider retaking the assessment "
            "with more focus."
        ),
    }

    def check(self, responses: Mapping[int, int]) -> ValidityFlags:
        """Unanswered validity items never raise a flag."""
        idealized = any(
            responses.get(qid) is not None and responses[qid] >= self.IDEALIZED_MIN
            for qid in self.IDEALIZED_ITEMS
        )
        random_rating = responses.get(self.RANDOM_ITEM)
        attention_rating = responses.get(self.ATTENTION_ITEM)

        flags = ValidityFlags(
            idealized=idealized,
            random=random_rating is not None and random_rating >= self.RANDOM_MIN,
            inattentive=attention_rating is not None and attention_rating <= self.ATTENTION_MAX,
        )
        if flags.has_issues:
            logger.warning("validity.flags_raised", **flags.model_dump())
        return flags

    def messages(self, flags: ValidityFlags) -> list[str]:
        return [
            self.MESSAGES[name]
            for name in ("idealized", "random", "inattentive")
            if getattr(flags, name)
        ]

    def message(self, flags: ValidityFlags) -> str:
        return " ".join(self.messages(flags))

    @staticmethod
    def should_fault(flags: ValidityFlags) -> bool:
        """Random or inattentive responding invalidates the roster; idealizing does not."""
        return flags.random or flags.inattentive
