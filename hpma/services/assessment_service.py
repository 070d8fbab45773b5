"""
HPMA — Assessment Pipeline

Runs the full scoring pipeline for one respondent:

  responses -> trait profile -> validity -> archetypes -> roster -> class name

and, on request, the field-guide report built from that result.  Each stage
is a pure function of its inputs plus the read-only static tables.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional

import structlog

from hpma.config import Settings, get_settings
from hpma.schemas.assessment import AssessmentResult
from hpma.schemas.questionnaire import AssessmentInput, ResponseSet
from hpma.schemas.report import FieldGuideReport
from hpma.services.archetype_service import ArchetypeService
from hpma.services.class_name_service import ClassNameService
from hpma.services.report_service import ReportService
from hpma.services.roster_service import RosterService
from hpma.services.scoring_service import ScoringService
from hpma.services.validity_service import ValidityService

logger = structlog.get_logger("hpma.assessment_service")


class AssessmentService:
    """Orchestrates scoring, classification and reporting."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        report_service: Optional[ReportService] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.scoring = ScoringService()
        self.validity = ValidityService()
        self.archetypes = ArchetypeService()
        self.roster = RosterService()
        self.class_names = ClassNameService()
        self._report_service = report_service

    @property
    def report_service(self) -> ReportService:
        if self._report_service is None:
            self._report_service = ReportService()
        return self._report_service

    def assess(
        self,
        baseline: ResponseSet,
        context_responses: Optional[Mapping[str, ResponseSet]] = None,
        duration_ms: Optional[int] = None,
    ) -> AssessmentResult:
        """Score one respondent end to end.

        Parameters
        ----------
        baseline:
            Question id -> rating for the 140 baseline items (partial sets
            are fine; unanswered items fall back as documented).
        context_responses:
            Optional per-context response sets keyed WORK / STRESS /
            INTIMACY / PUBLIC.
        duration_ms:
            Optional completion time, carried through to exports.

        Returns
        -------
        AssessmentResult
        """
        log = logger.bind(answered=len(baseline), contexts=sorted(context_responses or {}))
        log.info("assessment.start")

        profile = self.scoring.build_profile(baseline, context_responses)
        flags = self.validity.check(baseline)
        archetypes = self.archetypes.infer(profile)

        faulted = self.settings.FAULT_ON_INVALID_RESPONSES and self.validity.should_fault(flags)
        roster = self.roster.classify(archetypes.probabilities, faulted=faulted)

        epithets = self.class_names.compute_epithets(profile)
        class_name = self.class_names.generate(roster, epithets)

        result = AssessmentResult(
            profile=profile,
            archetypes=archetypes,
            roster=roster,
            validity=flags,
            validity_message=self.validity.message(flags),
            class_name=class_name,
            completed_at=datetime.now(timezone.utc).isoformat(),
            duration_ms=duration_ms,
        )
        log.info(
            "assessment.complete",
            structure=roster.structure,
            summary=roster.summary_label,
            class_name=class_name.full,
        )
        return result

    def assess_input(self, payload: AssessmentInput) -> AssessmentResult:
        return self.assess(payload.baseline, payload.contexts, payload.duration_ms)

    def build_report(self, result: AssessmentResult) -> FieldGuideReport:
        return self.report_service.build_report(
            result, validity_messages=self.validity.messages(result.validity)
        )
