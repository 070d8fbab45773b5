"""
HPMA — Trait Scoring Pipeline

Turns a raw 1-7 Likert response set into the scored trait profile:

  1. Score each item (reverse keying: 8 - raw)
  2. Aggregate HEXACO items into 24 facets, facets into 6 domains
  3. Aggregate motive / affect / attachment / antagonism subdomains
  4. Standardize against the fixed population norm (mean 4.0, SD 1.5)
  5. Classify attachment style and antagonism elevation
  6. Measure context drift of the 24 sentinel facets (optional)

Every step is a pure function of the response set.  Unanswered items score 0
and are excluded; a group with no answered items falls back to the scale
midpoint so downstream stages always receive a complete profile.
"""

from __future__ import annotations

import statistics
from typing import Iterable, Mapping, Optional

import structlog

from hpma.data.questions import (
    ANTAGONISM_AXES,
    BASELINE_QUESTIONS,
    CONTEXT_START,
    CONTEXTS,
    FACET_TO_DOMAIN,
    HEXACO_DOMAINS,
    HEXACO_FACETS_ORDERED,
    SENTINEL_QUESTIONS,
)
from hpma.schemas.profile import (
    AntagonismResult,
    AttachmentResult,
    ContextDependence,
    ContextShiftResult,
    FacetProfile,
    FacetShift,
    TraitProfile,
)
from hpma.schemas.questionnaire import QuestionDescriptor, ResponseSet

logger = structlog.get_logger("hpma.scoring_service")


class ScoringService:
    """Item, facet, domain and subdomain scoring.

    Population norms and classification cut-offs are class-level constants;
    they are part of the scoring contract and are not read from settings.
    """

    # ── Constants ─────────────────────────────────────────────────────────

    SCALE_MIDPOINT: float = 4.0
    DEFAULT_MEAN: float = 4.0
    DEFAULT_SD: float = 1.5
    REVERSE_PIVOT: int = 8

    ANTAGONISM_THRESHOLD: float = 5.0

    STABLE_SHIFT_MAX: float = 0.5
    MODERATE_SHIFT_MAX: float = 1.5
    TOP_SHIFT_COUNT: int = 3

    # ══════════════════════════════════════════════════════════════════════
    # Item level
    # ══════════════════════════════════════════════════════════════════════

    def reverse_score(self, value: int) -> int:
        return self.REVERSE_PIVOT - value

    def score_item(self, responses: Mapping[int, int], question: QuestionDescriptor) -> int:
        """Effective score of one item: 0 when unanswered, reversed if keyed so."""
        raw = responses.get(question.id)
        if raw is None:
            return 0
        return self.reverse_score(raw) if question.reversed else raw

    def z_score(self, raw: float) -> float:
        return (raw - self.DEFAULT_MEAN) / self.DEFAULT_SD

    def standardize(self, scores: Mapping[str, float]) -> dict[str, float]:
        return {key: self.z_score(value) for key, value in scores.items()}

    # ══════════════════════════════════════════════════════════════════════
    # Aggregation
    # ══════════════════════════════════════════════════════════════════════

    def _mean_or_midpoint(self, values: list[int]) -> float:
        return statistics.fmean(values) if values else self.SCALE_MIDPOINT

    def group_by_subdomain(
        self,
        questions: Iterable[QuestionDescriptor],
        responses: Mapping[int, int],
    ) -> dict[str, float]:
        """Mean effective score per subdomain, in first-seen subdomain order."""
        groups: dict[str, list[int]] = {}
        for question in questions:
            bucket = groups.setdefault(question.subdomain, [])
            score = self.score_item(responses, question)
            if score > 0:
                bucket.append(score)
        return {sub: self._mean_or_midpoint(scores) for sub, scores in groups.items()}

    def _baseline_module(self, module: str) -> tuple[QuestionDescriptor, ...]:
        return tuple(q for q in BASELINE_QUESTIONS if q.module == module)

    def compute_facet_scores(self, responses: Mapping[int, int]) -> dict[str, float]:
        grouped = self.group_by_subdomain(self._baseline_module("hexaco"), responses)
        return {facet: grouped.get(facet, self.SCALE_MIDPOINT) for facet in HEXACO_FACETS_ORDERED}

    def compute_hexaco(self, facet_scores: Mapping[str, float]) -> dict[str, float]:
        """Unweighted mean of the four facets of each domain."""
        by_domain: dict[str, list[float]] = {domain: [] for domain in HEXACO_DOMAINS}
        for facet in HEXACO_FACETS_ORDERED:
            by_domain[FACET_TO_DOMAIN[facet]].append(facet_scores.get(facet, self.SCALE_MIDPOINT))
        return {domain: statistics.fmean(values) for domain, values in by_domain.items()}

    def compute_facet_profile(self, responses: Mapping[int, int]) -> FacetProfile:
        scores = self.compute_facet_scores(responses)
        return FacetProfile(scores=scores, z_scores=self.standardize(scores))

    def compute_motives(self, responses: Mapping[int, int]) -> dict[str, float]:
        return self.group_by_subdomain(self._baseline_module("motive"), responses)

    def compute_affects(self, responses: Mapping[int, int]) -> dict[str, float]:
        return self.group_by_subdomain(self._baseline_module("affect"), responses)

    # ══════════════════════════════════════════════════════════════════════
    # Attachment & antagonism
    # ══════════════════════════════════════════════════════════════════════

    def compute_attachment(self, responses: Mapping[int, int]) -> AttachmentResult:
        """Place the respondent in one of four anxiety x avoidance quadrants.

        Scores at the midpoint count as high.  Confidence is the distance to
        the nearer quadrant boundary, scaled by the widest possible distance
        in that quadrant (4 for SECURE, 3 otherwise), clamped to [0, 1].
        """
        grouped = self.group_by_subdomain(self._baseline_module("attachment"), responses)
        anxiety = grouped.get("anxiety", self.SCALE_MIDPOINT)
        avoidance = grouped.get("avoidance", self.SCALE_MIDPOINT)
        mid = self.SCALE_MIDPOINT

        anxious_high = anxiety >= mid
        avoidant_high = avoidance >= mid

        if not anxious_high and not avoidant_high:
            style = "SECURE"
            confidence = min(mid - anxiety, mid - avoidance) / 4
        elif anxious_high and not avoidant_high:
            style = "PREOCCUPIED"
            confidence = min(anxiety - mid, mid - avoidance) / 3
        elif not anxious_high and avoidant_high:
            style = "DISMISSIVE"
            confidence = min(mid - anxiety, avoidance - mid) / 3
        else:
            style = "FEARFUL"
            confidence = min(anxiety - mid, avoidance - mid) / 3

        return AttachmentResult(
            anxiety=anxiety,
            avoidance=avoidance,
            style=style,
            confidence=max(0.0, min(1.0, confidence)),
        )

    def compute_antagonism(self, responses: Mapping[int, int]) -> AntagonismResult:
        grouped = self.group_by_subdomain(self._baseline_module("antagonism"), responses)
        axes = {axis: grouped.get(axis, self.SCALE_MIDPOINT) for axis in ANTAGONISM_AXES}
        composite = statistics.fmean(axes.values())
        return AntagonismResult(
            **axes,
            composite=composite,
            elevated=composite >= self.ANTAGONISM_THRESHOLD,
        )

    # ══════════════════════════════════════════════════════════════════════
    # Context dependence
    # ══════════════════════════════════════════════════════════════════════

    def classify_shift(self, mean_abs_delta: float) -> str:
        if mean_abs_delta < self.STABLE_SHIFT_MAX:
            return "STABLE"
        if mean_abs_delta < self.MODERATE_SHIFT_MAX:
            return "MODERATE"
        return "VOLATILE"

    def compute_context_dependence(
        self,
        baseline: Mapping[int, int],
        context_responses: Mapping[str, Mapping[int, int]],
    ) -> ContextDependence:
        """Compare each sentinel's context answers with its baseline answer.

        Context item ids are ``CONTEXT_START[ctx] + sentinel index``.  An
        unanswered context item falls back to the baseline score (delta 0);
        an unanswered baseline sentinel falls back to the scale midpoint.
        """
        results: dict[str, ContextShiftResult] = {}
        all_abs: list[float] = []
        per_facet: dict[str, list[float]] = {facet: [] for facet in HEXACO_FACETS_ORDERED}

        for ctx in CONTEXTS:
            answers = context_responses.get(ctx, {})
            deltas: dict[str, float] = {}
            for offset, sentinel in enumerate(SENTINEL_QUESTIONS):
                base = self.score_item(baseline, sentinel) or self.SCALE_MIDPOINT
                answered = answers.get(CONTEXT_START[ctx] + offset)
                delta = (answered - base) if answered is not None else 0.0
                deltas[sentinel.subdomain] = float(delta)
                all_abs.append(abs(delta))
                per_facet[sentinel.subdomain].append(abs(delta))

            ranked = sorted(deltas.items(), key=lambda kv: abs(kv[1]), reverse=True)
            mean_abs = statistics.fmean(abs(d) for d in deltas.values())
            results[ctx] = ContextShiftResult(
                context=ctx,
                deltas=deltas,
                top_shifts=[
                    FacetShift(facet=facet, delta=delta)
                    for facet, delta in ranked[: self.TOP_SHIFT_COUNT]
                ],
                mean_abs_delta=mean_abs,
                shift_pattern=self.classify_shift(mean_abs),
            )

        volatility = sorted(
            ((facet, statistics.fmean(values)) for facet, values in per_facet.items() if values),
            key=lambda kv: kv[1],
            reverse=True,
        )
        overall = statistics.fmean(all_abs) if all_abs else 0.0

        logger.debug(
            "scoring.context_dependence_complete",
            overall_volatility=round(overall, 3),
            patterns={ctx: r.shift_pattern for ctx, r in results.items()},
        )

        return ContextDependence(
            contexts=results,
            overall_volatility=overall,
            most_context_dependent=[f for f, _ in volatility[: self.TOP_SHIFT_COUNT]],
            most_stable=[f for f, _ in reversed(volatility[-self.TOP_SHIFT_COUNT:])],
        )

    # ══════════════════════════════════════════════════════════════════════
    # Full profile
    # ══════════════════════════════════════════════════════════════════════

    def build_profile(
        self,
        baseline: ResponseSet,
        context_responses: Optional[Mapping[str, Mapping[int, int]]] = None,
    ) -> TraitProfile:
        """Score every dimension for one respondent.

        Parameters
        ----------
        baseline:
            Question id -> rating (1-7) for the baseline items.
        context_responses:
            Optional ``{"WORK": {401: 5, ...}, ...}``.  Context dependence is
            only computed when at least one context has answers.

        Returns
        -------
        TraitProfile
        """
        log = logger.bind(answered=len(baseline))

        facets = self.compute_facet_profile(baseline)
        hexaco = self.compute_hexaco(facets.scores)
        motives = self.compute_motives(baseline)
        affects = self.compute_affects(baseline)
        log.info("scoring.facets_complete", hexaco={k: round(v, 2) for k, v in hexaco.items()})

        attachment = self.compute_attachment(baseline)
        antagonism = self.compute_antagonism(baseline)
        log.info(
            "scoring.attachment_antagonism_complete",
            attachment_style=attachment.style,
            antagonism_elevated=antagonism.elevated,
        )

        context_dependence = None
        if context_responses and any(context_responses.values()):
            context_dependence = self.compute_context_dependence(baseline, context_responses)

        return TraitProfile(
            facets=facets,
            hexaco=hexaco,
            hexaco_z=self.standardize(hexaco),
            motives=motives,
            motives_z=self.standardize(motives),
            affects=affects,
            affects_z=self.standardize(affects),
            attachment=attachment,
            antagonism=antagonism,
            context_dependence=context_dependence,
        )
