"""
HPMA — Archetype Inference

Projects standardized trait, motive and affect scores onto six archetypes
with fixed linear weights, then converts the raw scores into a probability
vector with a temperature-scaled softmax.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping

import structlog

from hpma.schemas.profile import ArchetypeResult, TraitProfile

logger = structlog.get_logger("hpma.archetype_service")

ARCHETYPES: tuple[str, ...] = (
    "explorer", "organizer", "connector", "protector", "performer", "philosopher",
)

ARCHETYPE_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "explorer": "Driven by curiosity and autonomy. Seeks novel experiences, ideas, and self-directed paths.",
    "organizer": "Motivated by mastery and structure. Values competence, planning, and systematic progress.",
    "connector": "Centered on belonging and care. Prioritizes relationships, cooperation, and emotional support.",
    "protector": "Focused on security and stability. Alert to threats, values safety and predictability.",
    "performer": "Energized by recognition and social engagement. Seeks status, attention, and playful interaction.",
    "philosopher": "Guided by meaning and purpose. Pursues values-driven goals and deep understanding.",
})


class ArchetypeService:
    """Weighted projection + softmax over the six archetypes."""

    # ── Constants ─────────────────────────────────────────────────────────

    TEMPERATURE: float = 0.8

    # archetype -> {"traits": {...}, "motives": {...}, "affects": {...}}
    WEIGHTS: Mapping[str, Mapping[str, Mapping[str, float]]] = MappingProxyType({
        "explorer": {"traits": {"O": 1.2}, "motives": {"autonomy": 0.8}, "affects": {"seeking": 1.0}},
        "organizer": {"traits": {"C": 1.2}, "motives": {"mastery": 1.0}, "affects": {"seeking": -0.5}},
        "connector": {"traits": {"A": 1.2}, "motives": {"belonging": 1.0}, "affects": {"care": 0.8}},
        "protector": {"traits": {"E": 0.6}, "motives": {"security": 1.0}, "affects": {"fear": 0.8}},
        "performer": {"traits": {"X": 1.2}, "motives": {"status": 1.0}, "affects": {"play": 0.8}},
        "philosopher": {"traits": {"O": 1.0}, "motives": {"purpose": 1.2}, "affects": {"seeking": 0.6}},
    })

    def raw_scores(
        self,
        hexaco_z: Mapping[str, float],
        motives_z: Mapping[str, float],
        affects_z: Mapping[str, float],
    ) -> dict[str, float]:
        """Σ weight x z for each archetype; a missing dimension counts as z = 0."""
        sources = {"traits": hexaco_z, "motives": motives_z, "affects": affects_z}
        raw: dict[str, float] = {}
        for archetype in ARCHETYPES:
            total = 0.0
            for group, weights in self.WEIGHTS[archetype].items():
                for dimension, weight in weights.items():
                    total += weight * sources[group].get(dimension, 0.0)
            raw[archetype] = total
        return raw

    def softmax(self, raw: Mapping[str, float]) -> dict[str, float]:
        scaled = {k: v / self.TEMPERATURE for k, v in raw.items()}
        peak = max(scaled.values())
        exps = {k: math.exp(v - peak) for k, v in scaled.items()}
        total = sum(exps.values())
        return {k: v / total for k, v in exps.items()}

    def infer(self, profile: TraitProfile) -> ArchetypeResult:
        """Compute raw scores, probabilities and top-two uncertainty."""
        raw = self.raw_scores(profile.hexaco_z, profile.motives_z, profile.affects_z)
        probabilities = self.softmax(raw)

        ranked = sorted(probabilities.values(), reverse=True)
        uncertainty = 1.0 - (ranked[0] - ranked[1])

        logger.info(
            "archetype.inferred",
            top=self.top_archetypes(probabilities, 1)[0][0],
            uncertainty=round(uncertainty, 3),
        )
        return ArchetypeResult(
            raw_scores=raw,
            probabilities=probabilities,
            uncertainty=uncertainty,
        )

    @staticmethod
    def top_archetypes(probabilities: Mapping[str, float], count: int = 3) -> list[tuple[str, float]]:
        """Highest-probability archetypes; ties keep canonical archetype order."""
        order = {name: i for i, name in enumerate(ARCHETYPES)}
        ranked = sorted(
            probabilities.items(),
            key=lambda kv: (-kv[1], order.get(kv[0], len(order))),
        )
        return ranked[:count]
