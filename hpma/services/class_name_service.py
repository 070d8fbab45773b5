"""
HPMA — Class Name Generator

Builds a short descriptive "class name" for a profile from its most salient
deviations.  Each facet, motive, affect, attachment style and antagonism
axis has a lexicon entry ``(positive word, negative word, weight)``.  An
epithet is produced for every dimension far enough from the population
mean; salience = weight x |z|, and the top three epithets name the profile.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple

import structlog

from hpma.schemas.class_name import ClassName, Epithet
from hpma.schemas.profile import TraitProfile
from hpma.schemas.roster import Roster

logger = structlog.get_logger("hpma.class_name_service")


class LexiconEntry(NamedTuple):
    positive: str
    negative: str
    weight: float


FACET_LEXICON: Mapping[str, LexiconEntry] = MappingProxyType({
    # Honesty-Humility
    "sincerity": LexiconEntry("Plainspoken", "Tactical", 1.0),
    "fairness": LexiconEntry("Equitable", "Expedient", 1.0),
    "greed_avoidance": LexiconEntry("Modest", "Acquisitive", 0.8),
    "modesty": LexiconEntry("Unassuming", "Self-Promoting", 0.8),
    # Emotionality
    "fearfulness": LexiconEntry("Cautious", "Unflinching", 0.9),
    "anxiety": LexiconEntry("Vigilant", "Untroubled", 0.9),
    "dependence": LexiconEntry("Bonded", "Self-Sufficient", 0.8),
    "sentimentality": LexiconEntry("Tender", "Composed", 0.8),
    # Extraversion
    "social_boldness": LexiconEntry("Stage-Ready", "Behind-Scenes", 1.1),
    "sociability": LexiconEntry("Gathering-Drawn", "Solitude-Seeking", 1.0),
    "liveliness": LexiconEntry("Spark-Carrier", "Even-Keeled", 1.0),
    "self_esteem": LexiconEntry("Self-Assured", "Self-Doubting", 0.9),
    # Agreeableness
    "forgivingness": LexiconEntry("Mercy-Given", "Score-Keeping", 1.0),
    "gentleness": LexiconEntry("Soft-Touch", "Sharp-Edged", 0.9),
    "flexibility": LexiconEntry("Yielding", "Stance-Holding", 0.8),
    "patience": LexiconEntry("Long-Fused", "Quick-Sparked", 0.9),
    # Conscientiousness
    "organization": LexiconEntry("Order-Keeper", "Flow-State", 1.0),
    "diligence": LexiconEntry("Grindstone", "Drift-Prone", 1.1),
    "perfectionism": LexiconEntry("Detail-Bound", "Good-Enough", 0.8),
    "prudence": LexiconEntry("Foresighted", "Moment-Living", 0.9),
    # Openness
    "aesthetic_appreciation": LexiconEntry("Beauty-Seeking", "Function-First", 0.8),
    "inquisitiveness": LexiconEntry("Cipher-Sighted", "Routine-Bound", 1.2),
    "creativity": LexiconEntry("Pattern-Breaking", "Convention-Keeping", 1.1),
    "unconventionality": LexiconEntry("Edge-Walking", "Path-Following", 1.0),
})

MOTIVE_LEXICON: Mapping[str, LexiconEntry] = MappingProxyType({
    "security": LexiconEntry("Fortress-Minded", "Risk-Embracing", 1.0),
    "belonging": LexiconEntry("Circle-Seeking", "Lone-Wolf", 1.0),
    "status": LexiconEntry("Rank-Conscious", "Status-Blind", 0.9),
    "mastery": LexiconEntry("Craftbound", "Enough-Is-Enough", 1.1),
    "autonomy": LexiconEntry("Unshackled", "Structure-Seeking", 1.1),
    "purpose": LexiconEntry("Mission-Driven", "Present-Focused", 1.0),
})

AFFECT_LEXICON: Mapping[str, LexiconEntry] = MappingProxyType({
    "seeking": LexiconEntry("Horizon-Chasing", "Here-Rooted", 1.0),
    "fear": LexiconEntry("Threat-Scanning", "Danger-Blind", 0.9),
    "anger": LexiconEntry("Fire-Carrying", "Cool-Blooded", 0.8),
    "care": LexiconEntry("Heart-Forward", "Arms-Length", 1.0),
    "grief": LexiconEntry("Loss-Touched", "Moving-On", 0.7),
    "play": LexiconEntry("Joy-Sparking", "Serious-Minded", 0.9),
    "desire": LexiconEntry("Pull-Feeling", "Steady-State", 0.7),
})

ATTACHMENT_LEXICON: Mapping[str, LexiconEntry] = MappingProxyType({
    "SECURE": LexiconEntry("Safe-Landed", "", 0.8),
    "PREOCCUPIED": LexiconEntry("", "Bond-Anxious", 0.9),
    "DISMISSIVE": LexiconEntry("Self-Contained", "", 0.8),
    "FEARFUL": LexiconEntry("", "Approach-Avoidant", 1.0),
})

ANTAGONISM_LEXICON: Mapping[str, LexiconEntry] = MappingProxyType({
    "exploitative": LexiconEntry("", "Game-Playing", 1.1),
    "callous": LexiconEntry("", "Stone-Hearted", 1.0),
    "combative": LexiconEntry("", "Fight-Ready", 0.9),
    "image_driven": LexiconEntry("", "Mirror-Watching", 0.8),
})


class ClassNameService:
    """Epithet extraction and class-name templating."""

    Z_THRESHOLD: float = 1.0
    ATTACHMENT_CONFIDENCE_MIN: float = 0.3
    ANTAGONISM_SCORE_MIN: float = 5.0
    SCALE_MIDPOINT: float = 4.0
    DEFAULT_SD: float = 1.5
    MAX_EPITHETS: int = 3
    FALLBACK_WORD: str = "Balanced"

    def _z_epithets(
        self,
        category: str,
        prefix: str,
        z_scores: Mapping[str, float],
        lexicon: Mapping[str, LexiconEntry],
    ) -> list[Epithet]:
        epithets: list[Epithet] = []
        for key, z in z_scores.items():
            entry = lexicon.get(key)
            if entry is None or abs(z) < self.Z_THRESHOLD:
                continue
            epithets.append(Epithet(
                category=category,
                source_key=f"{prefix}.{key}",
                z_score=z,
                salience=entry.weight * abs(z),
                positive_word=entry.positive,
                negative_word=entry.negative,
                direction="high" if z >= 0 else "low",
            ))
        return epithets

    def compute_epithets(self, profile: TraitProfile) -> list[Epithet]:
        """All qualifying epithets, most salient first."""
        epithets = (
            self._z_epithets("trait_facet", "facet", profile.facets.z_scores, FACET_LEXICON)
            + self._z_epithets("motive", "motive", profile.motives_z, MOTIVE_LEXICON)
            + self._z_epithets("affect", "affect", profile.affects_z, AFFECT_LEXICON)
        )

        attachment = profile.attachment
        entry = ATTACHMENT_LEXICON.get(attachment.style)
        if entry is not None and attachment.confidence > self.ATTACHMENT_CONFIDENCE_MIN:
            # pseudo-z: confidence 0..1 scaled onto the z range
            pseudo_z = attachment.confidence * 2
            epithets.append(Epithet(
                category="attachment",
                source_key=f"attachment.{attachment.style}",
                z_score=pseudo_z,
                salience=entry.weight * pseudo_z,
                positive_word=entry.positive,
                negative_word=entry.negative,
                direction="high" if entry.positive else "low",
            ))

        antagonism = profile.antagonism
        if antagonism.elevated:
            for axis, entry in ANTAGONISM_LEXICON.items():
                score = getattr(antagonism, axis)
                if score < self.ANTAGONISM_SCORE_MIN:
                    continue
                pseudo_z = (score - self.SCALE_MIDPOINT) / self.DEFAULT_SD
                epithets.append(Epithet(
                    category="antagonism",
                    source_key=f"antagonism.{axis}",
                    z_score=pseudo_z,
                    salience=entry.weight * pseudo_z,
                    positive_word=entry.positive,
                    negative_word=entry.negative,
                    direction="low",
                ))

        epithets.sort(key=lambda e: e.salience, reverse=True)
        return epithets

    def _template(self, roster: Roster, full: str) -> str:
        structure = roster.faulted_from if roster.structure == "FAULTED" else roster.structure
        if structure == "SOLO":
            return f"{roster.solo.label if roster.solo else roster.summary_label}: {full}"
        if structure == "DUET" and roster.duet:
            return f"{roster.duet.identity}: {full}"
        if structure == "TRIO" and roster.trio:
            return f"{roster.trio.label.split(':')[0]}: {full}"
        if structure in ("CHORD", "CHORUS"):
            return f"{structure.title()}: {full}"
        if structure == "MIST":
            return f"Diffuse: {full}"
        return full

    def generate(self, roster: Roster, epithets: list[Epithet]) -> ClassName:
        named = [e for e in epithets if e.word][: self.MAX_EPITHETS]
        words = [e.word for e in named]

        short = words[0] if words else self.FALLBACK_WORD
        standard = " ".join(words[:2]) or short
        full = " ".join(words[:3]) or standard

        class_name = ClassName(
            short=short,
            standard=standard,
            full=full,
            epithets=named,
            template_used=self._template(roster, full),
        )
        logger.info("class_name.generated", full=full, template=class_name.template_used)
        return class_name
