"""
HPMA — Roster Classifier

Classifies the six-way archetype probability vector into a roster structure
(how many archetypes meaningfully co-dominate) and, per structure, a mode,
canonical name, label and confidence record.

Structures are decided by an ordered procedure; the first matching rule
wins, which is what makes the categories mutually exclusive:

  1. p1 <  0.35                       -> MIST
  2. p1 >= 0.70 and p2 <= 0.20        -> SOLO
  3. S2 >= 0.70 and p3 <= 0.20        -> DUET
  4. S3 >= 0.80 and p4 <= 0.15        -> TRIO
  5. <= 4 voices >= 0.12, p1 >= 0.25  -> CHORD, otherwise CHORUS

FAULTED is never produced from the vector; callers request it when the
response set failed validity checks.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping, Sequence

import structlog

from hpma.schemas.roster import (
    ArchetypeProbability,
    ChoralRoster,
    ConfidenceRecord,
    DerivedMetrics,
    DuetRoster,
    MistRoster,
    Roster,
    SoloRoster,
    TrioRoster,
)
from hpma.services.archetype_service import ARCHETYPES

logger = structlog.get_logger("hpma.roster_service")

# ──────────────────────────────────────────────────────────────────────────────
# Naming tables
# ──────────────────────────────────────────────────────────────────────────────

DYAD_NAMES: Mapping[frozenset[str], str] = MappingProxyType({
    frozenset(("explorer", "philosopher")): "Seeker-Sage",
    frozenset(("explorer", "organizer")): "Visionary Builder",
    frozenset(("explorer", "connector")): "Wayfinder Diplomat",
    frozenset(("explorer", "protector")): "Sentinel Scout",
    frozenset(("explorer", "performer")): "Spotlight Pioneer",
    frozenset(("philosopher", "organizer")): "Systems Theorist",
    frozenset(("philosopher", "connector")): "Bridge Scholar",
    frozenset(("philosopher", "protector")): "Vigilant Stoic",
    frozenset(("philosopher", "performer")): "Public Intellectual",
    frozenset(("organizer", "connector")): "Community Operator",
    frozenset(("organizer", "protector")): "Risk Steward",
    frozenset(("organizer", "performer")): "Showrunner Executive",
    frozenset(("connector", "protector")): "Guardian Caretaker",
    frozenset(("connector", "performer")): "Charismatic Host",
    frozenset(("protector", "performer")): "Watchful Champion",
})

STRUCTURE_LABELS: Mapping[str, str] = MappingProxyType({
    "SOLO": "Solo",
    "DUET": "Duet",
    "TRIO": "Trio",
    "CHORD": "Chord",
    "CHORUS": "Chorus",
    "MIST": "Mist",
    "FAULTED": "Faulted",
})

MODE_LABELS: Mapping[str, str] = MappingProxyType({
    "TWIN_HELIX": "Twin-Helix",
    "LEANING_HELIX": "Leaning Helix",
    "KEYSTONE_LENS": "Keystone & Lens",
    "SIGNATURE_ACCENT": "Signature & Accent",
    "PURELINE": "Pureline",
    "TRI_HELIX": "Tri-Helix",
    "KEYSTONE_PRISM": "Keystone Prism",
    "KEYSTONE_ORBIT": "Keystone Orbit",
    "TRIAD_STACK": "Triad Stack",
    "CHORD_TOP4": "Chord (Top-4)",
    "CHORD_TOP_HEAVY": "Chord (Top-Heavy)",
    "CHORUS_DISTRIBUTED": "Chorus (Distributed)",
    "CHORUS_CONTEXT_SPLIT": "Chorus (Context-Split)",
    "SOLO": "Solo",
    "MIST": "Mist",
    "FAULTED": "Faulted",
})

_DUET_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "TWIN_HELIX": "A balanced blend where {anchor} and {lens} co-drive behavior equally. Context decides which takes the lead in any moment.",
    "LEANING_HELIX": "{anchor} slightly leads (~60/40), but {lens} remains a strong co-driver. Both archetypes actively shape your expression.",
    "KEYSTONE_LENS": "{anchor} is your engine (~75/25). {lens} colors how that engine runs, acting as a consistent interpretive filter.",
    "SIGNATURE_ACCENT": "Strong {anchor} dominance (~85/15). {lens} appears as a subtle accent rather than an active co-pilot.",
    "PURELINE": "Near-pure {anchor} orientation (~95/5). {lens} provides only a trace coloring to your dominant archetype.",
})

_TRIO_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "TRI_HELIX": "A balanced triad where {primary}, {secondary}, and {tertiary} contribute roughly equally. You draw from all three depending on context.",
    "KEYSTONE_PRISM": "{primary} anchors your expression, while {secondary} and {tertiary} act as twin lenses that both color how the keystone shows up.",
    "KEYSTONE_ORBIT": "{primary} leads as keystone, {secondary} provides the main lens, and {tertiary} operates as a background shadow influence.",
    "TRIAD_STACK": "{primary}, {secondary}, and {tertiary} stack in a loose order without a crisp keystone or a fully balanced triad.",
})


def display_name(archetype: str) -> str:
    return archetype.replace("_", " ").title()


class RosterService:
    """Ordered structure decision, mode sub-classification and confidence."""

    # ── Structure thresholds ──────────────────────────────────────────────

    MIST_P1_MAX: float = 0.35
    SOLO_P1_MIN: float = 0.70
    SOLO_P2_MAX: float = 0.20
    DUET_S2_MIN: float = 0.70
    DUET_P3_MAX: float = 0.20
    TRIO_S3_MIN: float = 0.80
    TRIO_P4_MAX: float = 0.15
    CHORD_P1_MIN: float = 0.25
    CHORD_MAX_VOICES: int = 4
    VOICE_THRESHOLD: float = 0.12

    # ── Mode thresholds ───────────────────────────────────────────────────

    # Upper (inclusive) r2 bound per duet band; above the last is PURELINE.
    DUET_BANDS: tuple[tuple[float, str], ...] = (
        (0.55, "TWIN_HELIX"),
        (0.65, "LEANING_HELIX"),
        (0.80, "KEYSTONE_LENS"),
        (0.92, "SIGNATURE_ACCENT"),
    )
    DUET_BOUNDARIES: tuple[float, ...] = (0.45, 0.55, 0.65, 0.80, 0.92)
    DUET_BOUNDARY_MARGIN: float = 0.02

    TRI_HELIX_MAX_GAP: float = 0.08
    PRISM_G12_MIN: float = 0.08
    PRISM_G23_MAX: float = 0.05
    ORBIT_GAP_MIN: float = 0.05

    # ── Confidence ────────────────────────────────────────────────────────

    LOW_DISTANCE: float = 0.05
    MEDIUM_DISTANCE: float = 0.10
    HIGH_ENTROPY: float = 0.90

    # ══════════════════════════════════════════════════════════════════════
    # Metrics
    # ══════════════════════════════════════════════════════════════════════

    def sort_probabilities(self, probabilities: Mapping[str, float]) -> list[ArchetypeProbability]:
        """Descending by probability; ties keep canonical archetype order."""
        order = {name: i for i, name in enumerate(ARCHETYPES)}
        ranked = sorted(
            probabilities.items(),
            key=lambda kv: (-kv[1], order.get(kv[0], len(order))),
        )
        return [ArchetypeProbability(archetype=name, probability=p) for name, p in ranked]

    @staticmethod
    def normalized_entropy(values: Sequence[float]) -> float:
        if len(values) <= 1:
            return 0.0
        entropy = -sum(p * math.log(p) for p in values if p > 0)
        return entropy / math.log(len(values))

    def compute_metrics(self, sorted_probs: Sequence[ArchetypeProbability]) -> DerivedMetrics:
        p = [item.probability for item in sorted_probs] + [0.0, 0.0, 0.0]
        s2 = p[0] + p[1]
        return DerivedMetrics(
            S2=s2,
            S3=s2 + p[2],
            r2=p[0] / s2 if s2 > 0 else 0.0,
            g12=p[0] - p[1],
            entropy_n=self.normalized_entropy([item.probability for item in sorted_probs]),
        )

    # ══════════════════════════════════════════════════════════════════════
    # Decisions
    # ══════════════════════════════════════════════════════════════════════

    def active_voices(self, sorted_probs: Sequence[ArchetypeProbability]) -> list[str]:
        return [item.archetype for item in sorted_probs if item.probability >= self.VOICE_THRESHOLD]

    def classify_structure(
        self, sorted_probs: Sequence[ArchetypeProbability], metrics: DerivedMetrics
    ) -> str:
        p1, p2, p3, p4 = self._top4(sorted_probs)

        if p1 < self.MIST_P1_MAX:
            return "MIST"
        if p1 >= self.SOLO_P1_MIN and p2 <= self.SOLO_P2_MAX:
            return "SOLO"
        if metrics.S2 >= self.DUET_S2_MIN and p3 <= self.DUET_P3_MAX:
            return "DUET"
        if metrics.S3 >= self.TRIO_S3_MIN and p4 <= self.TRIO_P4_MAX:
            return "TRIO"
        voices = self.active_voices(sorted_probs)
        if len(voices) <= self.CHORD_MAX_VOICES and p1 >= self.CHORD_P1_MIN:
            return "CHORD"
        return "CHORUS"

    def duet_mode(self, r2: float) -> str:
        """Band lookup on r2; sorted input guarantees r2 >= 0.5."""
        for upper, mode in self.DUET_BANDS:
            if r2 <= upper:
                return mode
        return "PURELINE"

    def trio_mode(self, p1: float, p2: float, p3: float) -> str:
        g12 = p1 - p2
        g23 = p2 - p3
        if max(abs(g12), abs(g23), abs(p1 - p3)) <= self.TRI_HELIX_MAX_GAP:
            return "TRI_HELIX"
        if g12 > self.PRISM_G12_MIN and g23 <= self.PRISM_G23_MAX:
            return "KEYSTONE_PRISM"
        if g12 > self.ORBIT_GAP_MIN and g23 > self.ORBIT_GAP_MIN:
            return "KEYSTONE_ORBIT"
        return "TRIAD_STACK"

    @staticmethod
    def dyad_name(first: str, second: str) -> str:
        name = DYAD_NAMES.get(frozenset((first, second)))
        if name is None:
            return f"{display_name(first)}–{display_name(second)} Hybrid"
        return name

    # ══════════════════════════════════════════════════════════════════════
    # Sub-records
    # ══════════════════════════════════════════════════════════════════════

    def _build_solo(self, sorted_probs: Sequence[ArchetypeProbability]) -> SoloRoster:
        archetype = sorted_probs[0].archetype
        return SoloRoster(
            archetype=archetype,
            label=f"Solo: {display_name(archetype)} Dominant",
            description=(
                f"{display_name(archetype)} strongly dominates your profile, "
                "with minimal influence from the other archetypes."
            ),
        )

    def _build_duet(
        self, sorted_probs: Sequence[ArchetypeProbability], metrics: DerivedMetrics
    ) -> DuetRoster:
        anchor, lens = sorted_probs[0].archetype, sorted_probs[1].archetype
        mode = self.duet_mode(metrics.r2)
        identity = self.dyad_name(anchor, lens)
        return DuetRoster(
            mode=mode,
            identity=identity,
            anchor=anchor,
            lens=lens,
            label=f"Duet: {identity} — {MODE_LABELS[mode]}",
            description=_DUET_DESCRIPTIONS[mode].format(
                anchor=display_name(anchor), lens=display_name(lens)
            ),
        )

    def _build_trio(self, sorted_probs: Sequence[ArchetypeProbability]) -> TrioRoster:
        p1, p2, p3, _ = self._top4(sorted_probs)
        primary, secondary, tertiary = (item.archetype for item in sorted_probs[:3])
        names = {
            "primary": display_name(primary),
            "secondary": display_name(secondary),
            "tertiary": display_name(tertiary),
        }
        mode = self.trio_mode(p1, p2, p3)
        if mode == "TRI_HELIX":
            label = "Trio: {primary}–{secondary}–{tertiary} Tri-Helix"
        elif mode == "KEYSTONE_PRISM":
            label = "Trio: {primary} Keystone Prism (Lenses: {secondary} + {tertiary})"
        elif mode == "KEYSTONE_ORBIT":
            label = "Trio: {primary} Keystone Orbit (Lens: {secondary}; Shadow: {tertiary})"
        else:
            label = "Trio: {primary} / {secondary} / {tertiary} Triad Stack"
        return TrioRoster(
            mode=mode,
            primary=primary,
            secondary=secondary,
            tertiary=tertiary,
            label=label.format(**names),
            description=_TRIO_DESCRIPTIONS[mode].format(**names),
        )

    def _build_choral(
        self,
        structure: str,
        sorted_probs: Sequence[ArchetypeProbability],
        metrics: DerivedMetrics,
    ) -> ChoralRoster:
        contributing = self.active_voices(sorted_probs)
        voices = ", ".join(display_name(v) for v in contributing)
        if structure == "CHORD":
            anchor = sorted_probs[0].archetype
            mode = "CHORD_TOP_HEAVY" if metrics.S3 >= self.TRIO_S3_MIN else "CHORD_TOP4"
            return ChoralRoster(
                mode=mode,
                anchor=anchor,
                contributing=contributing,
                label=f"{MODE_LABELS[mode]}: {display_name(anchor)} anchor; voices {voices}",
                description=(
                    f"{display_name(anchor)} anchors a small set of active voices ({voices}). "
                    "No single pair or triad dominates; the anchor sets the tone."
                ),
            )
        mode = "CHORUS_DISTRIBUTED"
        return ChoralRoster(
            mode=mode,
            contributing=contributing,
            label=f"{MODE_LABELS[mode]}: {voices}",
            description=(
                f"Several archetypes contribute meaningfully to your profile: {voices}. "
                "You draw flexibly from many sources."
            ),
        )

    def _build_mist(self, sorted_probs: Sequence[ArchetypeProbability]) -> MistRoster:
        leading = sorted_probs[0].archetype
        return MistRoster(
            leading=leading,
            label=f"Mist: Diffuse Profile (leading: {display_name(leading)})",
            description=(
                "No single archetype stands out strongly; your profile is distributed "
                f"broadly, with {display_name(leading)} only marginally ahead."
            ),
        )

    # ══════════════════════════════════════════════════════════════════════
    # Confidence
    # ══════════════════════════════════════════════════════════════════════

    def _level(self, distance: float) -> str:
        if distance < self.LOW_DISTANCE:
            return "LOW"
        if distance < self.MEDIUM_DISTANCE:
            return "MEDIUM"
        return "HIGH"

    def compute_confidence(
        self,
        structure: str,
        sorted_probs: Sequence[ArchetypeProbability],
        metrics: DerivedMetrics,
    ) -> ConfidenceRecord:
        """Distance from the nearest threshold that decided *structure*."""
        p1, p2, p3, p4 = self._top4(sorted_probs)
        notes: list[str] = []

        if structure == "SOLO":
            distance = min(p1 - self.SOLO_P1_MIN, self.SOLO_P2_MAX - p2)
            level = self._level(distance)
        elif structure == "DUET":
            distance = min(metrics.S2 - self.DUET_S2_MIN, self.DUET_P3_MAX - p3)
            level = self._level(distance)
            nearest_band = min(abs(metrics.r2 - b) for b in self.DUET_BOUNDARIES)
            if nearest_band < self.DUET_BOUNDARY_MARGIN:
                notes.append("Near duet mode boundary")
                if level == "HIGH":
                    level = "MEDIUM"
        elif structure == "TRIO":
            distance = min(metrics.S3 - self.TRIO_S3_MIN, self.TRIO_P4_MAX - p4)
            level = self._level(distance)
        elif structure in ("CHORD", "CHORUS"):
            distance = p1 - self.MIST_P1_MAX
            level = self._level(distance)
            if level == "HIGH":
                level = "MEDIUM"
            notes.append("Multi-voice profiles have inherently lower classification confidence")
        else:
            distance = self.MIST_P1_MAX - p1
            level = "LOW"
            notes.append("Diffuse profile: no clear archetype dominance")

        if level == "LOW" and structure in ("SOLO", "DUET", "TRIO"):
            notes.append(f"Near threshold for {STRUCTURE_LABELS[structure]} classification")
        if metrics.entropy_n > self.HIGH_ENTROPY:
            notes.append("Very high entropy suggests dispersed profile")

        return ConfidenceRecord(level=level, distance_from_boundary=distance, notes=notes)

    # ══════════════════════════════════════════════════════════════════════
    # Entry point
    # ══════════════════════════════════════════════════════════════════════

    def classify(self, probabilities: Mapping[str, float], faulted: bool = False) -> Roster:
        """Classify a probability vector into a complete roster record.

        Parameters
        ----------
        probabilities:
            Archetype name -> probability; need not be pre-sorted.
        faulted:
            Report the roster as FAULTED (validity override).  The would-be
            structure and its sub-record are kept alongside.

        Returns
        -------
        Roster
        """
        sorted_probs = self.sort_probabilities(probabilities)
        metrics = self.compute_metrics(sorted_probs)
        structure = self.classify_structure(sorted_probs, metrics)
        confidence = self.compute_confidence(structure, sorted_probs, metrics)

        fields: dict = {}
        if structure == "SOLO":
            fields["solo"] = self._build_solo(sorted_probs)
            summary = fields["solo"].label
        elif structure == "DUET":
            duet = self._build_duet(sorted_probs, metrics)
            fields["duet"] = duet
            summary = f"{duet.label} ({display_name(duet.anchor)} + {display_name(duet.lens)})"
        elif structure == "TRIO":
            fields["trio"] = self._build_trio(sorted_probs)
            summary = fields["trio"].label
        elif structure in ("CHORD", "CHORUS"):
            choral = self._build_choral(structure, sorted_probs, metrics)
            fields["choral"] = choral
            summary = choral.label
        else:
            fields["mist"] = self._build_mist(sorted_probs)
            summary = fields["mist"].label

        reported = structure
        faulted_from = None
        if faulted:
            reported, faulted_from = "FAULTED", structure
            summary = f"Faulted: {summary}"
            confidence = ConfidenceRecord(
                level="LOW",
                distance_from_boundary=confidence.distance_from_boundary,
                notes=["Validity checks failed; classification withheld", *confidence.notes],
            )

        logger.info(
            "roster.classified",
            structure=reported,
            faulted_from=faulted_from,
            confidence=confidence.level,
            p1=round(sorted_probs[0].probability, 4),
        )

        return Roster(
            sorted_probs=sorted_probs,
            metrics=metrics,
            structure=reported,
            faulted_from=faulted_from,
            confidence=confidence,
            summary_label=summary,
            **fields,
        )

    @staticmethod
    def _top4(sorted_probs: Sequence[ArchetypeProbability]) -> tuple[float, float, float, float]:
        p = [item.probability for item in sorted_probs[:4]]
        p += [0.0] * (4 - len(p))
        return p[0], p[1], p[2], p[3]
