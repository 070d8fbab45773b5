"""
HPMA — Field-Guide Report Assembly

Builds the narrative field guide for one assessment result by layering
content in a fixed order, accumulating rather than replacing:

  1. Identity content  dyad (by canonical duet name), triad (by sorted trio
                       key) or primary archetype content
  2. Mode modifiers    ``adds`` blocks appended to notes
  3. Rule snippets     appended to ``domain.field`` for every matching rule
  4. Validity notes    advisory messages when validity flags are raised

Every block that contributes is recorded in an append-only trace so the
report can show which content was selected and why.  Missing content never
fails a report; the affected sections are simply empty.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from hpma.config import get_settings
from hpma.schemas.assessment import AssessmentResult
from hpma.schemas.report import (
    DOMAIN_NAMES,
    CompatibilityMatch,
    ContentBundle,
    EvaluationBlock,
    FieldGuideReport,
    ModeModifiers,
    ReportDomains,
    ReportRoles,
    ReportTrace,
    RoleAssignment,
    ValiditySection,
)
from hpma.schemas.roster import Roster
from hpma.services.content_service import get_content
from hpma.services.roster_service import MODE_LABELS, STRUCTURE_LABELS, display_name
from hpma.services.rule_evaluator import RuleEvaluator, collect_flags, merge_snippets

logger = structlog.get_logger("hpma.report_service")


def build_evaluation_context(result: AssessmentResult) -> dict[str, Any]:
    """Flatten an assessment result into the mapping rule conditions address."""
    profile = result.profile
    roster = result.roster
    return {
        "scores": {
            "hexaco": dict(profile.hexaco),
            "facets": dict(profile.facets.scores),
            "motives": dict(profile.motives),
            "affects": dict(profile.affects),
            "attachment": profile.attachment.model_dump(),
            "antagonism": profile.antagonism.model_dump(),
        },
        "archetypes": dict(result.archetypes.probabilities),
        "validity": result.validity.model_dump(),
        "roster": {
            "structure": roster.structure,
            "faulted_from": roster.faulted_from,
            "solo": roster.solo.model_dump() if roster.solo else None,
            "duet": roster.duet.model_dump() if roster.duet else None,
            "trio": roster.trio.model_dump() if roster.trio else None,
            "choral": roster.choral.model_dump() if roster.choral else None,
            "mist": roster.mist.model_dump() if roster.mist else None,
            "metrics": roster.metrics.model_dump(),
            "confidence": roster.confidence.level,
        },
    }


def identity_key(name: str) -> str:
    """``"Seeker-Sage"`` -> ``"SEEKER_SAGE"``."""
    return name.replace("-", "_").replace(" ", "_").upper()


def triad_key(archetypes: list[str]) -> str:
    return "_".join(sorted(a.upper() for a in archetypes))


class ReportService:
    """Assembles ``FieldGuideReport`` objects and renders them as markdown."""

    def __init__(self, content: Optional[ContentBundle] = None) -> None:
        self.content = content or get_content()
        self.evaluator = RuleEvaluator(self.content.rules.thresholds)

    # ══════════════════════════════════════════════════════════════════════
    # Lookups
    # ══════════════════════════════════════════════════════════════════════

    def identity_content(self, roster: Roster) -> tuple[str, Optional[EvaluationBlock]]:
        """Return ``(source tag, block)`` for the roster's identity content."""
        if roster.duet:
            block = self.content.dyads.entries.get(identity_key(roster.duet.identity))
            if block is not None:
                return "dyad", block
        if roster.trio:
            trio = [roster.trio.primary, roster.trio.secondary, roster.trio.tertiary]
            block = self.content.triads.entries.get(triad_key(trio))
            if block is not None:
                return "triad", block
        return "primary", self.content.primaries.entries.get(roster.primary.lower())

    def mode_modifiers(self, roster: Roster) -> Optional[ModeModifiers]:
        modes = self.content.modes
        if roster.duet:
            return modes.duet_modes.get(roster.duet.mode)
        if roster.trio:
            return modes.trio_modes.get(roster.trio.mode)
        if roster.choral:
            return modes.polyphonic_modes.get(roster.choral.mode)
        return None

    def identity_name(self, roster: Roster, source: str, block: Optional[EvaluationBlock]) -> str:
        if roster.duet:
            return roster.duet.identity
        if source == "triad" and block is not None and block.name:
            return block.name
        primary = self.content.identities.primaries.get(roster.primary.upper())
        return primary.name if primary else display_name(roster.primary)

    @staticmethod
    def mode_name(roster: Roster) -> str:
        if roster.duet:
            return MODE_LABELS[roster.duet.mode]
        if roster.trio:
            return MODE_LABELS[roster.trio.mode]
        if roster.choral:
            return MODE_LABELS[roster.choral.mode]
        effective = roster.faulted_from or roster.structure
        return MODE_LABELS.get(effective, "Unclassified")

    @staticmethod
    def build_roles(roster: Roster) -> ReportRoles:
        roles = ReportRoles()
        if roster.solo:
            roles.anchor = RoleAssignment(name="Anchor", archetype=roster.solo.archetype)
        if roster.duet:
            roles.anchor = RoleAssignment(name="Anchor", archetype=roster.duet.anchor)
            roles.lens = RoleAssignment(name="Lens", archetype=roster.duet.lens)
        if roster.trio:
            roles.keystone = RoleAssignment(name="Keystone", archetype=roster.trio.primary)
            roles.lens = RoleAssignment(name="Lens", archetype=roster.trio.secondary)
            roles.shadow = RoleAssignment(name="Shadow", archetype=roster.trio.tertiary)
        if roster.choral:
            if roster.choral.anchor:
                roles.anchor = RoleAssignment(name="Anchor", archetype=roster.choral.anchor)
            roles.voices = [
                RoleAssignment(name="Voice", archetype=a) for a in roster.choral.contributing
            ]
        return roles

    # ══════════════════════════════════════════════════════════════════════
    # Merge
    # ══════════════════════════════════════════════════════════════════════

    def merge_domains(
        self,
        block: Optional[EvaluationBlock],
        modifiers: Optional[ModeModifiers],
        snippets: dict[str, list[str]],
        validity_messages: list[str],
        context: dict[str, Any],
        trace: list[str],
    ) -> ReportDomains:
        domains = ReportDomains()

        # Layer 1: identity content
        if block is not None:
            for name in DOMAIN_NAMES:
                if getattr(domains, name).absorb(getattr(block.domains, name)):
                    trace.append(f"identity:{name}")
            domains.strengths.evidence_hints = [
                hint for hint in domains.strengths.evidence_hints
                if self.evaluator.evaluate_condition(hint.when, context)
            ]

        # Layer 2: mode modifiers
        if modifiers is not None:
            adds = modifiers.adds
            if adds.strengths is not None:
                domains.strengths.notes.extend(adds.strengths)
                trace.append("mode:strengths")
            if adds.watchouts is not None:
                domains.watchouts.notes.extend(adds.watchouts)
                trace.append("mode:watchouts")
            if adds.prescriptions is not None:
                domains.self_improvement.notes.extend(adds.prescriptions)
                trace.append("mode:prescriptions")

        # Layer 3: rule snippets
        for path, lines in snippets.items():
            domain, _, field = path.partition(".")
            section = getattr(domains, domain) if domain in DOMAIN_NAMES else None
            if section is None or field not in type(section).text_fields():
                logger.warning("report.unknown_snippet_path", path=path)
                continue
            getattr(section, field).extend(lines)
            trace.append(f"rule:{path}")

        # Layer 4: validity
        if validity_messages:
            domains.validity = ValiditySection(notes=list(validity_messages))
            trace.append("validity:notes")

        return domains

    # ══════════════════════════════════════════════════════════════════════
    # Entry point
    # ══════════════════════════════════════════════════════════════════════

    def build_report(
        self,
        result: AssessmentResult,
        validity_messages: Optional[list[str]] = None,
    ) -> FieldGuideReport:
        """Generate the field guide for *result*.

        Parameters
        ----------
        result:
            A complete assessment result.
        validity_messages:
            Advisory validity explanations to include; defaults to none.

        Returns
        -------
        FieldGuideReport
        """
        roster = result.roster
        log = logger.bind(structure=roster.structure)

        context = build_evaluation_context(result)
        matches = self.evaluator.evaluate_all(self.content.rules.rules, context)
        log.info("report.rules_matched", matched=[m.rule_id for m in matches])

        source, block = self.identity_content(roster)
        modifiers = self.mode_modifiers(roster)
        identity = self.identity_name(roster, source, block)
        mode = self.mode_name(roster)
        structure_label = STRUCTURE_LABELS.get(roster.structure, roster.structure)

        tagline = block.tagline if block is not None else ""
        if not tagline:
            primary = self.content.identities.primaries.get(roster.primary.upper())
            tagline = primary.tagline if primary else ""

        selected: list[str] = []
        domains = self.merge_domains(
            block,
            modifiers,
            merge_snippets(matches),
            validity_messages or [],
            context,
            selected,
        )

        report = FieldGuideReport(
            version=get_settings().REPORT_VERSION,
            generated_at=datetime.now(timezone.utc).isoformat(),
            structure=roster.structure,
            structure_label=structure_label,
            identity_name=identity,
            identity_tagline=tagline,
            mode_name=mode,
            mode_ratio=modifiers.ratio if modifiers else None,
            summary_label=f"{structure_label}: {identity} — {mode}",
            roles=self.build_roles(roster),
            domains=domains,
            trace=ReportTrace(
                flags=collect_flags(matches),
                matched_rules=[m.rule_id for m in matches],
                selected_blocks=selected,
            ),
        )
        log.info(
            "report.built",
            identity_source=source,
            identity=identity,
            blocks=len(selected),
        )
        return report


# ──────────────────────────────────────────────────────────────────────────────
# Markdown rendering
# ──────────────────────────────────────────────────────────────────────────────


def _bullets(lines: list[str], title: str, items: list[str]) -> None:
    if not items:
        return
    if lines and lines[-1] != "" and not lines[-1].startswith("## "):
        lines.append("")
    lines.append(f"**{title}:**")
    lines.extend(f"- {item}" for item in items)


def _matches(lines: list[str], title: str, items: list[CompatibilityMatch]) -> None:
    if not items:
        return
    if lines and lines[-1] != "" and not lines[-1].startswith("## "):
        lines.append("")
    lines.append(f"**{title}:**")
    lines.extend(f"- **{m.match}**: {m.why}" for m in items)


def _notes(lines: list[str], notes: list[str]) -> None:
    if notes:
        lines.append("")
        lines.extend(f"> {note}" for note in notes)


def render_markdown(report: FieldGuideReport) -> str:
    """Render *report* as a markdown document with a glass-box trace footer."""
    lines: list[str] = [
        f"# {report.identity_name}",
        f"*{report.identity_tagline}*" if report.identity_tagline else "",
        "",
        f"**{report.summary_label}**",
    ]
    if report.mode_ratio:
        lines.append(f"Voice Balance: {report.mode_ratio}")
    lines.append("")

    roles = report.roles
    if not roles.is_empty():
        lines.append("## Your Voices")
        for role in (roles.anchor, roles.keystone, roles.lens, roles.shadow):
            if role is not None:
                lines.append(f"- **{role.name}**: {display_name(role.archetype)}")
        for voice in roles.voices or []:
            lines.append(f"- **{voice.name}**: {display_name(voice.archetype)}")
        lines.append("")

    d = report.domains
    sections: list[tuple[str, Any, list[tuple[str, Any]]]] = [
        ("Strengths", d.strengths, [("Highlights", d.strengths.bullets)]),
        ("Watch For", d.watchouts, [("Patterns", d.watchouts.bullets), ("Telltale Signs", d.watchouts.telltales)]),
        ("Career", d.career, [
            ("Best Environments", d.career.best_environments),
            ("Role Patterns", d.career.role_patterns),
            ("Avoid", d.career.anti_patterns),
            ("Collaboration", d.career.collaboration),
        ]),
        ("Money", d.money, [("Style", d.money.style), ("Risks", d.money.risks), ("Guardrails", d.money.guardrails)]),
        ("Relationships", d.relationships, [
            ("You Offer", d.relationships.offers),
            ("You Need", d.relationships.needs),
            ("Triggers", d.relationships.triggers),
            ("Repair", d.relationships.repair),
        ]),
        ("Parenting", d.parenting, [
            ("Strengths", d.parenting.strengths),
            ("Traps", d.parenting.traps),
            ("Do More", d.parenting.do_more),
            ("Do Less", d.parenting.do_less),
        ]),
        ("Hobbies", d.hobbies, [
            ("Recharge", d.hobbies.recharge),
            ("Play", d.hobbies.play),
            ("Warning Signs", d.hobbies.warning_signs),
        ]),
        ("Self-Improvement", d.self_improvement, [
            ("Leverage Points", d.self_improvement.leverage),
            ("Keystone Constraints", d.self_improvement.keystone_constraints),
            ("If-Then Rules", d.self_improvement.if_then_rules),
            ("Growth Edges", d.self_improvement.growth_edges),
        ]),
    ]

    for title, section, groups in sections:
        if section.is_empty():
            continue
        lines.append(f"## {title}")
        for label, items in groups:
            _bullets(lines, label, items)
        if section is d.strengths:
            _bullets(lines, "Why", [f"{h.because} ({h.when})" for h in d.strengths.evidence_hints])
        _notes(lines, section.notes)
        lines.append("")

    compat = d.compatibility
    if not compat.is_empty():
        lines.append("## Compatibility")
        _matches(lines, "Complementary Matches", compat.complementary)
        _matches(lines, "Friction Points", compat.friction)
        _matches(lines, "Potential Conflicts", compat.conflict)
        _notes(lines, compat.general_notes)
        lines.append("")

    if d.validity is not None and d.validity.notes:
        lines.append("## Validity")
        lines.extend(f"> {note}" for note in d.validity.notes)
        lines.append("")

    lines.extend([
        "---",
        "",
        "*Glass-Box Trace*",
        f"Flags: {', '.join(report.trace.flags) or 'none'}",
        f"Rules Matched: {len(report.trace.matched_rules)}",
        f"Blocks: {', '.join(report.trace.selected_blocks) or 'none'}",
    ])
    return "\n".join(lines)
