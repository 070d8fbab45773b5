from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ── Domain sections ────────────────────────────────────────────────────
# The same section models describe content blocks (where every field may be
# omitted) and the merged report sections.


class EvidenceHint(BaseModel):
    when: str
    because: str


class CompatibilityMatch(BaseModel):
    match: str
    why: str


class DomainSection(BaseModel):
    notes: list[str] = Field(default_factory=list)

    def absorb(self, other: Optional[DomainSection]) -> bool:
        """Append every list of *other* onto this section; False if absent."""
        if other is None:
            return False
        for name in type(self).model_fields:
            getattr(self, name).extend(getattr(other, name))
        return True

    @classmethod
    def text_fields(cls) -> set[str]:
        return {
            name for name, field in cls.model_fields.items()
            if field.annotation == list[str]
        }

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in type(self).model_fields)


class StrengthsSection(DomainSection):
    bullets: list[str] = Field(default_factory=list)
    evidence_hints: list[EvidenceHint] = Field(default_factory=list)


class WatchoutsSection(DomainSection):
    bullets: list[str] = Field(default_factory=list)
    telltales: list[str] = Field(default_factory=list)


class CareerSection(DomainSection):
    best_environments: list[str] = Field(default_factory=list)
    role_patterns: list[str] = Field(default_factory=list)
    anti_patterns: list[str] = Field(default_factory=list)
    collaboration: list[str] = Field(default_factory=list)


class MoneySection(DomainSection):
    style: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    guardrails: list[str] = Field(default_factory=list)


class RelationshipsSection(DomainSection):
    offers: list[str] = Field(default_factory=list)
    needs: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)
    repair: list[str] = Field(default_factory=list)


class ParentingSection(DomainSection):
    strengths: list[str] = Field(default_factory=list)
    traps: list[str] = Field(default_factory=list)
    do_more: list[str] = Field(default_factory=list)
    do_less: list[str] = Field(default_factory=list)


class HobbiesSection(DomainSection):
    recharge: list[str] = Field(default_factory=list)
    play: list[str] = Field(default_factory=list)
    warning_signs: list[str] = Field(default_factory=list)


class SelfImprovementSection(DomainSection):
    leverage: list[str] = Field(default_factory=list)
    keystone_constraints: list[str] = Field(default_factory=list)
    if_then_rules: list[str] = Field(default_factory=list)
    growth_edges: list[str] = Field(default_factory=list)


class CompatibilitySection(DomainSection):
    complementary: list[CompatibilityMatch] = Field(default_factory=list)
    friction: list[CompatibilityMatch] = Field(default_factory=list)
    conflict: list[CompatibilityMatch] = Field(default_factory=list)
    general_notes: list[str] = Field(default_factory=list)


class ValiditySection(DomainSection):
    pass


DOMAIN_NAMES: tuple[str, ...] = (
    "strengths", "watchouts", "career", "money", "relationships",
    "parenting", "hobbies", "self_improvement", "compatibility",
)


class DomainBlocks(BaseModel):
    """Content-side domain blocks; any block may be absent."""

    strengths: Optional[StrengthsSection] = None
    watchouts: Optional[WatchoutsSection] = None
    career: Optional[CareerSection] = None
    money: Optional[MoneySection] = None
    relationships: Optional[RelationshipsSection] = None
    parenting: Optional[ParentingSection] = None
    hobbies: Optional[HobbiesSection] = None
    self_improvement: Optional[SelfImprovementSection] = None
    compatibility: Optional[CompatibilitySection] = None


class ReportDomains(BaseModel):
    """Report-side domains; every section present, validity only when flagged."""

    strengths: StrengthsSection = Field(default_factory=StrengthsSection)
    watchouts: WatchoutsSection = Field(default_factory=WatchoutsSection)
    career: CareerSection = Field(default_factory=CareerSection)
    money: MoneySection = Field(default_factory=MoneySection)
    relationships: RelationshipsSection = Field(default_factory=RelationshipsSection)
    parenting: ParentingSection = Field(default_factory=ParentingSection)
    hobbies: HobbiesSection = Field(default_factory=HobbiesSection)
    self_improvement: SelfImprovementSection = Field(default_factory=SelfImprovementSection)
    compatibility: CompatibilitySection = Field(default_factory=CompatibilitySection)
    validity: Optional[ValiditySection] = None


# ── Content bundle ─────────────────────────────────────────────────────


class PrimaryIdentity(BaseModel):
    name: str
    tagline: str
    core_drive: str
    icon: str = ""


class DyadIdentity(BaseModel):
    pair: list[str] = Field(min_length=2, max_length=2)
    name: str
    tagline: str


class IdentitiesContent(BaseModel):
    version: str
    primaries: dict[str, PrimaryIdentity]
    dyads: dict[str, DyadIdentity] = Field(default_factory=dict)
    fallback_template: str = "{anchor}–{lens} Hybrid"


class ModeAdds(BaseModel):
    strengths: Optional[list[str]] = None
    watchouts: Optional[list[str]] = None
    prescriptions: Optional[list[str]] = None


class ModeModifiers(BaseModel):
    name: str
    ratio: Optional[str] = None
    description: Optional[str] = None
    adds: ModeAdds = Field(default_factory=ModeAdds)


class ModesContent(BaseModel):
    version: str
    duet_modes: dict[str, ModeModifiers] = Field(default_factory=dict)
    trio_modes: dict[str, ModeModifiers] = Field(default_factory=dict)
    polyphonic_modes: dict[str, ModeModifiers] = Field(default_factory=dict)


class EvaluationBlock(BaseModel):
    name: Optional[str] = None
    tagline: str = ""
    domains: DomainBlocks = Field(default_factory=DomainBlocks)


class EvaluationContent(BaseModel):
    version: str
    entries: dict[str, EvaluationBlock] = Field(default_factory=dict)


class Rule(BaseModel):
    id: str
    when: str
    add_flags: list[str] = Field(default_factory=list)
    add_snippets: dict[str, list[str]] = Field(default_factory=dict)


class RulesContent(BaseModel):
    version: str
    thresholds: dict[str, float] = Field(default_factory=dict)
    rules: list[Rule] = Field(default_factory=list)


class ContentBundle(BaseModel):
    identities: IdentitiesContent
    modes: ModesContent
    primaries: EvaluationContent
    dyads: EvaluationContent
    triads: EvaluationContent
    rules: RulesContent


# ── Report ─────────────────────────────────────────────────────────────


class RuleMatch(BaseModel):
    rule_id: str
    flags: list[str] = Field(default_factory=list)
    snippets: dict[str, list[str]] = Field(default_factory=dict)


class RoleAssignment(BaseModel):
    name: str
    archetype: str


class ReportRoles(BaseModel):
    anchor: Optional[RoleAssignment] = None
    keystone: Optional[RoleAssignment] = None
    lens: Optional[RoleAssignment] = None
    shadow: Optional[RoleAssignment] = None
    voices: Optional[list[RoleAssignment]] = None

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in type(self).model_fields)


class ReportTrace(BaseModel):
    flags: list[str] = Field(default_factory=list)
    matched_rules: list[str] = Field(default_factory=list)
    selected_blocks: list[str] = Field(default_factory=list)


class FieldGuideReport(BaseModel):
    version: str
    generated_at: str
    structure: str
    structure_label: str
    identity_name: str
    identity_tagline: str
    mode_name: str
    mode_ratio: Optional[str] = None
    summary_label: str
    roles: ReportRoles = Field(default_factory=ReportRoles)
    domains: ReportDomains = Field(default_factory=ReportDomains)
    trace: ReportTrace = Field(default_factory=ReportTrace)
