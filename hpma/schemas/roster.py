from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

Structure = Literal["SOLO", "DUET", "TRIO", "CHORD", "CHORUS", "MIST", "FAULTED"]
DuetMode = Literal["TWIN_HELIX", "LEANING_HELIX", "KEYSTONE_LENS", "SIGNATURE_ACCENT", "PURELINE"]
TrioMode = Literal["TRI_HELIX", "KEYSTONE_PRISM", "KEYSTONE_ORBIT", "TRIAD_STACK"]
PolyphonicMode = Literal["CHORD_TOP4", "CHORD_TOP_HEAVY", "CHORUS_DISTRIBUTED", "CHORUS_CONTEXT_SPLIT"]
ConfidenceLevel = Literal["HIGH", "MEDIUM", "LOW"]


class ArchetypeProbability(BaseModel):
    archetype: str
    probability: float


class DerivedMetrics(BaseModel):
    S2: float
    S3: float
    r2: float
    g12: float
    entropy_n: float


class SoloRoster(BaseModel):
    archetype: str
    label: str
    description: str


class DuetRoster(BaseModel):
    mode: DuetMode
    identity: str
    anchor: str
    lens: str
    label: str
    description: str


class TrioRoster(BaseModel):
    mode: TrioMode
    primary: str
    secondary: str
    tertiary: str
    label: str
    description: str


class ChoralRoster(BaseModel):
    mode: PolyphonicMode
    anchor: Optional[str] = None
    contributing: list[str]
    label: str
    description: str


class MistRoster(BaseModel):
    leading: str
    label: str
    description: str


class ConfidenceRecord(BaseModel):
    level: ConfidenceLevel
    distance_from_boundary: float
    notes: list[str] = Field(default_factory=list)


class Roster(BaseModel):
    version: str = "HPMA-Vocabulary-1.0"
    sorted_probs: list[ArchetypeProbability]
    metrics: DerivedMetrics
    structure: Structure
    faulted_from: Optional[Structure] = None
    solo: Optional[SoloRoster] = None
    duet: Optional[DuetRoster] = None
    trio: Optional[TrioRoster] = None
    choral: Optional[ChoralRoster] = None
    mist: Optional[MistRoster] = None
    confidence: ConfidenceRecord
    summary_label: str = Field(min_length=1)

    @property
    def primary(self) -> str:
        return self.sorted_probs[0].archetype
