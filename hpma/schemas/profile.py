from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

AttachmentStyle = Literal["SECURE", "PREOCCUPIED", "DISMISSIVE", "FEARFUL"]
ShiftPattern = Literal["STABLE", "MODERATE", "VOLATILE"]


class FacetProfile(BaseModel):
    scores: dict[str, float]
    z_scores: dict[str, float]


class AttachmentResult(BaseModel):
    anxiety: float
    avoidance: float
    style: AttachmentStyle
    confidence: float = Field(ge=0.0, le=1.0)


class AntagonismResult(BaseModel):
    exploitative: float
    callous: float
    combative: float
    image_driven: float
    composite: float
    elevated: bool


class FacetShift(BaseModel):
    facet: str
    delta: float


class ContextShiftResult(BaseModel):
    context: str
    deltas: dict[str, float]
    top_shifts: list[FacetShift]
    mean_abs_delta: float
    shift_pattern: ShiftPattern


class ContextDependence(BaseModel):
    contexts: dict[str, ContextShiftResult]
    overall_volatility: float
    most_context_dependent: list[str]
    most_stable: list[str]


class ArchetypeResult(BaseModel):
    raw_scores: dict[str, float]
    probabilities: dict[str, float]
    uncertainty: float


class ValidityFlags(BaseModel):
    idealized: bool = False
    random: bool = False
    inattentive: bool = False

    @property
    def has_issues(self) -> bool:
        return self.idealized or self.random or self.inattentive


class TraitProfile(BaseModel):
    """Every scored dimension for one respondent, raw and standardized."""

    facets: FacetProfile
    hexaco: dict[str, float]
    hexaco_z: dict[str, float]
    motives: dict[str, float]
    motives_z: dict[str, float]
    affects: dict[str, float]
    affects_z: dict[str, float]
    attachment: AttachmentResult
    antagonism: AntagonismResult
    context_dependence: Optional[ContextDependence] = None
