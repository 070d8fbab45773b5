from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from hpma.schemas.class_name import ClassName
from hpma.schemas.profile import ArchetypeResult, TraitProfile, ValidityFlags
from hpma.schemas.roster import Roster


class AssessmentResult(BaseModel):
    """The complete scored outcome for one respondent."""

    profile: TraitProfile
    archetypes: ArchetypeResult
    roster: Roster
    validity: ValidityFlags
    validity_message: str = ""
    class_name: ClassName
    completed_at: str
    duration_ms: Optional[int] = None
