from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

EpithetCategory = Literal["trait_facet", "motive", "affect", "attachment", "antagonism"]


class Epithet(BaseModel):
    category: EpithetCategory
    source_key: str
    z_score: float
    salience: float
    positive_word: str
    negative_word: str
    direction: Literal["high", "low"]

    @property
    def word(self) -> str:
        return self.positive_word if self.direction == "high" else self.negative_word


class ClassName(BaseModel):
    short: str
    standard: str
    full: str
    epithets: list[Epithet] = Field(default_factory=list, max_length=3)
    template_used: str
