from __future__ import annotations

from typing import Literal

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger("hpma.schemas.questionnaire")

Module = Literal["hexaco", "motive", "affect", "validity", "attachment", "antagonism", "context"]
Context = Literal["BASELINE", "WORK", "STRESS", "INTIMACY", "PUBLIC"]

# id -> rating; the pipeline never mutates one of these
ResponseSet = dict[int, int]


class QuestionDescriptor(BaseModel):
    id: int
    facet_id: str
    text: str
    module: Module
    domain: str
    subdomain: str
    reversed: bool = False
    context_sentinel: bool = False
    context: Context = "BASELINE"

    model_config = {"frozen": True}


class AssessmentInput(BaseModel):
    """One respondent's answers: the baseline set plus optional context sets."""

    baseline: dict[int, int] = Field(default_factory=dict)
    contexts: dict[str, dict[int, int]] = Field(default_factory=dict)
    duration_ms: int | None = None


def coerce_responses(raw: dict) -> ResponseSet:
    """Coerce a loosely typed mapping (e.g. decoded JSON) into a response set.

    Keys and values that cannot be read as integers are dropped with a
    warning rather than rejected.
    """
    responses: ResponseSet = {}
    dropped: list[str] = []
    for key, value in raw.items():
        try:
            qid = int(key)
            rating = int(value)
        except (TypeError, ValueError):
            dropped.append(str(key))
            continue
        if isinstance(value, float) and value != rating:
            dropped.append(str(key))
            continue
        responses[qid] = rating
    if dropped:
        logger.warning("responses.dropped_entries", keys=dropped)
    return responses
