"""
HPMA — Result Export

Two thin transforms of an ``AssessmentResult``:

  * JSON  full-fidelity structured dump (optionally with the field guide)
  * CSV   flattened ``section,label,value`` rows, one per dimension score and
          one per classification field
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Iterator, Optional

import structlog

from hpma.schemas.assessment import AssessmentResult
from hpma.schemas.report import FieldGuideReport

logger = structlog.get_logger("hpma.export_service")

Row = tuple[str, str, str]


def _score(value: float) -> str:
    return f"{value:.2f}"


def _prob(value: float) -> str:
    return f"{value:.4f}"


def _flag(value: bool) -> str:
    return "FLAGGED" if value else "OK"


def _cell(value: Any) -> str:
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _prob(value)
    return "" if value is None else str(value)


class ExportService:
    """JSON and CSV serialisation of assessment results."""

    CSV_HEADER: Row = ("section", "label", "value")

    def to_json(self, result: AssessmentResult, report: Optional[FieldGuideReport] = None) -> str:
        payload: dict[str, Any] = {"result": result.model_dump(mode="json")}
        if report is not None:
            payload["report"] = report.model_dump(mode="json")
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def iter_rows(self, result: AssessmentResult) -> Iterator[Row]:
        profile = result.profile

        for facet, score in profile.facets.scores.items():
            yield "facet", facet, _score(score)
        for facet, z in profile.facets.z_scores.items():
            yield "facet_z", facet, _score(z)
        for domain, score in profile.hexaco.items():
            yield "hexaco", domain, _score(score)
        for motive, score in profile.motives.items():
            yield "motive", motive, _score(score)
        for affect, score in profile.affects.items():
            yield "affect", affect, _score(score)

        attachment = profile.attachment
        yield "attachment", "anxiety", _score(attachment.anxiety)
        yield "attachment", "avoidance", _score(attachment.avoidance)
        yield "attachment", "style", attachment.style
        yield "attachment", "confidence", _score(attachment.confidence)

        for name, value in profile.antagonism.model_dump().items():
            yield "antagonism", name, _cell(value) if isinstance(value, bool) else _score(value)

        for archetype, probability in result.archetypes.probabilities.items():
            yield "archetype", archetype, _prob(probability)
        yield "archetype", "uncertainty", _prob(result.archetypes.uncertainty)

        for name in ("idealized", "random", "inattentive"):
            yield "validity", name, _flag(getattr(result.validity, name))

        roster = result.roster
        yield "roster", "version", roster.version
        yield "roster", "structure", roster.structure
        if roster.faulted_from:
            yield "roster", "faulted_from", roster.faulted_from
        yield "roster", "summary_label", roster.summary_label
        yield "roster", "confidence", roster.confidence.level
        yield "roster", "distance_from_boundary", _prob(roster.confidence.distance_from_boundary)
        yield "roster", "confidence_notes", _cell(roster.confidence.notes)

        for name, value in roster.metrics.model_dump().items():
            yield "metric", name, _prob(value)

        for section in ("solo", "duet", "trio", "choral", "mist"):
            record = getattr(roster, section)
            if record is None:
                continue
            for name, value in record.model_dump().items():
                if name != "description":
                    yield section, name, _cell(value)

        context = profile.context_dependence
        if context is not None:
            for ctx, shift in context.contexts.items():
                yield "context", f"{ctx}.mean_abs_delta", _score(shift.mean_abs_delta)
                yield "context", f"{ctx}.shift_pattern", shift.shift_pattern
            yield "context", "overall_volatility", _score(context.overall_volatility)
            yield "context", "most_context_dependent", _cell(context.most_context_dependent)
            yield "context", "most_stable", _cell(context.most_stable)

        class_name = result.class_name
        yield "class_name", "short", class_name.short
        yield "class_name", "standard", class_name.standard
        yield "class_name", "full", class_name.full
        yield "class_name", "template", class_name.template_used

        yield "metadata", "completed_at", result.completed_at
        if result.duration_ms is not None:
            yield "metadata", "duration_seconds", str(round(result.duration_ms / 1000))

    def to_csv(self, result: AssessmentResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.CSV_HEADER)
        count = 0
        for row in self.iter_rows(result):
            writer.writerow(row)
            count += 1
        logger.debug("export.csv_written", rows=count)
        return buffer.getvalue()
