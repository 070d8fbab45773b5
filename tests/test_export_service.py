"""Unit tests for ExportService — JSON and CSV output."""
import csv
import io
import json

import pytest

from hpma.services.assessment_service import AssessmentService
from hpma.services.export_service import ExportService


@pytest.fixture
def export_service():
    return ExportService()


@pytest.fixture
def neutral_result(neutral_responses):
    return AssessmentService().assess(neutral_responses, duration_ms=125000)


class TestJsonExport:

    def test_result_only(self, export_service, neutral_result):
        payload = json.loads(export_service.to_json(neutral_result))
        assert set(payload) == {"result"}
        assert payload["result"]["roster"]["structure"] == "MIST"
        assert payload["result"]["class_name"]["short"] == "Balanced"

    def test_with_report(self, export_service, neutral_result):
        report = AssessmentService().build_report(neutral_result)
        payload = json.loads(export_service.to_json(neutral_result, report))
        assert payload["report"]["structure"] == "MIST"
        assert payload["report"]["trace"]["matched_rules"]


class TestCsvExport:

    def _rows(self, export_service, result):
        return list(csv.reader(io.StringIO(export_service.to_csv(result))))

    def test_header(self, export_service, neutral_result):
        rows = self._rows(export_service, neutral_result)
        assert rows[0] == ["section", "label", "value"]
        assert all(len(row) == 3 for row in rows)

    def test_scores_and_classification_rows(self, export_service, neutral_result):
        rows = self._rows(export_service, neutral_result)
        assert ["hexaco", "O", "4.00"] in rows
        assert ["facet", "sincerity", "4.00"] in rows
        assert ["validity", "random", "OK"] in rows
        assert ["roster", "structure", "MIST"] in rows
        assert ["archetype", "explorer", "0.1667"] in rows
        assert ["attachment", "style", "FEARFUL"] in rows
        assert ["antagonism", "elevated", "false"] in rows
        assert ["class_name", "full", "Balanced"] in rows
        assert ["metadata", "duration_seconds", "125"] in rows

    def test_counts(self, export_service, neutral_result):
        rows = self._rows(export_service, neutral_result)
        sections = [row[0] for row in rows[1:]]
        assert sections.count("facet") == 24
        assert sections.count("hexaco") == 6
        assert sections.count("archetype") == 7
        assert "context" not in sections
