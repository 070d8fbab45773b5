"""Tests for the hpma command-line interface."""
import json

import pytest

from hpma.cli import load_input, main


@pytest.fixture
def responses_file(tmp_path, neutral_responses):
    path = tmp_path / "responses.json"
    path.write_text(json.dumps({str(k): v for k, v in neutral_responses.items()}), encoding="utf-8")
    return path


@pytest.fixture
def nested_file(tmp_path, neutral_responses):
    path = tmp_path / "nested.json"
    path.write_text(json.dumps({
        "baseline": {str(k): v for k, v in neutral_responses.items()},
        "contexts": {"work": {str(401 + i): 6 for i in range(24)}},
        "duration_ms": 90000,
    }), encoding="utf-8")
    return path


class TestLoadInput:

    def test_flat_mapping(self, responses_file):
        payload = load_input(responses_file)
        assert len(payload.baseline) == 140
        assert payload.contexts == {}

    def test_nested_mapping(self, nested_file):
        payload = load_input(nested_file)
        assert set(payload.contexts) == {"WORK"}
        assert payload.duration_ms == 90000

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_input(path)


class TestScoreCommand:

    def test_json_output(self, responses_file, capsys):
        assert main(["score", str(responses_file)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["result"]["roster"]["structure"] == "MIST"
        assert "report" not in payload

    def test_json_with_report(self, responses_file, capsys):
        assert main(["score", str(responses_file), "--report"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["report"]["structure"] == "MIST"

    def test_csv_output(self, nested_file, capsys):
        assert main(["score", str(nested_file), "--format", "csv"]) == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "section,label,value"
        assert "context,WORK.shift_pattern,VOLATILE" in out

    def test_markdown_output(self, responses_file, capsys):
        assert main(["score", str(responses_file), "-f", "markdown"]) == 0
        assert capsys.readouterr().out.startswith("# ")

    def test_output_file(self, responses_file, tmp_path):
        target = tmp_path / "out.csv"
        assert main(["score", str(responses_file), "-f", "csv", "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8").startswith("section,label,value")

    def test_missing_file(self, tmp_path, capsys):
        assert main(["score", str(tmp_path / "nope.json")]) == 2
        assert "error:" in capsys.readouterr().err


class TestQuestionsCommand:

    def test_module_filter(self, capsys):
        assert main(["questions", "--module", "validity"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 6
        assert lines[0].lstrip().startswith("107")

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()
