"""Tests for content bundle loading and configuration."""
import json

import pytest
from pydantic import ValidationError

from hpma.config import PACKAGED_CONTENT_DIR, Settings
from hpma.services.content_service import CONTENT_FILES, get_content, load_content
from hpma.services.roster_service import DYAD_NAMES
from hpma.services.rule_evaluator import parse_condition
from hpma.services.report_service import identity_key


class TestPackagedContent:
    """The bundled JSON content validates and is internally consistent."""

    def test_loads(self):
        bundle = get_content()
        assert set(bundle.identities.primaries) == {
            "EXPLORER", "ORGANIZER", "CONNECTOR", "PROTECTOR", "PERFORMER", "PHILOSOPHER",
        }
        assert len(bundle.primaries.entries) == 6

    def test_loaded_once(self):
        assert get_content() is get_content(PACKAGED_CONTENT_DIR)

    def test_every_dyad_has_content(self):
        bundle = get_content()
        for name in DYAD_NAMES.values():
            assert identity_key(name) in bundle.dyads.entries

    def test_all_modes_present(self):
        modes = get_content().modes
        assert set(modes.duet_modes) == {
            "TWIN_HELIX", "LEANING_HELIX", "KEYSTONE_LENS", "SIGNATURE_ACCENT", "PURELINE",
        }
        assert set(modes.trio_modes) == {"TRI_HELIX", "KEYSTONE_PRISM", "KEYSTONE_ORBIT", "TRIAD_STACK"}

    def test_every_rule_parses(self):
        for rule in get_content().rules.rules:
            assert parse_condition(rule.when) is not None, rule.id


class TestCustomContentDir:
    """Loading from an arbitrary directory."""

    def _copy_bundle(self, target):
        for filename in CONTENT_FILES.values():
            (target / filename).write_text(
                (PACKAGED_CONTENT_DIR / filename).read_text(encoding="utf-8"), encoding="utf-8"
            )

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="missing"):
            load_content(str(tmp_path))

    def test_invalid_json(self, tmp_path):
        self._copy_bundle(tmp_path)
        (tmp_path / "rules.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_content(str(tmp_path))

    def test_schema_violation(self, tmp_path):
        self._copy_bundle(tmp_path)
        (tmp_path / "modes.json").write_text(json.dumps({"duet_modes": {}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_content(str(tmp_path))


class TestSettings:
    """Tests for runtime configuration."""

    def test_defaults(self):
        settings = Settings()
        assert settings.FAULT_ON_INVALID_RESPONSES is False
        assert settings.content_path == PACKAGED_CONTENT_DIR

    def test_log_level_normalized(self):
        settings = Settings(LOG_LEVEL="debug")
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.log_level_number == 10

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="chatty")

    def test_environment_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HPMA_CONTENT_DIR", str(tmp_path))
        monkeypatch.setenv("HPMA_FAULT_ON_INVALID_RESPONSES", "true")
        settings = Settings()
        assert settings.content_path == tmp_path
        assert settings.FAULT_ON_INVALID_RESPONSES is True
