"""Tests for contract_compliance/config.py — Settings and defaults."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from contract_compliance.config import Settings, get_settings


class TestSettings:

    def test_get_settings_returns_instance(self):
        assert isinstance(get_settings(), Settings)

    def test_get_settings_returns_singleton(self):
        assert get_settings() is get_settings()

    def test_analysis_defaults(self):
        s = Settings()
        assert s.default_jurisdiction == "US"
        assert s.missing_rule_weight_threshold == 0.7
        assert s.implementation_quality_threshold == 0.7
        assert s.custom_rules_path is None

    def test_risk_threshold_defaults(self):
        s = Settings()
        assert (s.risk_threshold_low, s.risk_threshold_medium, s.risk_threshold_high) == (90.0, 70.0, 50.0)

    def test_library_defaults(self):
        s = Settings()
        assert s.similarity_threshold == 0.3
        assert s.template_suggestion_threshold == 0.5
        assert s.default_max_suggestions == 5
        assert s.seed_default_library is True


class TestEnvironmentOverrides:

    def test_env_overrides_jurisdiction(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_JURISDICTION", "EU")
        assert get_settings().default_jurisdiction == "EU"

    def test_custom_rules_path_converted(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_RULES_PATH", "/tmp/rules.json")
        assert get_settings().custom_rules_path == Path("/tmp/rules.json")

    def test_empty_custom_rules_path_is_none(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_RULES_PATH", "")
        assert get_settings().custom_rules_path is None

    def test_threshold_out_of_range_rejected(self, monkeypatch):
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "1.5")
        with pytest.raises(ValidationError):
            Settings()
