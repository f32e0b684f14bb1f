"""
Tests for Config - advisory model resolution and key handling.
"""

import os

import pytest

from tribuanalyzer.core.config import Config


class TestAdvisoryModels:
    def test_defaults(self, monkeypatch):
        monkeypatch.setattr(Config, "ADVISORY_MODELS", "")
        assert Config.get_advisory_models() == [
            "google-gla:gemini-3.1-pro-preview",
            "google-gla:gemini-3-flash-preview",
        ]

    def test_defaults_are_a_copy(self, monkeypatch):
        monkeypatch.setattr(Config, "ADVISORY_MODELS", "")
        Config.get_advisory_models().append("x")
        assert "x" not in Config.DEFAULT_ADVISORY_MODELS

    def test_env_list_is_ordered_and_trimmed(self, monkeypatch):
        monkeypatch.setattr(Config, "ADVISORY_MODELS", " google-gla:a , ,google-gla:b,")
        assert Config.get_advisory_models() == ["google-gla:a", "google-gla:b"]

    def test_blank_env_list_falls_back(self, monkeypatch):
        monkeypatch.setattr(Config, "ADVISORY_MODELS", " , ")
        assert Config.get_advisory_models() == Config.DEFAULT_ADVISORY_MODELS


class TestKeys:
    def test_validate_missing_key(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "")
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            Config.validate()

    def test_validate_ok(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "key")
        assert Config.validate() is True

    def test_config_does_not_touch_environment(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "legacy-key")

        Config.validate()

        assert "GEMINI_API_KEY" not in os.environ

    def test_get(self):
        assert Config.get("DEFAULT_CURRENCY") == Config.DEFAULT_CURRENCY
        assert Config.get("NOPE", "fallback") == "fallback"
