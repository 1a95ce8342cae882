"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from pantrykit.common.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PANTRY_API_URL", "TRANSPORT_BACKEND", "CLASSIFIER_AI_BACKEND", "DEFAULT_UNIT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.graphql_url == "http://localhost:4000/graphql"
        assert settings.transport_backend == "http"
        assert settings.classifier_ai_backend == "remote"
        assert settings.classifier_ai_threshold == 0.8
        assert settings.default_unit == "pieces"
        assert settings.default_location == "PANTRY"
        assert settings.default_threshold == 2

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PANTRY_API_URL", "https://api.example.com/")
        monkeypatch.setenv("TRANSPORT_BACKEND", "MEMORY")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.graphql_url == "https://api.example.com/graphql"
        assert settings.transport_backend == "memory"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("field,value", [
        ("log_level", "LOUD"),
        ("environment", "moon"),
        ("transport_backend", "carrier-pigeon"),
        ("classifier_ai_backend", "oracle"),
        ("classifier_ai_threshold", 1.5),
    ])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
