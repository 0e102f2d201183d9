"""
Unit tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from apprunner.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("APPRUNNER_HTTP_TIMEOUT_SECONDS", raising=False)

        settings = Settings(_env_file=None)

        assert settings.http_timeout_seconds == 30.0
        assert settings.sql_timeout_seconds == 30.0
        assert settings.max_page_size == 100
        assert settings.is_development

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("APPRUNNER_HTTP_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("APPRUNNER_ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.http_timeout_seconds == 5.0
        assert settings.is_production

    def test_settings_are_immutable(self):
        settings = Settings(_env_file=None)

        with pytest.raises(ValidationError):
            settings.max_page_size = 10

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, http_timeout_seconds=0)
