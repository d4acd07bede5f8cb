"""
Unit tests for configuration helpers.
"""

import pytest

from core import config


class TestBooleanFlags:

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", " on "])
    def test_truthy_values(self, monkeypatch, raw):
        monkeypatch.setenv("VETCARE_FLAG", raw)
        assert config._get_bool("VETCARE_FLAG", "false") is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", ""])
    def test_falsy_values(self, monkeypatch, raw):
        monkeypatch.setenv("VETCARE_FLAG", raw)
        assert config._get_bool("VETCARE_FLAG", "true") is False

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("VETCARE_FLAG", raising=False)
        assert config._get_bool("VETCARE_FLAG", "true") is True


class TestDefaults:

    def test_database_url_default(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert config.get_database_url() == "postgresql://localhost/vetcare_dev"

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        assert config.get_database_url() == "sqlite:///./other.db"

    def test_test_environment_settings(self):
        assert config.is_testing is True
        assert config.MAIL_ENABLED is False
        assert config.CLINIC_TIMEZONE == "UTC"
