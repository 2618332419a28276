"""Tests for settings and logging setup."""

import logging

import pytest

from skportal.core.config import Settings, get_settings
from skportal.core.logger import setup_logger


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FEMALE_QUOTA_PERCENT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.female_quota_percent == 30
        assert settings.branch_coordinator_slots == 10
        assert settings.max_report_bytes == 10 * 1024 * 1024
        assert settings.max_id_document_bytes == 5 * 1024 * 1024
        assert settings.signed_url_expire_seconds == 3600
        assert settings.structure_catalog_path is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FEMALE_QUOTA_PERCENT", "40")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        settings = Settings(_env_file=None)
        assert settings.female_quota_percent == 40
        assert settings.database_url == "sqlite:///./other.db"

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestLogger:
    """Tests for logger setup."""

    def test_console_logger(self):
        logger = setup_logger("skportal-test-console", level="debug")
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_file_logger(self, tmp_path):
        logger = setup_logger(
            "skportal-test-file",
            log_dir=str(tmp_path),
            file_logging=True,
            console_logging=False,
        )
        logger.info("roster committed")
        for handler in logger.handlers:
            handler.flush()
        assert "roster committed" in (tmp_path / "skportal-test-file.log").read_text()

    def test_no_duplicate_handlers(self):
        first = setup_logger("skportal-test-dupes")
        count = len(first.handlers)
        setup_logger("skportal-test-dupes")
        assert len(first.handlers) == count

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger("skportal-test-invalid", level="LOUD")
