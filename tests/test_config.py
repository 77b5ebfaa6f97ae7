"""Tests for reactor configuration."""

import logging

import pytest
from pydantic import ValidationError

from pledge.config import ReactorConfig


class TestReactorConfig:
    """Test ReactorConfig validation and environment loading."""

    def test_defaults(self):
        config = ReactorConfig()
        assert config.report_unhandled_rejections is True
        assert config.unhandled_rejection_log_level == "WARNING"
        assert config.log_level == logging.WARNING
        assert config.max_tasks is None

    def test_level_normalized(self):
        """Test level names are case-insensitive."""
        assert ReactorConfig(unhandled_rejection_log_level="error").log_level == logging.ERROR

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            ReactorConfig(unhandled_rejection_log_level="LOUD")

    def test_invalid_max_tasks(self):
        with pytest.raises(ValidationError):
            ReactorConfig(max_tasks=0)

    def test_from_env(self, monkeypatch):
        """Test PLEDGE_* variables are read."""
        monkeypatch.setenv("PLEDGE_REPORT_UNHANDLED", "off")
        monkeypatch.setenv("PLEDGE_UNHANDLED_LOG_LEVEL", "info")
        monkeypatch.setenv("PLEDGE_MAX_TASKS", "1000")

        config = ReactorConfig.from_env()

        assert config.report_unhandled_rejections is False
        assert config.log_level == logging.INFO
        assert config.max_tasks == 1000

    def test_from_env_defaults(self, monkeypatch):
        """Test missing variables fall back to defaults."""
        for name in ("PLEDGE_REPORT_UNHANDLED", "PLEDGE_UNHANDLED_LOG_LEVEL", "PLEDGE_MAX_TASKS"):
            monkeypatch.delenv(name, raising=False)

        assert ReactorConfig.from_env() == ReactorConfig()
