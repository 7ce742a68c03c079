"""Unit tests for recurrence_lite.core.config_manager."""

import logging
import os
from unittest.mock import patch

import pytest

from recurrence_lite.core.config_manager import ConfigManager, parse_env_file

pytestmark = pytest.mark.unit


class TestParseEnvFile:
    """Tests for parse_env_file."""

    def test_parse_env_file_when_missing_then_empty(self, tmp_path):
        """Test a missing file parses to an empty mapping."""
        assert parse_env_file(tmp_path / ".env") == {}

    def test_parse_env_file_skips_comments_and_strips_quotes(self, tmp_path):
        """Test comments, blank lines and malformed lines are skipped and quotes removed."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n\nRECURRENCE_LITE_DAYS = 7\nRECURRENCE_LITE_DEFAULT_TIMEZONE=\"Europe/Berlin\"\n"
            "RECURRENCE_LITE_LOG_LEVEL='debug'\nnot a pair\n=orphan\n",
            encoding="utf-8",
        )

        assert parse_env_file(env_file) == {
            "RECURRENCE_LITE_DAYS": "7",
            "RECURRENCE_LITE_DEFAULT_TIMEZONE": "Europe/Berlin",
            "RECURRENCE_LITE_LOG_LEVEL": "debug",
        }


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_build_config_from_env_maps_variables(self, monkeypatch):
        """Test RECURRENCE_LITE_* variables map onto config keys."""
        monkeypatch.setenv("RECURRENCE_LITE_DAYS", "7")
        monkeypatch.setenv("RECURRENCE_LITE_LIMIT", "50")
        monkeypatch.setenv("RECURRENCE_LITE_DEFAULT_TIMEZONE", "UTC")

        cfg = ConfigManager().build_config_from_env()

        assert cfg == {"default_days": 7, "default_limit": 50, "default_timezone": "UTC"}

    def test_build_config_from_env_when_int_invalid_then_ignored(self, monkeypatch, caplog):
        """Test unparseable integer variables are skipped with a warning."""
        caplog.set_level(logging.WARNING)
        monkeypatch.setenv("RECURRENCE_LITE_WORKER_CONCURRENCY", "many")

        assert ConfigManager().build_config_from_env() == {}
        assert "RECURRENCE_LITE_WORKER_CONCURRENCY" in caplog.text

    def test_load_env_file_does_not_override_existing_variables(self, tmp_path):
        """Test values already in the environment win over the .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("RECURRENCE_LITE_DAYS=30\nRECURRENCE_LITE_LIMIT=10\n", encoding="utf-8")

        with patch.dict(os.environ, {"RECURRENCE_LITE_DAYS": "3"}):
            loaded = ConfigManager(env_file_path=env_file).load_env_file()

            assert loaded == ["RECURRENCE_LITE_LIMIT"]
            assert os.environ["RECURRENCE_LITE_DAYS"] == "3"
            assert os.environ["RECURRENCE_LITE_LIMIT"] == "10"

    def test_load_env_file_when_missing_then_nothing_loaded(self, tmp_path):
        """Test a missing .env file loads nothing."""
        assert ConfigManager(env_file_path=tmp_path / ".env").load_env_file() == []

    def test_load_full_config_combines_env_file_and_environment(self, tmp_path):
        """Test load_full_config reads the .env file before building overrides."""
        env_file = tmp_path / ".env"
        env_file.write_text("RECURRENCE_LITE_MAX_SOURCE_EVENTS=25\n", encoding="utf-8")

        with patch.dict(os.environ, {"RECURRENCE_LITE_LOG_LEVEL": "DEBUG"}):
            overrides = ConfigManager(env_file_path=env_file).load_full_config()

        assert overrides == {"max_source_events": 25, "log_level": "DEBUG"}

    def test_default_env_file_is_in_cwd(self, tmp_path, monkeypatch):
        """Test the .env file defaults to the current working directory."""
        monkeypatch.chdir(tmp_path)

        assert ConfigManager().env_file_path == tmp_path / ".env"
