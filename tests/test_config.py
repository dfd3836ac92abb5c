"""Tests for process-wide configuration."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from gitseeker.core.config import (
    DEFAULT_DEEP_SEARCH_DELAY,
    DEFAULT_LOCAL_LLM_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    _load_from_env,
    configure,
    configure_logging,
    get_config,
    reset_config,
)
from gitseeker.core.exceptions import ConfigurationError, ErrorCategory, InvalidParameterError


class TestDefaults:
    async def test_defaults_without_env(self, monkeypatch):
        for name in (
            "GITSEEKER_TIMEOUT",
            "GITSEEKER_USER_AGENT",
            "GITSEEKER_DEEP_SEARCH_DELAY",
            "GITHUB_TOKEN",
            "GITLAB_TOKEN",
            "GITSEEKER_LOCAL_LLM_URL",
        ):
            monkeypatch.delenv(name, raising=False)
        config = reset_config()
        assert config["timeout"] == DEFAULT_TIMEOUT
        assert config["user_agent"] == DEFAULT_USER_AGENT
        assert config["deep_search_delay"] == DEFAULT_DEEP_SEARCH_DELAY
        assert config["github_token"] is None
        assert config["gitlab_token"] is None
        assert config["local_llm_url"] == DEFAULT_LOCAL_LLM_URL

    async def test_get_config_returns_copy(self):
        config = get_config()
        config["timeout"] = -1
        assert get_config()["timeout"] != -1


class TestEnvironment:
    async def test_reads_env(self, monkeypatch, temp_dir):
        monkeypatch.setenv("GITSEEKER_TIMEOUT", "5")
        monkeypatch.setenv("GITSEEKER_DEEP_SEARCH_DELAY", "0")
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        monkeypatch.setenv("GITSEEKER_PREFERENCES_PATH", str(temp_dir / "prefs.json"))
        config = reset_config()
        assert config["timeout"] == 5.0
        assert config["deep_search_delay"] == 0.0
        assert config["github_token"] == "ghp_test"
        assert config["preferences_path"] == temp_dir / "prefs.json"

    async def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("GITSEEKER_TIMEOUT", "soon")
        before = get_config()
        with pytest.raises(ConfigurationError, match="GITSEEKER_TIMEOUT") as exc_info:
            reset_config()
        assert exc_info.value.category == ErrorCategory.CONFIGURATION
        assert get_config() == before
        monkeypatch.delenv("GITSEEKER_TIMEOUT")

    async def test_negative_delay(self, monkeypatch):
        monkeypatch.setenv("GITSEEKER_DEEP_SEARCH_DELAY", "-1")
        with pytest.raises(ConfigurationError):
            reset_config()
        monkeypatch.delenv("GITSEEKER_DEEP_SEARCH_DELAY")

    async def test_import_time_load_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("GITSEEKER_TIMEOUT", "soon")
        monkeypatch.setenv("GITSEEKER_DEEP_SEARCH_DELAY", "-1")
        with caplog.at_level(logging.WARNING, logger="gitseeker.core.config"):
            loaded = _load_from_env(strict=False)
        assert loaded["timeout"] == DEFAULT_TIMEOUT
        assert loaded["deep_search_delay"] == DEFAULT_DEEP_SEARCH_DELAY
        assert "GITSEEKER_TIMEOUT" in caplog.text


class TestConfigure:
    async def test_override(self):
        config = configure(timeout=3.0, user_agent="tests/1.0")
        assert config["timeout"] == 3.0
        assert get_config()["user_agent"] == "tests/1.0"

    async def test_unknown_key(self):
        with pytest.raises(InvalidParameterError):
            configure(colour="blue")

    async def test_negative_timeout(self):
        with pytest.raises(InvalidParameterError):
            configure(timeout=-0.5)

    async def test_preferences_path_coerced(self):
        config = configure(preferences_path="~/prefs.json")
        assert isinstance(config["preferences_path"], Path)
        assert "~" not in str(config["preferences_path"])

    async def test_reset_discards_overrides(self, monkeypatch):
        monkeypatch.delenv("GITSEEKER_USER_AGENT", raising=False)
        configure(user_agent="override")
        assert reset_config()["user_agent"] == DEFAULT_USER_AGENT


class TestConfigureLogging:
    async def test_calls_basic_config(self):
        with patch("gitseeker.core.config.logging.basicConfig") as basic_config:
            configure_logging(logging.DEBUG)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
