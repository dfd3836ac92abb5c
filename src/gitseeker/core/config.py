"""
Process-wide settings.

Values are read from environment variables once at import time and can be
overridden at runtime with configure(). Source clients read the settings
when they are constructed.

Usage:
    from gitseeker.core.config import configure, get_config

    configure(timeout=10.0, github_token="ghp_...")
    timeout = get_config()["timeout"]
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError, ErrorContext, InvalidParameterError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "gitseeker/1.0"
DEFAULT_DEEP_SEARCH_DELAY = 0.1
DEFAULT_PREFERENCES_PATH = Path.home() / ".gitseeker" / "preferences.json"
DEFAULT_LOCAL_LLM_URL = "http://localhost:11434/v1/chat/completions"


def _float_env(name: str, default: float, strict: bool) -> float:
    """
    Read a non-negative duration from the environment.

    A bad value raises ConfigurationError when `strict`, otherwise it is
    logged and the default is used.
    """
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value: float | None = float(raw)
    except ValueError:
        value = None
    if value is not None and value >= 0:
        return value
    if strict:
        raise ConfigurationError(
            f"{name} must be a non-negative number of seconds, got {raw!r}",
            context=ErrorContext(operation="load_config", input_value=raw, suggestion=f"Unset {name} or fix its value"),
        )
    logger.warning(f"Ignoring {name}={raw!r}: expected a non-negative number of seconds, using {default}")
    return default


def _load_from_env(strict: bool = True) -> dict[str, Any]:
    return {
        "timeout": _float_env("GITSEEKER_TIMEOUT", DEFAULT_TIMEOUT, strict),
        "user_agent": os.environ.get("GITSEEKER_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
        "deep_search_delay": _float_env("GITSEEKER_DEEP_SEARCH_DELAY", DEFAULT_DEEP_SEARCH_DELAY, strict),
        "github_token": os.environ.get("GITHUB_TOKEN", "").strip() or None,
        "gitlab_token": os.environ.get("GITLAB_TOKEN", "").strip() or None,
        "preferences_path": Path(
            os.environ.get("GITSEEKER_PREFERENCES_PATH", "").strip() or DEFAULT_PREFERENCES_PATH
        ).expanduser(),
        "local_llm_url": os.environ.get("GITSEEKER_LOCAL_LLM_URL", "").strip() or DEFAULT_LOCAL_LLM_URL,
    }


# Import never fails on a bad environment; reset_config() reports it.
_config: dict[str, Any] = _load_from_env(strict=False)


def get_config() -> dict[str, Any]:
    """Return a copy of the current settings."""
    return dict(_config)


def configure(**overrides: Any) -> dict[str, Any]:
    """
    Override settings for the rest of the process.

    Raises:
        InvalidParameterError: Unknown setting name or negative duration.
    """
    for key, value in overrides.items():
        if key not in _config:
            raise InvalidParameterError(key, value, f"one of {sorted(_config)}")
        if key in ("timeout", "deep_search_delay") and (value is None or float(value) < 0):
            raise InvalidParameterError(key, value, "a non-negative number of seconds")
        if key == "preferences_path" and value is not None:
            value = Path(value).expanduser()
        _config[key] = value
    logger.debug(f"Configuration updated: {sorted(overrides)}")
    return get_config()


def reset_config() -> dict[str, Any]:
    """
    Reload settings from the environment, discarding overrides.

    Raises:
        ConfigurationError: A duration variable is not a non-negative number.
            The current settings are left unchanged.
    """
    fresh = _load_from_env()
    _config.clear()
    _config.update(fresh)
    return get_config()


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging for scripts embedding the library."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
