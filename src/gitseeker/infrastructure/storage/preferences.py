"""
Preference Store - AI provider selection and API keys.

Keys:
    gitseeker_ai_provider             selected provider
    gitseeker_ai_model                selected model (optional)
    gitseeker_api_key_<provider>      API key per provider

API keys are stored in plain text; the JSON file is created with owner-only
permissions where the platform supports it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from gitseeker.core.config import get_config
from gitseeker.core.exceptions import ConfigurationError
from gitseeker.infrastructure.ai.providers import AIConfig, AIProvider

logger = logging.getLogger(__name__)

PROVIDER_KEY = "gitseeker_ai_provider"
MODEL_KEY = "gitseeker_ai_model"
API_KEY_PREFIX = "gitseeker_api_key_"

DEFAULT_PROVIDER = AIProvider.LOCAL


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def as_dict(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore(MemoryStore):
    """
    Store persisted as one JSON object.

    Loaded once at construction and rewritten on every change. An unreadable
    file is logged and treated as empty.
    """

    def __init__(self, path: str | Path | None = None):
        super().__init__()
        self.path = Path(path).expanduser() if path else get_config()["preferences_path"]
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load preferences from {self.path}: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences file {self.path}: not a JSON object")
            return
        self._data = {str(k): str(v) for k, v in data.items() if v is not None}
        logger.debug(f"Loaded {len(self._data)} preferences from {self.path}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)
        try:
            os.chmod(self.path, 0o600)
        except OSError as e:
            logger.debug(f"Could not restrict permissions on {self.path}: {e}")

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._save()

    def delete(self, key: str) -> None:
        if self.get(key) is None:
            return
        super().delete(key)
        self._save()


def api_key_name(provider: AIProvider | str) -> str:
    return f"{API_KEY_PREFIX}{AIProvider.parse(provider).value}"


def save_ai_config(store: KeyValueStore, config: AIConfig) -> None:
    """Persist provider, and model and key when present."""
    store.set(PROVIDER_KEY, config.provider.value)
    if config.model:
        store.set(MODEL_KEY, config.model)
    if config.api_key:
        store.set(api_key_name(config.provider), config.api_key)


def load_ai_config(store: KeyValueStore) -> AIConfig:
    """
    Read the saved configuration.

    Falls back to the local provider when nothing (or an unknown provider)
    is stored. The API key is the one saved for the selected provider.
    """
    raw_provider = store.get(PROVIDER_KEY)
    provider = DEFAULT_PROVIDER
    if raw_provider:
        try:
            provider = AIProvider.parse(raw_provider)
        except ConfigurationError:
            logger.warning(f"Unknown saved provider {raw_provider!r}, using {DEFAULT_PROVIDER.value}")
    return AIConfig(
        provider=provider,
        model=store.get(MODEL_KEY) or None,
        api_key=store.get(api_key_name(provider)) or None,
    )


def clear_api_key(store: KeyValueStore, provider: AIProvider | str) -> None:
    store.delete(api_key_name(provider))
