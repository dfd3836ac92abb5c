"""
Local Storage

- preferences: Key-value preference store for the AI provider settings
"""

from .preferences import (
    API_KEY_PREFIX,
    MODEL_KEY,
    PROVIDER_KEY,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    api_key_name,
    clear_api_key,
    load_ai_config,
    save_ai_config,
)

__all__ = [
    "API_KEY_PREFIX",
    "MODEL_KEY",
    "PROVIDER_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "api_key_name",
    "clear_api_key",
    "load_ai_config",
    "save_ai_config",
]
