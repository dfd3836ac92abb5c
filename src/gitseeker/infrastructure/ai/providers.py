"""
Streaming Chat Providers

Token streaming from chat-completion APIs over server-sent events:

    Provider     Endpoint                                   Auth
    ──────────   ────────────────────────────────────────   ─────────────
    local        GITSEEKER_LOCAL_LLM_URL (OpenAI-compatible)  none
    openai       api.openai.com/v1/chat/completions         Bearer key
    anthropic    api.anthropic.com/v1/messages              x-api-key
    openrouter   openrouter.ai/api/v1/chat/completions      Bearer key

OpenAI-style streams carry tokens in `choices[0].delta.content` and end with
`data: [DONE]`. Anthropic streams carry them in `content_block_delta`
events and end with `message_stop`. Lines that are not valid JSON are
skipped.

Usage:
    config = AIConfig(provider="openai", api_key="sk-...")
    await stream_chat(config, [ChatMessage("user", "hi")], print)
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

import httpx
from typing_extensions import Self

from gitseeker.core.config import get_config
from gitseeker.core.exceptions import (
    APIError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
MAX_TOKENS = 2000
ANTHROPIC_VERSION = "2023-06-01"
APP_TITLE = "GitSeeker"

TokenCallback = Callable[[str], None]


class AIProvider(str, Enum):
    """Chat backends."""

    LOCAL = "local"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"

    @classmethod
    def parse(cls, value: AIProvider | str) -> AIProvider:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown provider: {value}") from None


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Static description of a provider."""

    name: str
    description: str
    requires_api_key: bool
    default_model: str
    models: tuple[str, ...] = ()
    chat_url: str | None = None


PROVIDER_CONFIGS: dict[AIProvider, ProviderConfig] = {
    AIProvider.LOCAL: ProviderConfig(
        name="Local",
        description="OpenAI-compatible server on this machine - free, private",
        requires_api_key=False,
        default_model="llama3.2",
        models=("llama3.2", "llama3.1:8b", "phi3.5", "qwen2.5:7b", "gemma2:2b", "mistral:7b"),
    ),
    AIProvider.OPENAI: ProviderConfig(
        name="OpenAI",
        description="GPT-4 and GPT-3.5 models - requires API key",
        requires_api_key=True,
        default_model="gpt-3.5-turbo",
        models=("gpt-4-turbo-preview", "gpt-4", "gpt-3.5-turbo", "gpt-3.5-turbo-16k"),
        chat_url="https://api.openai.com/v1/chat/completions",
    ),
    AIProvider.ANTHROPIC: ProviderConfig(
        name="Anthropic",
        description="Claude 3 models - requires API key",
        requires_api_key=True,
        default_model="claude-3-haiku-20240307",
        models=("claude-3-opus-20240229", "claude-3-sonnet-20240229", "claude-3-haiku-20240307"),
        chat_url="https://api.anthropic.com/v1/messages",
    ),
    AIProvider.OPENROUTER: ProviderConfig(
        name="OpenRouter",
        description="Access to 100+ models - requires API key",
        requires_api_key=True,
        default_model="meta-llama/llama-3-8b-instruct",
        models=(
            "anthropic/claude-3-opus",
            "openai/gpt-4-turbo-preview",
            "google/gemini-pro",
            "meta-llama/llama-3-70b-instruct",
            "mistralai/mixtral-8x7b-instruct",
            "meta-llama/llama-3-8b-instruct",
        ),
        chat_url="https://openrouter.ai/api/v1/chat/completions",
    ),
}

# Endpoints used only to check a key
OPENAI_MODELS_URL = "https://api.openai.com/v1/models"
OPENROUTER_MODELS_URL = "https://openrouter.ai/api/v1/models"


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class AIConfig:
    """Selected provider, model and key. An empty model means the provider default."""

    provider: AIProvider = AIProvider.LOCAL
    model: str | None = None
    api_key: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider", AIProvider.parse(self.provider))

    @property
    def provider_config(self) -> ProviderConfig:
        return PROVIDER_CONFIGS[self.provider]

    @property
    def resolved_model(self) -> str:
        return self.model or self.provider_config.default_model


# =============================================================================
# SSE parsing
# =============================================================================


def parse_sse_data(line: str) -> str | None:
    """Return the payload of a `data:` line, or None for any other line."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    return line[len("data:") :].strip()


def extract_token(provider: AIProvider, payload: dict[str, Any]) -> str:
    """Pull the text delta out of one decoded stream event."""
    if provider == AIProvider.ANTHROPIC:
        if payload.get("type") != "content_block_delta":
            return ""
        delta = payload.get("delta") or {}
        return (delta.get("text") or "") if isinstance(delta, dict) else ""

    choices = payload.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta") or {}
    return (delta.get("content") or "") if isinstance(delta, dict) else ""


def _is_end_of_stream(data: str, payload: dict[str, Any] | None = None) -> bool:
    if data == "[DONE]":
        return True
    return payload is not None and payload.get("type") == "message_stop"


def _error_message(response: httpx.Response, provider_name: str) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return f"{provider_name} API error (HTTP {response.status_code})"


# =============================================================================
# Client
# =============================================================================


class ChatProviderClient:
    """
    HTTP client for the chat providers.

    Args:
        timeout: Request timeout in seconds (default: configured timeout)
        client: Pre-built httpx client, mainly for tests
    """

    def __init__(self, timeout: float | None = None, client: httpx.AsyncClient | None = None):
        settings = get_config()
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout if timeout is not None else settings["timeout"]),
            headers={"User-Agent": settings["user_agent"]},
        )

    def build_request(
        self,
        config: AIConfig,
        messages: Sequence[ChatMessage],
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """
        Return (url, headers, json body) for a streaming chat call.

        Raises:
            ConfigurationError: A provider that needs a key has none
        """
        provider_config = config.provider_config
        if provider_config.requires_api_key and not config.api_key:
            raise ConfigurationError(f"{provider_config.name} API key required")

        headers = {"Content-Type": "application/json"}
        body: dict[str, Any] = {
            "model": config.resolved_model,
            "stream": True,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

        if config.provider == AIProvider.ANTHROPIC:
            system = next((m.content for m in messages if m.role == "system"), None)
            body["messages"] = [m.to_dict() for m in messages if m.role != "system"]
            if system is not None:
                body["system"] = system
            headers["x-api-key"] = config.api_key or ""
            headers["anthropic-version"] = ANTHROPIC_VERSION
            return provider_config.chat_url or "", headers, body

        body["messages"] = [m.to_dict() for m in messages]
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        if config.provider == AIProvider.OPENROUTER:
            headers["X-Title"] = APP_TITLE
        url = provider_config.chat_url or get_config()["local_llm_url"]
        return url, headers, body

    async def stream(self, config: AIConfig, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """
        Yield text tokens as the provider produces them.

        Raises:
            ConfigurationError: Missing API key
            RateLimitError: HTTP 429
            ServiceUnavailableError: HTTP 5xx
            APIError: Any other error status
            NetworkError: Transport failure
        """
        url, headers, body = self.build_request(config, messages)
        provider_name = config.provider_config.name
        logger.debug(f"Streaming chat from {provider_name} ({config.resolved_model})")

        try:
            async with self._client.stream("POST", url, headers=headers, json=body) as response:
                if response.status_code >= 400:
                    await response.aread()
                    if response.status_code == 429:
                        raise RateLimitError(service=provider_name)
                    if response.status_code >= 500:
                        raise ServiceUnavailableError(_error_message(response, provider_name), service=provider_name)
                    raise APIError(_error_message(response, provider_name))

                async for line in response.aiter_lines():
                    data = parse_sse_data(line)
                    if not data:
                        continue
                    if _is_end_of_stream(data):
                        return
                    try:
                        payload = json.loads(data)
                    except ValueError:
                        logger.debug(f"Skipping malformed stream line from {provider_name}")
                        continue
                    if not isinstance(payload, dict):
                        continue
                    if _is_end_of_stream(data, payload):
                        return
                    token = extract_token(config.provider, payload)
                    if token:
                        yield token
        except httpx.RequestError as e:
            raise NetworkError(f"{provider_name}: {e}") from e

    async def validate_api_key(self, provider: AIProvider | str, api_key: str) -> bool:
        """Check a key against the provider. Never raises."""
        try:
            provider = AIProvider.parse(provider)
            if provider == AIProvider.OPENAI:
                response = await self._client.get(OPENAI_MODELS_URL, headers={"Authorization": f"Bearer {api_key}"})
                return response.is_success
            if provider == AIProvider.ANTHROPIC:
                response = await self._client.post(
                    PROVIDER_CONFIGS[AIProvider.ANTHROPIC].chat_url or "",
                    headers={
                        "x-api-key": api_key,
                        "anthropic-version": ANTHROPIC_VERSION,
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": PROVIDER_CONFIGS[AIProvider.ANTHROPIC].default_model,
                        "messages": [{"role": "user", "content": "test"}],
                        "max_tokens": 1,
                    },
                )
                # 400 means the key was accepted and only the request was rejected
                return response.is_success or response.status_code == 400
            if provider == AIProvider.OPENROUTER:
                response = await self._client.get(
                    OPENROUTER_MODELS_URL, headers={"Authorization": f"Bearer {api_key}"}
                )
                return response.is_success
            return False
        except (httpx.HTTPError, ConfigurationError) as e:
            logger.warning(f"API key validation failed for {provider}: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


async def stream_chat(
    config: AIConfig,
    messages: Sequence[ChatMessage],
    on_token: TokenCallback,
    *,
    client: ChatProviderClient | None = None,
) -> None:
    """Stream a chat completion, passing every token to `on_token`."""
    if client is not None:
        async for token in client.stream(config, messages):
            on_token(token)
        return
    async with ChatProviderClient() as owned:
        async for token in owned.stream(config, messages):
            on_token(token)


async def validate_api_key(
    provider: AIProvider | str,
    api_key: str,
    *,
    client: ChatProviderClient | None = None,
) -> bool:
    """Check an API key. Never raises."""
    if client is not None:
        return await client.validate_api_key(provider, api_key)
    async with ChatProviderClient() as owned:
        return await owned.validate_api_key(provider, api_key)
