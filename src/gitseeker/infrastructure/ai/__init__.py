"""
AI Chat

- providers: Streaming chat-completion clients (local, OpenAI, Anthropic, OpenRouter)
- worker: Message-passing ChatWorker and the caller-side ChatSession
"""

from .providers import (
    PROVIDER_CONFIGS,
    AIConfig,
    AIProvider,
    ChatMessage,
    ChatProviderClient,
    ProviderConfig,
    extract_token,
    parse_sse_data,
    stream_chat,
    validate_api_key,
)
from .worker import (
    AbortRequest,
    ChatComplete,
    ChatEngine,
    ChatFailed,
    ChatRequest,
    ChatSession,
    ChatToken,
    ChatWorker,
    EngineStatus,
    InitComplete,
    InitFailed,
    InitProgress,
    InitRequest,
    ProviderChatEngine,
)

__all__ = [
    # Providers
    "PROVIDER_CONFIGS",
    "AIConfig",
    "AIProvider",
    "ChatMessage",
    "ChatProviderClient",
    "ProviderConfig",
    "extract_token",
    "parse_sse_data",
    "stream_chat",
    "validate_api_key",
    # Worker protocol
    "AbortRequest",
    "ChatComplete",
    "ChatFailed",
    "ChatRequest",
    "ChatToken",
    "InitComplete",
    "InitFailed",
    "InitProgress",
    "InitRequest",
    # Engines and session
    "ChatEngine",
    "ChatSession",
    "ChatWorker",
    "EngineStatus",
    "ProviderChatEngine",
]
