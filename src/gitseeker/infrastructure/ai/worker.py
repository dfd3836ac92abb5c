"""
Chat Worker - message-passing actor around a chat engine.

The worker owns the engine and talks to its caller only through typed
messages:

    ChatSession ──InitRequest/ChatRequest/AbortRequest──► ChatWorker (queue)
         ▲                                                     │
         └──InitProgress/InitComplete/InitFailed/ChatToken/────┘
              ChatComplete/ChatFailed

ChatSession is the caller side. It tracks at most one pending chat,
identified by request id; responses for any other id are ignored. Abort
rejects the pending chat immediately with ChatAbortedError and tells the
worker to stop generating.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from gitseeker.core.exceptions import (
    ChatAbortedError,
    ChatBusyError,
    ChatError,
    ConfigurationError,
    EngineNotReadyError,
)

from .providers import AIConfig, ChatMessage, ChatProviderClient, TokenCallback

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


# =============================================================================
# Messages
# =============================================================================


@dataclass(frozen=True, slots=True)
class InitRequest:
    model: str


@dataclass(frozen=True, slots=True)
class ChatRequest:
    messages: tuple[ChatMessage, ...]
    request_id: str


@dataclass(frozen=True, slots=True)
class AbortRequest:
    pass


@dataclass(frozen=True, slots=True)
class InitProgress:
    progress: float
    text: str


@dataclass(frozen=True, slots=True)
class InitComplete:
    pass


@dataclass(frozen=True, slots=True)
class InitFailed:
    error: str


@dataclass(frozen=True, slots=True)
class ChatToken:
    token: str
    request_id: str


@dataclass(frozen=True, slots=True)
class ChatComplete:
    request_id: str


@dataclass(frozen=True, slots=True)
class ChatFailed:
    error: str
    request_id: str


WorkerRequest = InitRequest | ChatRequest | AbortRequest
WorkerResponse = InitProgress | InitComplete | InitFailed | ChatToken | ChatComplete | ChatFailed


# =============================================================================
# Engines
# =============================================================================


class ChatEngine(Protocol):
    """Text-generation backend driven by the worker."""

    async def load(self, model: str, on_progress: ProgressCallback) -> None: ...

    def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]: ...

    def interrupt(self) -> None: ...


class ProviderChatEngine:
    """ChatEngine backed by one of the HTTP chat providers."""

    def __init__(self, config: AIConfig, client: ChatProviderClient | None = None):
        self._config = config
        self._client = client or ChatProviderClient()

    @property
    def config(self) -> AIConfig:
        return self._config

    async def load(self, model: str, on_progress: ProgressCallback) -> None:
        provider_config = self._config.provider_config
        if provider_config.requires_api_key and not self._config.api_key:
            raise ConfigurationError(f"{provider_config.name} API key required")
        if model:
            self._config = AIConfig(provider=self._config.provider, model=model, api_key=self._config.api_key)
        on_progress(1.0, f"Using {provider_config.name} ({self._config.resolved_model})")

    def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        return self._client.stream(self._config, messages)

    def interrupt(self) -> None:
        # Remote generation stops when the worker cancels the streaming task.
        pass

    async def close(self) -> None:
        await self._client.close()


# =============================================================================
# Worker
# =============================================================================


class ChatWorker:
    """
    Actor that serializes requests to a ChatEngine.

    Requests are read from an asyncio.Queue. A chat runs as its own task so
    an AbortRequest can be handled while tokens are still streaming.
    """

    def __init__(self, engine: ChatEngine, emit: Callable[[WorkerResponse], None]):
        self._engine = engine
        self._emit = emit
        self._inbox: asyncio.Queue[WorkerRequest] = asyncio.Queue()
        self._runner: asyncio.Task[None] | None = None
        self._chat_task: asyncio.Task[None] | None = None
        self._ready = False

    @property
    def started(self) -> bool:
        return self._runner is not None

    def start(self) -> None:
        if self._runner is None:
            self._runner = asyncio.create_task(self._run())

    def post(self, request: WorkerRequest) -> None:
        self._inbox.put_nowait(request)

    async def stop(self) -> None:
        tasks = [t for t in (self._chat_task, self._runner) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._runner = None
        self._chat_task = None

    async def _run(self) -> None:
        while True:
            request = await self._inbox.get()
            if isinstance(request, InitRequest):
                await self._initialize(request.model)
            elif isinstance(request, ChatRequest):
                self._chat_task = asyncio.create_task(self._chat(request))
            elif isinstance(request, AbortRequest):
                self._interrupt()

    async def _initialize(self, model: str) -> None:
        try:
            await self._engine.load(model, lambda progress, text: self._emit(InitProgress(progress, text)))
        except Exception as e:
            logger.warning(f"Chat engine failed to load {model!r}: {e}")
            self._emit(InitFailed(str(e) or "Unknown error during initialization"))
            return
        self._ready = True
        self._emit(InitComplete())

    async def _chat(self, request: ChatRequest) -> None:
        if not self._ready:
            self._emit(ChatFailed("Engine not initialized", request.request_id))
            return
        try:
            async for token in self._engine.stream(request.messages):
                if token:
                    self._emit(ChatToken(token, request.request_id))
        except asyncio.CancelledError:
            self._emit(ChatFailed("Aborted", request.request_id))
            raise
        except Exception as e:
            logger.warning(f"Chat {request.request_id} failed: {e}")
            self._emit(ChatFailed(str(e) or "Unknown error during chat", request.request_id))
            return
        self._emit(ChatComplete(request.request_id))

    def _interrupt(self) -> None:
        self._engine.interrupt()
        if self._chat_task is not None and not self._chat_task.done():
            self._chat_task.cancel()


# =============================================================================
# Session
# =============================================================================


class EngineStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(slots=True)
class _PendingChat:
    request_id: str
    on_token: TokenCallback
    future: asyncio.Future[None]


class ChatSession:
    """
    Caller-side handle on a ChatWorker.

    Example:
        session = ChatSession(ProviderChatEngine(AIConfig("openai", api_key=key)))
        await session.initialize()
        await session.chat([ChatMessage("user", "hello")], print)
    """

    def __init__(self, engine: ChatEngine):
        self._worker = ChatWorker(engine, self._on_response)
        self._pending: _PendingChat | None = None
        self._init_future: asyncio.Future[None] | None = None
        self.status = EngineStatus.IDLE
        self.progress = 0.0
        self.progress_text = ""
        self.error: str | None = None

    @property
    def is_generating(self) -> bool:
        return self._pending is not None

    async def initialize(self, model: str = "") -> None:
        """
        Start the worker and load the engine. Calling again while loading or
        after a successful load waits for that load; calling after a failed
        load tries again.

        Raises:
            ChatError: The engine failed to load
        """
        if self._init_future is None or self.status == EngineStatus.ERROR:
            self._init_future = asyncio.get_running_loop().create_future()
            self.status = EngineStatus.LOADING
            self.error = None
            self._worker.start()
            self._worker.post(InitRequest(model))
        await asyncio.shield(self._init_future)

    async def chat(self, messages: Sequence[ChatMessage], on_token: TokenCallback) -> None:
        """
        Stream one completion, passing tokens to `on_token`.

        Raises:
            EngineNotReadyError: initialize() has not completed
            ChatBusyError: Another chat is in flight
            ChatAbortedError: abort() was called
            ChatError: The engine reported a failure
        """
        if not self._worker.started or self.status != EngineStatus.READY:
            raise EngineNotReadyError(self.status.value)
        if self._pending is not None:
            raise ChatBusyError()

        request_id = uuid.uuid4().hex
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._pending = _PendingChat(request_id, on_token, future)
        self._worker.post(ChatRequest(tuple(messages), request_id))
        try:
            await future
        except asyncio.CancelledError:
            self.abort()
            raise

    def abort(self) -> bool:
        """
        Cancel the pending chat, if any.

        The pending call fails with ChatAbortedError right away; nothing else
        is affected. Returns whether a chat was aborted.
        """
        pending = self._pending
        if pending is None:
            return False
        self._pending = None
        self._worker.post(AbortRequest())
        if not pending.future.done():
            pending.future.set_exception(ChatAbortedError(pending.request_id))
        logger.debug(f"Chat {pending.request_id} aborted")
        return True

    async def close(self) -> None:
        self.abort()
        await self._worker.stop()

    def _on_response(self, response: WorkerResponse) -> None:
        if isinstance(response, InitProgress):
            self.status = EngineStatus.LOADING
            self.progress = response.progress
            self.progress_text = response.text
        elif isinstance(response, InitComplete):
            self.status = EngineStatus.READY
            self.progress = 1.0
            self.progress_text = "Model loaded"
            self._settle_init(None)
        elif isinstance(response, InitFailed):
            self.status = EngineStatus.ERROR
            self.error = response.error
            self._settle_init(ChatError(response.error))
        elif isinstance(response, ChatToken):
            if self._pending is not None and self._pending.request_id == response.request_id:
                self._pending.on_token(response.token)
        elif isinstance(response, ChatComplete):
            pending = self._take_pending(response.request_id)
            if pending is not None:
                pending.future.set_result(None)
        elif isinstance(response, ChatFailed):
            pending = self._take_pending(response.request_id)
            if pending is not None:
                pending.future.set_exception(ChatError(response.error, request_id=response.request_id))

    def _take_pending(self, request_id: str) -> _PendingChat | None:
        pending = self._pending
        if pending is None or pending.request_id != request_id or pending.future.done():
            return None
        self._pending = None
        return pending

    def _settle_init(self, error: ChatError | None) -> None:
        if self._init_future is None or self._init_future.done():
            return
        if error is None:
            self._init_future.set_result(None)
        else:
            self._init_future.set_exception(error)
