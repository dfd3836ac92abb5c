"""Tests for ChatWorker, ChatSession and ProviderChatEngine."""

import asyncio
from unittest.mock import MagicMock

import pytest

from gitseeker.core.exceptions import (
    ChatAbortedError,
    ChatBusyError,
    ChatError,
    ConfigurationError,
    EngineNotReadyError,
)
from gitseeker.infrastructure.ai.providers import AIConfig, ChatMessage
from gitseeker.infrastructure.ai.worker import (
    ChatComplete,
    ChatFailed,
    ChatRequest,
    ChatSession,
    ChatToken,
    ChatWorker,
    EngineStatus,
    InitComplete,
    InitProgress,
    InitRequest,
    ProviderChatEngine,
)

MESSAGES = [ChatMessage("user", "Hello")]


class FakeEngine:
    """Scripted engine: yields `tokens`, then optionally blocks or fails."""

    def __init__(self, tokens=("Hel", "lo"), load_error=None, stream_error=None, block=False):
        self.tokens = tokens
        self.load_error = load_error
        self.stream_error = stream_error
        self.block = block
        self.loaded_model = None
        self.received = None
        self.interrupted = asyncio.Event()

    async def load(self, model, on_progress):
        on_progress(0.5, "halfway")
        if self.load_error is not None:
            raise self.load_error
        self.loaded_model = model

    async def stream(self, messages):
        self.received = messages
        for token in self.tokens:
            yield token
        if self.block:
            await asyncio.Event().wait()
        if self.stream_error is not None:
            raise self.stream_error

    def interrupt(self):
        self.interrupted.set()


async def _until(predicate, rounds=100):
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
async def session(engine):
    s = ChatSession(engine)
    yield s
    await s.close()


@pytest.fixture
async def ready_session(session):
    await session.initialize("tiny-model")
    return session


# ============================================================
# Initialization
# ============================================================


class TestInitialize:
    async def test_success(self, session, engine):
        assert session.status == EngineStatus.IDLE
        await session.initialize("tiny-model")
        assert session.status == EngineStatus.READY
        assert session.progress == 1.0
        assert engine.loaded_model == "tiny-model"

    async def test_failure(self, session, engine):
        engine.load_error = RuntimeError("out of memory")
        with pytest.raises(ChatError, match="out of memory"):
            await session.initialize()
        assert session.status == EngineStatus.ERROR
        assert session.error == "out of memory"

    async def test_retry_after_failure(self, session, engine):
        engine.load_error = RuntimeError("flaky")
        with pytest.raises(ChatError):
            await session.initialize()
        engine.load_error = None
        await session.initialize()
        assert session.status == EngineStatus.READY
        assert session.error is None

    async def test_second_call_waits_for_first(self, session, engine):
        await asyncio.gather(session.initialize("a"), session.initialize("b"))
        assert engine.loaded_model == "a"

    async def test_progress_reported(self):
        emitted = []
        worker = ChatWorker(FakeEngine(), emitted.append)
        worker.start()
        worker.post(InitRequest("m"))
        await _until(lambda: any(isinstance(r, InitComplete) for r in emitted))
        await worker.stop()
        assert emitted[0] == InitProgress(0.5, "halfway")


# ============================================================
# Chat
# ============================================================


class TestChat:
    async def test_not_ready(self, session):
        with pytest.raises(EngineNotReadyError):
            await session.chat(MESSAGES, print)

    async def test_tokens_streamed(self, ready_session, engine):
        tokens = []
        await ready_session.chat(MESSAGES, tokens.append)
        assert tokens == ["Hel", "lo"]
        assert engine.received == tuple(MESSAGES)
        assert not ready_session.is_generating

    async def test_consecutive_chats(self, ready_session):
        first, second = [], []
        await ready_session.chat(MESSAGES, first.append)
        await ready_session.chat(MESSAGES, second.append)
        assert first == second == ["Hel", "lo"]

    async def test_engine_failure(self, ready_session, engine):
        engine.stream_error = RuntimeError("context too long")
        tokens = []
        with pytest.raises(ChatError, match="context too long") as exc:
            await ready_session.chat(MESSAGES, tokens.append)
        assert not isinstance(exc.value, ChatAbortedError)
        assert tokens == ["Hel", "lo"]
        assert not ready_session.is_generating

    async def test_busy(self, ready_session, engine):
        engine.block = True
        first_token = asyncio.Event()
        task = asyncio.create_task(ready_session.chat(MESSAGES, lambda t: first_token.set()))
        await asyncio.wait_for(first_token.wait(), timeout=1.0)

        assert ready_session.is_generating
        with pytest.raises(ChatBusyError):
            await ready_session.chat(MESSAGES, print)

        ready_session.abort()
        with pytest.raises(ChatAbortedError):
            await task


# ============================================================
# Abort
# ============================================================


class TestAbort:
    async def test_abort_rejects_pending(self, ready_session, engine):
        engine.block = True
        tokens = []
        first_token = asyncio.Event()

        def on_token(token):
            tokens.append(token)
            first_token.set()

        task = asyncio.create_task(ready_session.chat(MESSAGES, on_token))
        await asyncio.wait_for(first_token.wait(), timeout=1.0)

        assert ready_session.abort() is True
        assert not ready_session.is_generating
        with pytest.raises(ChatAbortedError) as exc:
            await task
        assert str(exc.value) == "Aborted"
        await asyncio.wait_for(engine.interrupted.wait(), timeout=1.0)

    async def test_abort_without_pending(self, ready_session):
        assert ready_session.abort() is False

    async def test_usable_after_abort(self, ready_session, engine):
        engine.block = True
        first_token = asyncio.Event()
        task = asyncio.create_task(ready_session.chat(MESSAGES, lambda t: first_token.set()))
        await asyncio.wait_for(first_token.wait(), timeout=1.0)
        ready_session.abort()
        with pytest.raises(ChatAbortedError):
            await task

        engine.block = False
        tokens = []
        await ready_session.chat(MESSAGES, tokens.append)
        assert tokens == ["Hel", "lo"]

    async def test_caller_cancellation_aborts(self, ready_session, engine):
        engine.block = True
        first_token = asyncio.Event()
        task = asyncio.create_task(ready_session.chat(MESSAGES, lambda t: first_token.set()))
        await asyncio.wait_for(first_token.wait(), timeout=1.0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not ready_session.is_generating
        await asyncio.wait_for(engine.interrupted.wait(), timeout=1.0)


# ============================================================
# Response routing
# ============================================================


class TestResponseRouting:
    async def test_stale_responses_ignored(self, ready_session, engine):
        engine.block = True
        tokens = []
        first_token = asyncio.Event()

        def on_token(token):
            tokens.append(token)
            first_token.set()

        task = asyncio.create_task(ready_session.chat(MESSAGES, on_token))
        await asyncio.wait_for(first_token.wait(), timeout=1.0)

        ready_session._on_response(ChatToken("stale", "old-request"))
        ready_session._on_response(ChatComplete("old-request"))
        ready_session._on_response(ChatFailed("boom", "old-request"))

        assert ready_session.is_generating
        assert "stale" not in tokens
        ready_session.abort()
        with pytest.raises(ChatAbortedError):
            await task

    async def test_responses_without_pending_ignored(self, ready_session):
        ready_session._on_response(ChatComplete("nobody"))
        ready_session._on_response(ChatFailed("Aborted", "nobody"))
        assert not ready_session.is_generating

    async def test_worker_refuses_chat_before_init(self):
        emitted = []
        worker = ChatWorker(FakeEngine(), emitted.append)
        worker.start()
        worker.post(ChatRequest(tuple(MESSAGES), "r1"))
        await _until(lambda: bool(emitted))
        await worker.stop()
        assert emitted == [ChatFailed("Engine not initialized", "r1")]


# ============================================================
# ProviderChatEngine
# ============================================================


class TestProviderChatEngine:
    async def test_load_requires_key(self):
        engine = ProviderChatEngine(AIConfig("openai"), client=MagicMock())
        with pytest.raises(ConfigurationError):
            await engine.load("", lambda p, t: None)

    async def test_session_reports_missing_key(self):
        session = ChatSession(ProviderChatEngine(AIConfig("anthropic"), client=MagicMock()))
        try:
            with pytest.raises(ChatError, match="API key required"):
                await session.initialize()
            assert session.status == EngineStatus.ERROR
        finally:
            await session.close()

    async def test_load_applies_model(self):
        progress = []
        engine = ProviderChatEngine(AIConfig("openai", api_key="k"), client=MagicMock())
        await engine.load("gpt-4", lambda p, t: progress.append(p))
        assert engine.config.resolved_model == "gpt-4"
        assert engine.config.api_key == "k"
        assert progress == [1.0]

    async def test_local_needs_no_key(self):
        engine = ProviderChatEngine(AIConfig(), client=MagicMock())
        await engine.load("", lambda p, t: None)
        assert engine.config.resolved_model == "llama3.2"

    async def test_stream_delegates(self):
        client = MagicMock()
        config = AIConfig("openai", api_key="k")
        engine = ProviderChatEngine(config, client=client)
        result = engine.stream(MESSAGES)
        client.stream.assert_called_once_with(config, MESSAGES)
        assert result is client.stream.return_value
