"""
Shared fixtures for the test suite.

Provides scripted model invokers (no network calls), the two test personas,
and a TestClient whose orchestrator runs against a scripted invoker.

Environment is set before anything under app/ is imported, because
app.database builds its engine from settings at import time.
"""

import asyncio
import os
import tempfile
import uuid

os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.gettempdir()}/toolbox-test-{uuid.uuid4().hex}.db"
)
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["DEBATE_MAX_TURNS"] = "5"
os.environ["DEBATE_TURN_DELAY_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient

from app.services.debate import (
    DebateOrchestrator,
    DebateSessionRegistry,
    InMemoryUpdateChannel,
    Persona,
)
from app.services.model_invoker import BaseModelInvoker, ModelInvocationError


# ---------------------------------------------------------------------------
# Scripted invokers
# ---------------------------------------------------------------------------

class ScriptedInvoker(BaseModelInvoker):
    """
    Deterministic invoker: reply n is "<model_id> reply <n>".

    fail_on_call raises ModelInvocationError on that (1-based) call;
    crash_on_call raises RuntimeError, which the orchestrator must treat as
    an internal fault.
    """

    def __init__(self, fail_on_call: int | None = None, crash_on_call: int | None = None):
        self.fail_on_call = fail_on_call
        self.crash_on_call = crash_on_call
        self.calls: list[dict] = []

    async def invoke(self, model_id, prompt, max_output_tokens, temperature):
        self.calls.append({
            "model_id": model_id,
            "prompt": prompt,
            "max_output_tokens": max_output_tokens,
            "temperature": temperature,
        })
        call_number = len(self.calls)
        # Yield to the loop like a real network call would
        await asyncio.sleep(0)

        if call_number == self.fail_on_call:
            raise ModelInvocationError("upstream returned 500")
        if call_number == self.crash_on_call:
            raise RuntimeError("boom")
        return f"{model_id} reply {call_number}"


class BlockingInvoker(BaseModelInvoker):
    """Never returns until released; used for cancellation and duplicate-trigger tests."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def invoke(self, model_id, prompt, max_output_tokens, temperature):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return "released"


# ---------------------------------------------------------------------------
# Debate fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def personas() -> tuple[Persona, Persona]:
    return (
        Persona("AI 1", "model-pro", "You argue FOR the topic. Topic: {topic}"),
        Persona("AI 2", "model-con", "You argue AGAINST the topic. Topic: {topic}"),
    )


@pytest.fixture
def registry() -> DebateSessionRegistry:
    return DebateSessionRegistry()


@pytest.fixture
def channel() -> InMemoryUpdateChannel:
    return InMemoryUpdateChannel()


@pytest.fixture
def invoker() -> ScriptedInvoker:
    return ScriptedInvoker()


@pytest.fixture
def make_orchestrator(registry, channel, personas):
    """Factory so each test can pick its own invoker."""

    def _make(invoker: BaseModelInvoker, **kwargs) -> DebateOrchestrator:
        return DebateOrchestrator(
            invoker=invoker,
            registry=registry,
            channel=channel,
            personas=personas,
            **kwargs,
        )

    return _make


def drain(subscription) -> list:
    """All events currently queued on a subscription."""
    events = []
    while subscription.pending():
        events.append(subscription.get_nowait())
    return events


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app_invoker() -> BaseModelInvoker:
    """Invoker used by the app's orchestrator; override in a test module to change it."""
    return ScriptedInvoker()


@pytest.fixture
def client(app_invoker, personas):
    """TestClient with lifespan started and a scripted orchestrator installed."""
    from app.main import app

    with TestClient(app) as test_client:
        app.state.orchestrator = DebateOrchestrator(
            invoker=app_invoker,
            registry=app.state.registry,
            channel=app.state.channel,
            personas=personas,
        )
        yield test_client
