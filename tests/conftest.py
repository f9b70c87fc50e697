"""Shared fixtures for pytest-based integration and unit tests."""
from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Global environment overrides for predictable test behaviour
# ---------------------------------------------------------------------------

# Settings are read at import time, so these must be set before any
# everything_converter module is imported by the test modules.
os.environ.setdefault("OPENROUTER_API_KEY", "unit-test-key")
os.environ.setdefault("OPEN_EXCHANGE_RATES_API_KEY", "unit-test-fx-key")
os.environ.setdefault("ENABLE_METRICS", "true")


@pytest.fixture(autouse=True)
def _offline_token_counting(monkeypatch):
    """Keep tiktoken from downloading encodings; counts fall back to chars/4."""
    from everything_converter.services.token_counter import TokenCounter

    def _no_encoder(self, model):
        raise RuntimeError("token encodings disabled in tests")

    monkeypatch.setattr(TokenCounter, "_get_encoder", _no_encoder)


# ---------------------------------------------------------------------------
# Core FastAPI app fixture
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """Return the FastAPI application instance."""
    from everything_converter.main import app as fastapi_app

    return fastapi_app


@pytest.fixture(scope="session")
def client(app) -> Iterable[TestClient]:
    """Provide a shared TestClient for API integration tests."""
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# OpenAI-shaped stubs
# ---------------------------------------------------------------------------


def make_completion(
    content: Optional[str],
    model: str = "stub-model",
    prompt_tokens: int = 120,
    completion_tokens: int = 30,
    with_usage: bool = True,
):
    """Build an object shaped like an OpenAI ChatCompletion."""
    usage = None
    if with_usage:
        usage = SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
    return SimpleNamespace(
        model=model,
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
    )


class StubStream:
    """Async chunk stream; an exception in the chunk list is raised at that point."""

    def __init__(self, chunks: Iterable[Any]):
        self.chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=chunk))])

    async def close(self):
        self.closed = True


class StubCompletions:
    """Replays queued replies for ``chat.completions.create`` and records calls.

    A reply may be a string (wrapped into a completion), a prepared completion
    object, a list of stream chunks, or an exception to raise.
    """

    def __init__(self, replies: Iterable[Any]):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []
        self.streams: List[StubStream] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.replies:
            raise AssertionError("unexpected completion call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if kwargs.get("stream"):
            stream = StubStream(reply)
            self.streams.append(stream)
            return stream
        if isinstance(reply, str):
            return make_completion(reply, model=kwargs["model"])
        return reply


class StubOpenAI:
    def __init__(self, replies: Iterable[Any]):
        self.completions = StubCompletions(replies)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def completion():
    """Factory for OpenAI-shaped completion objects."""
    return make_completion


@pytest.fixture
def stub_openai() -> Callable[..., StubOpenAI]:
    """Factory: ``stub_openai(reply1, reply2, ...)``."""
    return lambda *replies: StubOpenAI(replies)


@pytest.fixture
def completion_client_factory(stub_openai):
    """Build a CompletionClient over a stub upstream with queued replies."""
    from everything_converter.services.completion_client import CompletionClient

    def _factory(*replies, default_model: str = "openai/gpt-5"):
        return CompletionClient(
            default_model=default_model,
            default_temperature=0.7,
            client=stub_openai(*replies),
        )

    return _factory


# ---------------------------------------------------------------------------
# Exchange-rate fixtures
# ---------------------------------------------------------------------------

STUB_RATES = {"base": "USD", "rates": {"EUR": 0.9, "GBP": 0.8, "JPY": 150.0}}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rates_upstream():
    """Mutable upstream for the rates provider, served through httpx.MockTransport."""
    state = SimpleNamespace(status_code=200, payload=STUB_RATES, error=None, requests=[])

    def handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        if state.error is not None:
            raise state.error
        return httpx.Response(state.status_code, json=state.payload)

    state.transport = httpx.MockTransport(handler)
    return state


@pytest.fixture
def fx_service(rates_upstream, fake_clock):
    """FXService wired to the mock upstream and a controllable clock."""
    from everything_converter.services.fx_service import FXService

    return FXService(
        api_key="test-key",
        url="https://rates.test/api/latest.json",
        transport=rates_upstream.transport,
        clock=fake_clock,
        wall_clock=lambda: 1_700_000_000.0,
    )


@pytest.fixture
def pipeline_factory(completion_client_factory, fx_service):
    """Real ConversionPipeline over stub LLM replies and the mock rate provider."""
    from everything_converter.services.conversion_pipeline import ConversionPipeline

    def _factory(*replies):
        return ConversionPipeline(completion_client_factory(*replies), fx_service)

    return _factory


# ---------------------------------------------------------------------------
# Stub service fixtures used to isolate routers from upstreams
# ---------------------------------------------------------------------------


@pytest.fixture
def patch_pipeline(monkeypatch):
    """Install a pipeline as the singleton seen by every router."""

    def _install(pipeline):
        getter = lambda: pipeline  # noqa: E731
        monkeypatch.setattr("everything_converter.routers.chat_routes.get_conversion_pipeline", getter)
        monkeypatch.setattr("everything_converter.routers.convert_routes.get_conversion_pipeline", getter)
        return pipeline

    return _install


@pytest.fixture
def dummy_fx_service(monkeypatch, fx_service):
    """Route /api/exchange-rates to the mock-backed FXService."""
    monkeypatch.setattr("everything_converter.routers.exchange_routes.get_fx_service", lambda: fx_service)
    return fx_service


@pytest.fixture
def dummy_suggestion_service(monkeypatch):
    """Patch the suggestion service singleton with a deterministic stub."""
    from everything_converter.models.conversion_schemas import ConversionPair

    class _DummySuggestionService:
        def __init__(self):
            self.calls: List[Any] = []

        async def suggest(self, from_text: str) -> List[str]:
            self.calls.append(("suggest", from_text))
            return ["meters", "football fields", "other units"]

        async def surprise(self, count: int = 2, selection=None):
            self.calls.append(("surprise", count, selection))
            pairs = [
                ConversionPair(from_text="1 blue whale", to_text="elephants"),
                ConversionPair(from_text="a marathon", to_text="bananas"),
            ]
            return pairs[:count]

    service = _DummySuggestionService()
    monkeypatch.setattr(
        "everything_converter.routers.suggestion_routes.get_suggestion_service", lambda: service
    )
    return service


@pytest.fixture
def dummy_benchmark_service(monkeypatch):
    """Patch the benchmark service with one backed by a scripted pipeline."""
    from everything_converter.services.benchmark_service import BenchmarkService

    holder = SimpleNamespace(service=None)

    def _install(pipeline):
        holder.service = BenchmarkService(pipeline)
        monkeypatch.setattr(
            "everything_converter.routers.convert_routes.get_benchmark_service", lambda: holder.service
        )
        return holder.service

    return _install
