"""
Unit tests for the local model bindings.
"""

import asyncio
import time

import pytest

from studysnap.core.errors import APIError, GenerationFailed, InvalidResponse
from studysnap.integrations import local_model as local_model_module
from studysnap.integrations.local_model import OllamaLocalModel, UnavailableLocalModel


class FakeOllamaClient:
    """Stand-in for ollama.AsyncClient."""

    def __init__(self, response=None, error=None, models=None, list_delay=0.0):
        self.response = response
        self.error = error
        self.models = models or []
        self.list_delay = list_delay
        self.kwargs = None
        self.list_calls = 0

    async def chat(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response

    async def list(self):
        self.list_calls += 1
        await asyncio.sleep(self.list_delay)
        return {"models": self.models}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def fake_server(monkeypatch):
    """Route availability checks to a fake client."""

    def _install(model, client):
        monkeypatch.setattr(local_model_module, "HAS_OLLAMA", True)
        monkeypatch.setattr(model, "_listing_client", lambda: client)
        return client

    return _install


class TestUnavailableLocalModel:
    """Tests for the disabled binding."""

    @pytest.mark.asyncio
    async def test_never_available(self):
        """Reports unavailable and refuses requests."""
        model = UnavailableLocalModel("disabled for tests")

        assert await model.is_available() is False
        with pytest.raises(APIError, match="disabled for tests"):
            await model.respond("system", "user")


class TestOllamaAvailability:
    """Tests for the availability check."""

    @pytest.mark.parametrize(
        "listing,expected",
        [
            ([{"model": "llama3.2:latest"}], True),
            ([{"name": "llama3.2"}], True),
            ([{"model": "mistral:7b"}], False),
            ([], False),
        ],
    )
    def test_has_model(self, listing, expected):
        """Model names match with or without a tag."""
        assert OllamaLocalModel("llama3.2")._has_model(listing) is expected

    @pytest.mark.asyncio
    async def test_server_lists_model(self, fake_server):
        """A server listing the model reports available."""
        model = OllamaLocalModel("llama3.2")
        fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2:latest"}]))

        assert await model.is_available() is True

    @pytest.mark.asyncio
    async def test_slow_server_does_not_block_loop(self, fake_server):
        """Other tasks keep running while the server is slow to answer."""
        model = OllamaLocalModel("llama3.2", check_timeout=2.0)
        fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2"}], list_delay=0.5))
        gaps = []

        async def ticker():
            last = time.monotonic()
            for _ in range(8):
                await asyncio.sleep(0.05)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        available, _ = await asyncio.gather(model.is_available(), ticker())

        assert available is True
        assert max(gaps) < 0.3

    @pytest.mark.asyncio
    async def test_unresponsive_server_times_out(self, fake_server):
        """A hung server is reported unavailable after the check timeout."""
        model = OllamaLocalModel("llama3.2", check_timeout=0.05)
        fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2"}], list_delay=10.0))

        started = time.monotonic()
        available = await model.is_available()

        assert available is False
        assert time.monotonic() - started < 2.0

    @pytest.mark.asyncio
    async def test_result_cached_within_ttl(self, fake_server):
        """A fresh result is reused without asking the server again."""
        clock = FakeClock()
        model = OllamaLocalModel("llama3.2", availability_ttl=30.0, clock=clock)
        client = fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2"}]))

        await model.is_available()
        clock.now += 10
        await model.is_available()

        assert client.list_calls == 1

    @pytest.mark.asyncio
    async def test_failed_request_recovers_after_ttl(self, fake_server):
        """A transient chat failure disables the model only until the cache expires."""
        clock = FakeClock()
        model = OllamaLocalModel("llama3.2", availability_ttl=30.0, clock=clock)
        client = fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2"}]))
        model._client = FakeOllamaClient(error=ConnectionError("refused"))

        assert await model.is_available() is True
        with pytest.raises(GenerationFailed):
            await model.respond("system", "user")
        assert await model.is_available() is False

        clock.now += 31
        assert await model.is_available() is True
        assert client.list_calls == 2

    @pytest.mark.asyncio
    async def test_reset_forces_recheck(self, fake_server):
        """reset() discards the cached result."""
        model = OllamaLocalModel("llama3.2")
        client = fake_server(model, FakeOllamaClient(models=[{"model": "llama3.2"}]))

        await model.is_available()
        model.reset()
        await model.is_available()

        assert client.list_calls == 2


class TestOllamaRespond:
    """Tests for local chat requests."""

    @pytest.mark.asyncio
    async def test_respond_sends_single_turn(self):
        """System instructions and one user message are sent."""
        model = OllamaLocalModel("llama3.2")
        model._client = FakeOllamaClient(response={"message": {"content": "local reply"}})

        result = await model.respond("Be brief.", "What is DNA?")

        assert result == "local reply"
        assert model._client.kwargs["model"] == "llama3.2"
        assert model._client.kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "What is DNA?"},
        ]

    @pytest.mark.asyncio
    async def test_respond_without_content(self):
        """A reply without content is invalid."""
        model = OllamaLocalModel()
        model._client = FakeOllamaClient(response={"message": {"content": None}})

        with pytest.raises(InvalidResponse):
            await model.respond("system", "user")
