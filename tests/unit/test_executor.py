"""
Unit tests for the request executor.
"""

import asyncio
import random

import pytest
from httpx import Request, Response

from studysnap.core.errors import InvalidResponse, MissingCredentialError
from studysnap.core.modes import Provider, StaticPreferenceStore
from studysnap.generation.executor import RequestExecutor
from studysnap.generation.schemas import ChatTurn


class TestPacing:
    """Tests for the pre-request delay."""

    @pytest.mark.asyncio
    async def test_delay_within_bounds(self, store, hosted_client, local_model):
        """Delays are drawn from 500-1000 ms."""
        delays = []

        async def record_sleep(seconds):
            delays.append(seconds)

        executor = RequestExecutor(
            store, hosted_client, local_model, rng=random.Random(3), sleep=record_sleep
        )
        for _ in range(50):
            await executor.apply_pacing_delay()

        assert len(delays) == 50
        assert all(0.5 <= d <= 1.0 for d in delays)

    @pytest.mark.asyncio
    async def test_cancellation_skips_delay(self, store, hosted_client, local_model):
        """A cancelled wait returns instead of propagating."""

        async def cancelled_sleep(seconds):
            raise asyncio.CancelledError()

        executor = RequestExecutor(store, hosted_client, local_model, sleep=cancelled_sleep)

        await executor.apply_pacing_delay()


class TestHostedExecution:
    """Tests for hosted calls."""

    @pytest.mark.asyncio
    async def test_execute_sends_system_and_user(self, executor, hosted_client, completion_body, monkeypatch):
        """Single-shot prompts go out as system + user messages."""
        sent = {}

        async def mock_post(url, **kwargs):
            sent.update(kwargs)
            return Response(200, json=completion_body("ok"), request=Request("POST", url))

        monkeypatch.setattr(hosted_client.client, "post", mock_post)

        result = await executor.execute("SYSTEM", "USER")

        assert result == "ok"
        assert sent["json"]["model"] == "test/model"
        assert sent["json"]["messages"] == [
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "USER"},
        ]

    @pytest.mark.asyncio
    async def test_conversation_history_sent(self, executor, hosted_client, completion_body, monkeypatch):
        """Hosted conversations carry the whole history."""
        sent = {}

        async def mock_post(url, **kwargs):
            sent.update(kwargs)
            return Response(200, json=completion_body("ok"), request=Request("POST", url))

        monkeypatch.setattr(hosted_client.client, "post", mock_post)

        turns = [
            ChatTurn("user", "What is a cell?"),
            ChatTurn("assistant", "The unit of life."),
            ChatTurn("user", "And a tissue?"),
        ]
        await executor.execute_conversation("SYSTEM", turns)

        assert len(sent["json"]["messages"]) == 4
        assert sent["json"]["messages"][2] == {"role": "assistant", "content": "The unit of life."}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "   "])
    async def test_missing_credential_before_network(self, hosted_client, local_model, key, monkeypatch):
        """A blank key fails before any request or delay."""
        calls = []

        async def mock_post(url, **kwargs):
            calls.append(url)

        async def record_sleep(seconds):
            calls.append(seconds)

        monkeypatch.setattr(hosted_client.client, "post", mock_post)
        store = StaticPreferenceStore(hosted_api_key=key)
        executor = RequestExecutor(store, hosted_client, local_model, sleep=record_sleep)

        with pytest.raises(MissingCredentialError):
            await executor.execute("SYSTEM", "USER")

        assert calls == []


class TestLocalExecution:
    """Tests for local calls."""

    @pytest.mark.asyncio
    async def test_only_latest_user_turn_sent(self, store, hosted_client, make_local_model):
        """The local session gets the system prompt and the last user message."""
        local = make_local_model(available=True, reply="local answer")
        executor = RequestExecutor(store, hosted_client, local)
        turns = [
            ChatTurn("user", "first question"),
            ChatTurn("assistant", "first answer"),
            ChatTurn("user", "second question"),
        ]

        result = await executor.execute_conversation("SYSTEM", turns, Provider.LOCAL)

        assert result == "local answer"
        assert local.calls == [("SYSTEM", "second question")]

    @pytest.mark.asyncio
    async def test_trailing_assistant_turn_rejected(self, store, hosted_client, make_local_model):
        """A conversation not ending with the user is invalid for the local model."""
        local = make_local_model(available=True, reply="unused")
        executor = RequestExecutor(store, hosted_client, local)

        with pytest.raises(InvalidResponse):
            await executor.execute_conversation(
                "SYSTEM", [ChatTurn("user", "q"), ChatTurn("assistant", "a")], Provider.LOCAL
            )

        assert local.calls == []
