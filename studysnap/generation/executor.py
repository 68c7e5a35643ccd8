"""
Request execution against the selected provider.

Hosted calls resolve the credential first (a blank key is a configuration
error raised before any network activity), wait a randomized pacing delay,
then post the conversation. Local calls open a session from the system
prompt and send only the latest user turn.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable

from loguru import logger

from studysnap.core.errors import InvalidResponse, MissingCredentialError
from studysnap.core.modes import PreferenceStore, Provider
from studysnap.generation.schemas import ChatTurn
from studysnap.integrations.hosted_client import HostedChatClient
from studysnap.integrations.local_model import LocalModelProvider

Sleep = Callable[[float], Awaitable[None]]


class RequestExecutor:
    """Runs (system, user) prompts or conversations on one provider."""

    def __init__(
        self,
        store: PreferenceStore,
        hosted_client: HostedChatClient,
        local_model: LocalModelProvider,
        pacing_min_ms: int = 500,
        pacing_max_ms: int = 1000,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize executor.

        Args:
            store: Preference and credential store
            hosted_client: Hosted chat-completions client
            local_model: Local model binding
            pacing_min_ms: Lower bound of the pre-call delay
            pacing_max_ms: Upper bound of the pre-call delay
            rng: Random source for the delay
            sleep: Awaitable sleep, replaceable in tests
        """
        self.store = store
        self.hosted_client = hosted_client
        self.local_model = local_model
        self.pacing_min_ms = pacing_min_ms
        self.pacing_max_ms = pacing_max_ms
        self.rng = rng or random.Random()
        self._sleep = sleep

    async def apply_pacing_delay(self) -> None:
        """Sleep 500-1000 ms (by default). Cancellation skips the delay only."""
        delay = self.rng.uniform(self.pacing_min_ms, self.pacing_max_ms) / 1000.0
        try:
            await self._sleep(delay)
        except asyncio.CancelledError:
            logger.debug("Pacing delay cancelled, proceeding without delay")

    def _hosted_api_key(self) -> str:
        key = self.store.get_hosted_api_key()
        if not key or not key.strip():
            raise MissingCredentialError(
                "missing credential: set HOSTED_API_KEY to use the hosted model"
            )
        return key.strip()

    async def run_hosted(self, system: str, turns: list[ChatTurn]) -> str:
        api_key = self._hosted_api_key()
        model = self.store.get_hosted_model_name()
        messages = [{"role": "system", "content": system}]
        messages.extend(turn.to_message() for turn in turns)

        await self.apply_pacing_delay()
        logger.info(f"Sending {len(turns)} message(s) to hosted model {model}")
        return await self.hosted_client.complete(api_key, model, messages)

    async def run_local(self, system: str, turns: list[ChatTurn]) -> str:
        # History is not re-ingested; the session only sees the latest user turn
        if not turns or turns[-1].role != "user":
            raise InvalidResponse("conversation must end with a user message")
        logger.info("Sending request to local model")
        return await self.local_model.respond(system, turns[-1].content)

    async def execute(self, system: str, user: str, provider: Provider = Provider.HOSTED) -> str:
        """Run a single-shot prompt pair."""
        return await self.execute_conversation(system, [ChatTurn(role="user", content=user)], provider)

    async def execute_conversation(
        self,
        system: str,
        turns: list[ChatTurn],
        provider: Provider = Provider.HOSTED,
    ) -> str:
        """Run a conversation on ``provider``. Errors propagate as AIError."""
        if provider == Provider.LOCAL:
            return await self.run_local(system, turns)
        return await self.run_hosted(system, turns)
