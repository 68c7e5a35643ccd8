"""
Local model capability.

``LocalModelProvider`` is what the pipeline needs from an on-device model:
an availability check and a single-turn ``respond``. ``OllamaLocalModel``
binds it to an Ollama server; ``UnavailableLocalModel`` is the stub used when
local inference is disabled or the ``local-ai`` extra is not installed.

Availability is checked asynchronously with a bounded timeout and cached for
``availability_ttl`` seconds, so a slow or dead server never stalls the event
loop and a transient failure does not disable the local model for good.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Protocol

from loguru import logger

from studysnap.core.errors import APIError, GenerationFailed, InvalidResponse

# Ollama ships in the optional local-ai extra
try:
    import ollama

    HAS_OLLAMA = True
except ImportError:
    HAS_OLLAMA = False
    logger.debug("ollama not installed - local model disabled")


class LocalModelProvider(Protocol):
    """On-device model session factory."""

    async def is_available(self) -> bool: ...

    async def respond(self, instructions: str, user_text: str) -> str: ...


class UnavailableLocalModel:
    """Local model that is never available."""

    def __init__(self, reason: str = "local model is not configured"):
        self.reason = reason

    async def is_available(self) -> bool:
        return False

    async def respond(self, instructions: str, user_text: str) -> str:
        raise APIError(self.reason)


class OllamaLocalModel:
    """LocalModelProvider backed by an Ollama server."""

    def __init__(
        self,
        model: str = "llama3.2",
        host: str = "http://localhost:11434",
        check_timeout: float = 2.0,
        request_timeout: float = 120.0,
        availability_ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the Ollama binding.

        Args:
            model: Ollama model name
            host: Ollama server URL
            check_timeout: Seconds allowed for the availability check
            request_timeout: Seconds allowed for a chat request
            availability_ttl: Seconds an availability result is reused
            clock: Monotonic time source, replaceable in tests
        """
        self.model = model
        self.host = host
        self.check_timeout = check_timeout
        self.request_timeout = request_timeout
        self.availability_ttl = availability_ttl
        self._clock = clock
        self._available: bool | None = None
        self._checked_at = 0.0
        self._client = None

    @property
    def client(self):
        """Lazy-load the async Ollama client."""
        if self._client is None:
            if not HAS_OLLAMA:
                raise APIError("ollama package is not installed (pip install studysnap[local-ai])")
            self._client = ollama.AsyncClient(host=self.host, timeout=self.request_timeout)
        return self._client

    def _listing_client(self):
        return ollama.AsyncClient(host=self.host, timeout=self.check_timeout)

    def _has_model(self, models) -> bool:
        for entry in models:
            name = entry.get("model") or entry.get("name") or ""
            if name == self.model or name.split(":")[0] == self.model:
                return True
        return False

    def _remember(self, available: bool) -> None:
        self._available = available
        self._checked_at = self._clock()

    def _cache_fresh(self) -> bool:
        return (
            self._available is not None
            and self._clock() - self._checked_at < self.availability_ttl
        )

    async def is_available(self) -> bool:
        """Whether the server is reachable and has the model pulled."""
        if self._cache_fresh():
            return self._available
        if not HAS_OLLAMA:
            self._remember(False)
            return False

        try:
            listing = await asyncio.wait_for(self._listing_client().list(), timeout=self.check_timeout)
            self._remember(self._has_model(listing["models"]))
        except Exception as e:
            logger.warning(f"Ollama at {self.host} not reachable: {e!r}")
            self._remember(False)

        if not self._available:
            logger.info(f"Local model '{self.model}' unavailable")
        return self._available

    def reset(self) -> None:
        """Forget the cached availability result."""
        self._available = None
        self._checked_at = 0.0

    async def respond(self, instructions: str, user_text: str) -> str:
        try:
            response = await self.client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": user_text},
                ],
                stream=False,
            )
        except APIError:
            raise
        except Exception as e:
            # Checked again once the cached result expires
            self._remember(False)
            raise GenerationFailed(f"local model request failed: {e}") from e

        content = response["message"]["content"]
        if content is None:
            raise InvalidResponse()

        logger.debug(f"Local model response:\n{content}\n--- end response ---")
        return content
