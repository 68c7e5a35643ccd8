"""
Hosted chat-completions client.

Posts ``{model, messages: [{role, content}]}`` to an OpenAI-compatible
endpoint with bearer auth and a product-identifying header, and reads
``choices[0].message.content`` from the reply. Every failure is classified
into the AIError taxonomy:

- transport failure or timeout -> GenerationFailed
- non-2xx status -> APIError("status <code>")
- undecodable envelope or missing content -> InvalidResponse
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from studysnap.core.errors import APIError, GenerationFailed, InvalidResponse

DEFAULT_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"


class HostedChatClient:
    """HTTP client for the hosted chat-completions endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        app_title: str = "StudySnap",
        timeout_seconds: float = 60.0,
    ):
        """
        Initialize hosted client.

        Args:
            endpoint: Full chat-completions URL
            app_title: Value of the X-Title header
            timeout_seconds: Request timeout
        """
        self.endpoint = endpoint
        self.app_title = app_title
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> HostedChatClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": self.app_title,
        }

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Provider error message from an error body, if it carries one."""
        try:
            error = response.json().get("error")
        except (ValueError, AttributeError):
            return ""
        if isinstance(error, dict):
            message = error.get("message")
            code = error.get("code")
            if message and code:
                return f"{message} (code {code})"
            return message or ""
        if isinstance(error, str):
            return error
        return ""

    async def complete(self, api_key: str, model: str, messages: list[dict[str, str]]) -> str:
        """
        Send a chat completion and return the message content.

        Args:
            api_key: Bearer credential
            model: Model identifier
            messages: Role/content messages, system first

        Returns:
            Assistant message content

        Raises:
            GenerationFailed: On transport failure
            APIError: On non-2xx status
            InvalidResponse: On undecodable or content-less reply
        """
        try:
            response = await self.client.post(
                self.endpoint,
                json={"model": model, "messages": messages},
                headers=self._headers(api_key),
            )
        except httpx.TimeoutException as e:
            logger.error(f"Hosted model timeout: {e}")
            raise GenerationFailed(f"request timed out: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"Hosted model request error: {e}")
            raise GenerationFailed(f"request error: {e}") from e

        if not response.is_success:
            detail = self._error_detail(response)
            logger.error(f"Hosted model error {response.status_code}: {response.text[:500]}")
            message = f"status {response.status_code}"
            if detail:
                message = f"{message} - {detail}"
            raise APIError(message)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Hosted model returned an undecodable envelope: {e}")
            raise InvalidResponse() from e

        if not isinstance(content, str):
            raise InvalidResponse()

        logger.debug(f"Hosted model response:\n{content}\n--- end response ---")
        return content
