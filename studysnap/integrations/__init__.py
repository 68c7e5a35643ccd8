"""Model provider bindings: hosted chat-completions over httpx, local Ollama."""

from studysnap.integrations.hosted_client import HostedChatClient
from studysnap.integrations.local_model import (
    LocalModelProvider,
    OllamaLocalModel,
    UnavailableLocalModel,
)

__all__ = [
    "HostedChatClient",
    "LocalModelProvider",
    "OllamaLocalModel",
    "UnavailableLocalModel",
]
