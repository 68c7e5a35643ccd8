"""
Model provider preferences and selection.

Two backends can serve a generation request:
1. Local - an on-device model (Ollama), free and private but optional
2. Hosted - an OpenAI-compatible chat-completions endpoint (BYOK)

``select_provider`` is a pure decision over the user preference and local
availability. The preference store is the narrow interface the pipeline uses
to read preferences and credentials.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from config import Settings
    from studysnap.integrations.local_model import LocalModelProvider


LOCAL_UNAVAILABLE_NOTICE = (
    "Local model requires a running Ollama server with the configured model. "
    "Falling back to hosted model."
)


class ModelPreference(str, Enum):
    """User preference for which backend serves requests."""

    AUTOMATIC = "automatic"  # Local when available, hosted otherwise
    HOSTED_ONLY = "hosted_only"


class Provider(str, Enum):
    """Backend that serves a single call."""

    LOCAL = "local"
    HOSTED = "hosted"


@dataclass(frozen=True)
class ProviderChoice:
    """Outcome of provider selection."""

    provider: Provider
    fallback_notice: str | None = None

    @property
    def degraded(self) -> bool:
        return self.fallback_notice is not None


def select_provider(preference: ModelPreference, local_available: bool) -> ProviderChoice:
    """
    Choose the backend for one call.

    Args:
        preference: User preference
        local_available: Whether the local model can serve requests right now

    Returns:
        ProviderChoice with a notice only when the call is degraded
    """
    if preference == ModelPreference.HOSTED_ONLY:
        return ProviderChoice(provider=Provider.HOSTED)
    if local_available:
        return ProviderChoice(provider=Provider.LOCAL)
    return ProviderChoice(provider=Provider.HOSTED, fallback_notice=LOCAL_UNAVAILABLE_NOTICE)


class PreferenceStore(Protocol):
    """Read-only view of preferences and credentials."""

    def get_preference(self) -> ModelPreference: ...

    def get_hosted_api_key(self) -> str: ...

    def get_hosted_model_name(self) -> str: ...

    async def is_local_model_available(self) -> bool: ...


class SettingsPreferenceStore:
    """PreferenceStore backed by application settings and a local model binding."""

    def __init__(self, settings: Settings, local_model: LocalModelProvider):
        self.settings = settings
        self.local_model = local_model

    def get_preference(self) -> ModelPreference:
        return ModelPreference(self.settings.model_preference)

    def get_hosted_api_key(self) -> str:
        return self.settings.hosted_api_key

    def get_hosted_model_name(self) -> str:
        return self.settings.hosted_model

    async def is_local_model_available(self) -> bool:
        if not self.settings.local_model_enabled:
            return False
        return await self.local_model.is_available()


@dataclass
class StaticPreferenceStore:
    """In-memory PreferenceStore, used by the CLI overrides and tests."""

    preference: ModelPreference = ModelPreference.AUTOMATIC
    hosted_api_key: str = ""
    hosted_model_name: str = "openai/gpt-oss-20b:free"
    local_available: bool = False

    def get_preference(self) -> ModelPreference:
        return self.preference

    def get_hosted_api_key(self) -> str:
        return self.hosted_api_key

    def get_hosted_model_name(self) -> str:
        return self.hosted_model_name

    async def is_local_model_available(self) -> bool:
        return self.local_available
