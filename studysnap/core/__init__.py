"""
Core Module - errors, provider selection and the fallback notice slot.

Components:
- errors: AIError taxonomy and display formatting
- modes: ModelPreference, provider selection, preference stores
- notice: First-writer-wins fallback notice cell
"""

from studysnap.core.errors import (
    AIError,
    APIError,
    GenerationFailed,
    InvalidResponse,
    MissingCredentialError,
    ParsingFailed,
    format_error,
)
from studysnap.core.modes import (
    ModelPreference,
    PreferenceStore,
    Provider,
    ProviderChoice,
    SettingsPreferenceStore,
    StaticPreferenceStore,
    select_provider,
)
from studysnap.core.notice import FallbackNoticeSlot

__all__ = [
    "AIError",
    "APIError",
    "GenerationFailed",
    "InvalidResponse",
    "MissingCredentialError",
    "ParsingFailed",
    "format_error",
    "ModelPreference",
    "PreferenceStore",
    "Provider",
    "ProviderChoice",
    "SettingsPreferenceStore",
    "StaticPreferenceStore",
    "select_provider",
    "FallbackNoticeSlot",
]
