"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from studysnap.core.errors import GenerationFailed  # noqa: E402
from studysnap.core.modes import ModelPreference, StaticPreferenceStore  # noqa: E402
from studysnap.core.notice import FallbackNoticeSlot  # noqa: E402
from studysnap.generation.executor import RequestExecutor  # noqa: E402
from studysnap.generation.service import StudyContentService  # noqa: E402
from studysnap.integrations.hosted_client import HostedChatClient  # noqa: E402

HOSTED_URL = "https://llm.example.test/v1/chat/completions"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeLocalModel:
    """LocalModelProvider double recording what it was sent."""

    def __init__(self, available=True, reply="", error=None):
        self.available = available
        self.reply = reply
        self.error = error
        self.calls = []

    async def is_available(self):
        return self.available

    async def respond(self, instructions, user_text):
        self.calls.append((instructions, user_text))
        if self.error is not None:
            raise self.error
        return self.reply


async def no_sleep(seconds):
    """Instant replacement for asyncio.sleep."""
    return None


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def store():
    """Hosted-only store with a valid key."""
    return StaticPreferenceStore(
        preference=ModelPreference.HOSTED_ONLY,
        hosted_api_key="sk-test",
        hosted_model_name="test/model",
        local_available=False,
    )


@pytest.fixture
def local_model():
    """Local model that is unavailable and fails if called."""
    return FakeLocalModel(available=False, error=GenerationFailed("local model offline"))


@pytest_asyncio.fixture
async def hosted_client():
    """Hosted client pointed at a test URL."""
    client = HostedChatClient(endpoint=HOSTED_URL, app_title="StudySnap", timeout_seconds=5)
    yield client
    await client.close()


@pytest.fixture
def executor(store, hosted_client, local_model, rng):
    """Executor with pacing sleeps skipped."""
    return RequestExecutor(store, hosted_client, local_model, rng=rng, sleep=no_sleep)


@pytest.fixture
def service(store, executor, rng):
    """Service wired to the test executor."""
    return StudyContentService(store, executor, FallbackNoticeSlot(), rng=rng)


def completion(content):
    """Chat-completions envelope carrying ``content``."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def sample_quiz_output():
    """Well-formed model output with four questions."""
    blocks = []
    for i in range(1, 5):
        blocks.append(
            f"[QUESTION]\nWhat is fact {i}?\n"
            f"[ANSWER]\nAnswer {i}\n"
            f"[OPTION]\nAnswer {i}\n"
            f"[OPTION]\nWrong {i}a\n"
            f"[OPTION]\nWrong {i}b\n"
            f"[OPTION]\nWrong {i}c\n"
            f"[EXPLANATION]\nBecause of fact {i}.\n"
            "[END]"
        )
    return "\n".join(blocks)


@pytest.fixture
def sample_flashcard_output():
    """Well-formed model output with two flashcards."""
    return (
        "[FRONT]\nMitochondria\n[BACK]\nPowerhouse of the cell.\n[END]\n"
        "[FRONT]\nRibosome\n[BACK]\nSite of protein synthesis.\n[END]"
    )


@pytest.fixture
def sample_suggestion_output():
    """Suggestion output with one fully tagged and one minimal suggestion."""
    return (
        "[TITLE]\nIntro to Statistics\n[DESCRIPTION]\nLearn averages and spread.\n"
        "[CATEGORY]\nMathematics\n[DIFFICULTY]\nBeginner\n[TIME]\n2-3 hours\n[ICON]\nfunction\n[END]\n"
        "[TITLE]\nRoman Republic\n[DESCRIPTION]\nHow Rome governed before the empire.\n[END]"
    )


@pytest.fixture
def make_local_model():
    """Factory for FakeLocalModel instances."""
    return FakeLocalModel


@pytest.fixture
def completion_body():
    """Factory for chat-completions response bodies."""
    return completion
