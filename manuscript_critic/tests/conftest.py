"""
Pytest configuration and fixtures for manuscript critic tests.

This module provides:
- Network blocking fixture to prevent accidental API calls in CI
- A scripted completion client and zero-delay settings
- Sample manuscript text and model replies
"""

import json
import socket
from typing import List, Union
from unittest.mock import patch

import pytest

from manuscript_critic.config import CritiqueSettings, LLMProvider
from manuscript_critic.models import AnalysisRequest
from manuscript_critic.services import CompletionGateway, InMemoryAnalysisStore, ModelResponse


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""
    pass


def _block_socket_connect(*args, **kwargs):
    """Block all socket connections to prevent accidental API calls."""
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. "
        "If you need to test network functionality, use mocks. "
        "This prevents accidental OpenAI/Anthropic API calls that cost money."
    )


@pytest.fixture(autouse=True)
def block_network():
    """
    Automatically block all network connections in tests.

    If a test needs to make real network calls (integration tests),
    it should be marked with @pytest.mark.integration and run separately.
    """
    with patch.object(socket.socket, 'connect', _block_socket_connect):
        with patch.object(socket, 'create_connection', _block_socket_connect):
            yield


class ScriptedClient:
    """
    Completion client that plays back a script.

    Each script entry is either reply text or an exception to raise. The last
    entry repeats once the script runs out.
    """

    provider = LLMProvider.DEMO
    model = "scripted"

    def __init__(self, script: List[Union[str, BaseException]]):
        self.script = list(script)
        self.calls = []

    @property
    def attempts(self) -> int:
        return len(self.calls)

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        self.calls.append({"system": system_prompt, "user": user_prompt, "max_tokens": max_tokens})
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(step, BaseException):
            raise step
        return ModelResponse(content=step, model=self.model, provider=self.provider)


async def no_sleep(delay: float) -> None:
    return None


def make_gateway(client, max_retries: int = 3, timeout_seconds: float = 5.0) -> CompletionGateway:
    return CompletionGateway(
        client,
        max_retries=max_retries,
        timeout_seconds=timeout_seconds,
        base_delay=0.0,
        max_jitter=0.0,
        sleep=no_sleep,
    )


SAMPLE_REPLY = {
    "overallScore": 78,
    "scores": {"pacing": 65, "dialogue": 88, "prose_quality": 81},
    "strengths": [
        {
            "category": "dialogue",
            "title": "Natural banter",
            "description": "Exchanges between the siblings feel lived-in.",
            "examples": [{"text": "\"You always say that,\" Mara said.", "location": "Chapter 1"}],
        }
    ],
    "weaknesses": [
        {
            "category": "pacing",
            "title": "Slow opening",
            "description": "The first scene delays the inciting incident.",
            "suggestions": ["Open closer to the storm."],
        }
    ],
    "opportunities": [],
    "issues": [
        {"type": "cliche", "severity": "minor", "category": "prose_quality", "title": "Stock phrase", "description": "Dark and stormy night."},
        {"type": "plot_hole", "severity": "critical", "category": "plot_structure", "title": "Missing key", "description": "The key appears from nowhere."},
        {"type": "info_dump", "severity": "moderate", "category": "pacing", "title": "History lecture", "description": "Two pages of backstory."},
    ],
    "executiveSummary": "A promising draft with a slow start.",
    "priorityActions": [
        {"priority": 2, "category": "pacing", "action": "Trim the backstory.", "impact": "medium", "effort": "low"},
        {"priority": 1, "category": "plot_structure", "action": "Set up the key earlier.", "impact": "high", "effort": "low"},
    ],
}


@pytest.fixture
def sample_reply() -> str:
    return "Here is my analysis:\n" + json.dumps(SAMPLE_REPLY) + "\nLet me know if you need more."


@pytest.fixture
def manuscript_text() -> str:
    paragraph = (
        "Mara pulled the shutters closed as the storm rolled over the harbour. "
        "Her brother laughed at her from the doorway, rain dripping from his coat. "
        "Neither of them noticed the key glinting on the windowsill. "
    )
    return paragraph * 10


@pytest.fixture
def settings() -> CritiqueSettings:
    return CritiqueSettings(demo_mode=True, retry_base_delay=0.0, retry_max_jitter=0.0)


@pytest.fixture
def store() -> InMemoryAnalysisStore:
    return InMemoryAnalysisStore()


@pytest.fixture
def full_book_request() -> AnalysisRequest:
    return AnalysisRequest(user_id="user-1", book_id="book-1")


@pytest.fixture
def scripted_client():
    """Factory: scripted_client([reply_or_exception, ...])."""
    return ScriptedClient


@pytest.fixture
def gateway_for():
    """Factory: gateway_for(client, max_retries=3, timeout_seconds=5.0) with no backoff delay."""
    return make_gateway
