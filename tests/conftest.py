"""Pytest configuration and shared fixtures."""
import os

import pytest

from geminichat.history import ChatSessionStore, InMemoryStorage
from geminichat.llm import Message

from helpers import FakeClock


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {"gemini": os.getenv("GEMINI_API_KEY")}


@pytest.fixture
def clock():
    """Deterministic clock for store timestamps."""
    return FakeClock()


@pytest.fixture
def backend():
    """Empty in-memory storage backend."""
    return InMemoryStorage()


@pytest.fixture
def store(backend, clock):
    """Chat session store over the in-memory backend."""
    return ChatSessionStore(backend, clock=clock)


@pytest.fixture
def sample_transcript():
    """A short two-turn conversation."""
    return [
        Message.user("What is the capital of France?"),
        Message.assistant("The capital of France is **Paris**."),
        Message.user("And of Italy?"),
        Message.assistant("Rome."),
    ]


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point geminichat at a temporary home and clear API settings."""
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "GEMINI_BASE_URL",
        "GEMINICHAT_SYSTEM_PROMPT",
        "GEMINICHAT_SYSTEM_PROMPT_FILE",
        "GEMINICHAT_MOCK",
        "GEMINICHAT_STREAM",
        "GEMINICHAT_TIMEOUT",
        "GEMINICHAT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEMINICHAT_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("GEMINICHAT_MOCK_INTERVAL", "0")
    monkeypatch.chdir(tmp_path)
    return tmp_path
