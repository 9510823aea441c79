"""Configuration for geminichat.

Centralizes constants and the settings read from environment variables.
A ``.env`` file in the working directory is honoured through python-dotenv.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Request building
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1"
SYSTEM_PART_MAX_LENGTH = 2000  # Characters per system prompt part

# Stream decoding
NO_RESPONSE_TEXT = "(no response)"
TEXT_FIELD_NAME = "text"

# Mock streaming
MOCK_DEMO_TEXT = (
    "This is a simulated streaming response used for UI testing. "
    "It arrives in chunks so you can verify typing and scrolling behavior."
)
MOCK_INTERVAL_SECONDS = 0.04
MOCK_MAX_STEP = 6  # Largest prefix growth per tick

# Chat history
STORAGE_KEY = "gemini_chat_histories"
PREVIEW_MAX_LENGTH = 100
EMPTY_PREVIEW = "Empty chat"
DEFAULT_HOME = Path.home() / ".geminichat"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


class ChatSettings(BaseModel):
    """Runtime settings for the chat client."""

    api_key: str | None = Field(default=None, description="Gemini API key")
    model: str = Field(default=DEFAULT_MODEL, description="Gemini model name")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    system_prompt: str = Field(default="", description="Leading instruction sent with every request")
    mock: bool = Field(default=False, description="Use the simulated streaming provider")
    mock_interval: float = Field(default=MOCK_INTERVAL_SECONDS, ge=0, description="Seconds between mock updates")
    streaming: bool = Field(default=True, description="Read the response body incrementally")
    home: Path = Field(default=DEFAULT_HOME, description="Directory holding chat history")
    timeout: float = Field(default=60.0, gt=0, description="HTTP timeout in seconds")
    log_level: str = Field(default="warning")
    storage_key: str = Field(default=STORAGE_KEY)

    @property
    def history_dir(self) -> Path:
        """Directory the file storage backend writes to."""
        return self.home / "history"


def _read_system_prompt() -> str:
    prompt = os.getenv("GEMINICHAT_SYSTEM_PROMPT", "")
    if prompt:
        return prompt
    prompt_file = os.getenv("GEMINICHAT_SYSTEM_PROMPT_FILE")
    if prompt_file:
        return Path(prompt_file).expanduser().read_text(encoding="utf-8")
    return ""


def load_settings(**overrides) -> ChatSettings:
    """Build settings from the environment.

    Environment variables:
        GEMINI_API_KEY: API key (required unless mock mode is on)
        GEMINI_MODEL: Model name (default: gemini-2.5-flash)
        GEMINI_BASE_URL: API root (default: the public v1 endpoint)
        GEMINICHAT_SYSTEM_PROMPT: System instruction text
        GEMINICHAT_SYSTEM_PROMPT_FILE: File to read the system instruction from
        GEMINICHAT_MOCK: Use simulated responses (default: false)
        GEMINICHAT_MOCK_INTERVAL: Seconds between simulated updates (default: 0.04)
        GEMINICHAT_STREAM: Read responses incrementally (default: true)
        GEMINICHAT_HOME: Data directory (default: ~/.geminichat)
        GEMINICHAT_TIMEOUT: HTTP timeout in seconds (default: 60)
        GEMINICHAT_LOG_LEVEL: debug, info, warning or error (default: warning)

    Args:
        **overrides: Values that take precedence over the environment
            (None values are ignored so CLI options can be passed through)

    Returns:
        Validated ChatSettings
    """
    load_dotenv()

    values = {
        "api_key": os.getenv("GEMINI_API_KEY") or None,
        "model": os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        "base_url": os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
        "system_prompt": _read_system_prompt(),
        "mock": _env_flag("GEMINICHAT_MOCK", False),
        "mock_interval": float(os.getenv("GEMINICHAT_MOCK_INTERVAL", str(MOCK_INTERVAL_SECONDS))),
        "streaming": _env_flag("GEMINICHAT_STREAM", True),
        "home": Path(os.getenv("GEMINICHAT_HOME", str(DEFAULT_HOME))).expanduser(),
        "timeout": float(os.getenv("GEMINICHAT_TIMEOUT", "60")),
        "log_level": os.getenv("GEMINICHAT_LOG_LEVEL", "warning"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ChatSettings(**values)
