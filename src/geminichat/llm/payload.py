"""Request body construction for the generateContent endpoint."""

from typing import Any

from ..config import SYSTEM_PART_MAX_LENGTH
from .models import Message, Sender


def chunk_text_to_parts(text: str, max_length: int = SYSTEM_PART_MAX_LENGTH) -> list[dict[str, str]]:
    """Split text into ``{"text": ...}`` parts of at most ``max_length`` characters.

    Args:
        text: Text to split
        max_length: Maximum characters per part

    Returns:
        Parts in order; empty for empty text
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")
    return [{"text": text[start:start + max_length]} for start in range(0, len(text), max_length)]


def build_payload(messages: list[Message], system_prompt: str | None = None) -> dict[str, Any]:
    """Build the JSON body for a generateContent request.

    The API has no system role, so a system prompt is sent as a leading
    ``user`` entry. Assistant messages use the API's ``model`` role.

    Args:
        messages: Transcript, oldest first
        system_prompt: Optional instruction prepended to the conversation

    Returns:
        ``{"contents": [{"role": ..., "parts": [{"text": ...}]}, ...]}``
    """
    contents: list[dict[str, Any]] = []

    if system_prompt:
        contents.append({"role": "user", "parts": chunk_text_to_parts(system_prompt)})

    for message in messages:
        role = "model" if message.sender == Sender.ASSISTANT else "user"
        contents.append({"role": role, "parts": [{"text": message.text}]})

    return {"contents": contents}
