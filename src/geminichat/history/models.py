"""Data models for persisted chat history.

These models define the structure of saved conversations, independent of
the storage backend used. The serialized form is a JSON array of
``{"id", "timestamp", "preview", "messages": [{"sender", "text"}]}``.
"""

from pydantic import BaseModel, Field, TypeAdapter

from ..config import EMPTY_PREVIEW, PREVIEW_MAX_LENGTH
from ..llm.models import Message, Sender


def make_preview(messages: list[Message]) -> str:
    """Return the first user message, truncated, or a placeholder."""
    first_user = next((m for m in messages if m.sender == Sender.USER), None)
    if first_user is None or not first_user.text:
        return EMPTY_PREVIEW
    return first_user.text[:PREVIEW_MAX_LENGTH]


class ChatEntry(BaseModel):
    """A saved snapshot of one conversation."""

    id: str = Field(min_length=1, description="Session identifier, unique in the store")
    timestamp: int = Field(description="Last save time in epoch milliseconds")
    preview: str = Field(description="First user message, truncated")
    messages: list[Message] = Field(default_factory=list)

    @classmethod
    def from_transcript(cls, session_id: str, messages: list[Message], timestamp: int) -> "ChatEntry":
        """Snapshot a transcript; the preview is always derived here."""
        return cls(
            id=session_id,
            timestamp=timestamp,
            preview=make_preview(messages),
            messages=[message.model_copy() for message in messages],
        )


class StorageStats(BaseModel):
    """Chat history statistics."""

    count: int = Field(ge=0, description="Number of saved chats")
    size_in_bytes: int = Field(ge=0, description="UTF-8 size of the serialized store")
    storage_key: str

    @property
    def size_in_kb(self) -> float:
        return round(self.size_in_bytes / 1024, 2)


ChatEntryList = TypeAdapter(list[ChatEntry])
