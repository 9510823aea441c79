from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Sender(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Represents one message of a conversation transcript."""

    model_config = ConfigDict(frozen=True)

    sender: Sender = Field(description="Who wrote the message: 'user' or 'assistant'")
    text: str = Field(description="Message text")

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(sender=Sender.USER, text=text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(sender=Sender.ASSISTANT, text=text)


# Receives the best current reconstruction of the reply while it streams in.
UpdateCallback = Callable[[str], None]
