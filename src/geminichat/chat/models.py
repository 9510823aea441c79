"""Data structures for the chat module."""

from pydantic import BaseModel


class TurnResult(BaseModel):
    """Terminal value of one request/response turn.

    Attributes:
        session_id: Session the turn belongs to
        text: Final reply text, or the error text when the request failed
        failed: True if the endpoint reported an error
        stale: True if another chat became active while the reply streamed in;
            the reply was saved to its own session but not shown
    """

    session_id: str
    text: str
    failed: bool = False
    stale: bool = False

    def __str__(self) -> str:
        """String representation of TurnResult."""
        return self.text
