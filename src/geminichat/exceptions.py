"""Exception types for geminichat.

Only ``RequestError`` ever reaches the conversation controller. The other
errors are raised inside the history layer and are caught there: persistence
must never interrupt a chat.
"""


class GeminiChatError(Exception):
    """Base class for all geminichat errors."""


class RequestError(GeminiChatError):
    """The text-generation endpoint did not answer with a success status.

    Carries the raw response body so the caller can show it to the user.
    ``status_code`` is None when the request never got a response
    (connection refused, timeout, ...).
    """

    def __init__(self, body: str, status_code: int | None = None):
        self.body = body
        self.status_code = status_code
        super().__init__(f"API error: {body}")


class PersistenceError(GeminiChatError):
    """Reading or writing the durable chat history failed."""


class ImportValidationError(GeminiChatError):
    """An imported chat history payload has the wrong shape."""


class ConversationBusyError(GeminiChatError):
    """A message was submitted while a reply is still streaming in."""
