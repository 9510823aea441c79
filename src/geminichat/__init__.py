"""
geminichat: a terminal chat client for Gemini.

Streams replies through a decoder that tolerates partial and oddly framed
JSON, and keeps conversations in a local, resumable history.
"""

__version__ = "0.1.0"

from .chat import ConversationController, TurnResult
from .exceptions import (
    ConversationBusyError,
    GeminiChatError,
    ImportValidationError,
    PersistenceError,
    RequestError,
)
from .history import ChatEntry, ChatSessionStore, create_storage_backend
from .llm import LLMProvider, Message, Sender, create_llm_provider
from .render import render_markdown_html
from .stream import StreamDecoder, decode, decode_body

__all__ = [
    "ChatEntry",
    "ChatSessionStore",
    "ConversationBusyError",
    "ConversationController",
    "GeminiChatError",
    "ImportValidationError",
    "LLMProvider",
    "Message",
    "PersistenceError",
    "RequestError",
    "Sender",
    "StreamDecoder",
    "TurnResult",
    "create_llm_provider",
    "create_storage_backend",
    "decode",
    "decode_body",
    "render_markdown_html",
]
