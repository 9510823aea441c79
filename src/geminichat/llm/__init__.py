from .base import LLMProvider
from .factory import create_llm_provider
from .models import Message, Sender, UpdateCallback
from .payload import build_payload, chunk_text_to_parts
from .providers import GeminiProvider, MockProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "Message",
    "Sender",
    "UpdateCallback",
    "build_payload",
    "chunk_text_to_parts",
    "GeminiProvider",
    "MockProvider",
]
