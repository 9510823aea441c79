"""Chat history persistence for geminichat.

Provides resumable conversation storage across sessions.
"""

from .base import StorageBackend
from .factory import create_storage_backend
from .file import FileStorage
from .in_memory import InMemoryStorage
from .models import ChatEntry, StorageStats, make_preview
from .store import ChatSessionStore

__all__ = [
    "ChatEntry",
    "ChatSessionStore",
    "FileStorage",
    "InMemoryStorage",
    "StorageBackend",
    "StorageStats",
    "create_storage_backend",
    "make_preview",
]
